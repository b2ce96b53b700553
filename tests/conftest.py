import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMS_ENABLED"] = "false"

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cleanserve.core.security import create_access_token
from cleanserve.db.session import Base, get_db
from cleanserve.main import app
from cleanserve.models.address import Address
from cleanserve.models.booking import Booking
from cleanserve.models.referral_campaign import ReferralCampaign
from cleanserve.models.service import Service
from cleanserve.models.service_package import ServicePackage
from cleanserve.models.spare_part import SparePart
from cleanserve.models.user import User
from cleanserve.services.pricing import calculate_pricing

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _user(db, role, email, **kw) -> User:
    u = User(id=str(uuid.uuid4()), email=email, role=role, full_name=email.split("@")[0], is_active=True, **kw)
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def customer(db):
    return _user(db, "customer", "sara@example.com", phone="+966500000010", language="en")


@pytest.fixture
def referrer(db):
    return _user(db, "customer", "omar@example.com", referral_code="OMAR10")


@pytest.fixture
def technician(db):
    return _user(db, "technician", "tech@example.com", phone="+966500000020")


@pytest.fixture
def other_technician(db):
    return _user(db, "technician", "tech2@example.com")


@pytest.fixture
def admin(db):
    return _user(db, "admin", "admin@example.com")


@pytest.fixture
def headers():
    def _headers(user: User, lang: str | None = None) -> dict:
        h = {"Authorization": f"Bearer {create_access_token(user.id)}"}
        if lang:
            h["Accept-Language"] = lang
        return h
    return _headers


@pytest.fixture
def address(db, customer):
    a = Address(id=str(uuid.uuid4()), user_id=customer.id, address_name="Home", street_name="King Fahd Rd", district="Olaya")
    db.add(a)
    db.commit()
    return a


@pytest.fixture
def service(db):
    s = Service(
        id=str(uuid.uuid4()),
        name={"en": "AC Maintenance", "ar": "صيانة المكيفات"},
        base_price=Decimal("500.00"),
        vat_percentage=Decimal("15"),
        duration_minutes=90,
        is_active=True,
    )
    db.add(s)
    db.commit()
    return s


@pytest.fixture
def package(db, service):
    p = ServicePackage(
        id=str(uuid.uuid4()),
        service_id=service.id,
        name={"en": "Premium", "ar": "مميز"},
        tier="premium",
        price=Decimal("400.00"),
        discount_percentage=Decimal("10"),
        is_active=True,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def spare_part(db):
    p = SparePart(
        id=str(uuid.uuid4()),
        name={"en": "Capacitor", "ar": "مكثف"},
        category="ac",
        price=Decimal("50.00"),
        stock=10,
        is_active=True,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def campaign(db):
    c = ReferralCampaign(
        id=str(uuid.uuid4()),
        name={"en": "Friends", "ar": "الأصدقاء"},
        is_active=True,
        valid_from=datetime.now(timezone.utc) - timedelta(days=1),
        valid_until=datetime.now(timezone.utc) + timedelta(days=30),
        invitee_discount_type="percentage",
        invitee_discount_value=Decimal("10"),
        inviter_reward_value=Decimal("25"),
        max_usage_per_user=2,
    )
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def make_booking(db, customer, service, address):
    """Insert a booking directly at a given lifecycle point (no status log)."""
    def _make(status="pending", technician=None, base_price="500.00") -> Booking:
        pricing = calculate_pricing(Decimal(base_price), vat_percentage=Decimal("15"))
        b = Booking(
            id=str(uuid.uuid4()),
            user_id=customer.id,
            service_id=service.id,
            address_id=address.id,
            technician_id=technician.id if technician else None,
            status=status,
            scheduled_date=date(2026, 11, 2),
            scheduled_time="10:00",
            service_cost=pricing.service_cost,
            discount_amount=pricing.discount_amount,
            referral_discount=pricing.referral_discount,
            spare_parts_cost=Decimal("0.00"),
            subtotal=pricing.subtotal,
            vat_percentage=pricing.vat_percentage,
            vat_amount=pricing.vat_amount,
            total_amount=pricing.total_amount,
            currency="SAR",
        )
        db.add(b)
        db.commit()
        return b
    return _make
