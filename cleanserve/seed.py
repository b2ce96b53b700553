import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError, OperationalError

from cleanserve.db.session import SessionLocal
from cleanserve.models.user import User
from cleanserve.models.service import Service
from cleanserve.models.service_package import ServicePackage
from cleanserve.models.spare_part import SparePart
from cleanserve.models.referral_campaign import ReferralCampaign

logger = logging.getLogger(__name__)


def ensure_user(db: Session, email: str, role: str, name: str, phone: str | None = None, referral_code: str | None = None) -> User:
    u = db.query(User).filter(User.email == email).first()
    if u:
        return u
    u = User(
        id=str(uuid.uuid4()),
        email=email,
        full_name=name,
        role=role,
        phone=phone,
        referral_code=referral_code,
        is_active=True,
    )
    db.add(u)
    db.commit()
    return u


def ensure_service(db: Session, name_en: str, name_ar: str, base_price: str, duration_minutes: int, packages: list[tuple]) -> Service:
    s = db.query(Service).filter(Service.name["en"].as_string() == name_en).first()
    if s:
        return s
    s = Service(
        id=str(uuid.uuid4()),
        name={"en": name_en, "ar": name_ar},
        base_price=Decimal(base_price),
        vat_percentage=Decimal("15"),
        duration_minutes=duration_minutes,
        is_active=True,
    )
    db.add(s)
    for tier, pkg_en, pkg_ar, price, discount in packages:
        db.add(ServicePackage(
            id=str(uuid.uuid4()),
            service_id=s.id,
            name={"en": pkg_en, "ar": pkg_ar},
            tier=tier,
            price=Decimal(price),
            discount_percentage=Decimal(discount),
            is_active=True,
        ))
    db.commit()
    return s


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        # roles
        ensure_user(db, "admin@cleanserve.sa", "admin", "Admin")
        ensure_user(db, "technician@cleanserve.sa", "technician", "Technician", phone="+966500000001")
        ensure_user(db, "customer@cleanserve.sa", "customer", "Demo Customer", phone="+966500000002", referral_code="DEMO2025")

        # catalog
        ensure_service(db, "Home Cleaning", "تنظيف المنازل", "200.00", 120, [
            ("basic", "Basic", "أساسي", "200.00", "0"),
            ("premium", "Premium", "مميز", "350.00", "10"),
        ])
        ensure_service(db, "AC Maintenance", "صيانة المكيفات", "500.00", 90, [
            ("basic", "Single unit", "وحدة واحدة", "500.00", "0"),
            ("vip", "Whole home", "المنزل بالكامل", "1200.00", "15"),
        ])

        PARTS = [
            ("AC Filter", "فلتر تكييف", "ac", "45.00"),
            ("Capacitor", "مكثف", "ac", "120.00"),
            ("Refrigerant refill", "تعبئة فريون", "ac", "250.00"),
        ]
        for en, ar, category, price in PARTS:
            if not db.query(SparePart).filter(SparePart.name["en"].as_string() == en).first():
                db.add(SparePart(
                    id=str(uuid.uuid4()),
                    name={"en": en, "ar": ar},
                    category=category,
                    price=Decimal(price),
                    stock=100,
                    is_active=True,
                ))

        # referral campaign
        if not db.query(ReferralCampaign).first():
            db.add(ReferralCampaign(
                id=str(uuid.uuid4()),
                name={"en": "Launch Campaign", "ar": "حملة الإطلاق"},
                is_active=True,
                valid_from=datetime.now(timezone.utc),
                valid_until=None,
                invitee_discount_type="percentage",
                invitee_discount_value=Decimal("10"),
                inviter_reward_value=Decimal("25"),
                max_usage_per_user=10,
            ))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    run()
