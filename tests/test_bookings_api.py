from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cleanserve.models.address import Address
from cleanserve.models.booking import Booking
from cleanserve.models.order_status_log import OrderStatusLog
from cleanserve.models.referral import Referral
from cleanserve.models.service import Service
from cleanserve.schemas.booking import BookingCreate
from cleanserve.services import booking_service, referral_service


def _payload(service, address, **extra):
    body = {
        "service_id": service.id,
        "address_id": address.id,
        "scheduled_date": "2026-11-02",
        "scheduled_time": "10:00",
    }
    body.update(extra)
    return body


def test_create_booking_prices_service(client, db, headers, customer, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address), headers=headers(customer))
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Booking created successfully"
    assert body["message_ar"]

    data = body["data"]
    assert data["status"] == "pending"
    assert data["currency"] == "SAR"
    assert data["service"]["name"] == "AC Maintenance"
    assert data["package"] is None
    assert data["pricing"]["subtotal"] == 500.0
    assert data["pricing"]["vat_amount"] == 75.0
    assert data["pricing"]["total_amount"] == 575.0

    booking = db.get(Booking, data["booking_id"])
    assert booking.user_id == customer.id
    assert booking.total_amount == Decimal("575.00")
    logs = db.execute(select(OrderStatusLog).where(OrderStatusLog.booking_id == booking.id)).scalars().all()
    assert [log.status for log in logs] == ["pending"]


def test_create_booking_with_package(client, headers, customer, service, package, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, package_id=package.id), headers=headers(customer))
    assert r.status_code == 201, r.text
    pricing = r.json()["data"]["pricing"]
    assert pricing["service_cost"] == 400.0
    assert pricing["discount"] == 40.0
    assert pricing["subtotal"] == 360.0
    assert pricing["total_amount"] == 414.0


def test_create_booking_localizes_names(client, headers, customer, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address), headers=headers(customer, "ar-SA,ar;q=0.9"))
    assert r.status_code == 201
    body = r.json()
    assert body["data"]["service"]["name"] == "صيانة المكيفات"


def test_create_booking_with_referral(client, db, headers, customer, referrer, service, address, campaign):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, referral_code="OMAR10"), headers=headers(customer))
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["pricing"]["referral_discount"] == 50.0
    assert data["pricing"]["subtotal"] == 450.0
    assert data["pricing"]["total_amount"] == 517.5

    referral = db.execute(select(Referral).where(Referral.booking_id == data["booking_id"])).scalar_one()
    assert referral.inviter_id == referrer.id
    assert referral.invitee_id == customer.id
    assert referral.status == "pending"
    assert referral.invitee_discount == Decimal("50.00")


def test_blank_referral_code_is_ignored(client, db, headers, customer, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, referral_code="   "), headers=headers(customer))
    assert r.status_code == 201
    assert db.execute(select(Referral)).scalars().all() == []


def test_invalid_referral_creates_nothing(client, db, headers, customer, service, address, campaign):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, referral_code="NOPE"), headers=headers(customer))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_referral_code"
    assert db.execute(select(Booking)).scalars().all() == []


def test_own_referral_code(client, headers, referrer, service, db, campaign):
    a = Address(id="addr-omar", user_id=referrer.id)
    db.add(a)
    db.commit()
    r = client.post("/api/v1/bookings/create", json=_payload(service, a, referral_code="OMAR10"), headers=headers(referrer))
    assert r.status_code == 400
    assert r.json()["error"] == "self_referral_not_allowed"


def test_unknown_service(client, headers, customer, address):
    body = {"service_id": "missing", "address_id": address.id, "scheduled_date": "2026-11-02", "scheduled_time": "10:00"}
    r = client.post("/api/v1/bookings/create", json=body, headers=headers(customer))
    assert r.status_code == 404
    assert r.json()["error"] == "service_not_found"


def test_package_of_another_service(client, db, headers, customer, service, package, address):
    other = Service(id="svc-other", name={"en": "Cleaning"}, base_price=Decimal("100"))
    db.add(other)
    db.commit()
    r = client.post("/api/v1/bookings/create", json=_payload(other, address, package_id=package.id), headers=headers(customer))
    assert r.status_code == 404
    assert r.json()["error"] == "package_not_found"


def test_address_of_another_user(client, db, headers, referrer, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address), headers=headers(referrer))
    assert r.status_code == 404
    assert r.json()["error"] == "address_not_found"


def test_validation_errors_are_400(client, headers, customer, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, scheduled_date="2026-13-40"), headers=headers(customer))
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "validation_error"
    assert any(e["field"] == "scheduled_date" for e in body["errors"])


def test_missing_token(client, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address))
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_technician_cannot_book(client, headers, technician, service, address):
    r = client.post("/api/v1/bookings/create", json=_payload(service, address), headers=headers(technician))
    assert r.status_code == 403


def test_get_booking_detail(client, headers, customer, service, address):
    created = client.post("/api/v1/bookings/create", json=_payload(service, address), headers=headers(customer)).json()["data"]
    r = client.get(f"/api/v1/bookings/{created['booking_id']}", headers=headers(customer))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "pending"
    assert data["status_label"] == "Pending"
    assert data["pricing"]["total_amount"] == 575.0
    assert data["quotations"] == []
    assert data["status_history"][0]["message"] == "Booking created"


def test_get_booking_access(client, headers, make_booking, referrer, technician, other_technician, admin):
    booking = make_booking("technician_assigned", technician=technician)
    url = f"/api/v1/bookings/{booking.id}"
    assert client.get(url, headers=headers(referrer)).status_code == 403
    assert client.get(url, headers=headers(other_technician)).status_code == 403
    assert client.get(url, headers=headers(technician)).status_code == 200
    assert client.get(url, headers=headers(admin)).status_code == 200


def test_get_missing_booking(client, headers, customer):
    r = client.get("/api/v1/bookings/nope", headers=headers(customer))
    assert r.status_code == 404
    assert r.json()["error"] == "booking_not_found"


def test_package_with_broken_discount_is_a_client_error(client, db, headers, customer, service, package, address):
    package.discount_percentage = Decimal("150")
    db.commit()
    r = client.post("/api/v1/bookings/create", json=_payload(service, address, package_id=package.id), headers=headers(customer))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_discount"
    assert db.query(Booking).count() == 0


def test_failed_referral_insert_rolls_back_booking(db, monkeypatch, customer, referrer, service, address, campaign):
    db.add(Referral(id="ref-taken", campaign_id=campaign.id, inviter_id=customer.id, invitee_id=referrer.id,
                    booking_id="older-booking", referral_code="SARA10", inviter_reward=Decimal("25.00"),
                    invitee_discount=Decimal("10.00")))
    db.commit()

    def clashing_referral(*args, **kwargs):
        referral = referral_service.build_referral(*args, **kwargs)
        referral.id = "ref-taken"
        return referral

    monkeypatch.setattr(booking_service, "build_referral", clashing_referral)
    body = BookingCreate(**_payload(service, address, referral_code="OMAR10"))
    with pytest.raises(IntegrityError):
        booking_service.create_booking(db, customer, body)

    assert db.query(Booking).count() == 0
    assert db.query(OrderStatusLog).count() == 0
    assert db.query(Referral).count() == 1
