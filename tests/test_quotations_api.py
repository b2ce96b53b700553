from decimal import Decimal

import pytest
from sqlalchemy import select, update

from cleanserve.core.errors import QuotationAlreadyProcessed
from cleanserve.models.booking import Booking
from cleanserve.models.order_status_log import OrderStatusLog
from cleanserve.models.quotation import Quotation
from cleanserve.models.quotation_item import QuotationItem
from cleanserve.services.quotation_service import approve_quotation


def _quote(client, headers, technician, booking, spare_part, **extra):
    body = {"order_id": booking.id, "spare_parts": [{"part_id": spare_part.id, "quantity": 2}]}
    body.update(extra)
    return client.post("/api/v1/quotations/create", json=body, headers=headers(technician))


def test_create_quotation_moves_booking_to_quotation_pending(client, db, headers, make_booking, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    r = _quote(client, headers, technician, booking, spare_part, additional_cost="25.50", notes="Capacitor is burnt")
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["status"] == "pending"
    assert data["spare_parts_total"] == 100.0
    assert data["additional_cost"] == 25.5
    assert data["total_cost"] == 125.5
    assert data["spare_parts"][0]["name"] == "Capacitor"
    assert data["spare_parts"][0]["unit_price"] == 50.0

    db.expire_all()
    assert db.get(Booking, booking.id).status == "quotation_pending"
    items = db.execute(select(QuotationItem).where(QuotationItem.quotation_id == data["quotation_id"])).scalars().all()
    assert [(i.quantity, i.total_price) for i in items] == [(2, Decimal("100.00"))]


def test_quoted_unit_price_overrides_catalog(client, headers, make_booking, technician, spare_part):
    booking = make_booking("confirmed", technician=technician)
    body = {"order_id": booking.id, "spare_parts": [{"part_id": spare_part.id, "quantity": 3, "unit_price": "40"}]}
    r = client.post("/api/v1/quotations/create", json=body, headers=headers(technician))
    assert r.status_code == 201, r.text
    assert r.json()["data"]["total_cost"] == 120.0


def test_quotation_requires_assignment(client, headers, make_booking, technician, other_technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    r = _quote(client, headers, other_technician, booking, spare_part)
    assert r.status_code == 403
    assert r.json()["error"] == "not_assigned"


def test_quotation_unknown_part(client, headers, make_booking, technician):
    booking = make_booking("technician_assigned", technician=technician)
    body = {"order_id": booking.id, "spare_parts": [{"part_id": "missing", "quantity": 1}]}
    r = client.post("/api/v1/quotations/create", json=body, headers=headers(technician))
    assert r.status_code == 404
    assert r.json()["error"] == "spare_part_not_found"


def test_quotation_not_allowed_while_en_route(client, headers, make_booking, technician, spare_part):
    booking = make_booking("en_route", technician=technician)
    r = _quote(client, headers, technician, booking, spare_part)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_transition"


def test_only_one_pending_quotation(client, db, headers, make_booking, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    assert _quote(client, headers, technician, booking, spare_part).status_code == 201
    r = _quote(client, headers, technician, booking, spare_part)
    assert r.status_code == 400
    assert r.json()["error"] == "quotation_already_pending"


def test_approve_updates_booking_totals(client, db, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]

    r = client.put(f"/api/v1/quotations/{qid}/approve", headers=headers(customer))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "approved"
    assert data["order_total_updated"] == 690.0
    assert data["spare_parts_cost"] == 100.0
    assert data["subtotal"] == 600.0
    assert data["vat_amount"] == 90.0
    assert data["order_status"] == "confirmed"

    db.expire_all()
    b = db.get(Booking, booking.id)
    assert b.status == "confirmed"
    assert b.total_amount == Decimal("690.00")
    assert b.vat_amount == Decimal("90.00")
    q = db.get(Quotation, qid)
    assert q.status == "approved"
    assert q.approved_at is not None


def test_approve_on_zero_priced_booking(client, db, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician, base_price="0.00")
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]
    data = client.put(f"/api/v1/quotations/{qid}/approve", headers=headers(customer)).json()["data"]
    assert data["subtotal"] == 100.0
    assert data["vat_amount"] == 15.0
    assert data["order_total_updated"] == 115.0


def test_reject_keeps_totals(client, db, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]

    r = client.put(f"/api/v1/quotations/{qid}/reject", json={"reason": "Too expensive"}, headers=headers(customer))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "rejected"
    assert data["reason"] == "Too expensive"
    assert data["order_status"] == "confirmed"

    db.expire_all()
    b = db.get(Booking, booking.id)
    assert b.total_amount == Decimal("575.00")
    assert b.spare_parts_cost == Decimal("0.00")
    q = db.get(Quotation, qid)
    assert q.customer_response == "Too expensive"
    logs = db.execute(
        select(OrderStatusLog.message).where(OrderStatusLog.booking_id == booking.id, OrderStatusLog.status == "confirmed")
    ).scalars().all()
    assert logs == ["Quotation rejected: Too expensive"]


def test_reject_without_body(client, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]
    r = client.put(f"/api/v1/quotations/{qid}/reject", headers=headers(customer))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["reason"] == "Rejected by customer"


def test_quotation_resolved_once(client, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]
    assert client.put(f"/api/v1/quotations/{qid}/approve", headers=headers(customer)).status_code == 200

    for action in ("approve", "reject"):
        r = client.put(f"/api/v1/quotations/{qid}/{action}", headers=headers(customer))
        assert r.status_code == 400
        assert r.json()["error"] == "quotation_already_processed"


def test_stale_approval_loses_race(db, make_booking, customer, technician):
    booking = make_booking("quotation_pending", technician=technician)
    q = Quotation(id="q-race", booking_id=booking.id, technician_id=technician.id, status="pending",
                  total_cost=Decimal("100.00"))
    db.add(q)
    db.commit()
    assert q.status == "pending"
    # A concurrent request resolves it; this session still holds the stale copy.
    db.execute(
        update(Quotation).where(Quotation.id == "q-race").values(status="rejected")
        .execution_options(synchronize_session=False)
    )
    with pytest.raises(QuotationAlreadyProcessed):
        approve_quotation(db, customer, "q-race")
    db.expire_all()
    assert db.get(Booking, booking.id).total_amount == Decimal("575.00")


def test_only_owner_resolves_quotation(client, headers, make_booking, referrer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    qid = _quote(client, headers, technician, booking, spare_part).json()["data"]["quotation_id"]
    r = client.put(f"/api/v1/quotations/{qid}/approve", headers=headers(referrer))
    assert r.status_code == 403


def test_unknown_quotation(client, headers, customer):
    r = client.put("/api/v1/quotations/nope/approve", headers=headers(customer))
    assert r.status_code == 404
    assert r.json()["error"] == "quotation_not_found"


def test_detail_lists_quotations(client, headers, make_booking, customer, technician, spare_part):
    booking = make_booking("technician_assigned", technician=technician)
    _quote(client, headers, technician, booking, spare_part)
    data = client.get(f"/api/v1/bookings/{booking.id}", headers=headers(customer, "ar")).json()["data"]
    assert data["status_label"] == "في انتظار الموافقة على السعر"
    assert len(data["quotations"]) == 1
    assert data["quotations"][0]["spare_parts"][0]["quantity"] == 2


def test_empty_quotation_rejected(client, db, headers, make_booking, technician):
    booking = make_booking("technician_assigned", technician=technician)
    r = client.post("/api/v1/quotations/create", json={"order_id": booking.id, "spare_parts": []}, headers=headers(technician))
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"
    db.expire_all()
    assert db.get(Booking, booking.id).status == "technician_assigned"
    assert db.query(Quotation).count() == 0


def test_labour_only_quotation_allowed(client, headers, make_booking, technician):
    booking = make_booking("technician_assigned", technician=technician)
    body = {"order_id": booking.id, "additional_cost": "80"}
    r = client.post("/api/v1/quotations/create", json=body, headers=headers(technician))
    assert r.status_code == 201, r.text
    assert r.json()["data"]["total_cost"] == 80.0
