"""Spare-parts quotations.

A technician prices extra parts/work on a booking; the customer approves or
rejects it. Approval folds the quotation into the booking's totals. A
quotation is resolved exactly once: the status flip is a conditional UPDATE
on ``status = 'pending'`` so concurrent approve/reject calls cannot both win.
"""
import uuid
import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from cleanserve.core.errors import (
    NotAssigned, Forbidden, QuotationNotFound, QuotationAlreadyProcessed,
    QuotationAlreadyPending, SparePartNotFound,
)
from cleanserve.models.booking import Booking
from cleanserve.models.quotation import Quotation
from cleanserve.models.quotation_item import QuotationItem
from cleanserve.models.spare_part import SparePart
from cleanserve.models.user import User
from cleanserve.schemas.quotation import QuotationCreate
from cleanserve.services.order_status_service import get_booking, apply_transition
from cleanserve.services.notification_service import notify_status_change
from cleanserve.services.pricing import apply_quotation, to_money, ZERO
from cleanserve.core.i18n import resolve, status_name

logger = logging.getLogger(__name__)


def create_quotation(db: Session, technician: User, body: QuotationCreate, lang: str = "en") -> dict:
    booking = get_booking(db, body.order_id, for_update=True)
    if booking.technician_id != technician.id:
        raise NotAssigned(f"booking {booking.id} is not assigned to {technician.id}")

    pending = db.execute(
        select(Quotation.id).where(Quotation.booking_id == booking.id, Quotation.status == "pending").limit(1)
    ).scalar_one_or_none()
    if pending:
        raise QuotationAlreadyPending(f"quotation {pending} is still pending")

    quotation_id = str(uuid.uuid4())
    items: list[QuotationItem] = []
    lines: list[dict] = []
    parts_total = ZERO
    for position, line in enumerate(body.spare_parts):
        part = db.get(SparePart, line.part_id)
        if not part or not part.is_active:
            raise SparePartNotFound(f"spare part {line.part_id} not found")
        unit_price = to_money(line.unit_price if line.unit_price is not None else part.price)
        line_total = to_money(unit_price * line.quantity)
        parts_total += line_total
        items.append(QuotationItem(
            id=str(uuid.uuid4()),
            quotation_id=quotation_id,
            position=position,
            spare_part_id=part.id,
            quantity=line.quantity,
            unit_price=unit_price,
            total_price=line_total,
        ))
        lines.append({
            "part_id": part.id,
            "name": resolve(part.name, lang),
            "quantity": line.quantity,
            "unit_price": float(unit_price),
            "total_price": float(line_total),
        })

    additional_cost = to_money(body.additional_cost)
    total_cost = parts_total + additional_cost

    quotation = Quotation(
        id=quotation_id,
        booking_id=booking.id,
        technician_id=technician.id,
        status="pending",
        spare_parts_total=parts_total,
        additional_cost=additional_cost,
        total_cost=total_cost,
        notes=body.notes,
        notes_ar=body.notes_ar,
    )

    try:
        db.add(quotation)
        db.add_all(items)
        apply_transition(
            db, booking, "quotation_pending", technician.id,
            f"Quotation created: {total_cost} {booking.currency}",
            f"تم إنشاء عرض السعر: {total_cost} ريال",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Quotation %s (%s %s) submitted on booking %s by technician %s",
                quotation.id, total_cost, booking.currency, booking.id, technician.id)
    notify_status_change(db, booking)

    return {
        "quotation_id": quotation.id,
        "order_id": booking.id,
        "spare_parts": lines,
        "spare_parts_total": float(parts_total),
        "additional_cost": float(additional_cost),
        "total_cost": float(total_cost),
        "status": quotation.status,
        "created_at": quotation.created_at.isoformat() if quotation.created_at else None,
    }


def _load_for_customer(db: Session, customer: User, quotation_id: str) -> tuple[Quotation, Booking]:
    quotation = db.get(Quotation, quotation_id)
    if not quotation:
        raise QuotationNotFound(f"quotation {quotation_id} not found")
    booking = db.execute(
        select(Booking).where(Booking.id == quotation.booking_id).with_for_update()
    ).scalar_one_or_none()
    if not booking or booking.user_id != customer.id:
        raise Forbidden(f"quotation {quotation_id} does not belong to {customer.id}")
    if quotation.status != "pending":
        raise QuotationAlreadyProcessed(f"quotation {quotation_id} is {quotation.status}")
    return quotation, booking


def _claim(db: Session, quotation_id: str, **values) -> None:
    """Flip a pending quotation; loses the race if another request resolved it first."""
    result = db.execute(
        update(Quotation)
        .where(Quotation.id == quotation_id, Quotation.status == "pending")
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise QuotationAlreadyProcessed(f"quotation {quotation_id} was resolved concurrently")


def approve_quotation(db: Session, customer: User, quotation_id: str, lang: str = "en") -> dict:
    quotation, booking = _load_for_customer(db, customer, quotation_id)
    approved_at = datetime.now(timezone.utc)

    totals = apply_quotation(
        booking.subtotal, booking.vat_amount, booking.spare_parts_cost,
        quotation.total_cost, booking.vat_percentage,
    )

    try:
        _claim(db, quotation.id, status="approved", approved_at=approved_at)
        booking.spare_parts_cost = totals.spare_parts_cost
        booking.subtotal = totals.subtotal
        booking.vat_amount = totals.vat_amount
        booking.total_amount = totals.total_amount
        apply_transition(
            db, booking, "confirmed", customer.id,
            f"Quotation approved. New total: {totals.total_amount} {booking.currency}",
            f"تمت الموافقة على عرض السعر. المجموع الجديد: {totals.total_amount} ريال",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Quotation %s approved; booking %s total now %s", quotation_id, booking.id, totals.total_amount)
    notify_status_change(db, booking)

    return {
        "quotation_id": quotation_id,
        "status": "approved",
        "order_total_updated": float(totals.total_amount),
        "spare_parts_cost": float(totals.spare_parts_cost),
        "subtotal": float(totals.subtotal),
        "vat_amount": float(totals.vat_amount),
        "approved_at": approved_at.isoformat(),
        "order_status": booking.status,
        "order_status_label": status_name(booking.status, lang),
    }


def reject_quotation(db: Session, customer: User, quotation_id: str, reason: str | None = None, lang: str = "en") -> dict:
    quotation, booking = _load_for_customer(db, customer, quotation_id)
    response = reason or "Rejected by customer"
    rejected_at = datetime.now(timezone.utc)
    suffix = f": {reason}" if reason else ""

    try:
        _claim(db, quotation.id, status="rejected", rejected_at=rejected_at, customer_response=response)
        apply_transition(
            db, booking, "confirmed", customer.id,
            f"Quotation rejected{suffix}",
            f"تم رفض عرض السعر{suffix}",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Quotation %s rejected on booking %s", quotation_id, booking.id)
    notify_status_change(db, booking)

    return {
        "quotation_id": quotation_id,
        "status": "rejected",
        "reason": response,
        "rejected_at": rejected_at.isoformat(),
        "order_status": booking.status,
        "order_status_label": status_name(booking.status, lang),
    }
