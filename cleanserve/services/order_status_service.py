"""Order lifecycle.

    pending -> confirmed -> technician_assigned -> en_route -> in_progress -> completed

``quotation_pending`` branches off ``confirmed``/``technician_assigned`` and
returns to ``confirmed`` once the quotation is resolved. ``cancelled`` is
reachable from every non-terminal status. Each transition appends an
``OrderStatusLog`` row and, after commit, texts the customer.
"""
import uuid
import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from cleanserve.core.errors import BookingNotFound, NotAssigned, InvalidStatus, InvalidTransition, BookingNotAcceptable
from cleanserve.core.i18n import status_name
from cleanserve.models.booking import Booking
from cleanserve.models.order_status_log import OrderStatusLog
from cleanserve.models.quotation import Quotation
from cleanserve.models.user import User
from cleanserve.services.notification_service import notify_status_change

logger = logging.getLogger(__name__)

STATUSES = (
    "pending", "confirmed", "technician_assigned", "en_route",
    "in_progress", "quotation_pending", "completed", "cancelled",
)
TERMINAL_STATUSES = frozenset({"completed", "cancelled"})
TECHNICIAN_STATUSES = frozenset({"en_route", "in_progress", "completed"})

TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"technician_assigned", "en_route", "quotation_pending", "cancelled"}),
    "technician_assigned": frozenset({"en_route", "quotation_pending", "cancelled"}),
    "en_route": frozenset({"in_progress", "cancelled"}),
    "in_progress": frozenset({"completed", "cancelled"}),
    "quotation_pending": frozenset({"confirmed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def get_booking(db: Session, booking_id: str, for_update: bool = False) -> Booking:
    stmt = select(Booking).where(Booking.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    booking = db.execute(stmt).scalar_one_or_none()
    if not booking:
        raise BookingNotFound(f"booking {booking_id} not found")
    return booking


def log_status(db: Session, booking: Booking, actor_id: str | None, message: str, message_ar: str) -> OrderStatusLog:
    entry = OrderStatusLog(
        id=str(uuid.uuid4()),
        booking_id=booking.id,
        status=booking.status,
        message=message,
        message_ar=message_ar,
        user_id=actor_id,
    )
    db.add(entry)
    return entry


def apply_transition(db: Session, booking: Booking, target: str, actor_id: str | None,
                     message: str | None = None, message_ar: str | None = None) -> OrderStatusLog:
    """Move ``booking`` to ``target`` and append the log row. Does not commit."""
    if not can_transition(booking.status, target):
        raise InvalidTransition(f"{booking.status} -> {target}")

    now = datetime.now(timezone.utc)
    booking.status = target
    booking.updated_at = now
    if target == "technician_assigned":
        booking.assigned_at = now
    elif target == "in_progress":
        booking.started_at = now
    elif target == "completed":
        booking.completed_at = now
    elif target == "cancelled":
        booking.cancelled_at = now
        booking.cancelled_by = actor_id

    return log_status(
        db, booking, actor_id,
        message or f"Order status updated to {target}",
        message_ar or f"تم تحديث حالة الطلب إلى {status_name(target, 'ar')}",
    )


def close_pending_quotations(db: Session, booking_id: str, note: str) -> int:
    """Reject whatever quotation is still pending on a booking an admin moved on. Does not commit."""
    result = db.execute(
        update(Quotation)
        .where(Quotation.booking_id == booking_id, Quotation.status == "pending")
        .values(status="rejected", rejected_at=datetime.now(timezone.utc), customer_response=note)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def _result(booking: Booking, old_status: str, lang: str) -> dict:
    return {
        "order_id": booking.id,
        "old_status": old_status,
        "new_status": booking.status,
        "status_label": status_name(booking.status, lang),
        "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
    }


def update_status_by_technician(db: Session, technician: User, booking_id: str, status: str,
                                message: str | None = None, message_ar: str | None = None, lang: str = "en") -> dict:
    if status not in TECHNICIAN_STATUSES:
        raise InvalidStatus(f"technicians cannot set status {status!r}")

    booking = get_booking(db, booking_id, for_update=True)
    if booking.technician_id != technician.id:
        raise NotAssigned(f"booking {booking_id} is not assigned to {technician.id}")

    old_status = booking.status
    try:
        apply_transition(db, booking, status, technician.id, message, message_ar)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Booking %s: %s -> %s by technician %s", booking.id, old_status, status, technician.id)
    notify_status_change(db, booking)
    return _result(booking, old_status, lang)


def accept_booking(db: Session, technician: User, booking_id: str, lang: str = "en") -> dict:
    """A technician claims a confirmed booking nobody else holds."""
    booking = get_booking(db, booking_id, for_update=True)
    if booking.status != "confirmed" or (booking.technician_id and booking.technician_id != technician.id):
        raise BookingNotAcceptable(f"booking {booking_id} is {booking.status}")

    old_status = booking.status
    try:
        booking.technician_id = technician.id
        apply_transition(db, booking, "technician_assigned", technician.id,
                         "Technician assigned to order", "تم تعيين فني للطلب")
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Booking %s accepted by technician %s", booking.id, technician.id)
    notify_status_change(db, booking)
    out = _result(booking, old_status, lang)
    out["technician_id"] = technician.id
    return out


def update_status_by_admin(db: Session, admin: User, booking_id: str, status: str, reason: str | None = None,
                           technician_id: str | None = None, lang: str = "en") -> dict:
    if status not in STATUSES:
        raise InvalidStatus(f"unknown status {status!r}")

    booking = get_booking(db, booking_id, for_update=True)
    old_status = booking.status

    if status == "technician_assigned":
        tech_id = technician_id or booking.technician_id
        tech = db.get(User, tech_id) if tech_id else None
        if not tech or tech.role != "technician" or not tech.is_active:
            raise InvalidTransition("an active technician is required to assign the booking")
        booking.technician_id = tech.id

    suffix = f": {reason}" if reason else ""
    try:
        apply_transition(
            db, booking, status, admin.id,
            f"Order status changed to {status} by admin{suffix}",
            f"تم تغيير حالة الطلب إلى {status_name(status, 'ar')} من قبل المشرف{suffix}",
        )
        if old_status == "quotation_pending":
            closed = close_pending_quotations(db, booking.id, f"Closed by admin{suffix}")
            if closed:
                logger.info("Booking %s left quotation_pending; closed %s pending quotation(s)", booking.id, closed)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Booking %s: %s -> %s by admin %s", booking.id, old_status, status, admin.id)
    notify_status_change(db, booking)
    return _result(booking, old_status, lang)
