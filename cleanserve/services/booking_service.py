import uuid
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from cleanserve.core.config import settings
from cleanserve.core.errors import ServiceNotFound, PackageNotFound, AddressNotFound, Forbidden, InvalidStatus
from cleanserve.core.i18n import resolve, status_name
from cleanserve.models.address import Address
from cleanserve.models.booking import Booking
from cleanserve.models.order_status_log import OrderStatusLog
from cleanserve.models.quotation import Quotation
from cleanserve.models.quotation_item import QuotationItem
from cleanserve.models.service import Service
from cleanserve.models.service_package import ServicePackage
from cleanserve.models.user import User
from cleanserve.schemas.booking import BookingCreate
from cleanserve.services.order_status_service import STATUSES, get_booking, log_status
from cleanserve.services.pricing import calculate_pricing, ZERO
from cleanserve.services.referral_service import validate_referral_code, build_referral

logger = logging.getLogger(__name__)


def _service_out(service: Service | None, lang: str) -> dict | None:
    if not service:
        return None
    return {"id": service.id, "name": resolve(service.name, lang), "duration_minutes": service.duration_minutes}


def _package_out(package: ServicePackage | None, lang: str) -> dict | None:
    if not package:
        return None
    return {"id": package.id, "name": resolve(package.name, lang), "tier": package.tier}


def create_booking(db: Session, user: User, body: BookingCreate, lang: str = "en") -> dict:
    service = db.get(Service, body.service_id)
    if not service or not service.is_active:
        raise ServiceNotFound(f"service {body.service_id} not found")

    package = None
    if body.package_id:
        package = db.get(ServicePackage, body.package_id)
        if not package or package.service_id != service.id or not package.is_active:
            raise PackageNotFound(f"package {body.package_id} not found for service {service.id}")

    address = db.get(Address, body.address_id)
    if not address or address.user_id != user.id:
        raise AddressNotFound(f"address {body.address_id} not found")

    grant = None
    if body.referral_code:
        grant = validate_referral_code(db, body.referral_code, user.id)

    base_price = package.price if package else service.base_price
    pricing = calculate_pricing(
        base_price,
        discount_percentage=package.discount_percentage if package else 0,
        referral_discount=grant.discount_for(base_price) if grant else 0,
        vat_percentage=service.vat_percentage if service.vat_percentage is not None else settings.DEFAULT_VAT_PERCENTAGE,
    )

    booking = Booking(
        id=str(uuid.uuid4()),
        user_id=user.id,
        service_id=service.id,
        package_id=package.id if package else None,
        address_id=address.id,
        status="pending",
        scheduled_date=date.fromisoformat(body.scheduled_date),
        scheduled_time=body.scheduled_time,
        notes=body.notes,
        notes_ar=body.notes_ar,
        service_cost=pricing.service_cost,
        discount_amount=pricing.discount_amount,
        referral_code=body.referral_code if grant else None,
        referral_discount=pricing.referral_discount,
        spare_parts_cost=ZERO,
        subtotal=pricing.subtotal,
        vat_percentage=pricing.vat_percentage,
        vat_amount=pricing.vat_amount,
        total_amount=pricing.total_amount,
        currency=settings.CURRENCY,
        payment_status="pending",
    )

    # Booking, its first status log and the referral commit together or not at all.
    try:
        db.add(booking)
        log_status(db, booking, user.id, "Booking created", "تم إنشاء الحجز")
        if grant:
            db.add(build_referral(grant, body.referral_code, user.id, booking.id, pricing.referral_discount))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Booking creation failed for user %s", user.id)
        raise
    db.refresh(booking)

    logger.info("Booking %s created for user %s: total %s %s%s", booking.id, user.id, booking.total_amount,
                booking.currency, f" (referral {body.referral_code})" if grant else "")

    return {
        "booking_id": booking.id,
        "status": booking.status,
        "service": _service_out(service, lang),
        "package": _package_out(package, lang),
        "scheduled_date": booking.scheduled_date.isoformat(),
        "scheduled_time": booking.scheduled_time,
        "pricing": pricing.as_dict(),
        "currency": booking.currency,
        "created_at": booking.created_at.isoformat() if booking.created_at else None,
    }


def _can_view(user: User, booking: Booking) -> bool:
    if user.role == "admin":
        return True
    if user.role == "technician":
        return booking.technician_id == user.id
    return booking.user_id == user.id


def _status_history(db: Session, booking_id: str) -> list[dict]:
    logs = db.execute(
        select(OrderStatusLog).where(OrderStatusLog.booking_id == booking_id).order_by(OrderStatusLog.created_at.asc())
    ).scalars().all()
    return [{
        "status": log.status,
        "message": log.message,
        "message_ar": log.message_ar,
        "created_at": log.created_at.isoformat() if log.created_at else None,
    } for log in logs]


def get_booking_detail(db: Session, user: User, booking_id: str, lang: str = "en") -> dict:
    booking = get_booking(db, booking_id)
    if not _can_view(user, booking):
        raise Forbidden(f"user {user.id} cannot view booking {booking_id}")

    service = db.get(Service, booking.service_id)
    package = db.get(ServicePackage, booking.package_id) if booking.package_id else None

    quotations = db.execute(
        select(Quotation).where(Quotation.booking_id == booking.id).order_by(Quotation.created_at.asc())
    ).scalars().all()
    items_by_quotation: dict[str, list[QuotationItem]] = {}
    if quotations:
        items = db.execute(
            select(QuotationItem)
            .where(QuotationItem.quotation_id.in_([q.id for q in quotations]))
            .order_by(QuotationItem.position.asc())
        ).scalars().all()
        for item in items:
            items_by_quotation.setdefault(item.quotation_id, []).append(item)

    return {
        "id": booking.id,
        "status": booking.status,
        "status_label": status_name(booking.status, lang),
        "service": _service_out(service, lang),
        "package": _package_out(package, lang),
        "scheduled_date": booking.scheduled_date.isoformat(),
        "scheduled_time": booking.scheduled_time,
        "notes": booking.notes,
        "notes_ar": booking.notes_ar,
        "pricing": {
            "service_cost": float(booking.service_cost),
            "discount": float(booking.discount_amount),
            "referral_discount": float(booking.referral_discount),
            "spare_parts_cost": float(booking.spare_parts_cost),
            "subtotal": float(booking.subtotal),
            "vat_percentage": float(booking.vat_percentage),
            "vat_amount": float(booking.vat_amount),
            "total_amount": float(booking.total_amount),
            "currency": booking.currency,
        },
        "payment_status": booking.payment_status,
        "technician_id": booking.technician_id,
        "quotations": [{
            "id": q.id,
            "spare_parts": [{
                "part_id": i.spare_part_id,
                "quantity": i.quantity,
                "unit_price": float(i.unit_price),
                "total_price": float(i.total_price),
            } for i in items_by_quotation.get(q.id, [])],
            "additional_cost": float(q.additional_cost),
            "total_cost": float(q.total_cost),
            "status": q.status,
            "customer_response": q.customer_response,
            "created_at": q.created_at.isoformat() if q.created_at else None,
            "approved_at": q.approved_at.isoformat() if q.approved_at else None,
            "rejected_at": q.rejected_at.isoformat() if q.rejected_at else None,
        } for q in quotations],
        "status_history": _status_history(db, booking.id),
        "created_at": booking.created_at.isoformat() if booking.created_at else None,
        "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
    }


def _check_status_filter(status: str | None) -> None:
    if status is not None and status not in STATUSES:
        raise InvalidStatus(f"unknown status filter {status!r}")


def _lookup(db: Session, model, ids) -> dict:
    ids = {i for i in ids if i}
    if not ids:
        return {}
    return {row.id: row for row in db.execute(select(model).where(model.id.in_(ids))).scalars()}


def list_customer_orders(db: Session, user: User, status: str | None = None, limit: int = 50,
                         lang: str = "en") -> dict:
    """The customer's own bookings, newest first, optionally filtered by status."""
    _check_status_filter(status)
    stmt = select(Booking).where(Booking.user_id == user.id)
    if status:
        stmt = stmt.where(Booking.status == status)
    rows = db.execute(
        stmt.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit + 1)
    ).scalars().all()
    has_more = len(rows) > limit
    rows = rows[:limit]

    services = _lookup(db, Service, (b.service_id for b in rows))
    packages = _lookup(db, ServicePackage, (b.package_id for b in rows))

    orders = [{
        "id": b.id,
        "status": b.status,
        "status_label": status_name(b.status, lang),
        "service": _service_out(services.get(b.service_id), lang),
        "package": _package_out(packages.get(b.package_id), lang),
        "scheduled_date": b.scheduled_date.isoformat(),
        "scheduled_time": b.scheduled_time,
        "total_amount": float(b.total_amount),
        "currency": b.currency,
        "payment_status": b.payment_status,
        "technician_id": b.technician_id,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "updated_at": b.updated_at.isoformat() if b.updated_at else None,
    } for b in rows]
    return {"orders": orders, "total_count": len(orders), "has_more": has_more}


def list_technician_orders(db: Session, technician: User, scope: str = "assigned", status: str | None = None,
                           lang: str = "en") -> dict:
    """Jobs for a technician.

    ``assigned`` lists bookings already on the technician; ``available`` lists
    confirmed bookings nobody has accepted yet. The customer's phone is only
    shared once the booking is assigned to the caller.
    """
    _check_status_filter(status)
    if scope == "available":
        stmt = select(Booking).where(Booking.status == "confirmed", Booking.technician_id.is_(None))
    else:
        stmt = select(Booking).where(Booking.technician_id == technician.id)
        if status:
            stmt = stmt.where(Booking.status == status)
    rows = db.execute(
        stmt.order_by(Booking.scheduled_date.asc(), Booking.scheduled_time.asc(), Booking.id.asc())
    ).scalars().all()

    services = _lookup(db, Service, (b.service_id for b in rows))
    customers = _lookup(db, User, (b.user_id for b in rows))
    addresses = _lookup(db, Address, (b.address_id for b in rows))

    orders = []
    for b in rows:
        customer = customers.get(b.user_id)
        address = addresses.get(b.address_id)
        mine = b.technician_id == technician.id
        orders.append({
            "id": b.id,
            "status": b.status,
            "status_label": status_name(b.status, lang),
            "service": _service_out(services.get(b.service_id), lang),
            "customer": {
                "name": customer.full_name if customer else "",
                "phone": customer.phone if customer and mine else None,
            },
            "address": {
                "name": address.address_name,
                "street_name": address.street_name,
                "district": address.district,
            } if address else None,
            "scheduled_date": b.scheduled_date.isoformat(),
            "scheduled_time": b.scheduled_time,
            "total_amount": float(b.total_amount),
            "currency": b.currency,
            "notes": (b.notes_ar or b.notes) if lang == "ar" else b.notes,
            "created_at": b.created_at.isoformat() if b.created_at else None,
        })
    return {"orders": orders, "total_count": len(orders)}


def get_order_status(db: Session, user: User, booking_id: str, lang: str = "en") -> dict:
    booking = get_booking(db, booking_id)
    if not _can_view(user, booking):
        raise Forbidden(f"user {user.id} cannot view booking {booking_id}")

    technician = db.get(User, booking.technician_id) if booking.technician_id else None
    return {
        "order_id": booking.id,
        "current_status": booking.status,
        "current_status_label": status_name(booking.status, lang),
        "scheduled_date": booking.scheduled_date.isoformat(),
        "scheduled_time": booking.scheduled_time,
        "technician": {
            "id": technician.id,
            "name": technician.full_name,
            "phone": technician.phone,
        } if technician else None,
        "status_history": _status_history(db, booking.id),
    }
