from decimal import Decimal
from sqlalchemy import String, DateTime, Date, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime, timezone
from cleanserve.db.session import Base

def _now():
    return datetime.now(timezone.utc)

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)  # customer
    service_id: Mapped[str] = mapped_column(String(36), index=True)
    package_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    address_id: Mapped[str] = mapped_column(String(36))
    technician_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)

    # pending, confirmed, technician_assigned, en_route, in_progress, quotation_pending, completed, cancelled
    status: Mapped[str] = mapped_column(String(30), default="pending", index=True)
    scheduled_date: Mapped[date] = mapped_column(Date)
    scheduled_time: Mapped[str] = mapped_column(String(10))  # "10:00"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes_ar: Mapped[str | None] = mapped_column(Text, nullable=True)

    service_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    referral_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    referral_discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    spare_parts_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    vat_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("15"))
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    payment_status: Mapped[str] = mapped_column(String(30), default="pending")  # pending, authorized, paid, failed, refunded, cancelled

    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)
