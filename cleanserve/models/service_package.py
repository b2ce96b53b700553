from decimal import Decimal
from sqlalchemy import String, DateTime, Boolean, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from cleanserve.db.session import Base

class ServicePackage(Base):
    __tablename__ = "service_packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(36), index=True)
    name: Mapped[dict] = mapped_column(JSON)
    tier: Mapped[str] = mapped_column(String(20), default="basic")  # basic, premium, vip, enterprise
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # replaces the service base price
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
