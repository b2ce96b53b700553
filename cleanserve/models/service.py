from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Boolean, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from cleanserve.db.session import Base

class Service(Base):
    __tablename__ = "services"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[dict] = mapped_column(JSON)  # {"en": "Deep Cleaning", "ar": "تنظيف عميق"}
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    vat_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True, default=Decimal("15"))
    duration_minutes: Mapped[int] = mapped_column(Integer, default=120)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
