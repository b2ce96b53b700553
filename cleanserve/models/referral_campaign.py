from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Boolean, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from cleanserve.db.session import Base

class ReferralCampaign(Base):
    __tablename__ = "referral_campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[dict] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)  # null = open-ended
    invitee_discount_type: Mapped[str] = mapped_column(String(12))  # percentage, fixed
    invitee_discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    inviter_reward_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    max_usage_per_user: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
