import uuid
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from cleanserve.core.errors import InvalidReferralCode, SelfReferralNotAllowed, NoActiveCampaign, UsageLimitReached
from cleanserve.models.user import User
from cleanserve.models.referral import Referral
from cleanserve.models.referral_campaign import ReferralCampaign
from cleanserve.services.pricing import referral_discount_amount, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferralGrant:
    referrer_id: str
    campaign_id: str
    discount_type: str  # percentage, fixed
    discount_value: Decimal
    inviter_reward: Decimal

    def discount_for(self, base_price) -> Decimal:
        return referral_discount_amount(base_price, self.discount_type, self.discount_value)


def get_active_campaign(db: Session, now: datetime | None = None) -> ReferralCampaign | None:
    """Most recently created campaign that is switched on and inside its validity window."""
    now = now or datetime.now(timezone.utc)
    return db.execute(
        select(ReferralCampaign)
        .where(
            ReferralCampaign.is_active == True,  # noqa: E712
            ReferralCampaign.valid_from <= now,
            or_(ReferralCampaign.valid_until.is_(None), ReferralCampaign.valid_until >= now),
        )
        .order_by(ReferralCampaign.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def count_referrals(db: Session, inviter_id: str, campaign_id: str) -> int:
    return db.execute(
        select(func.count(Referral.id)).where(
            Referral.inviter_id == inviter_id,
            Referral.campaign_id == campaign_id,
        )
    ).scalar_one()


def validate_referral_code(db: Session, referral_code: str, user_id: str, now: datetime | None = None) -> ReferralGrant:
    code = (referral_code or "").strip()
    referrer = db.execute(select(User).where(User.referral_code == code)).scalar_one_or_none() if code else None
    if not referrer:
        raise InvalidReferralCode(f"unknown referral code {code!r}")

    if referrer.id == user_id:
        raise SelfReferralNotAllowed()

    campaign = get_active_campaign(db, now)
    if not campaign:
        raise NoActiveCampaign()

    used = count_referrals(db, referrer.id, campaign.id)
    if used >= campaign.max_usage_per_user:
        logger.info("Referral code %s exhausted: %s/%s uses in campaign %s", code, used, campaign.max_usage_per_user, campaign.id)
        raise UsageLimitReached()

    return ReferralGrant(
        referrer_id=referrer.id,
        campaign_id=campaign.id,
        discount_type=campaign.invitee_discount_type,
        discount_value=Decimal(str(campaign.invitee_discount_value)),
        inviter_reward=to_money(campaign.inviter_reward_value),
    )


def build_referral(grant: ReferralGrant, referral_code: str, invitee_id: str, booking_id: str, invitee_discount: Decimal) -> Referral:
    """Pending referral row for a new booking; the caller adds it to the booking's transaction."""
    return Referral(
        id=str(uuid.uuid4()),
        campaign_id=grant.campaign_id,
        inviter_id=grant.referrer_id,
        invitee_id=invitee_id,
        booking_id=booking_id,
        referral_code=referral_code.strip(),
        status="pending",
        inviter_reward=grant.inviter_reward,
        invitee_discount=to_money(invitee_discount),
    )
