"""Booking price calculation.

Pure functions, no database access. Amounts are ``Decimal`` rounded to two
places; the step order (package discount, then referral discount, clamp,
then VAT) is part of the pricing contract.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from cleanserve.core.errors import InvalidDiscount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
DEFAULT_VAT_PERCENTAGE = Decimal("15")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _dec(value, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or value == "":
        return default
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class PricingBreakdown:
    service_cost: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    referral_discount: Decimal
    subtotal: Decimal
    vat_percentage: Decimal
    vat_amount: Decimal
    total_amount: Decimal

    def as_dict(self) -> dict:
        return {
            "service_cost": float(self.service_cost),
            "discount": float(self.discount_amount),
            "referral_discount": float(self.referral_discount),
            "subtotal": float(self.subtotal),
            "vat_percentage": float(self.vat_percentage),
            "vat_amount": float(self.vat_amount),
            "total_amount": float(self.total_amount),
        }


def referral_discount_amount(base_price, discount_type: str, discount_value) -> Decimal:
    """Invitee discount: a percentage of ``base_price`` or a fixed amount."""
    base = _dec(base_price)
    value = _dec(discount_value)
    if discount_type == "percentage":
        return to_money(base * value / HUNDRED)
    return to_money(value)


def calculate_pricing(base_price, discount_percentage=0, referral_discount=0, vat_percentage=None) -> PricingBreakdown:
    base = to_money(_dec(base_price))
    pct = _dec(discount_percentage)
    if pct < 0 or pct > HUNDRED:
        raise InvalidDiscount(f"discount_percentage {pct} outside 0-100")
    vat_pct = _dec(vat_percentage, DEFAULT_VAT_PERCENTAGE)

    discount_amount = to_money(base * pct / HUNDRED)
    referral = to_money(referral_discount)
    # Stacked discounts may exceed the price; never go below zero.
    subtotal = max(ZERO, to_money(base - discount_amount - referral))
    vat_amount = to_money(subtotal * vat_pct / HUNDRED)
    total_amount = subtotal + vat_amount

    return PricingBreakdown(
        service_cost=base,
        discount_percentage=pct,
        discount_amount=discount_amount,
        referral_discount=referral,
        subtotal=subtotal,
        vat_percentage=vat_pct,
        vat_amount=vat_amount,
        total_amount=total_amount,
    )


@dataclass(frozen=True)
class QuotationTotals:
    spare_parts_cost: Decimal
    subtotal: Decimal
    vat_amount: Decimal
    total_amount: Decimal


def apply_quotation(subtotal, vat_amount, spare_parts_cost, quotation_total, vat_percentage=None) -> QuotationTotals:
    """Fold an approved quotation into a booking's totals.

    VAT is scaled by the booking's existing VAT-to-subtotal ratio. A booking
    discounted to zero has no ratio, so its nominal ``vat_percentage`` is used.
    """
    old_subtotal = to_money(subtotal)
    old_vat = to_money(vat_amount)
    added = to_money(quotation_total)

    new_subtotal = old_subtotal + added
    if old_subtotal > 0:
        new_vat = to_money(new_subtotal * old_vat / old_subtotal)
    else:
        new_vat = to_money(new_subtotal * _dec(vat_percentage, DEFAULT_VAT_PERCENTAGE) / HUNDRED)

    return QuotationTotals(
        spare_parts_cost=to_money(spare_parts_cost) + added,
        subtotal=new_subtotal,
        vat_amount=new_vat,
        total_amount=new_subtotal + new_vat,
    )
