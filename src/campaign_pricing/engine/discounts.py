"""
Discount calculation - ordered, capped discount stacking.

Order is fixed:
1. Multi-week discount on the subtotal
2. Early-partner discount on what the multi-week discount leaves
3. Cap on the combined discount, scaling both parts proportionally

Discounts compound rather than add on the raw subtotal, so reordering
these steps changes the result. Promo codes are priced separately on the
base price and are not subject to the cap.
"""
import logging
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

from .errors import InvalidInputError
from .models import (
    DiscountAmounts,
    DiscountPolicy,
    DurationType,
    PackageDefinition,
    PromoCode,
    PromoOutcome,
    PromoType,
)

logger = logging.getLogger(__name__)


def round_half_up(amount: Decimal) -> int:
    """Round a Decimal amount of cents to a whole cent, halves away from zero."""
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def round_down(amount: Decimal) -> int:
    """Floor a Decimal amount of cents to a whole cent."""
    return int(amount.quantize(Decimal(1), rounding=ROUND_FLOOR))


def compute_cap(subtotal: int, cap_fraction: Optional[Decimal]) -> Optional[int]:
    """Largest discount allowed on this subtotal, or None when uncapped."""
    if cap_fraction is None:
        return None
    return round_down(Decimal(subtotal) * cap_fraction)


def compute_discounts(
    subtotal: int,
    week_count: int,
    policy: DiscountPolicy,
    early_partner_eligible: bool = False,
) -> DiscountAmounts:
    """
    Compute multi-week and early-partner discounts for a subtotal.
    
    Args:
        subtotal: Base price plus add-ons, in cents
        week_count: Committed duration in weeks
        policy: Discount rules and cap
        early_partner_eligible: Request-level eligibility for the early-partner offer
        
    Returns:
        DiscountAmounts whose total never exceeds the cap
    """
    if subtotal < 0:
        raise InvalidInputError(f"Subtotal cannot be negative (got {subtotal})")
    
    cap = compute_cap(subtotal, policy.cap_fraction)
    
    if subtotal == 0:
        return DiscountAmounts(multi_week=0, early_partner=0, total=0, raw_total=0, cap=cap)
    
    # 1. Multi-week
    multi_week = 0
    rule = policy.multi_week
    if rule.enabled and week_count >= rule.threshold_weeks:
        multi_week = round_half_up(Decimal(subtotal) * rule.rate)
    
    # 2. Early partner, on the post-multi-week remainder
    early_partner = 0
    offer = policy.early_partner
    if offer.active and early_partner_eligible:
        early_partner = round_half_up(Decimal(subtotal - multi_week) * offer.rate)
    
    raw_total = multi_week + early_partner
    
    # 3. Cap, keeping the ratio between the two discounts
    if raw_total == 0 or cap is None or raw_total <= cap:
        return DiscountAmounts(
            multi_week=multi_week,
            early_partner=early_partner,
            total=raw_total,
            raw_total=raw_total,
            cap=cap,
        )
    
    scaled_multi_week = multi_week * cap // raw_total
    scaled_early_partner = cap - scaled_multi_week
    logger.debug(
        f"Discounts {raw_total} exceed cap {cap} on subtotal {subtotal}; "
        f"scaled to {scaled_multi_week} + {scaled_early_partner}"
    )
    
    return DiscountAmounts(
        multi_week=scaled_multi_week,
        early_partner=scaled_early_partner,
        total=cap,
        raw_total=raw_total,
        cap=cap,
    )


def compute_promo_discount(
    promo: PromoCode,
    package: PackageDefinition,
    duration: DurationType,
    base_price: int,
    subtotal: int,
) -> PromoOutcome:
    """
    Price a promo code against a booking.

    A code that fails one of its gates (inactive, other package, minimum
    purchase, free days on a weekly booking) gives a zero amount and the
    reason, rather than an error. The discount never exceeds the base price.
    """
    if not promo.active:
        return PromoOutcome(code=promo.code, amount=0, reason="code is not active")
    if not promo.applies_to(package.code):
        return PromoOutcome(code=promo.code, amount=0, reason=f"not valid for {package.code}")
    if subtotal < promo.min_purchase_amount:
        return PromoOutcome(
            code=promo.code,
            amount=0,
            reason=f"subtotal {subtotal} is below the minimum purchase of {promo.min_purchase_amount}",
        )

    if promo.discount_type is PromoType.PERCENTAGE:
        amount = round_half_up(Decimal(base_price) * promo.discount_value / 100)
    elif promo.discount_type is PromoType.FIXED_AMOUNT:
        amount = min(promo.discount_value, base_price)
    else:
        if duration is not DurationType.DAILY or package.daily_rate is None:
            return PromoOutcome(code=promo.code, amount=0, reason="free days apply to daily bookings only")
        amount = min(promo.discount_value * package.daily_rate, base_price)

    return PromoOutcome(code=promo.code, amount=amount)
