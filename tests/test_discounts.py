"""
Discount algorithm tests.

Covers order of application, rounding to whole cents and the cap's
proportional scaling.
"""
from decimal import Decimal

import pytest

from campaign_pricing.engine.discounts import compute_cap, compute_discounts, round_half_up
from campaign_pricing.engine.errors import InvalidInputError
from campaign_pricing.engine.models import DiscountPolicy, EarlyPartnerRule, MultiWeekRule


def make_policy(cap="0.30", multi_rate="0.10", early_rate="0.20", threshold=2, early_active=True):
    return DiscountPolicy(
        multi_week=MultiWeekRule(threshold_weeks=threshold, rate=Decimal(multi_rate)),
        early_partner=EarlyPartnerRule(rate=Decimal(early_rate), active=early_active),
        cap_fraction=Decimal(cap) if cap is not None else None,
    )


def test_early_partner_compounds_on_remainder():
    """20% of what is left after 10% off, not 20% of the original subtotal."""
    amounts = compute_discounts(10000, 2, make_policy(cap=None), early_partner_eligible=True)

    assert amounts.multi_week == 1000
    assert amounts.early_partner == 1800
    assert amounts.total == 2800
    assert amounts.raw_total == 2800
    assert amounts.cap is None
    assert not amounts.was_capped


def test_threshold_is_inclusive():
    policy = make_policy(threshold=4)
    assert compute_discounts(10000, 3, policy).multi_week == 0
    assert compute_discounts(10000, 4, policy).multi_week == 1000


def test_disabled_multi_week_rule():
    policy = DiscountPolicy(
        multi_week=MultiWeekRule(threshold_weeks=2, rate=Decimal("0.10"), enabled=False),
        early_partner=EarlyPartnerRule(rate=Decimal("0.20"), active=True),
        cap_fraction=Decimal("0.30"),
    )
    amounts = compute_discounts(10000, 5, policy, early_partner_eligible=True)
    assert amounts.multi_week == 0
    assert amounts.early_partner == 2000


def test_no_discounts_apply():
    amounts = compute_discounts(10000, 1, make_policy(), early_partner_eligible=False)
    assert amounts.total == 0
    assert amounts.raw_total == 0
    assert amounts.cap == 3000


def test_zero_subtotal():
    amounts = compute_discounts(0, 10, make_policy(), early_partner_eligible=True)
    assert (amounts.multi_week, amounts.early_partner, amounts.total) == (0, 0, 0)


def test_negative_subtotal_rejected():
    with pytest.raises(InvalidInputError):
        compute_discounts(-1, 2, make_policy())


def test_components_round_half_up_to_cents():
    # 1005 × 10% = 100.5 → 101; (1005 - 101) × 20% = 180.8 → 181
    amounts = compute_discounts(1005, 2, make_policy(cap=None), early_partner_eligible=True)
    assert amounts.multi_week == 101
    assert amounts.early_partner == 181


def test_cap_scales_both_to_exact_cap():
    # raw 2550 + 4590 = 7140; cap 10% of 25500 = 2550
    amounts = compute_discounts(25500, 3, make_policy(cap="0.10"), early_partner_eligible=True)

    assert amounts.raw_total == 7140
    assert amounts.cap == 2550
    assert amounts.total == 2550
    assert amounts.multi_week == 910
    assert amounts.early_partner == 1640
    assert amounts.was_capped


def test_cap_keeps_ratio_between_discounts():
    amounts = compute_discounts(25500, 3, make_policy(cap="0.25"), early_partner_eligible=True)

    uncapped_ratio = Decimal(2550) / Decimal(7140)
    capped_ratio = Decimal(amounts.multi_week) / Decimal(amounts.total)
    assert abs(capped_ratio - uncapped_ratio) < Decimal("0.001")


def test_zero_cap_removes_all_discounts():
    amounts = compute_discounts(25500, 3, make_policy(cap="0"), early_partner_eligible=True)
    assert amounts.total == 0
    assert amounts.multi_week == 0
    assert amounts.early_partner == 0


def test_cap_boundary_is_exact_when_exceeded():
    """Whenever the compounded rate passes the cap, the discount is the cap."""
    policy = make_policy(cap="0.25", multi_rate="0.15", early_rate="0.15")
    for subtotal in (999, 1000, 12345, 25500, 100001):
        amounts = compute_discounts(subtotal, 2, policy, early_partner_eligible=True)
        assert amounts.total == compute_cap(subtotal, policy.cap_fraction)
        assert amounts.multi_week + amounts.early_partner == amounts.total


def test_cap_never_exceeded_and_never_increases_discount():
    for cap in ("0.05", "0.20", "0.30", "0.50"):
        policy = make_policy(cap=cap)
        for subtotal in (1, 7, 99, 1005, 8500, 25500, 123457):
            for weeks in (1, 2, 6):
                amounts = compute_discounts(subtotal, weeks, policy, early_partner_eligible=True)
                assert amounts.total <= subtotal * Decimal(cap)
                assert amounts.total <= amounts.raw_total
                assert amounts.multi_week >= 0
                assert amounts.early_partner >= 0


def test_compute_cap_floors():
    assert compute_cap(1001, Decimal("0.30")) == 300
    assert compute_cap(1001, None) is None


def test_round_half_up():
    assert round_half_up(Decimal("0.5")) == 1
    assert round_half_up(Decimal("2.49")) == 2
    assert round_half_up(Decimal("2.5")) == 3
