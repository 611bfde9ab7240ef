"""
Loyalty Redemption - Caps how many points can be burned against a bill.

A merchant allows at most a percentage of each bill to be paid in points
(20% unless configured). Points convert at a fixed 1000 JP per currency unit.
The figures here are advisory: the wallet ledger re-checks the live balance
when it commits the debit.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_FLOOR
from typing import Optional

from ..config.settings import get_settings, Settings
from ..engine.errors import InvalidInputError, RedemptionLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionLimits:
    """Redemption ceiling for one bill and one wallet."""
    bill_amount_cents: int
    cap_percentage: Decimal
    wallet_balance: int
    max_redeemable_currency: Decimal
    max_redeemable_points: int
    actual_max_redeemable: int


@dataclass(frozen=True)
class RedemptionPreview:
    """What a validated redemption is worth against the bill."""
    points: int
    currency_value: Decimal
    discount_cents: int
    remaining_bill_cents: int


def _require_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer (got {value!r})")
    return value


class RedemptionCalculator:
    """Computes and enforces merchant redemption caps."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.points_per_currency_unit = self.settings.points_per_currency_unit

    def points_to_currency(self, points: int) -> Decimal:
        """Currency value of a number of points, to the cent (rounded down)."""
        value = Decimal(points) / self.points_per_currency_unit
        return value.quantize(Decimal("0.01"), rounding=ROUND_DOWN)

    def compute_limits(
        self,
        bill_amount_cents: int,
        wallet_balance: int,
        cap_percentage: Optional[int | float | Decimal] = None,
    ) -> RedemptionLimits:
        """
        Work out the most points that may be redeemed on a bill.

        Args:
            bill_amount_cents: Bill total in cents, positive
            wallet_balance: Points in the user's wallet, non-negative
            cap_percentage: Merchant cap [0, 100]; defaults to the configured 20%.
                A 0% cap is a merchant that accepts no points on the bill.

        Returns:
            RedemptionLimits with the cap-derived and wallet-clamped maximum
        """
        bill = _require_int(bill_amount_cents, "Bill amount")
        balance = _require_int(wallet_balance, "Wallet balance")
        if bill <= 0:
            raise InvalidInputError(f"Bill amount must be positive (got {bill})")
        if balance < 0:
            raise InvalidInputError(f"Wallet balance cannot be negative (got {balance})")

        if cap_percentage is None:
            cap_percentage = self.settings.default_redeem_cap_percentage
        if isinstance(cap_percentage, bool):
            raise InvalidInputError(f"Redemption cap must be a number (got {cap_percentage!r})")
        try:
            cap = Decimal(str(cap_percentage))
        except InvalidOperation:
            raise InvalidInputError(f"Redemption cap must be a number (got {cap_percentage!r})") from None
        if not cap.is_finite() or cap < 0 or cap > 100:
            raise InvalidInputError(f"Redemption cap must be in [0, 100] percent (got {cap_percentage})")

        max_currency = Decimal(bill) / 100 * cap / 100
        max_points = int((max_currency * self.points_per_currency_unit).to_integral_value(rounding=ROUND_FLOOR))
        actual_max = min(max_points, balance)

        logger.debug(
            f"Redemption limits for bill {bill}c at {cap}%: "
            f"{max_points} points by cap, {actual_max} after wallet balance {balance}"
        )
        return RedemptionLimits(
            bill_amount_cents=bill,
            cap_percentage=cap,
            wallet_balance=balance,
            max_redeemable_currency=max_currency,
            max_redeemable_points=max_points,
            actual_max_redeemable=actual_max,
        )

    def clamp_points(self, requested_points: int, limits: RedemptionLimits) -> int:
        """Clamp a selection into [0, actual max] for display, e.g. a slider."""
        points = _require_int(requested_points, "Points")
        return max(0, min(points, limits.actual_max_redeemable))

    def validate_redemption(self, requested_points: int, limits: RedemptionLimits) -> RedemptionPreview:
        """
        Check a redemption at submission time.

        Unlike clamp_points this never adjusts the request: a stale UI
        showing an outdated balance must fail rather than redeem a
        different amount.
        """
        points = _require_int(requested_points, "Points")
        if points <= 0:
            raise InvalidInputError(f"Points to redeem must be positive (got {points})")
        if points > limits.actual_max_redeemable:
            logger.info(
                f"Rejected redemption of {points} points; max is {limits.actual_max_redeemable}"
            )
            raise RedemptionLimitExceededError(points, limits.actual_max_redeemable)

        value = self.points_to_currency(points)
        discount_cents = int(value * 100)
        return RedemptionPreview(
            points=points,
            currency_value=value,
            discount_cents=discount_cents,
            remaining_bill_cents=limits.bill_amount_cents - discount_cents,
        )


def compute_redemption_limits(
    bill_amount_cents: int,
    wallet_balance: int,
    cap_percentage: Optional[int | float | Decimal] = None,
) -> RedemptionLimits:
    """Module-level shortcut using the default settings."""
    return RedemptionCalculator().compute_limits(bill_amount_cents, wallet_balance, cap_percentage)
