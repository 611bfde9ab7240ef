"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Catalog entries are frozen so one catalog can be shared between requests.
"""
from dataclasses import dataclass, field, asdict
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import (
    InvalidCatalogError,
    InvalidInputError,
    UnknownAddOnError,
    UnknownPackageError,
    UnknownPromoCodeError,
)


class DurationType(str, Enum):
    """How a campaign is billed."""
    DAILY = "daily"
    WEEKLY = "weekly"


class PromoType(str, Enum):
    """How a promo code's discount_value is read."""
    PERCENTAGE = "percentage"      # percent of the base price
    FIXED_AMOUNT = "fixed_amount"  # cents off the base price
    FREE_DAYS = "free_days"        # days at the daily rate, daily bookings only


def parse_duration_type(value) -> DurationType:
    """Coerce "daily"/"weekly" (any case) or a DurationType."""
    if isinstance(value, DurationType):
        return value
    try:
        return DurationType(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Duration type must be one of daily, weekly (got {value!r})"
        ) from None


def as_rate(value, name: str) -> Decimal:
    """Coerce a rate to a Decimal fraction in [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidCatalogError(f"{name} must be a decimal fraction (got {value!r})")
    try:
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        rate = Decimal(str(value))
    except InvalidOperation:
        raise InvalidCatalogError(f"{name} must be a decimal fraction (got {value!r})") from None
    if not rate.is_finite() or rate < 0 or rate > 1:
        raise InvalidCatalogError(f"{name} must be between 0 and 1 (got {value})")
    return rate


def normalize_promo_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class PackageDefinition:
    """A campaign package in the catalog. Rates are in cents."""
    code: str
    name: str
    weekly_rate: int
    daily_rate: Optional[int] = None
    supports_daily_booking: bool = True
    description: str = ""
    features: tuple[str, ...] = ()


@dataclass(frozen=True)
class AddOnDefinition:
    """A flat-priced add-on, independent of duration. Price is in cents."""
    code: str
    name: str
    price: int
    description: str = ""


@dataclass(frozen=True)
class MultiWeekRule:
    """Percentage off the subtotal once the booking reaches a week threshold."""
    threshold_weeks: int
    rate: Decimal
    label: str = "Multi-week discount"
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'rate', as_rate(self.rate, "multi_week rate"))


@dataclass(frozen=True)
class EarlyPartnerRule:
    """Percentage off what remains after the multi-week discount."""
    rate: Decimal
    label: str = "Early partner discount"
    active: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'rate', as_rate(self.rate, "early_partner rate"))


@dataclass(frozen=True)
class DiscountPolicy:
    """Discount rules plus the cap on their combined effect."""
    multi_week: MultiWeekRule
    early_partner: EarlyPartnerRule
    cap_fraction: Optional[Decimal] = None  # None = uncapped

    def __post_init__(self):
        if self.cap_fraction is not None:
            object.__setattr__(self, 'cap_fraction', as_rate(self.cap_fraction, "cap_fraction"))


@dataclass(frozen=True)
class PromoCode:
    """
    A promo code discounting the base price of a booking.

    discount_value is a percent, a number of cents or a number of days
    depending on discount_type. An empty applicable_packages set means the
    code is valid for every package.
    """
    code: str
    discount_type: PromoType
    discount_value: int
    applicable_packages: frozenset[str] = frozenset()
    min_purchase_amount: int = 0
    active: bool = True
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'code', normalize_promo_code(self.code))
        try:
            object.__setattr__(self, 'discount_type', PromoType(self.discount_type))
        except ValueError:
            raise InvalidCatalogError(
                f"{self.code}: unknown discount_type {self.discount_type!r}"
            ) from None

        for name in ('discount_value', 'min_purchase_amount'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidCatalogError(f"{self.code}: {name} must be a non-negative integer (got {value!r})")
        if self.discount_type is PromoType.PERCENTAGE and self.discount_value > 100:
            raise InvalidCatalogError(f"{self.code}: percentage cannot exceed 100 (got {self.discount_value})")

        if isinstance(self.applicable_packages, str):
            raise InvalidCatalogError(f"{self.code}: applicable_packages must be a collection of codes")
        object.__setattr__(self, 'applicable_packages', frozenset(self.applicable_packages))

    def applies_to(self, package_code: str) -> bool:
        return not self.applicable_packages or package_code in self.applicable_packages


@dataclass(frozen=True)
class Catalog:
    """Immutable lookup tables, built once and shared."""
    packages: Mapping[str, PackageDefinition]
    add_ons: Mapping[str, AddOnDefinition]
    discounts: DiscountPolicy
    catalog_hash: Optional[str] = None
    promo_codes: Mapping[str, PromoCode] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'packages', MappingProxyType(dict(self.packages)))
        object.__setattr__(self, 'add_ons', MappingProxyType(dict(self.add_ons)))
        object.__setattr__(self, 'promo_codes', MappingProxyType(dict(self.promo_codes)))

    @classmethod
    def from_definitions(
        cls,
        packages: list[PackageDefinition],
        add_ons: list[AddOnDefinition],
        discounts: DiscountPolicy,
        catalog_hash: Optional[str] = None,
        promo_codes: tuple[PromoCode, ...] = (),
    ) -> 'Catalog':
        """Build a catalog keyed by code, keeping the given order."""
        return cls(
            packages={p.code: p for p in packages},
            add_ons={a.code: a for a in add_ons},
            discounts=discounts,
            catalog_hash=catalog_hash,
            promo_codes={p.code: p for p in promo_codes},
        )

    def get_package(self, code: str) -> PackageDefinition:
        try:
            return self.packages[code]
        except (KeyError, TypeError):
            raise UnknownPackageError(code) from None

    def get_add_on(self, code: str) -> AddOnDefinition:
        try:
            return self.add_ons[code]
        except (KeyError, TypeError):
            raise UnknownAddOnError(code) from None

    def get_promo_code(self, code: str) -> PromoCode:
        """Case-insensitive promo lookup."""
        try:
            return self.promo_codes[normalize_promo_code(code)]
        except (KeyError, AttributeError):
            raise UnknownPromoCodeError(code) from None


@dataclass(frozen=True)
class PricingRequest:
    """A pricing request, built fresh for each user interaction."""
    package_code: str
    duration_type: DurationType | str
    week_count: int
    selected_add_ons: frozenset[str] = frozenset()
    is_early_partner_eligible: bool = False
    promo_code: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.selected_add_ons, str):
            raise InvalidInputError(
                f"selected_add_ons must be a collection of codes, not a string (got {self.selected_add_ons!r})"
            )
        # Set semantics: a repeated add-on code counts once
        object.__setattr__(self, 'selected_add_ons', frozenset(self.selected_add_ons))

        if self.promo_code is not None:
            if not isinstance(self.promo_code, str):
                raise InvalidInputError(f"Promo code must be a string (got {self.promo_code!r})")
            object.__setattr__(self, 'promo_code', self.promo_code.strip() or None)


@dataclass(frozen=True)
class DiscountAmounts:
    """Discounts after the cap has been applied. Amounts are in cents."""
    multi_week: int
    early_partner: int
    total: int
    raw_total: int
    cap: Optional[int] = None

    @property
    def was_capped(self) -> bool:
        return self.total < self.raw_total


@dataclass(frozen=True)
class PromoOutcome:
    """Result of checking a promo code against a booking."""
    code: str
    amount: int
    reason: str = ""

    @property
    def applied(self) -> bool:
        return self.amount > 0


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class BreakdownLine:
    """A named amount shown to the user as a line item."""
    name: str
    amount: int


@dataclass
class Breakdown:
    """Display breakdown, rendered verbatim by the UI."""
    package: str
    duration: str
    add_ons: list[BreakdownLine] = field(default_factory=list)
    discounts: list[BreakdownLine] = field(default_factory=list)


@dataclass
class PricingResult:
    """
    Complete result of a pricing calculation. Money is in cents.

    total_discount_amount covers the capped multi-week and early-partner
    discounts; a promo code discount is reported separately and sits
    outside the cap.
    """
    package_code: str
    duration_type: str
    week_count: int
    base_price: int
    add_ons_total: int
    subtotal: int
    multi_week_discount_amount: int
    early_partner_discount_amount: int
    total_discount_amount: int
    final_total: int
    breakdown: Breakdown
    promo_code: Optional[str] = None
    promo_discount_amount: int = 0
    weekly_price: int = 0
    weekly_savings_percent: int = 0
    currency: str = "CAD"
    trace: list[TraceStep] = field(default_factory=list)

    # Metadata
    catalog_hash: Optional[str] = None

    @property
    def savings_amount(self) -> int:
        return self.total_discount_amount + self.promo_discount_amount

    @property
    def promo_applied(self) -> bool:
        return self.promo_discount_amount > 0

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain dict for the checkout collaborator and receipts."""
        data = asdict(self)
        data["savings_amount"] = self.savings_amount
        data["promo_applied"] = self.promo_applied
        return data
