"""
Pricing Engine - Campaign pricing resolution with traceability.

Resolves a sponsorship campaign total with:
- Base price from the package rate and committed weeks
- Flat-priced add-ons (unknown codes fail closed)
- Multi-week and early-partner discounts, compounded and capped
- Optional promo code on the base price, outside the cap
- Structured PricingResult with display breakdown and audit trace
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from ..config.settings import get_settings, Settings
from .discounts import compute_discounts, compute_promo_discount
from .errors import InvalidInputError, UnsupportedDurationError
from .formatting import format_cad, format_duration
from .models import (
    Breakdown,
    BreakdownLine,
    Catalog,
    DiscountAmounts,
    DurationType,
    PackageDefinition,
    PromoOutcome,
    PricingRequest,
    PricingResult,
    parse_duration_type,
)

logger = logging.getLogger(__name__)


def validate_week_count(week_count) -> int:
    """Week count must be a whole number of at least one week."""
    if isinstance(week_count, bool) or not isinstance(week_count, int):
        raise InvalidInputError(f"Week count must be an integer (got {week_count!r})")
    if week_count < 1:
        raise InvalidInputError(f"Week count must be at least 1 (got {week_count})")
    return week_count


def weekly_savings_percent(package: PackageDefinition) -> int:
    """Percent saved by the weekly rate versus seven daily rates."""
    if not package.supports_daily_booking or not package.daily_rate:
        return 0
    daily_equivalent = package.daily_rate * 7
    percent = Decimal(daily_equivalent - package.weekly_rate) * 100 / daily_equivalent
    return int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class PricingEngine:
    """
    Core pricing engine for sponsorship campaigns.

    Resolution order:
    1. Look up the package in the catalog
    2. Base price: weekly rate × weeks, or daily rate × 7 × weeks
    3. Add-ons: sum of flat prices
    4. Discounts: multi-week, then early partner on the remainder, then cap
    5. Promo code, if any, on the base price
    6. Final total = subtotal - discounts - promo

    The engine holds no per-request state; one instance can serve
    concurrent callers.
    """

    def __init__(self, catalog: Optional[Catalog] = None, settings: Optional[Settings] = None):
        """Initialize engine with a catalog, loading the packaged one by default."""
        from ..data.catalog_loader import load_catalog
        
        self.settings = settings or get_settings()
        self._catalog_supplied = catalog is not None
        self.catalog = catalog if catalog is not None else load_catalog(self.settings)

    def reload_data(self):
        """Reload catalog CSVs from disk. No-op for an injected catalog."""
        if self._catalog_supplied:
            return
        from ..data.catalog_loader import load_catalog
        
        self.catalog = load_catalog(self.settings)

    def compute_base_price(
        self,
        package: PackageDefinition,
        duration_type: DurationType | str,
        week_count: int,
    ) -> int:
        """
        Base price in cents for a package over a number of weeks.

        Daily bookings are normalized to whole weeks of seven days;
        there is no partial-week daily billing.
        """
        duration = parse_duration_type(duration_type)
        weeks = validate_week_count(week_count)

        if duration is DurationType.WEEKLY:
            return package.weekly_rate * weeks

        if not package.supports_daily_booking or package.daily_rate is None:
            raise UnsupportedDurationError(package.code, duration.value)
        return package.daily_rate * 7 * weeks

    def compute_add_ons_total(self, add_on_codes: Iterable[str]) -> int:
        """Sum of flat add-on prices in cents. Unknown codes raise."""
        return sum(self.catalog.get_add_on(code).price for code in set(add_on_codes))

    def compute_discounts(
        self,
        subtotal: int,
        week_count: int,
        early_partner_eligible: bool = False,
    ) -> DiscountAmounts:
        """Apply the catalog discount policy to a subtotal."""
        return compute_discounts(
            subtotal=subtotal,
            week_count=week_count,
            policy=self.catalog.discounts,
            early_partner_eligible=early_partner_eligible,
        )

    def quote(
        self,
        package_code: str,
        duration_type: DurationType | str = DurationType.WEEKLY,
        week_count: int = 1,
        add_ons: Iterable[str] = (),
        early_partner: bool = False,
        promo_code: Optional[str] = None,
    ) -> PricingResult:
        """Convenience wrapper building the PricingRequest for the caller."""
        return self.compute(PricingRequest(
            package_code=package_code,
            duration_type=duration_type,
            week_count=week_count,
            selected_add_ons=frozenset(add_ons),
            is_early_partner_eligible=early_partner,
            promo_code=promo_code,
        ))

    def compute(self, request: PricingRequest) -> PricingResult:
        """
        Calculate a campaign price with full traceability.

        Args:
            request: PricingRequest with package, duration, add-ons and promo code

        Returns:
            PricingResult with breakdown and trace

        Raises:
            UnknownPackageError, UnknownAddOnError, UnknownPromoCodeError,
            UnsupportedDurationError, InvalidInputError. Nothing is returned on failure.
        """
        package = self.catalog.get_package(request.package_code)
        duration = parse_duration_type(request.duration_type)
        weeks = validate_week_count(request.week_count)
        promo = self.catalog.get_promo_code(request.promo_code) if request.promo_code else None

        base_price = self.compute_base_price(package, duration, weeks)

        # Catalog order keeps the breakdown stable regardless of set iteration
        add_ons_total = self.compute_add_ons_total(request.selected_add_ons)
        add_on_lines = [
            BreakdownLine(name=add_on.name, amount=add_on.price)
            for code, add_on in self.catalog.add_ons.items()
            if code in request.selected_add_ons
        ]

        subtotal = base_price + add_ons_total
        discounts = self.compute_discounts(subtotal, weeks, request.is_early_partner_eligible)

        policy = self.catalog.discounts
        discount_lines = []
        if discounts.multi_week > 0:
            discount_lines.append(BreakdownLine(name=policy.multi_week.label, amount=discounts.multi_week))
        if discounts.early_partner > 0:
            discount_lines.append(BreakdownLine(name=policy.early_partner.label, amount=discounts.early_partner))

        promo_outcome = None
        promo_amount = 0
        if promo is not None:
            promo_outcome = compute_promo_discount(promo, package, duration, base_price, subtotal)
            promo_amount = min(promo_outcome.amount, subtotal - discounts.total)
            if promo_amount > 0:
                discount_lines.append(BreakdownLine(
                    name=promo.description or f"Promo code {promo.code}",
                    amount=promo_amount,
                ))

        result = PricingResult(
            package_code=package.code,
            duration_type=duration.value,
            week_count=weeks,
            base_price=base_price,
            add_ons_total=add_ons_total,
            subtotal=subtotal,
            multi_week_discount_amount=discounts.multi_week,
            early_partner_discount_amount=discounts.early_partner,
            total_discount_amount=discounts.total,
            final_total=subtotal - discounts.total - promo_amount,
            breakdown=Breakdown(
                package=package.name,
                duration=format_duration(duration, weeks),
                add_ons=add_on_lines,
                discounts=discount_lines,
            ),
            promo_code=promo.code if promo is not None else None,
            promo_discount_amount=promo_amount,
            weekly_price=package.weekly_rate,
            weekly_savings_percent=weekly_savings_percent(package),
            currency=self.settings.currency,
            catalog_hash=self.catalog.catalog_hash,
        )

        self._add_trace(result, package, duration, discounts, promo_outcome)
        logger.debug(
            f"Priced {package.code} {duration.value} x{weeks}: "
            f"subtotal={subtotal} discount={discounts.total} promo={promo_amount} total={result.final_total}"
        )
        return result

    def _add_trace(
        self,
        result: PricingResult,
        package: PackageDefinition,
        duration: DurationType,
        discounts: DiscountAmounts,
        promo_outcome: Optional[PromoOutcome] = None,
    ):
        """Record each resolution step on the result for audit."""
        result.add_trace("Package Lookup", "Found package in catalog", package.code)

        if duration is DurationType.WEEKLY:
            rate_desc = f"{result.week_count} × {format_cad(package.weekly_rate)}/week"
        else:
            rate_desc = f"{result.week_count * 7} days × {format_cad(package.daily_rate)}/day"
        result.add_trace("Base Price", rate_desc, str(result.base_price))

        if result.breakdown.add_ons:
            names = ", ".join(line.name for line in result.breakdown.add_ons)
            result.add_trace("Add-ons", names, str(result.add_ons_total))
        else:
            result.add_trace("Add-ons", "No add-ons selected")

        result.add_trace("Subtotal", "Base price + add-ons", str(result.subtotal))

        policy = self.catalog.discounts
        if discounts.raw_total == 0:
            result.add_trace("Discounts", "No discounts apply")
        else:
            result.add_trace(
                "Discounts",
                f"{policy.multi_week.label} then {policy.early_partner.label.lower()}",
                str(discounts.raw_total),
            )

        if discounts.was_capped:
            result.add_trace(
                "Discount Cap",
                f"Capped at {float(policy.cap_fraction) * 100:g}% of subtotal",
                str(discounts.total),
            )

        if promo_outcome is not None:
            if result.promo_applied:
                result.add_trace(
                    "Promo Code",
                    f"{promo_outcome.code} applied to base price",
                    str(result.promo_discount_amount),
                )
            else:
                reason = promo_outcome.reason or "no discount"
                result.add_trace("Promo Code", f"{promo_outcome.code} not applied: {reason}")

        result.add_trace("Final Total", "Subtotal - discounts - promo", str(result.final_total))
