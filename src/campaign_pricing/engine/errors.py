"""
Pricing errors.

Every failure is a deterministic validation error raised synchronously.
None of them are retryable: the same input always fails the same way.
"""


class PricingError(ValueError):
    """Base class for all pricing and redemption failures."""


class InvalidInputError(PricingError):
    """Malformed request value (duration type, week count, amounts)."""


class UnsupportedDurationError(PricingError):
    """Daily billing requested for a weekly-only package."""
    
    def __init__(self, package_code: str, duration_type: str):
        self.package_code = package_code
        self.duration_type = duration_type
        super().__init__(
            f"Package '{package_code}' is only available as weekly booking "
            f"(requested {duration_type})"
        )


class UnknownPackageError(PricingError):
    """Package code is not in the catalog."""
    
    def __init__(self, package_code: str):
        self.package_code = package_code
        super().__init__(f"Unknown package code '{package_code}'")


class UnknownAddOnError(PricingError):
    """Add-on code is not in the catalog."""
    
    def __init__(self, add_on_code: str):
        self.add_on_code = add_on_code
        super().__init__(f"Unknown add-on code '{add_on_code}'")


class RedemptionLimitExceededError(PricingError):
    """Requested points exceed what the bill cap and wallet balance allow."""
    
    def __init__(self, requested_points: int, max_redeemable: int):
        self.requested_points = requested_points
        self.max_redeemable = max_redeemable
        super().__init__(
            f"Cannot redeem {requested_points} points; "
            f"maximum redeemable is {max_redeemable}"
        )


class InvalidCatalogError(PricingError):
    """Catalog data file contains a malformed or inconsistent row."""


class UnknownPromoCodeError(PricingError):
    """Promo code is not in the catalog."""
    
    def __init__(self, promo_code: str):
        self.promo_code = promo_code
        super().__init__(f"Unknown promo code '{promo_code}'")
