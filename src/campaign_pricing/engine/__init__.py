"""Engine subpackage - core pricing logic and resolution."""
from .pricing_engine import PricingEngine
from .models import Catalog, DurationType, PricingRequest, PricingResult, PromoCode, PromoType
from .errors import (
    PricingError,
    InvalidInputError,
    UnsupportedDurationError,
    UnknownPackageError,
    UnknownAddOnError,
    UnknownPromoCodeError,
)

__all__ = [
    'PricingEngine', 'Catalog', 'DurationType', 'PricingRequest', 'PricingResult',
    'PromoCode', 'PromoType',
    'PricingError', 'InvalidInputError', 'UnsupportedDurationError',
    'UnknownPackageError', 'UnknownAddOnError', 'UnknownPromoCodeError',
]
