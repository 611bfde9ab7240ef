"""Loyalty subpackage - points redemption caps."""
from .redemption import (
    RedemptionCalculator,
    RedemptionLimits,
    RedemptionPreview,
    compute_redemption_limits,
)

__all__ = ['RedemptionCalculator', 'RedemptionLimits', 'RedemptionPreview', 'compute_redemption_limits']
