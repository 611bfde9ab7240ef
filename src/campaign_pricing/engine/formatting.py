"""Display helpers for prices held in cents."""
from decimal import Decimal, ROUND_HALF_UP

from .errors import UnsupportedDurationError
from .models import DurationType, PackageDefinition, parse_duration_type


def format_cad(cents: int) -> str:
    """Format cents as whole Canadian dollars, e.g. 135000 -> '$1,350'."""
    dollars = int((Decimal(abs(cents)) / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    sign = "-" if cents < 0 and dollars else ""
    return f"{sign}${dollars:,}"


def get_pricing_text(package: PackageDefinition, duration_type: DurationType | str) -> str:
    """Headline rate for a package, e.g. '$60/week'."""
    duration = parse_duration_type(duration_type)
    if duration is DurationType.DAILY:
        if not package.supports_daily_booking or package.daily_rate is None:
            raise UnsupportedDurationError(package.code, duration.value)
        return f"{format_cad(package.daily_rate)}/day"
    return f"{format_cad(package.weekly_rate)}/week"


def format_duration(duration_type: DurationType, week_count: int) -> str:
    """Duration label for the breakdown: '3 weeks' or '21 days'."""
    if duration_type is DurationType.DAILY:
        days = week_count * 7
        return f"{days} day{'s' if days != 1 else ''}"
    return f"{week_count} week{'s' if week_count != 1 else ''}"
