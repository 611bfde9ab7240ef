"""
Print a priced campaign with its breakdown and trace.

Usage:
    python scripts/debug_quote.py [package] [daily|weekly] [weeks] [add_on ...]
"""
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from campaign_pricing.engine import PricingEngine, PricingError
from campaign_pricing.engine.formatting import format_cad, get_pricing_text


def debug(args: list[str]):
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    
    package = args[0] if len(args) > 0 else "events_spotlight"
    duration = args[1] if len(args) > 1 else "weekly"
    weeks = int(args[2]) if len(args) > 2 else 2
    add_ons = args[3:]
    
    engine = PricingEngine()
    
    print("Loaded Packages:")
    for code, pkg in engine.catalog.packages.items():
        rates = [get_pricing_text(pkg, "weekly")]
        if pkg.supports_daily_booking:
            rates.append(get_pricing_text(pkg, "daily"))
        print(f"  {code}: {pkg.name} ({', '.join(rates)})")
    
    print(f"\n--- Pricing {package} {duration} x{weeks} {add_ons or ''} ---")
    try:
        result = engine.quote(package, duration, weeks, add_ons=add_ons, early_partner=True)
    except PricingError as e:
        print(f"Refused: {e}")
        sys.exit(1)
    
    print(f"{result.breakdown.package}: {result.breakdown.duration}")
    for line in result.breakdown.add_ons:
        print(f"  + {line.name}: {format_cad(line.amount)}")
    for line in result.breakdown.discounts:
        print(f"  - {line.name}: {format_cad(line.amount)}")
    print(f"Total: {format_cad(result.final_total)} (saved {format_cad(result.savings_amount)})")
    
    print("\nTrace:")
    print(result.get_trace_text())


if __name__ == "__main__":
    debug(sys.argv[1:])
