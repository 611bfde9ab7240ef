"""
Generate golden test cases by running the current pricing engine on the
packaged catalog. This captures current behavior as a regression baseline.

The bookings are curated to cover each package and duration, every add-on
combination, the multi-week threshold, the (inactive) early-partner offer
and each packaged promo code.
"""
import os
import sys

import pandas as pd

# Add src to path for internal imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from campaign_pricing.engine import PricingEngine


# (package, duration, weeks, add-ons, early partner, promo code)
GOLDEN_BOOKINGS = [
    ('events_spotlight', 'weekly', 1, (), False, ''),
    ('events_spotlight', 'weekly', 2, (), False, ''),
    ('events_spotlight', 'weekly', 4, ('ig_story', 'email_feature'), False, ''),
    ('events_spotlight', 'daily', 1, (), False, ''),
    ('events_spotlight', 'daily', 3, ('ig_story',), False, ''),
    ('homepage_feature', 'weekly', 4, ('ig_story', 'email_feature'), False, ''),
    ('homepage_feature', 'daily', 1, (), False, ''),
    ('homepage_feature', 'daily', 2, ('email_feature',), False, ''),
    ('full_feature', 'weekly', 1, ('email_feature',), False, ''),
    ('full_feature', 'weekly', 3, (), True, ''),
    ('events_spotlight', 'weekly', 2, (), False, 'SPOTLIGHT25'),
    ('events_spotlight', 'daily', 1, (), False, 'FREEDAY'),
]


def generate_golden_cases():
    engine = PricingEngine()

    cases = []
    for package, duration, weeks, add_ons, early_partner, promo_code in GOLDEN_BOOKINGS:
        result = engine.quote(
            package,
            duration,
            weeks,
            add_ons=add_ons,
            early_partner=early_partner,
            promo_code=promo_code or None,
        )
        cases.append({
            'package': package,
            'duration': duration,
            'weeks': weeks,
            'add_ons': '|'.join(add_ons),
            'early_partner': 'true' if early_partner else 'false',
            'promo_code': promo_code,
            'expected_base': result.base_price,
            'expected_add_ons': result.add_ons_total,
            'expected_subtotal': result.subtotal,
            'expected_multi_week': result.multi_week_discount_amount,
            'expected_early_partner': result.early_partner_discount_amount,
            'expected_discount': result.total_discount_amount,
            'expected_promo': result.promo_discount_amount,
            'expected_final': result.final_total,
            'description': result.breakdown.package,
        })

    # Write to CSV
    df = pd.DataFrame(cases)
    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'golden_cases.csv')
    df.to_csv(output_path, index=False)
    print(f"Generated {len(cases)} golden test cases")
    print(f"Output: {output_path}")
    print()
    print("Sample cases:")
    print(df.head(10).to_string(index=False))


if __name__ == "__main__":
    generate_golden_cases()
