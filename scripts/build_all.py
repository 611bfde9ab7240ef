#!/usr/bin/env python
"""
Release check for the pricing catalog.

Validates the catalog CSVs, then replays the golden pricing cases against
them. Exits non-zero when either step fails.

Usage:
    python scripts/build_all.py [--skip-tests]
"""
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / 'src'))

from campaign_pricing.data.catalog_loader import build_catalog_report


def check_catalog() -> dict:
    report = build_catalog_report(verbose=True)
    if report["status"] != "success":
        for error in report["errors"]:
            print(f"  catalog error: {error}")
    return report


def replay_golden_cases() -> bool:
    import pytest

    return pytest.main([str(ROOT / 'tests' / 'test_golden_cases.py'), '-q']) == 0


def print_summary(report: dict):
    metrics = report['metrics']
    print(f"Catalog {report['catalog_hash']}")
    print(f"  packages:     {metrics['package_count']} (weekly only: {', '.join(metrics['weekly_only']) or 'none'})")
    print(f"  add-ons:      {metrics['add_on_count']}")
    print(f"  promo codes:  {metrics['promo_code_count']}")
    print(f"  discount cap: {metrics['cap_fraction'] or 'uncapped'}")
    for warning in report["warnings"]:
        print(f"  warning: {warning}")


def main(argv: list[str]) -> int:
    report = check_catalog()
    if report["status"] != "success":
        print("Catalog check failed")
        return 1

    if '--skip-tests' not in argv and not replay_golden_cases():
        print("Golden cases failed")
        return 1

    print_summary(report)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
