import os
import sys
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from campaign_pricing.config.settings import Settings
from campaign_pricing.engine import PricingEngine
from campaign_pricing.engine.models import (
    AddOnDefinition,
    Catalog,
    DiscountPolicy,
    EarlyPartnerRule,
    MultiWeekRule,
    PackageDefinition,
)


@pytest.fixture(scope="module")
def engine():
    """Engine over the packaged default catalog."""
    return PricingEngine()


@pytest.fixture
def make_catalog():
    """
    Factory for a small in-memory catalog.

    community_spotlight bills $85/week or $15/day; weekly_only has no daily rate.
    Multi-week is 10% from 2 weeks, early partner 20%. No promo codes
    unless passed in.
    """
    def _make(cap_fraction=Decimal("0.30"), early_partner_active=True, multi_week_enabled=True, promo_codes=()):
        return Catalog.from_definitions(
            packages=[
                PackageDefinition(
                    code="community_spotlight",
                    name="Community Spotlight",
                    weekly_rate=8500,
                    daily_rate=1500,
                ),
                PackageDefinition(
                    code="weekly_only",
                    name="Weekly Only Bundle",
                    weekly_rate=20000,
                    supports_daily_booking=False,
                ),
                PackageDefinition(
                    code="free_listing",
                    name="Free Listing",
                    weekly_rate=0,
                    daily_rate=0,
                ),
            ],
            add_ons=[
                AddOnDefinition(code="ig_story", name="IG Story Boost", price=1000),
                AddOnDefinition(code="email_feature", name="Email Feature", price=9000),
            ],
            discounts=DiscountPolicy(
                multi_week=MultiWeekRule(threshold_weeks=2, rate=Decimal("0.10"), enabled=multi_week_enabled),
                early_partner=EarlyPartnerRule(rate=Decimal("0.20"), active=early_partner_active),
                cap_fraction=cap_fraction,
            ),
            catalog_hash="testcatalog1",
            promo_codes=promo_codes,
        )
    return _make


@pytest.fixture
def make_engine(make_catalog):
    """Factory for an engine over make_catalog."""
    def _make(**kwargs):
        return PricingEngine(catalog=make_catalog(**kwargs))
    return _make


@pytest.fixture
def write_catalog(tmp_path):
    """Write catalog CSVs into a temp dir and return Settings pointing at them."""
    default_packages = (
        "code,name,description,daily_rate,weekly_rate,supports_daily_booking,features\n"
        "spot,Spotlight,Inline banner,1000,6000,true,Inline placement|Daily or weekly\n"
        "bundle,Bundle,Everything,,35000,false,Both placements\n"
    )
    default_add_ons = (
        "code,name,description,price\n"
        "ig_story,IG Story Boost,Story during your run,1000\n"
    )
    default_discounts = (
        "rule,label,threshold_weeks,rate,enabled\n"
        "multi_week,Multi-week discount,2,0.10,true\n"
        "early_partner,Early partner discount,,0.20,true\n"
        "discount_cap,Discount cap,,0.30,true\n"
    )

    def _write(packages=default_packages, add_ons=default_add_ons, discounts=default_discounts, promo_codes=None):
        for name, content in (
            ('packages.csv', packages),
            ('add_ons.csv', add_ons),
            ('discounts.csv', discounts),
            ('promo_codes.csv', promo_codes),
        ):
            if content is not None:
                (tmp_path / name).write_text(content, encoding='utf-8')
        return Settings.load(catalog_dir=tmp_path)
    return _write
