"""
Catalog Loader - Reads package, add-on and discount CSVs into a Catalog.

The CSVs are the single source of pricing configuration:
- packages.csv: campaign packages with daily/weekly rates in cents
- add_ons.csv: flat-priced add-ons in cents
- discounts.csv: multi-week, early-partner and discount cap rules
- promo_codes.csv: optional promo codes on the base price

The catalog is built once and never mutated afterwards.
"""
import hashlib
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.errors import InvalidCatalogError, PricingError
from ..engine.models import (
    AddOnDefinition,
    Catalog,
    DiscountPolicy,
    EarlyPartnerRule,
    MultiWeekRule,
    PackageDefinition,
    PromoCode,
    PromoType,
)

logger = logging.getLogger(__name__)


PACKAGE_COLUMNS = ['code', 'name', 'description', 'daily_rate', 'weekly_rate', 'supports_daily_booking', 'features']
ADD_ON_COLUMNS = ['code', 'name', 'description', 'price']
DISCOUNT_COLUMNS = ['rule', 'label', 'threshold_weeks', 'rate', 'enabled']
PROMO_CODE_COLUMNS = ['code', 'description', 'discount_type', 'discount_value', 'applicable_packages', 'min_purchase_amount', 'active']

DISCOUNT_RULES = {'multi_week', 'early_partner', 'discount_cap'}


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def get_catalog_hash(settings: Settings) -> str:
    """Hash of the catalog files, stamped on every pricing result."""
    digest = hashlib.sha256()
    for path in (settings.packages_csv, settings.add_ons_csv, settings.discounts_csv, settings.promo_codes_csv):
        if path == settings.promo_codes_csv and not path.exists():
            continue
        with open(path, 'rb') as f:
            digest.update(f.read())
    return digest.hexdigest()[:12]


def parse_bool(value: str, default: bool = False) -> bool:
    """Parse a boolean from CSV string."""
    if not value:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def parse_cents(value: str, field: str, code: str) -> int:
    """Parse a non-negative whole number of cents."""
    try:
        cents = int(value)
    except ValueError:
        raise InvalidCatalogError(f"{code}: {field} must be a whole number of cents (got {value!r})") from None
    if cents < 0:
        raise InvalidCatalogError(f"{code}: {field} cannot be negative (got {cents})")
    return cents


def parse_rate(value: str, code: str) -> Decimal:
    """Parse a fractional rate in [0, 1]."""
    try:
        rate = Decimal(value)
    except InvalidOperation:
        raise InvalidCatalogError(f"{code}: rate must be a decimal fraction (got {value!r})") from None
    if not rate.is_finite() or rate < 0 or rate > 1:
        raise InvalidCatalogError(f"{code}: rate must be between 0 and 1 (got {value})")
    return rate


def read_table(path: Path, columns: list[str]) -> pd.DataFrame:
    """Read a catalog CSV as strings, stripped, with required columns checked."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}.")

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise InvalidCatalogError(f"{path.name} is empty") from None
    except pd.errors.ParserError as e:
        raise InvalidCatalogError(f"{path.name} could not be parsed: {e}") from None

    # Strip all strings and headers
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidCatalogError(f"{path.name} is missing columns: {', '.join(missing)}")

    duplicated = df[columns[0]][df[columns[0]].duplicated()].unique()
    if len(duplicated) > 0:
        raise InvalidCatalogError(f"{path.name} has duplicate entries: {', '.join(duplicated)}")

    return df


def parse_packages(df: pd.DataFrame) -> list[PackageDefinition]:
    """Convert packages.csv rows into PackageDefinitions."""
    packages = []
    for _, row in df.iterrows():
        code = row['code']
        if not code:
            raise InvalidCatalogError("packages.csv has a row without a code")
        if not row['weekly_rate']:
            raise InvalidCatalogError(f"{code}: weekly_rate is required")

        supports_daily = parse_bool(row['supports_daily_booking'], default=True)
        daily_rate = None
        if supports_daily:
            if not row['daily_rate']:
                raise InvalidCatalogError(f"{code}: daily_rate is required for daily booking")
            daily_rate = parse_cents(row['daily_rate'], 'daily_rate', code)

        features = tuple(f.strip() for f in row['features'].split('|') if f.strip())

        packages.append(PackageDefinition(
            code=code,
            name=row['name'] or code,
            description=row['description'],
            daily_rate=daily_rate,
            weekly_rate=parse_cents(row['weekly_rate'], 'weekly_rate', code),
            supports_daily_booking=supports_daily,
            features=features,
        ))
    return packages


def parse_add_ons(df: pd.DataFrame) -> list[AddOnDefinition]:
    """Convert add_ons.csv rows into AddOnDefinitions."""
    add_ons = []
    for _, row in df.iterrows():
        code = row['code']
        if not code:
            raise InvalidCatalogError("add_ons.csv has a row without a code")
        add_ons.append(AddOnDefinition(
            code=code,
            name=row['name'] or code,
            description=row['description'],
            price=parse_cents(row['price'], 'price', code),
        ))
    return add_ons


def parse_discounts(df: pd.DataFrame) -> DiscountPolicy:
    """
    Convert discounts.csv rows into a DiscountPolicy.

    multi_week and early_partner rows are required. A missing or disabled
    discount_cap row leaves discounts uncapped.
    """
    rows = {}
    for _, row in df.iterrows():
        rule = row['rule']
        if rule not in DISCOUNT_RULES:
            raise InvalidCatalogError(f"discounts.csv has unknown rule {rule!r}")
        rows[rule] = row

    for required in ('multi_week', 'early_partner'):
        if required not in rows:
            raise InvalidCatalogError(f"discounts.csv is missing the {required} rule")

    mw = rows['multi_week']
    try:
        threshold = int(mw['threshold_weeks'])
    except ValueError:
        raise InvalidCatalogError(
            f"multi_week: threshold_weeks must be a whole number (got {mw['threshold_weeks']!r})"
        ) from None
    if threshold < 1:
        raise InvalidCatalogError(f"multi_week: threshold_weeks must be at least 1 (got {threshold})")

    multi_week = MultiWeekRule(
        threshold_weeks=threshold,
        rate=parse_rate(mw['rate'], 'multi_week'),
        label=mw['label'] or "Multi-week discount",
        enabled=parse_bool(mw['enabled'], default=True),
    )

    ep = rows['early_partner']
    early_partner = EarlyPartnerRule(
        rate=parse_rate(ep['rate'], 'early_partner'),
        label=ep['label'] or "Early partner discount",
        active=parse_bool(ep['enabled']),
    )

    cap_fraction = None
    cap = rows.get('discount_cap')
    if cap is not None and parse_bool(cap['enabled'], default=True):
        cap_fraction = parse_rate(cap['rate'], 'discount_cap')

    return DiscountPolicy(multi_week=multi_week, early_partner=early_partner, cap_fraction=cap_fraction)


def parse_promo_codes(df: pd.DataFrame, package_codes: set[str]) -> list[PromoCode]:
    """
    Convert promo_codes.csv rows into PromoCodes.

    applicable_packages is pipe-separated and may only name catalog packages;
    blank means every package.
    """
    promos = []
    seen = set()
    for _, row in df.iterrows():
        code = row['code'].upper()
        if not code:
            raise InvalidCatalogError("promo_codes.csv has a row without a code")
        if code in seen:
            raise InvalidCatalogError(f"promo_codes.csv has duplicate entries: {code}")
        seen.add(code)

        try:
            discount_type = PromoType(row['discount_type'].lower())
        except ValueError:
            raise InvalidCatalogError(
                f"{code}: discount_type must be one of "
                f"{', '.join(t.value for t in PromoType)} (got {row['discount_type']!r})"
            ) from None

        applicable = frozenset(p.strip() for p in row['applicable_packages'].split('|') if p.strip())
        unknown = sorted(applicable - package_codes)
        if unknown:
            raise InvalidCatalogError(f"{code}: applicable_packages names unknown packages: {', '.join(unknown)}")

        promos.append(PromoCode(
            code=code,
            description=row['description'],
            discount_type=discount_type,
            discount_value=parse_cents(row['discount_value'], 'discount_value', code),
            applicable_packages=applicable,
            min_purchase_amount=parse_cents(row['min_purchase_amount'] or '0', 'min_purchase_amount', code),
            active=parse_bool(row['active'], default=True),
        ))
    return promos


def load_promo_codes(settings: Settings, package_codes: set[str]) -> list[PromoCode]:
    """Promo codes are optional; a catalog without the file has none."""
    if not settings.promo_codes_csv.exists():
        return []
    return parse_promo_codes(read_table(settings.promo_codes_csv, PROMO_CODE_COLUMNS), package_codes)


def find_catalog_warnings(packages: list[PackageDefinition]) -> list[str]:
    """Consistency checks the engine itself does not enforce."""
    warnings = []
    for pkg in packages:
        if pkg.daily_rate is not None and pkg.weekly_rate > pkg.daily_rate * 7:
            warnings.append(
                f"{pkg.code}: weekly_rate {pkg.weekly_rate} exceeds 7 × daily_rate ({pkg.daily_rate * 7})"
            )
    return warnings


def load_catalog(settings: Optional[Settings] = None) -> Catalog:
    """
    Load and validate the pricing catalog.

    Args:
        settings: Optional settings override

    Returns:
        Immutable Catalog

    Raises:
        FileNotFoundError: a catalog CSV is missing
        InvalidCatalogError: a row is malformed
    """
    settings = settings or get_settings()

    packages = parse_packages(read_table(settings.packages_csv, PACKAGE_COLUMNS))
    add_ons = parse_add_ons(read_table(settings.add_ons_csv, ADD_ON_COLUMNS))
    discounts = parse_discounts(read_table(settings.discounts_csv, DISCOUNT_COLUMNS))
    promo_codes = load_promo_codes(settings, {p.code for p in packages})

    for warning in find_catalog_warnings(packages):
        logger.warning(warning)

    catalog = Catalog.from_definitions(
        packages=packages,
        add_ons=add_ons,
        discounts=discounts,
        catalog_hash=get_catalog_hash(settings),
        promo_codes=promo_codes,
    )
    logger.info(
        f"Loaded catalog {catalog.catalog_hash} from {settings.catalog_dir}: "
        f"{len(catalog.packages)} packages, {len(catalog.add_ons)} add-ons, "
        f"{len(catalog.promo_codes)} promo codes"
    )
    return catalog


def build_catalog_report(settings: Optional[Settings] = None, verbose: bool = False) -> dict:
    """
    Validate the catalog files and summarize them.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Report dictionary with status, input files, metrics, warnings and errors
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    for name, path in (
        ("packages", settings.packages_csv),
        ("add_ons", settings.add_ons_csv),
        ("discounts", settings.discounts_csv),
        ("promo_codes", settings.promo_codes_csv),
    ):
        report["input_files"][name] = {
            "path": str(path),
            "hash": get_file_hash(path)
        }

    try:
        catalog = load_catalog(settings)
    except (FileNotFoundError, PricingError) as e:
        report["errors"].append(str(e))
        report["status"] = "failed"
        if verbose:
            print(f"ERROR: {e}")
        return report

    report["warnings"].extend(find_catalog_warnings(list(catalog.packages.values())))

    policy = catalog.discounts
    report["metrics"] = {
        "package_count": len(catalog.packages),
        "add_on_count": len(catalog.add_ons),
        "promo_code_count": len(catalog.promo_codes),
        "daily_bookable": sorted(c for c, p in catalog.packages.items() if p.supports_daily_booking),
        "weekly_only": sorted(c for c, p in catalog.packages.items() if not p.supports_daily_booking),
        "multi_week": {
            "threshold_weeks": policy.multi_week.threshold_weeks,
            "rate": str(policy.multi_week.rate),
            "enabled": policy.multi_week.enabled,
        },
        "early_partner": {
            "rate": str(policy.early_partner.rate),
            "active": policy.early_partner.active,
        },
        "cap_fraction": str(policy.cap_fraction) if policy.cap_fraction is not None else None,
    }
    report["catalog_hash"] = catalog.catalog_hash
    report["status"] = "success"

    if verbose:
        print(f"Catalog {catalog.catalog_hash}: {len(catalog.packages)} packages, {len(catalog.add_ons)} add-ons")
        for warning in report["warnings"]:
            print(f"WARNING: {warning}")

    return report
