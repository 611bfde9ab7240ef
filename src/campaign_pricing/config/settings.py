"""
Centralized settings and path configuration for the pricing engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


CATALOG_DIR_ENV = "PRICING_CATALOG_DIR"


def get_package_root() -> Path:
    """Get the installed package directory (where data/ lives)."""
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""
    
    # Catalog data files
    catalog_dir: Path
    packages_csv: Path
    add_ons_csv: Path
    discounts_csv: Path
    promo_codes_csv: Path
    
    # Money
    currency: str = 'CAD'
    
    # Loyalty (1000 JP = 1 currency unit)
    points_per_currency_unit: int = 1000
    default_redeem_cap_percentage: int = 20
    
    @classmethod
    def load(cls, catalog_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, honouring the PRICING_CATALOG_DIR override."""
        env_dir = os.environ.get(CATALOG_DIR_ENV)
        if catalog_dir is not None:
            root = Path(catalog_dir)
        elif env_dir:
            root = Path(env_dir)
        else:
            root = get_package_root() / 'data'
        
        return cls(
            catalog_dir=root,
            packages_csv=root / 'packages.csv',
            add_ons_csv=root / 'add_ons.csv',
            discounts_csv=root / 'discounts.csv',
            promo_codes_csv=root / 'promo_codes.csv',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings

