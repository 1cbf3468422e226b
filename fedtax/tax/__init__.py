"""Tax reference tables and year-specific configurations."""

from fedtax.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    EitcParameters,
    FilingStatus,
    PhaseOutRange,
    TaxBracket,
    TaxTableError,
    TaxYearConfig,
    get_tax_year_config,
)

__all__ = [
    "FilingStatus",
    "TaxBracket",
    "EitcParameters",
    "PhaseOutRange",
    "TaxTableError",
    "TaxYearConfig",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_CONFIGS",
    "get_tax_year_config",
]
