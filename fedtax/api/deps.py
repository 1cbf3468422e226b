"""FastAPI dependencies for tax-year table access."""

from fastapi import HTTPException, status

from fedtax.core.logging import get_logger, tax_year_ctx
from fedtax.tax.year_config import TaxTableError, TaxYearConfig, get_tax_year_config

logger = get_logger(__name__)


async def get_year_config(year: int) -> TaxYearConfig:
    """Resolve the ``{year}`` path parameter to its reference tables.

    Args:
        year: Tax year from the request path.

    Returns:
        TaxYearConfig for the year.

    Raises:
        HTTPException: 404 if no tables exist for the year.
    """
    try:
        config = get_tax_year_config(year)
    except TaxTableError as e:
        logger.warning("tax_year_not_found", year=year, error=str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    tax_year_ctx.set(year)
    return config
