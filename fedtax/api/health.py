"""Health check endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from fedtax.tax.year_config import TAX_YEAR_CONFIGS

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    tax_years: list[int]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report liveness and the tax years with loaded tables.

    Tables are validated at import, so any year listed here is usable.
    """
    return HealthResponse(status="ok", tax_years=sorted(TAX_YEAR_CONFIGS))
