"""Tax estimate API endpoints.

Thin shell over the engine: requests carry a return snapshot, the year comes
from the path, and responses are the engine results as plain JSON. Money
fields are serialized as strings so cents are exact.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fedtax.api.deps import get_year_config
from fedtax.core.logging import get_logger
from fedtax.engine.calculator import calculate_return
from fedtax.engine.planning import (
    check_filing_requirement,
    compare_scenarios,
    estimate_quarterly_tax,
)
from fedtax.returns.models import TaxReturn
from fedtax.tax.year_config import FilingStatus, TaxYearConfig

logger = get_logger(__name__)

router = APIRouter(prefix="/api/tax-years", tags=["estimate"])


class FilingStatusOption(BaseModel):
    """Filing status choice with its standard deduction."""

    value: FilingStatus
    label: str
    standard_deduction: Decimal


class BracketItem(BaseModel):
    """One marginal bracket; ``max`` is None for the top bracket."""

    min: Decimal
    max: Decimal | None
    rate: Decimal


class WhatIfRequest(BaseModel):
    """Return plus the extra income to model."""

    tax_return: TaxReturn = Field(default_factory=TaxReturn)
    additional_wages: Decimal = Field(default=Decimal("0"), ge=0)
    additional_self_employment: Decimal = Field(default=Decimal("0"), ge=0)
    additional_withholding: Decimal = Field(default=Decimal("0"), ge=0)


class FilingRequirementRequest(BaseModel):
    """Facts for the must-file check."""

    filing_status: FilingStatus = FilingStatus.SINGLE
    claimed_as_dependent: bool = False
    earned_income: Decimal = Field(default=Decimal("0"), ge=0)
    unearned_income: Decimal = Field(default=Decimal("0"), ge=0)
    had_withholding: bool = False


@router.get("/{year}/filing-statuses", response_model=list[FilingStatusOption])
async def list_filing_statuses(
    config: TaxYearConfig = Depends(get_year_config),
) -> list[FilingStatusOption]:
    """List filing statuses supported for the year."""
    return [
        FilingStatusOption(
            value=status,
            label=status.label,
            standard_deduction=config.standard_deduction_for(status),
        )
        for status in FilingStatus
    ]


@router.get("/{year}/brackets/{filing_status}", response_model=list[BracketItem])
async def get_brackets(
    filing_status: FilingStatus,
    config: TaxYearConfig = Depends(get_year_config),
) -> list[BracketItem]:
    """Bracket schedule for a filing status."""
    return [
        BracketItem(min=bracket.min, max=bracket.max, rate=bracket.rate)
        for bracket in config.brackets_for(filing_status)
    ]


@router.post("/{year}/estimate")
async def estimate_return(
    tax_return: TaxReturn,
    config: TaxYearConfig = Depends(get_year_config),
) -> dict[str, Any]:
    """Calculate the full federal estimate for a return."""
    result = calculate_return(tax_return, config)
    logger.info(
        "estimate_calculated",
        filing_status=result.filing_status.value,
        is_refund=result.is_refund,
    )
    return result.to_dict()


@router.post("/{year}/estimate/quarterly")
async def estimate_quarterly(
    tax_return: TaxReturn,
    config: TaxYearConfig = Depends(get_year_config),
) -> dict[str, Any]:
    """Estimated quarterly payments for self-employment income."""
    return estimate_quarterly_tax(tax_return, config).to_dict()


@router.post("/{year}/what-if")
async def what_if(
    request: WhatIfRequest,
    config: TaxYearConfig = Depends(get_year_config),
) -> dict[str, Any]:
    """Compare the return against one with additional income."""
    comparison = compare_scenarios(
        request.tax_return,
        config,
        additional_wages=request.additional_wages,
        additional_self_employment=request.additional_self_employment,
        additional_withholding=request.additional_withholding,
    )
    return comparison.to_dict()


@router.post("/{year}/filing-requirement")
async def filing_requirement(
    request: FilingRequirementRequest,
    config: TaxYearConfig = Depends(get_year_config),
) -> dict[str, Any]:
    """Decide whether the filer must or should file."""
    requirement = check_filing_requirement(
        request.filing_status,
        request.claimed_as_dependent,
        request.earned_income,
        request.unearned_income,
        request.had_withholding,
        config,
    )
    return requirement.to_dict()
