"""Pytest configuration and shared fixtures for tests."""

from decimal import Decimal

import pytest

from fedtax.returns.models import (
    Dependent,
    Income,
    NonemployeeRecord,
    PersonalInfo,
    TaxReturn,
    W2Record,
)
from fedtax.tax.year_config import TAX_YEAR_2025, FilingStatus, TaxYearConfig


@pytest.fixture
def config() -> TaxYearConfig:
    """2025 reference tables."""
    return TAX_YEAR_2025


@pytest.fixture
def single_w2_return() -> TaxReturn:
    """Single filer with one $50,000 W-2 and $6,000 withheld."""
    return TaxReturn(
        income=Income(
            w2s=[
                W2Record(
                    employer_name="Acme Corp",
                    employer_ein="12-3456789",
                    wages_tips=Decimal("50000"),
                    federal_withheld=Decimal("6000"),
                )
            ]
        )
    )


@pytest.fixture
def family_return() -> TaxReturn:
    """Single filer, $30,000 wages, two young children, nothing withheld."""
    return TaxReturn(
        personal_info=PersonalInfo(
            filing_status=FilingStatus.SINGLE,
            dependents=[
                Dependent(first_name="Ava", age=5),
                Dependent(first_name="Ben", age=8),
            ],
        ),
        income=Income(w2s=[W2Record(wages_tips=Decimal("30000"))]),
    )


@pytest.fixture
def freelancer_return() -> TaxReturn:
    """Single filer with $40,000 of 1099-NEC income only."""
    return TaxReturn(
        income=Income(
            form_1099_necs=[
                NonemployeeRecord(
                    payer_name="Rideshare Co",
                    nonemployee_compensation=Decimal("40000"),
                )
            ]
        )
    )
