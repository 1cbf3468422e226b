"""Pydantic models for the tax-return snapshot handed to the engine.

This module defines the input boundary of the estimator:
- Information returns: W2Record, InterestRecord (1099-INT),
  DividendRecord (1099-DIV), NonemployeeRecord (1099-NEC),
  PaymentCardRecord (1099-K), TuitionStatement (1098-T)
- Return sections: PersonalInfo, Income, Adjustments, DeductionInputs,
  EducationInputs
- TaxReturn: the complete snapshot

All monetary fields use Decimal for precision. Each information-return record
is an immutable snapshot identified by a generated id. Every section defaults
to empty, so ``TaxReturn()`` is a valid all-zero return.
"""

from __future__ import annotations

import re
import uuid
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fedtax.tax.year_config import FilingStatus


def _new_id() -> str:
    return str(uuid.uuid4())


class EducationCreditType(str, Enum):
    """Education credit a filer may elect."""

    AOTC = "aotc"
    LLC = "llc"
    NONE = "none"


class EnrollmentStatus(str, Enum):
    """Student enrollment level for AOTC eligibility."""

    FULL_TIME = "full-time"
    HALF_TIME = "half-time"
    LESS_THAN_HALF_TIME = "less-than-half-time"


class DependentRelationship(str, Enum):
    """Relationship of a dependent to the filer."""

    CHILD = "child"
    STEPCHILD = "stepchild"
    FOSTER_CHILD = "foster-child"
    SIBLING = "sibling"
    PARENT = "parent"
    OTHER = "other"


def validate_tin(value: str, default_format: str) -> str:
    """Validate and format a TIN as SSN or EIN.

    Empty strings pass through untouched; the form layer owns presence checks.

    Args:
        value: TIN string, with or without separators.
        default_format: "ssn" or "ein" when input is ambiguous.

    Returns:
        Formatted TIN in SSN or EIN format, or "" when empty.

    Raises:
        ValueError: If TIN is not exactly 9 digits after cleaning.
    """
    cleaned = re.sub(r"\s", "", value)
    if not cleaned:
        return ""
    digits = re.sub(r"\D", "", cleaned)

    if len(digits) != 9:
        raise ValueError(f"TIN must be exactly 9 digits, got {len(digits)}")

    if re.fullmatch(r"\d{3}-\d{2}-\d{4}", cleaned):
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"
    if re.fullmatch(r"\d{2}-\d{7}", cleaned):
        return f"{digits[:2]}-{digits[2:]}"

    if default_format == "ssn":
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"
    if default_format == "ein":
        return f"{digits[:2]}-{digits[2:]}"

    raise ValueError("default_format must be 'ssn' or 'ein'")


TIN = Annotated[str, Field(description="Taxpayer Identification Number (SSN or EIN)")]


class _Snapshot(BaseModel):
    """Immutable information-return snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Generated record identifier")


# =============================================================================
# Information Returns
# =============================================================================


class W2Record(_Snapshot):
    """W-2 Wage and Tax Statement boxes used by the estimator."""

    employer_name: str = Field(default="", description="Box c: Employer name")
    employer_ein: TIN = Field(default="", description="Box b: Employer EIN")

    wages_tips: Decimal = Field(default=Decimal("0"), description="Box 1: Wages, tips, other compensation")
    federal_withheld: Decimal = Field(default=Decimal("0"), description="Box 2: Federal income tax withheld")
    social_security_wages: Decimal = Field(default=Decimal("0"), description="Box 3: Social security wages")
    social_security_withheld: Decimal = Field(default=Decimal("0"), description="Box 4: Social security tax withheld")
    medicare_wages: Decimal = Field(default=Decimal("0"), description="Box 5: Medicare wages and tips")
    medicare_withheld: Decimal = Field(default=Decimal("0"), description="Box 6: Medicare tax withheld")
    retirement_plan: bool = Field(default=False, description="Box 13: Retirement plan")

    @field_validator("employer_ein")
    @classmethod
    def validate_employer_ein(cls, v: str) -> str:
        """Validate and format employer EIN."""
        return validate_tin(v, default_format="ein")


class InterestRecord(_Snapshot):
    """1099-INT Interest Income boxes."""

    payer_name: str = Field(default="", description="Payer's name")
    payer_tin: TIN = Field(default="", description="Payer's TIN")

    interest_income: Decimal = Field(default=Decimal("0"), description="Box 1: Interest income")
    early_withdrawal_penalty: Decimal = Field(default=Decimal("0"), description="Box 2: Early withdrawal penalty")
    us_savings_bond_interest: Decimal = Field(
        default=Decimal("0"),
        description="Box 3: Interest on U.S. Savings Bonds and Treasury obligations",
    )
    federal_withheld: Decimal = Field(default=Decimal("0"), description="Box 4: Federal income tax withheld")
    tax_exempt_interest: Decimal = Field(default=Decimal("0"), description="Box 8: Tax-exempt interest")

    @field_validator("payer_tin")
    @classmethod
    def validate_payer_tin(cls, v: str) -> str:
        """Validate payer TIN (can be EIN or SSN)."""
        return validate_tin(v, default_format="ein")


class DividendRecord(_Snapshot):
    """1099-DIV Dividend Income boxes."""

    payer_name: str = Field(default="", description="Payer's name")
    payer_tin: TIN = Field(default="", description="Payer's TIN")

    ordinary_dividends: Decimal = Field(default=Decimal("0"), description="Box 1a: Total ordinary dividends")
    qualified_dividends: Decimal = Field(default=Decimal("0"), description="Box 1b: Qualified dividends")
    capital_gain_distributions: Decimal = Field(
        default=Decimal("0"), description="Box 2a: Total capital gain distributions"
    )
    federal_withheld: Decimal = Field(default=Decimal("0"), description="Box 4: Federal income tax withheld")

    @field_validator("payer_tin")
    @classmethod
    def validate_payer_tin(cls, v: str) -> str:
        """Validate payer TIN (SSN or EIN)."""
        return validate_tin(v, default_format="ein")


class NonemployeeRecord(_Snapshot):
    """1099-NEC Nonemployee Compensation boxes."""

    payer_name: str = Field(default="", description="Payer's name")
    payer_tin: TIN = Field(default="", description="Payer's TIN")

    nonemployee_compensation: Decimal = Field(default=Decimal("0"), description="Box 1: Nonemployee compensation")
    federal_withheld: Decimal = Field(default=Decimal("0"), description="Box 4: Federal income tax withheld")

    @field_validator("payer_tin")
    @classmethod
    def validate_payer_tin(cls, v: str) -> str:
        """Validate payer TIN (SSN or EIN)."""
        return validate_tin(v, default_format="ein")


class PaymentCardRecord(_Snapshot):
    """1099-K Payment Card and Third Party Network Transactions boxes."""

    payer_name: str = Field(default="", description="Payment settlement entity (e.g. a gig platform)")
    gross_amount: Decimal = Field(default=Decimal("0"), description="Box 1a: Gross amount of transactions")
    number_of_transactions: int = Field(default=0, ge=0, description="Box 3: Number of payment transactions")
    federal_withheld: Decimal = Field(default=Decimal("0"), description="Box 4: Federal income tax withheld")


class TuitionStatement(_Snapshot):
    """1098-T Tuition Statement boxes."""

    school_name: str = Field(default="", description="Filer (school) name")
    payments_received: Decimal = Field(
        default=Decimal("0"), description="Box 1: Payments received for qualified tuition"
    )
    scholarships_grants: Decimal = Field(default=Decimal("0"), description="Box 5: Scholarships or grants")
    at_least_half_time: bool = Field(default=True, description="Box 8: At least half-time student")
    graduate_student: bool = Field(default=False, description="Box 9: Graduate student")

    @property
    def qualified_expenses(self) -> Decimal:
        """Tuition paid net of scholarships, floored at zero."""
        return max(Decimal("0"), self.payments_received - self.scholarships_grants)

    @property
    def taxable_scholarship(self) -> Decimal:
        """Scholarship amount in excess of tuition paid."""
        return max(Decimal("0"), self.scholarships_grants - self.payments_received)


class ScheduleCExpenses(BaseModel):
    """Simplified Schedule C expenses for gig and freelance work."""

    model_config = ConfigDict(frozen=True)

    business_description: str = ""
    business_miles: Decimal = Field(default=Decimal("0"), description="Business miles driven")
    supplies: Decimal = Field(default=Decimal("0"))
    phone_internet: Decimal = Field(default=Decimal("0"), description="Business-use portion")
    platform_fees: Decimal = Field(default=Decimal("0"))
    other_expenses: Decimal = Field(default=Decimal("0"))

    def total(self, mileage_rate: Decimal) -> Decimal:
        """Total deductible expenses using the standard mileage rate."""
        return (
            self.business_miles * mileage_rate
            + self.supplies
            + self.phone_internet
            + self.platform_fees
            + self.other_expenses
        )


# =============================================================================
# Return Sections
# =============================================================================


class Dependent(BaseModel):
    """A dependent listed on the return."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    first_name: str = ""
    relationship: DependentRelationship = DependentRelationship.CHILD
    age: int = Field(default=0, ge=0)
    lived_with_filer: bool = True


class PersonalInfo(BaseModel):
    """Filer details that drive table lookups."""

    filing_status: FilingStatus = FilingStatus.SINGLE
    claimed_as_dependent: bool = False
    dependents: list[Dependent] = Field(default_factory=list)


class Income(BaseModel):
    """Income section: zero or more records of each information return."""

    w2s: list[W2Record] = Field(default_factory=list)
    form_1099_ints: list[InterestRecord] = Field(default_factory=list)
    form_1099_divs: list[DividendRecord] = Field(default_factory=list)
    form_1099_necs: list[NonemployeeRecord] = Field(default_factory=list)
    form_1099_ks: list[PaymentCardRecord] = Field(default_factory=list)
    schedule_c: ScheduleCExpenses | None = None


class Adjustments(BaseModel):
    """Above-the-line adjustments; each field is capped by the year's table."""

    student_loan_interest: Decimal = Field(default=Decimal("0"), description="Form 1098-E interest paid")
    educator_expenses: Decimal = Field(default=Decimal("0"))
    hsa_contributions: Decimal = Field(default=Decimal("0"), description="HSA contributions not made by employer")
    hsa_family_coverage: bool = False
    ira_contributions: Decimal = Field(default=Decimal("0"), description="Traditional IRA contributions")
    self_employment_health_insurance: Decimal = Field(default=Decimal("0"))


class DeductionInputs(BaseModel):
    """Itemizable expenses."""

    mortgage_interest: Decimal = Field(default=Decimal("0"))
    salt_taxes: Decimal = Field(default=Decimal("0"), description="State and local taxes paid")
    charitable_contributions: Decimal = Field(default=Decimal("0"))
    medical_expenses: Decimal = Field(default=Decimal("0"))


class StudentEducationInfo(BaseModel):
    """Student facts that decide AOTC eligibility."""

    enrollment_status: EnrollmentStatus = EnrollmentStatus.FULL_TIME
    year_in_program: int = Field(default=1, ge=1, le=5)
    has_completed_four_years: bool = False
    has_felony_drug_conviction: bool = False
    pursuing_degree: bool = True
    aotc_years_claimed: int = Field(default=0, ge=0, description="Prior years AOTC was claimed")


class EducationInputs(BaseModel):
    """Education section: 1098-T statements and the elected credit."""

    tuition_statements: list[TuitionStatement] = Field(default_factory=list)
    student_info: StudentEducationInfo = Field(default_factory=StudentEducationInfo)
    selected_credit: EducationCreditType = EducationCreditType.NONE

    @property
    def qualified_expenses(self) -> Decimal:
        """Qualified expenses summed across all 1098-T statements."""
        return sum(
            (statement.qualified_expenses for statement in self.tuition_statements),
            Decimal("0"),
        )


class TaxReturn(BaseModel):
    """Complete tax-return snapshot supplied by the form flow."""

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    income: Income = Field(default_factory=Income)
    adjustments: Adjustments = Field(default_factory=Adjustments)
    deductions: DeductionInputs = Field(default_factory=DeductionInputs)
    education: EducationInputs = Field(default_factory=EducationInputs)
