"""Tax year-specific reference tables.

This module centralizes every table the calculation engine consumes: bracket
schedules, standard deduction amounts, adjustment caps, self-employment
constants, and credit parameters. Engine code never hardcodes these values;
it receives a ``TaxYearConfig`` as an explicit argument, so supporting a new
year means adding a table here and nothing else.

Every table keyed by filing status must be total over ``FilingStatus``.
``TaxYearConfig.validate`` enforces that (and bracket contiguity) and runs for
every registered year at import time.

Example:
    >>> from fedtax.tax.year_config import FilingStatus, get_tax_year_config
    >>> config = get_tax_year_config(2025)
    >>> config.standard_deduction_for(FilingStatus.SINGLE)
    Decimal('15000')
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType


class TaxTableError(ValueError):
    """Raised when a reference table is missing an entry or is malformed.

    This signals a configuration defect, never a user-input problem.
    """


class FilingStatus(str, Enum):
    """Filing status supported by the estimator."""

    SINGLE = "single"
    MARRIED_JOINTLY = "married-jointly"
    HEAD_OF_HOUSEHOLD = "head-of-household"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return FILING_STATUS_LABELS[self]


FILING_STATUS_LABELS: dict[FilingStatus, str] = {
    FilingStatus.SINGLE: "Single",
    FilingStatus.MARRIED_JOINTLY: "Married Filing Jointly",
    FilingStatus.HEAD_OF_HOUSEHOLD: "Head of Household",
}

# EITC tables stop at three children; larger families share the 3-child row.
EITC_MAX_CHILDREN = 3


# =============================================================================
# Table Structures
# =============================================================================


@dataclass(frozen=True)
class TaxBracket:
    """One marginal-rate bracket covering income in ``[min, max)``.

    Attributes:
        min: Lower bound of the bracket.
        max: Upper bound, or None for the unbounded top bracket.
        rate: Marginal rate applied to income inside the bracket.
    """

    min: Decimal
    max: Decimal | None
    rate: Decimal


@dataclass(frozen=True)
class EitcParameters:
    """Earned Income Tax Credit parameters for one status/children row."""

    max_credit: Decimal
    phase_in_rate: Decimal
    phase_out_rate: Decimal
    earned_income_threshold: Decimal
    phase_out_start: Decimal
    phase_out_end: Decimal


@dataclass(frozen=True)
class PhaseOutRange:
    """Income range over which a credit phases out linearly to zero."""

    start: Decimal
    end: Decimal


@dataclass(frozen=True)
class ChildTaxCreditParameters:
    """Child Tax Credit parameters.

    Attributes:
        max_per_child: Credit per qualifying child before phase-out.
        refundable_max_per_child: Additional Child Tax Credit cap per child.
        child_max_age: Oldest age (inclusive) that still qualifies.
        phase_out_thresholds: AGI threshold per filing status.
        reduction_per_thousand: Reduction for each $1,000 (or part) over.
    """

    max_per_child: Decimal
    refundable_max_per_child: Decimal
    child_max_age: int
    phase_out_thresholds: Mapping[FilingStatus, Decimal]
    reduction_per_thousand: Decimal = Decimal("50")


@dataclass(frozen=True)
class AmericanOpportunityParameters:
    """American Opportunity Tax Credit parameters."""

    first_tier_expenses: Decimal
    first_tier_rate: Decimal
    second_tier_expenses: Decimal
    second_tier_rate: Decimal
    refundable_rate: Decimal
    max_refundable: Decimal
    max_years_claimed: int
    phase_out: Mapping[FilingStatus, PhaseOutRange]


@dataclass(frozen=True)
class LifetimeLearningParameters:
    """Lifetime Learning Credit parameters."""

    credit_rate: Decimal
    max_qualified_expenses: Decimal
    phase_out: Mapping[FilingStatus, PhaseOutRange]


@dataclass(frozen=True)
class TaxYearConfig:
    """Complete, immutable reference-table set for one tax year.

    All monetary values are Decimal for precision in tax calculations.
    Mappings are wrapped in ``MappingProxyType`` by ``_freeze`` so a shared
    config cannot be mutated by a caller.
    """

    tax_year: int

    # Income tax
    brackets: Mapping[FilingStatus, tuple[TaxBracket, ...]]
    standard_deductions: Mapping[FilingStatus, Decimal]
    dependent_standard_deduction_minimum: Decimal
    dependent_standard_deduction_addon: Decimal

    # Above-the-line adjustment caps
    student_loan_interest_cap: Decimal
    educator_expenses_cap: Decimal
    hsa_cap_self_only: Decimal
    hsa_cap_family: Decimal
    ira_contribution_cap: Decimal

    # Itemized deduction limits
    salt_cap: Decimal
    medical_expense_floor_rate: Decimal

    # Self-employment tax (combined employer + employee rates)
    se_tax_rate: Decimal
    se_net_earnings_multiplier: Decimal
    se_deduction_rate: Decimal
    mileage_rate: Decimal

    # Credits
    child_tax_credit: ChildTaxCreditParameters
    eitc: Mapping[FilingStatus, Mapping[int, EitcParameters]]
    eitc_investment_income_limit: Decimal
    american_opportunity: AmericanOpportunityParameters
    lifetime_learning: LifetimeLearningParameters

    # Estimated tax
    estimated_tax_threshold: Decimal
    estimated_tax_due_dates: tuple[date, ...]

    # -------------------------------------------------------------------------
    # Total lookups
    # -------------------------------------------------------------------------

    def brackets_for(self, filing_status: FilingStatus) -> tuple[TaxBracket, ...]:
        """Return the ordered bracket schedule for a filing status."""
        return _lookup(self.brackets, filing_status, "brackets", self.tax_year)

    def standard_deduction_for(self, filing_status: FilingStatus) -> Decimal:
        """Return the non-dependent standard deduction for a filing status."""
        return _lookup(
            self.standard_deductions, filing_status, "standard_deductions", self.tax_year
        )

    def ctc_threshold_for(self, filing_status: FilingStatus) -> Decimal:
        """Return the Child Tax Credit phase-out threshold."""
        return _lookup(
            self.child_tax_credit.phase_out_thresholds,
            filing_status,
            "child_tax_credit.phase_out_thresholds",
            self.tax_year,
        )

    def eitc_parameters_for(
        self, filing_status: FilingStatus, num_children: int
    ) -> EitcParameters:
        """Return the EITC row, sharing the 3-child row for larger families."""
        rows = _lookup(self.eitc, filing_status, "eitc", self.tax_year)
        children = min(max(num_children, 0), EITC_MAX_CHILDREN)
        if children not in rows:
            raise TaxTableError(
                f"Tax year {self.tax_year}: eitc[{filing_status.value}] "
                f"has no row for {children} children"
            )
        return rows[children]

    def aotc_phase_out_for(self, filing_status: FilingStatus) -> PhaseOutRange:
        """Return the American Opportunity Credit phase-out range."""
        return _lookup(
            self.american_opportunity.phase_out,
            filing_status,
            "american_opportunity.phase_out",
            self.tax_year,
        )

    def llc_phase_out_for(self, filing_status: FilingStatus) -> PhaseOutRange:
        """Return the Lifetime Learning Credit phase-out range."""
        return _lookup(
            self.lifetime_learning.phase_out,
            filing_status,
            "lifetime_learning.phase_out",
            self.tax_year,
        )

    # -------------------------------------------------------------------------
    # Structural check
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """Check that every table is total and every bracket schedule is sound.

        Raises:
            TaxTableError: On the first structural defect found.
        """
        for status in FilingStatus:
            schedule = self.brackets_for(status)
            _validate_brackets(schedule, status, self.tax_year)
            self.standard_deduction_for(status)
            self.ctc_threshold_for(status)
            self.aotc_phase_out_for(status)
            self.llc_phase_out_for(status)
            rows = _lookup(self.eitc, status, "eitc", self.tax_year)
            missing = [n for n in range(EITC_MAX_CHILDREN + 1) if n not in rows]
            if missing:
                raise TaxTableError(
                    f"Tax year {self.tax_year}: eitc[{status.value}] is missing "
                    f"rows for children {missing}"
                )

        if len(self.estimated_tax_due_dates) != 4:
            raise TaxTableError(
                f"Tax year {self.tax_year}: expected 4 estimated tax due dates, "
                f"got {len(self.estimated_tax_due_dates)}"
            )


def _lookup(table: Mapping, filing_status: FilingStatus, name: str, year: int):
    """Look up a filing-status keyed entry, failing loudly when absent."""
    try:
        status = FilingStatus(filing_status)
    except ValueError as exc:
        raise TaxTableError(f"Unknown filing status: {filing_status!r}") from exc
    if status not in table:
        raise TaxTableError(f"Tax year {year}: {name} has no entry for {status.value}")
    return table[status]


def _validate_brackets(
    schedule: tuple[TaxBracket, ...], status: FilingStatus, year: int
) -> None:
    """Ensure brackets start at zero, are contiguous, and end unbounded."""
    where = f"Tax year {year}: brackets[{status.value}]"
    if not schedule:
        raise TaxTableError(f"{where} is empty")
    if schedule[0].min != Decimal("0"):
        raise TaxTableError(f"{where} must start at 0, starts at {schedule[0].min}")

    for lower, upper in zip(schedule, schedule[1:]):
        if lower.max is None:
            raise TaxTableError(f"{where} has an unbounded bracket before the last")
        if lower.max != upper.min:
            raise TaxTableError(
                f"{where} is not contiguous: {lower.max} != {upper.min}"
            )
        if lower.max <= lower.min:
            raise TaxTableError(f"{where} has an empty bracket at {lower.min}")

    if schedule[-1].max is not None:
        raise TaxTableError(f"{where} top bracket must be unbounded")


def _schedule(*rows: tuple[str, str | None, str]) -> tuple[TaxBracket, ...]:
    """Build a bracket schedule from (min, max, rate) string triples."""
    return tuple(
        TaxBracket(
            min=Decimal(low),
            max=Decimal(high) if high is not None else None,
            rate=Decimal(rate),
        )
        for low, high, rate in rows
    )


def _eitc(
    max_credit: str,
    phase_in_rate: str,
    phase_out_rate: str,
    earned_income_threshold: str,
    phase_out_start: str,
    phase_out_end: str,
) -> EitcParameters:
    return EitcParameters(
        max_credit=Decimal(max_credit),
        phase_in_rate=Decimal(phase_in_rate),
        phase_out_rate=Decimal(phase_out_rate),
        earned_income_threshold=Decimal(earned_income_threshold),
        phase_out_start=Decimal(phase_out_start),
        phase_out_end=Decimal(phase_out_end),
    )


def _freeze(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


def _education_phase_out(
    single: tuple[str, str], joint: tuple[str, str]
) -> Mapping[FilingStatus, PhaseOutRange]:
    single_range = PhaseOutRange(start=Decimal(single[0]), end=Decimal(single[1]))
    return _freeze(
        {
            FilingStatus.SINGLE: single_range,
            FilingStatus.MARRIED_JOINTLY: PhaseOutRange(
                start=Decimal(joint[0]), end=Decimal(joint[1])
            ),
            FilingStatus.HEAD_OF_HOUSEHOLD: single_range,
        }
    )


# =============================================================================
# Shared EITC rows (2024 IRS figures; reused for the 2025 estimate tables)
# =============================================================================

_EITC_UNMARRIED = _freeze(
    {
        0: _eitc("632", "0.0765", "0.0765", "8260", "10330", "18591"),
        1: _eitc("4213", "0.34", "0.1598", "12390", "22720", "49084"),
        2: _eitc("6960", "0.40", "0.2106", "17400", "22720", "55768"),
        3: _eitc("7830", "0.45", "0.2106", "17400", "22720", "59899"),
    }
)

_EITC_JOINT = _freeze(
    {
        0: _eitc("632", "0.0765", "0.0765", "8260", "17250", "25511"),
        1: _eitc("4213", "0.34", "0.1598", "12390", "29640", "56004"),
        2: _eitc("6960", "0.40", "0.2106", "17400", "29640", "62688"),
        3: _eitc("7830", "0.45", "0.2106", "17400", "29640", "66819"),
    }
)

_EITC_TABLE = _freeze(
    {
        FilingStatus.SINGLE: _EITC_UNMARRIED,
        FilingStatus.MARRIED_JOINTLY: _EITC_JOINT,
        FilingStatus.HEAD_OF_HOUSEHOLD: _EITC_UNMARRIED,
    }
)

_CHILD_TAX_CREDIT = ChildTaxCreditParameters(
    max_per_child=Decimal("2000"),
    refundable_max_per_child=Decimal("1700"),
    child_max_age=16,
    phase_out_thresholds=_freeze(
        {
            FilingStatus.SINGLE: Decimal("200000"),
            FilingStatus.MARRIED_JOINTLY: Decimal("400000"),
            FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("200000"),
        }
    ),
)

_AMERICAN_OPPORTUNITY = AmericanOpportunityParameters(
    first_tier_expenses=Decimal("2000"),
    first_tier_rate=Decimal("1.00"),
    second_tier_expenses=Decimal("2000"),
    second_tier_rate=Decimal("0.25"),
    refundable_rate=Decimal("0.40"),
    max_refundable=Decimal("1000"),
    max_years_claimed=4,
    phase_out=_education_phase_out(("80000", "90000"), ("160000", "180000")),
)

_LIFETIME_LEARNING = LifetimeLearningParameters(
    credit_rate=Decimal("0.20"),
    max_qualified_expenses=Decimal("10000"),
    phase_out=_education_phase_out(("80000", "90000"), ("160000", "180000")),
)


# =============================================================================
# 2024 Configuration - IRS published values
# =============================================================================

TAX_YEAR_2024 = TaxYearConfig(
    tax_year=2024,
    brackets=_freeze(
        {
            FilingStatus.SINGLE: _schedule(
                ("0", "11600", "0.10"),
                ("11600", "47150", "0.12"),
                ("47150", "100525", "0.22"),
                ("100525", "191950", "0.24"),
                ("191950", "243725", "0.32"),
                ("243725", "609350", "0.35"),
                ("609350", None, "0.37"),
            ),
            FilingStatus.MARRIED_JOINTLY: _schedule(
                ("0", "23200", "0.10"),
                ("23200", "94300", "0.12"),
                ("94300", "201050", "0.22"),
                ("201050", "383900", "0.24"),
                ("383900", "487450", "0.32"),
                ("487450", "731200", "0.35"),
                ("731200", None, "0.37"),
            ),
            FilingStatus.HEAD_OF_HOUSEHOLD: _schedule(
                ("0", "16550", "0.10"),
                ("16550", "63100", "0.12"),
                ("63100", "100500", "0.22"),
                ("100500", "191950", "0.24"),
                ("191950", "243700", "0.32"),
                ("243700", "609350", "0.35"),
                ("609350", None, "0.37"),
            ),
        }
    ),
    standard_deductions=_freeze(
        {
            FilingStatus.SINGLE: Decimal("14600"),
            FilingStatus.MARRIED_JOINTLY: Decimal("29200"),
            FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("21900"),
        }
    ),
    dependent_standard_deduction_minimum=Decimal("1300"),
    dependent_standard_deduction_addon=Decimal("450"),
    student_loan_interest_cap=Decimal("2500"),
    educator_expenses_cap=Decimal("300"),
    hsa_cap_self_only=Decimal("4150"),
    hsa_cap_family=Decimal("8300"),
    ira_contribution_cap=Decimal("7000"),
    salt_cap=Decimal("10000"),
    medical_expense_floor_rate=Decimal("0.075"),
    se_tax_rate=Decimal("0.153"),  # 12.4% SS + 2.9% Medicare
    se_net_earnings_multiplier=Decimal("0.9235"),
    se_deduction_rate=Decimal("0.5"),
    mileage_rate=Decimal("0.67"),
    child_tax_credit=_CHILD_TAX_CREDIT,
    eitc=_EITC_TABLE,
    eitc_investment_income_limit=Decimal("11600"),
    american_opportunity=_AMERICAN_OPPORTUNITY,
    lifetime_learning=_LIFETIME_LEARNING,
    estimated_tax_threshold=Decimal("1000"),
    estimated_tax_due_dates=(
        date(2024, 4, 15),
        date(2024, 6, 17),
        date(2024, 9, 16),
        date(2025, 1, 15),
    ),
)

# =============================================================================
# 2025 Configuration - estimator tables (EITC rows carried from 2024)
# =============================================================================

TAX_YEAR_2025 = TaxYearConfig(
    tax_year=2025,
    brackets=_freeze(
        {
            FilingStatus.SINGLE: _schedule(
                ("0", "11925", "0.10"),
                ("11925", "48475", "0.12"),
                ("48475", "103350", "0.22"),
                ("103350", "197300", "0.24"),
                ("197300", "250525", "0.32"),
                ("250525", "626350", "0.35"),
                ("626350", None, "0.37"),
            ),
            FilingStatus.MARRIED_JOINTLY: _schedule(
                ("0", "23850", "0.10"),
                ("23850", "96950", "0.12"),
                ("96950", "206700", "0.22"),
                ("206700", "394600", "0.24"),
                ("394600", "501050", "0.32"),
                ("501050", "751600", "0.35"),
                ("751600", None, "0.37"),
            ),
            FilingStatus.HEAD_OF_HOUSEHOLD: _schedule(
                ("0", "17000", "0.10"),
                ("17000", "64850", "0.12"),
                ("64850", "103350", "0.22"),
                ("103350", "197300", "0.24"),
                ("197300", "250500", "0.32"),
                ("250500", "626350", "0.35"),
                ("626350", None, "0.37"),
            ),
        }
    ),
    standard_deductions=_freeze(
        {
            FilingStatus.SINGLE: Decimal("15000"),
            FilingStatus.MARRIED_JOINTLY: Decimal("30000"),
            FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("22500"),
        }
    ),
    dependent_standard_deduction_minimum=Decimal("1350"),
    dependent_standard_deduction_addon=Decimal("450"),
    student_loan_interest_cap=Decimal("2500"),
    educator_expenses_cap=Decimal("300"),
    hsa_cap_self_only=Decimal("4300"),
    hsa_cap_family=Decimal("8550"),
    ira_contribution_cap=Decimal("7000"),
    salt_cap=Decimal("10000"),
    medical_expense_floor_rate=Decimal("0.075"),
    se_tax_rate=Decimal("0.153"),
    se_net_earnings_multiplier=Decimal("0.9235"),
    se_deduction_rate=Decimal("0.5"),
    mileage_rate=Decimal("0.70"),
    child_tax_credit=_CHILD_TAX_CREDIT,
    eitc=_EITC_TABLE,
    eitc_investment_income_limit=Decimal("11600"),
    american_opportunity=_AMERICAN_OPPORTUNITY,
    lifetime_learning=_LIFETIME_LEARNING,
    estimated_tax_threshold=Decimal("1000"),
    estimated_tax_due_dates=(
        date(2025, 4, 15),
        date(2025, 6, 16),
        date(2025, 9, 15),
        date(2026, 1, 15),
    ),
)

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: dict[int, TaxYearConfig] = {
    2024: TAX_YEAR_2024,
    2025: TAX_YEAR_2025,
}

for _config in TAX_YEAR_CONFIGS.values():
    _config.validate()


def get_tax_year_config(year: int) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2025).

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        TaxTableError: If no configuration exists for the requested year.

    Example:
        >>> config = get_tax_year_config(2025)
        >>> config.se_net_earnings_multiplier
        Decimal('0.9235')
    """
    if year not in TAX_YEAR_CONFIGS:
        available = sorted(TAX_YEAR_CONFIGS.keys())
        raise TaxTableError(
            f"No tax configuration for year {year}. Available years: {available}"
        )
    return TAX_YEAR_CONFIGS[year]
