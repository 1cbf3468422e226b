"""Planning helpers built on the return calculator.

- estimate_quarterly_tax: estimated payments for self-employment income
- compare_scenarios: what-if comparison for additional income
- check_filing_requirement: must-file / should-file decision
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from fedtax.engine.calculator import CalculationResult, calculate_return, to_jsonable
from fedtax.engine.money import ZERO, round_cents
from fedtax.returns.models import NonemployeeRecord, TaxReturn, W2Record
from fedtax.tax.year_config import FilingStatus, TaxYearConfig

HUNDRED = Decimal("100")
QUARTERS = 4


def _currency(amount: Decimal) -> str:
    return f"${amount:,.0f}"


# =============================================================================
# Estimated Quarterly Tax
# =============================================================================


@dataclass(frozen=True)
class QuarterlyPayment:
    """One estimated tax installment."""

    quarter: int
    due_date: date
    amount: Decimal


@dataclass(frozen=True)
class EstimatedTaxResult:
    """Estimated tax owed on self-employment income.

    Attributes:
        net_self_employment_income: Net Schedule C profit.
        self_employment_tax: SE tax on that profit.
        income_tax_share: Income tax attributable to SE income.
        total_estimated_tax: SE tax plus the income tax share.
        quarterly_payment: Total divided evenly over four installments.
        effective_income_tax_rate: Income tax share over net SE income.
        payments_required: Total meets the estimated tax threshold.
        federal_withholding: Withholding already on the return.
        payments: Installment schedule with due dates.
    """

    net_self_employment_income: Decimal
    self_employment_tax: Decimal
    income_tax_share: Decimal
    total_estimated_tax: Decimal
    quarterly_payment: Decimal
    effective_income_tax_rate: Decimal
    payments_required: bool
    federal_withholding: Decimal
    payments: tuple[QuarterlyPayment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


def estimate_quarterly_tax(
    tax_return: TaxReturn, config: TaxYearConfig
) -> EstimatedTaxResult:
    """Estimate quarterly payments for self-employment income.

    Income tax is attributed to SE income in proportion to its share of
    wages plus net SE income.

    Example:
        >>> result = estimate_quarterly_tax(TaxReturn(), TAX_YEAR_2025)
        >>> result.payments_required
        False
    """
    calculation = calculate_return(tax_return, config)
    net_se = calculation.self_employment_income
    combined_income = calculation.total_wages + net_se

    if combined_income > ZERO:
        income_tax_share = round_cents(calculation.income_tax * net_se / combined_income)
    else:
        income_tax_share = ZERO

    total = calculation.self_employment_tax + income_tax_share
    quarterly = round_cents(total / QUARTERS)
    effective_rate = income_tax_share / net_se if net_se > ZERO else ZERO

    payments = tuple(
        QuarterlyPayment(quarter=index + 1, due_date=due_date, amount=quarterly)
        for index, due_date in enumerate(config.estimated_tax_due_dates)
    )

    return EstimatedTaxResult(
        net_self_employment_income=net_se,
        self_employment_tax=calculation.self_employment_tax,
        income_tax_share=income_tax_share,
        total_estimated_tax=round_cents(total),
        quarterly_payment=quarterly,
        effective_income_tax_rate=effective_rate,
        payments_required=total >= config.estimated_tax_threshold,
        federal_withholding=calculation.federal_withholding,
        payments=payments,
    )


# =============================================================================
# What-If Comparison
# =============================================================================


@dataclass(frozen=True)
class ScenarioSnapshot:
    """The figures compared between the current and what-if return."""

    income_tax: Decimal
    self_employment_tax: Decimal
    total_tax_before_credits: Decimal
    total_tax: Decimal
    refund_or_owed: Decimal
    is_refund: bool

    @classmethod
    def from_result(cls, result: CalculationResult) -> ScenarioSnapshot:
        return cls(
            income_tax=result.income_tax,
            self_employment_tax=result.self_employment_tax,
            total_tax_before_credits=result.total_tax_before_credits,
            total_tax=result.total_tax,
            refund_or_owed=result.refund_or_owed,
            is_refund=result.is_refund,
        )


@dataclass(frozen=True)
class VarianceItem:
    """A figure that moved by more than the variance threshold."""

    field: str
    current_value: Decimal
    scenario_value: Decimal
    variance_pct: Decimal
    direction: str  # "increase" or "decrease"


@dataclass(frozen=True)
class ScenarioComparison:
    """Current return versus the return with extra income.

    Attributes:
        current: Figures for the return as entered.
        scenario: Figures with the additional income and withholding.
        additional_income: Extra wages plus extra self-employment income.
        income_tax_change: Change in bracket tax.
        self_employment_tax_change: Change in SE tax.
        withholding_change: Extra withholding.
        refund_or_owed_change: Change in refund (positive is better).
        take_home: Extra income left after the extra tax, floored at 0.
        take_home_pct: Take-home as a whole percent of the extra income.
        effective_rate_on_extra: Extra tax as a whole percent of extra income.
        variances: Figures that moved by more than the threshold.
    """

    current: ScenarioSnapshot
    scenario: ScenarioSnapshot
    additional_income: Decimal
    income_tax_change: Decimal
    self_employment_tax_change: Decimal
    withholding_change: Decimal
    refund_or_owed_change: Decimal
    take_home: Decimal
    take_home_pct: Decimal
    effective_rate_on_extra: Decimal
    variances: tuple[VarianceItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


def compare_values(
    current: dict[str, Decimal],
    scenario: dict[str, Decimal],
    threshold: Decimal = Decimal("10"),
) -> list[VarianceItem]:
    """Flag figures whose change exceeds the threshold percentage.

    A figure that was zero and becomes positive is reported as a 100%
    increase.

    Example:
        >>> variances = compare_values(
        ...     {"income_tax": Decimal("5000")},
        ...     {"income_tax": Decimal("6000")},
        ... )
        >>> variances[0].direction
        'increase'
    """
    variances: list[VarianceItem] = []

    for field_name, current_value in current.items():
        scenario_value = scenario.get(field_name, ZERO)

        if current_value == ZERO:
            if scenario_value > ZERO:
                variances.append(
                    VarianceItem(
                        field=field_name,
                        current_value=current_value,
                        scenario_value=scenario_value,
                        variance_pct=HUNDRED,
                        direction="increase",
                    )
                )
            continue

        difference = scenario_value - current_value
        variance_pct = abs(difference) / abs(current_value) * HUNDRED

        # Strictly greater than the threshold
        if variance_pct > threshold:
            variances.append(
                VarianceItem(
                    field=field_name,
                    current_value=current_value,
                    scenario_value=scenario_value,
                    variance_pct=variance_pct,
                    direction="increase" if difference > ZERO else "decrease",
                )
            )

    return variances


def build_scenario_return(
    tax_return: TaxReturn,
    additional_wages: Decimal = ZERO,
    additional_self_employment: Decimal = ZERO,
    additional_withholding: Decimal = ZERO,
) -> TaxReturn:
    """Copy a return with an extra W-2 and/or 1099-NEC appended.

    Withholding rides on the extra W-2, so it only applies when there are
    additional wages.
    """
    w2s = list(tax_return.income.w2s)
    necs = list(tax_return.income.form_1099_necs)

    if additional_wages > ZERO:
        w2s.append(
            W2Record(
                employer_name="Scenario Additional W-2",
                wages_tips=additional_wages,
                federal_withheld=additional_withholding,
                social_security_wages=additional_wages,
                social_security_withheld=round_cents(additional_wages * Decimal("0.062")),
                medicare_wages=additional_wages,
                medicare_withheld=round_cents(additional_wages * Decimal("0.0145")),
            )
        )
    if additional_self_employment > ZERO:
        necs.append(
            NonemployeeRecord(
                payer_name="Scenario Additional 1099",
                nonemployee_compensation=additional_self_employment,
            )
        )

    income = tax_return.income.model_copy(update={"w2s": w2s, "form_1099_necs": necs})
    return tax_return.model_copy(update={"income": income})


def compare_scenarios(
    tax_return: TaxReturn,
    config: TaxYearConfig,
    additional_wages: Decimal = ZERO,
    additional_self_employment: Decimal = ZERO,
    additional_withholding: Decimal = ZERO,
    threshold: Decimal = Decimal("10"),
) -> ScenarioComparison:
    """Recalculate the return with extra income and report the differences.

    Args:
        tax_return: Return as entered.
        config: Tax year tables.
        additional_wages: Extra W-2 wages.
        additional_self_employment: Extra 1099-NEC income.
        additional_withholding: Withholding on the extra wages.
        threshold: Variance percentage worth flagging.

    Returns:
        ScenarioComparison.
    """
    current_result = calculate_return(tax_return, config)
    scenario_return = build_scenario_return(
        tax_return, additional_wages, additional_self_employment, additional_withholding
    )
    scenario_result = calculate_return(scenario_return, config)

    current = ScenarioSnapshot.from_result(current_result)
    scenario = ScenarioSnapshot.from_result(scenario_result)

    extra_income = max(ZERO, additional_wages) + max(ZERO, additional_self_employment)
    income_tax_change = scenario.income_tax - current.income_tax
    se_tax_change = scenario.self_employment_tax - current.self_employment_tax
    extra_tax = income_tax_change + se_tax_change
    take_home = max(ZERO, extra_income - extra_tax)

    if extra_income > ZERO:
        take_home_pct = (take_home / extra_income * HUNDRED).quantize(Decimal("1"))
        rate_on_extra = (extra_tax / extra_income * HUNDRED).quantize(Decimal("1"))
    else:
        take_home_pct = ZERO
        rate_on_extra = ZERO

    variances = compare_values(
        {
            "income_tax": current.income_tax,
            "self_employment_tax": current.self_employment_tax,
            "total_tax": current.total_tax,
        },
        {
            "income_tax": scenario.income_tax,
            "self_employment_tax": scenario.self_employment_tax,
            "total_tax": scenario.total_tax,
        },
        threshold,
    )

    return ScenarioComparison(
        current=current,
        scenario=scenario,
        additional_income=extra_income,
        income_tax_change=income_tax_change,
        self_employment_tax_change=se_tax_change,
        withholding_change=scenario_result.federal_withholding
        - current_result.federal_withholding,
        refund_or_owed_change=scenario.refund_or_owed - current.refund_or_owed,
        take_home=take_home,
        take_home_pct=take_home_pct,
        effective_rate_on_extra=rate_on_extra,
        variances=tuple(variances),
    )


# =============================================================================
# Filing Requirement
# =============================================================================


@dataclass(frozen=True)
class FilingRequirement:
    """Whether a filer must (or should) file.

    Attributes:
        must_file: Income meets a filing threshold.
        should_file: Not required, but tax was withheld and can be refunded.
        threshold: The total-income threshold that applied.
        reasons: Human-readable explanation lines.
        earned_income_threshold: Dependent earned income threshold.
        unearned_income_threshold: Dependent unearned income threshold.
    """

    must_file: bool
    should_file: bool
    threshold: Decimal
    reasons: tuple[str, ...]
    earned_income_threshold: Decimal
    unearned_income_threshold: Decimal

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


def check_filing_requirement(
    filing_status: FilingStatus,
    claimed_as_dependent: bool,
    earned_income: Decimal,
    unearned_income: Decimal,
    had_withholding: bool,
    config: TaxYearConfig,
) -> FilingRequirement:
    """Decide whether a return must be filed.

    Dependents must file when earned income exceeds the single standard
    deduction, when unearned income exceeds the dependent minimum, or when
    total income exceeds the greater of the dependent minimum and earned
    income plus the add-on. Everyone else must file once total income reaches
    the standard deduction for their status.

    Raises:
        TaxTableError: If the filing status has no standard deduction entry.
    """
    total = earned_income + unearned_income
    earned_threshold = config.standard_deduction_for(FilingStatus.SINGLE)
    unearned_threshold = config.dependent_standard_deduction_minimum
    reasons: list[str] = []
    must_file = False

    if claimed_as_dependent:
        threshold = max(
            config.dependent_standard_deduction_minimum,
            earned_income + config.dependent_standard_deduction_addon,
        )
        if earned_income > earned_threshold:
            must_file = True
            reasons.append(
                f"Earned income ({_currency(earned_income)}) exceeds the "
                f"{_currency(earned_threshold)} threshold"
            )
        if unearned_income > unearned_threshold:
            must_file = True
            reasons.append(
                f"Unearned income ({_currency(unearned_income)}) exceeds the "
                f"{_currency(unearned_threshold)} threshold"
            )
        if total > threshold and not must_file:
            must_file = True
            reasons.append(
                f"Total income ({_currency(total)}) exceeds the "
                f"{_currency(threshold)} threshold"
            )
        if not must_file:
            reasons.append("Income is below the filing thresholds for dependents")
    else:
        threshold = config.standard_deduction_for(filing_status)
        if total >= threshold:
            must_file = True
            reasons.append(
                f"Total income ({_currency(total)}) meets or exceeds the "
                f"{_currency(threshold)} filing threshold"
            )
        else:
            reasons.append(
                f"Income ({_currency(total)}) is below the "
                f"{_currency(threshold)} filing threshold"
            )

    should_file = had_withholding and not must_file
    if should_file:
        reasons.append("Tax was withheld; filing is the only way to get it back")

    return FilingRequirement(
        must_file=must_file,
        should_file=should_file,
        threshold=threshold,
        reasons=tuple(reasons),
        earned_income_threshold=earned_threshold,
        unearned_income_threshold=unearned_threshold,
    )
