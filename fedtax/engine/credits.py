"""Tax credit evaluation.

Every credit runs through the same pipeline:

1. compute a base amount from the credit's own inputs,
2. reduce it with a ``PhaseOut`` rule keyed by income,
3. split it into refundable and nonrefundable parts with a ``RefundSplit``.

Credits covered: Child Tax Credit (with the Additional CTC refundable cap),
Earned Income Tax Credit, American Opportunity Tax Credit and Lifetime
Learning Credit. Only one education credit applies per return.

The split only records how much of each credit may be refunded. Applying
credits against liability happens in ``fedtax.engine.reconcile``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from enum import Enum

from fedtax.engine.money import ZERO, round_cents
from fedtax.returns.models import (
    EducationCreditType,
    EnrollmentStatus,
    StudentEducationInfo,
    TaxReturn,
)
from fedtax.tax.year_config import FilingStatus, PhaseOutRange, TaxYearConfig

THOUSAND = Decimal("1000")


# =============================================================================
# Pipeline Building Blocks
# =============================================================================


class PhaseOutKind(str, Enum):
    """Shape of a credit's income phase-out."""

    STEPPED = "stepped"  # fixed reduction per $1,000 (or part) over start
    LINEAR_RANGE = "linear_range"  # proportional between start and end
    LINEAR_RATE = "linear_rate"  # rate per dollar over start


@dataclass(frozen=True)
class PhaseOut:
    """Phase-out rule parameters.

    Attributes:
        kind: Phase-out shape.
        start: Income where the reduction begins.
        end: Income where the credit reaches zero (LINEAR_RANGE, LINEAR_RATE).
        rate: Reduction per step (STEPPED) or per dollar (LINEAR_RATE).
    """

    kind: PhaseOutKind
    start: Decimal
    end: Decimal | None = None
    rate: Decimal = ZERO

    @classmethod
    def over_range(cls, phase_out: PhaseOutRange) -> PhaseOut:
        return cls(kind=PhaseOutKind.LINEAR_RANGE, start=phase_out.start, end=phase_out.end)


def apply_phase_out(amount: Decimal, income: Decimal, rule: PhaseOut) -> Decimal:
    """Reduce a credit for income above the rule's start, floored at zero.

    Example:
        >>> rule = PhaseOut(PhaseOutKind.STEPPED, Decimal("200000"), rate=Decimal("50"))
        >>> apply_phase_out(Decimal("2000"), Decimal("200001"), rule)
        Decimal('1950')
    """
    if income <= rule.start:
        return max(ZERO, amount)

    excess = income - rule.start
    if rule.kind is PhaseOutKind.STEPPED:
        steps = (excess / THOUSAND).to_integral_value(rounding=ROUND_CEILING)
        reduced = amount - steps * rule.rate
    elif rule.kind is PhaseOutKind.LINEAR_RANGE:
        width = rule.end - rule.start
        ratio = min(Decimal("1"), excess / width)
        reduced = amount * (Decimal("1") - ratio)
    else:
        if rule.end is not None and income > rule.end:
            return ZERO
        reduced = amount - excess * rule.rate

    return max(ZERO, reduced)


class RefundRule(str, Enum):
    """How the refundable portion of a credit is realized."""

    NONREFUNDABLE = "nonrefundable"
    FIXED = "fixed"  # refundable portion refunds regardless of liability
    UNUSED = "unused"  # only the part left after liability refunds, up to the cap


@dataclass(frozen=True)
class RefundSplit:
    """Refundable share of a credit: ``min(amount * rate, cap)``."""

    rule: RefundRule
    rate: Decimal = Decimal("1")
    cap: Decimal | None = None

    def refundable(self, amount: Decimal) -> Decimal:
        if self.rule is RefundRule.NONREFUNDABLE:
            return ZERO
        portion = round_cents(amount * self.rate)
        if self.cap is not None:
            portion = min(portion, self.cap)
        return portion


NONREFUNDABLE = RefundSplit(rule=RefundRule.NONREFUNDABLE, rate=ZERO)
FULLY_REFUNDABLE = RefundSplit(rule=RefundRule.FIXED)


class CreditKind(str, Enum):
    """Credits evaluated by the engine, in the order they apply."""

    CHILD_TAX_CREDIT = "ctc"
    AMERICAN_OPPORTUNITY = "aotc"
    LIFETIME_LEARNING = "llc"
    EARNED_INCOME = "eitc"


CREDIT_NAMES: dict[CreditKind, tuple[str, str]] = {
    CreditKind.CHILD_TAX_CREDIT: ("Child Tax Credit", "Schedule 8812"),
    CreditKind.AMERICAN_OPPORTUNITY: ("American Opportunity Credit", "Form 8863"),
    CreditKind.LIFETIME_LEARNING: ("Lifetime Learning Credit", "Form 8863"),
    CreditKind.EARNED_INCOME: ("Earned Income Credit", "Schedule EIC"),
}


@dataclass(frozen=True)
class CreditLine:
    """One computed credit.

    Attributes:
        kind: Which credit this is.
        name: Display name.
        form: IRS form for claiming this credit.
        amount: Credit after phase-out.
        refundable_amount: Refundable portion (a cap for UNUSED credits).
        refund_rule: How the refundable portion is realized.
    """

    kind: CreditKind
    name: str
    form: str
    amount: Decimal
    refundable_amount: Decimal
    refund_rule: RefundRule

    @property
    def nonrefundable_amount(self) -> Decimal:
        """Portion that may only offset liability."""
        if self.refund_rule is RefundRule.FIXED:
            return self.amount - self.refundable_amount
        return self.amount


def compute_credit(
    kind: CreditKind,
    base_amount: Decimal,
    income: Decimal,
    phase_out: PhaseOut,
    split: RefundSplit,
) -> CreditLine:
    """Run one credit through the shared phase-out and refund-split pipeline."""
    amount = round_cents(apply_phase_out(base_amount, income, phase_out))
    name, form = CREDIT_NAMES[kind]
    return CreditLine(
        kind=kind,
        name=name,
        form=form,
        amount=amount,
        refundable_amount=split.refundable(amount),
        refund_rule=split.rule,
    )


# =============================================================================
# Credit Inputs
# =============================================================================


@dataclass(frozen=True)
class CreditInputs:
    """Everything the credit engine reads.

    Attributes:
        filing_status: Filing status for threshold lookups.
        agi: Adjusted Gross Income.
        earned_income: Wages plus net self-employment income.
        investment_income: Interest (taxable and exempt) plus dividends.
        claimed_as_dependent: Filer is someone else's dependent.
        num_qualifying_children: Children meeting the CTC age/residency test.
        qualified_education_expenses: Tuition net of scholarships.
        student_info: AOTC eligibility facts.
        selected_education_credit: Credit the filer elected, or NONE.
    """

    filing_status: FilingStatus
    agi: Decimal
    earned_income: Decimal = ZERO
    investment_income: Decimal = ZERO
    claimed_as_dependent: bool = False
    num_qualifying_children: int = 0
    qualified_education_expenses: Decimal = ZERO
    student_info: StudentEducationInfo = field(default_factory=StudentEducationInfo)
    selected_education_credit: EducationCreditType = EducationCreditType.NONE


def count_qualifying_children(tax_return: TaxReturn, config: TaxYearConfig) -> int:
    """Count dependents young enough for the CTC who lived with the filer."""
    max_age = config.child_tax_credit.child_max_age
    return sum(
        1
        for dependent in tax_return.personal_info.dependents
        if dependent.age <= max_age and dependent.lived_with_filer
    )


def build_credit_inputs(
    tax_return: TaxReturn,
    agi: Decimal,
    earned_income: Decimal,
    investment_income: Decimal,
    config: TaxYearConfig,
) -> CreditInputs:
    """Assemble CreditInputs from the return and upstream totals."""
    return CreditInputs(
        filing_status=tax_return.personal_info.filing_status,
        agi=agi,
        earned_income=earned_income,
        investment_income=investment_income,
        claimed_as_dependent=tax_return.personal_info.claimed_as_dependent,
        num_qualifying_children=count_qualifying_children(tax_return, config),
        qualified_education_expenses=tax_return.education.qualified_expenses,
        student_info=tax_return.education.student_info,
        selected_education_credit=tax_return.education.selected_credit,
    )


# =============================================================================
# Individual Credits
# =============================================================================


def calculate_child_tax_credit(inputs: CreditInputs, config: TaxYearConfig) -> CreditLine:
    """Child Tax Credit with its stepped phase-out.

    $50 is lost for each $1,000 (or part) of AGI over the threshold. The
    unused portion is refundable up to the per-child ACTC cap.
    """
    params = config.child_tax_credit
    children = max(0, inputs.num_qualifying_children)
    phase_out = PhaseOut(
        kind=PhaseOutKind.STEPPED,
        start=config.ctc_threshold_for(inputs.filing_status),
        rate=params.reduction_per_thousand,
    )
    split = RefundSplit(
        rule=RefundRule.UNUSED,
        cap=params.refundable_max_per_child * children,
    )
    return compute_credit(
        CreditKind.CHILD_TAX_CREDIT,
        params.max_per_child * children,
        inputs.agi,
        phase_out,
        split,
    )


def calculate_eitc(inputs: CreditInputs, config: TaxYearConfig) -> CreditLine:
    """Earned Income Tax Credit.

    Investment income over the limit disqualifies outright, before any
    phase-in or phase-out math. The credit phases in on earned income and
    phases out on the greater of earned income and AGI.
    """
    params = config.eitc_parameters_for(inputs.filing_status, inputs.num_qualifying_children)

    disqualified = (
        inputs.claimed_as_dependent
        or inputs.investment_income > config.eitc_investment_income_limit
        or inputs.earned_income <= ZERO
    )
    if disqualified:
        base = ZERO
    elif inputs.earned_income <= params.earned_income_threshold:
        base = min(inputs.earned_income * params.phase_in_rate, params.max_credit)
    else:
        base = params.max_credit

    phase_out = PhaseOut(
        kind=PhaseOutKind.LINEAR_RATE,
        start=params.phase_out_start,
        end=params.phase_out_end,
        rate=params.phase_out_rate,
    )
    return compute_credit(
        CreditKind.EARNED_INCOME,
        base,
        max(inputs.earned_income, inputs.agi),
        phase_out,
        FULLY_REFUNDABLE,
    )


@dataclass(frozen=True)
class EducationCreditOption:
    """One education credit evaluated on its own."""

    line: CreditLine
    eligible: bool
    reasons: tuple[str, ...] = ()


def aotc_ineligibility_reasons(
    inputs: CreditInputs, config: TaxYearConfig
) -> list[str]:
    """Reasons the American Opportunity Credit is unavailable."""
    params = config.american_opportunity
    student = inputs.student_info
    reasons: list[str] = []

    if student.has_completed_four_years:
        reasons.append("Student has completed 4 years of post-secondary education")
    if student.aotc_years_claimed >= params.max_years_claimed:
        reasons.append(
            f"AOTC already claimed for {student.aotc_years_claimed} tax years"
        )
    if student.has_felony_drug_conviction:
        reasons.append("Student has a felony drug conviction")
    if not student.pursuing_degree:
        reasons.append("Student is not pursuing a degree or credential")
    if student.enrollment_status is EnrollmentStatus.LESS_THAN_HALF_TIME:
        reasons.append("Student must be enrolled at least half-time")
    if inputs.agi >= config.aotc_phase_out_for(inputs.filing_status).end:
        reasons.append("Income exceeds limit for AOTC")
    return reasons


def calculate_aotc(inputs: CreditInputs, config: TaxYearConfig) -> EducationCreditOption:
    """American Opportunity Tax Credit.

    100% of the first tier of expenses plus 25% of the second tier, phased
    out linearly over the income range. 40% of the result is refundable, up
    to the refundable cap.
    """
    params = config.american_opportunity
    expenses = max(ZERO, inputs.qualified_education_expenses)
    reasons = aotc_ineligibility_reasons(inputs, config)
    eligible = not reasons and expenses > ZERO

    base = ZERO
    if eligible:
        first_tier = min(expenses, params.first_tier_expenses)
        second_tier = min(
            max(ZERO, expenses - params.first_tier_expenses),
            params.second_tier_expenses,
        )
        base = first_tier * params.first_tier_rate + second_tier * params.second_tier_rate

    line = compute_credit(
        CreditKind.AMERICAN_OPPORTUNITY,
        base,
        inputs.agi,
        PhaseOut.over_range(config.aotc_phase_out_for(inputs.filing_status)),
        RefundSplit(
            rule=RefundRule.FIXED,
            rate=params.refundable_rate,
            cap=params.max_refundable,
        ),
    )
    return EducationCreditOption(line=line, eligible=eligible, reasons=tuple(reasons))


def calculate_llc(inputs: CreditInputs, config: TaxYearConfig) -> EducationCreditOption:
    """Lifetime Learning Credit: flat rate on capped expenses, nonrefundable."""
    params = config.lifetime_learning
    phase_out = config.llc_phase_out_for(inputs.filing_status)
    expenses = max(ZERO, inputs.qualified_education_expenses)

    reasons: list[str] = []
    if inputs.agi >= phase_out.end:
        reasons.append("Income exceeds limit for LLC")
    elif expenses <= ZERO:
        reasons.append("No qualified education expenses")
    eligible = not reasons

    base = ZERO
    if eligible:
        base = min(expenses, params.max_qualified_expenses) * params.credit_rate

    line = compute_credit(
        CreditKind.LIFETIME_LEARNING,
        base,
        inputs.agi,
        PhaseOut.over_range(phase_out),
        NONREFUNDABLE,
    )
    return EducationCreditOption(line=line, eligible=eligible, reasons=tuple(reasons))


@dataclass(frozen=True)
class EducationCreditResult:
    """Education credit comparison and the credit actually claimed.

    Attributes:
        credit_type: Credit applied (AOTC, LLC, or NONE).
        line: The applied credit line, or None.
        qualified_expenses: Expenses the credits were computed on.
        aotc: AOTC evaluated on its own.
        llc: LLC evaluated on its own.
        recommended_credit: AOTC when it is worth something, else LLC.
        ineligibility_reasons: Prefixed reasons from both credits.
    """

    credit_type: EducationCreditType
    line: CreditLine | None
    qualified_expenses: Decimal
    aotc: EducationCreditOption
    llc: EducationCreditOption
    recommended_credit: EducationCreditType
    ineligibility_reasons: tuple[str, ...]

    @property
    def credit_amount(self) -> Decimal:
        return self.line.amount if self.line is not None else ZERO

    @property
    def refundable_amount(self) -> Decimal:
        return self.line.refundable_amount if self.line is not None else ZERO


def calculate_education_credits(
    inputs: CreditInputs, config: TaxYearConfig
) -> EducationCreditResult:
    """Evaluate both education credits and pick the one to claim.

    An eligible elected credit wins; an ineligible election falls back to
    the recommended one.
    """
    aotc = calculate_aotc(inputs, config)
    llc = calculate_llc(inputs, config)

    recommended = EducationCreditType.NONE
    if aotc.eligible and aotc.line.amount > ZERO:
        recommended = EducationCreditType.AOTC
    elif llc.eligible and llc.line.amount > ZERO:
        recommended = EducationCreditType.LLC

    options = {EducationCreditType.AOTC: aotc, EducationCreditType.LLC: llc}
    selected = inputs.selected_education_credit
    if selected in options and options[selected].eligible:
        effective = selected
    else:
        effective = recommended
    line = options[effective].line if effective in options else None

    reasons: list[str] = []
    if not aotc.eligible:
        reasons.extend(f"AOTC: {reason}" for reason in aotc.reasons)
    if not llc.eligible:
        reasons.extend(f"LLC: {reason}" for reason in llc.reasons)

    return EducationCreditResult(
        credit_type=effective,
        line=line,
        qualified_expenses=inputs.qualified_education_expenses,
        aotc=aotc,
        llc=llc,
        recommended_credit=recommended,
        ineligibility_reasons=tuple(reasons),
    )


# =============================================================================
# Credits Evaluation
# =============================================================================


@dataclass(frozen=True)
class CreditsResult:
    """Result of credits evaluation.

    Attributes:
        lines: Credits with a positive amount, in application order.
        child_tax_credit: CTC line (possibly zero).
        earned_income_credit: EITC line (possibly zero).
        education: Education credit comparison.
        total_credits: Sum of computed credit amounts.
    """

    lines: tuple[CreditLine, ...]
    child_tax_credit: CreditLine
    earned_income_credit: CreditLine
    education: EducationCreditResult
    total_credits: Decimal


def evaluate_credits(inputs: CreditInputs, config: TaxYearConfig) -> CreditsResult:
    """Evaluate all credits independently.

    Example:
        >>> inputs = CreditInputs(filing_status=FilingStatus.SINGLE, agi=Decimal("80000"),
        ...                       earned_income=Decimal("80000"), num_qualifying_children=2)
        >>> evaluate_credits(inputs, TAX_YEAR_2025).total_credits
        Decimal('4000.00')
    """
    ctc = calculate_child_tax_credit(inputs, config)
    education = calculate_education_credits(inputs, config)
    eitc = calculate_eitc(inputs, config)

    ordered = [ctc]
    if education.line is not None:
        ordered.append(education.line)
    ordered.append(eitc)
    lines = tuple(line for line in ordered if line.amount > ZERO)

    return CreditsResult(
        lines=lines,
        child_tax_credit=ctc,
        earned_income_credit=eitc,
        education=education,
        total_credits=sum((line.amount for line in lines), ZERO),
    )
