"""Tests for the credit pipeline: CTC, EITC, AOTC, and LLC."""

from decimal import Decimal

import pytest

from fedtax.engine.credits import (
    CreditInputs,
    CreditKind,
    PhaseOut,
    PhaseOutKind,
    RefundRule,
    apply_phase_out,
    calculate_aotc,
    calculate_child_tax_credit,
    calculate_education_credits,
    calculate_eitc,
    calculate_llc,
    count_qualifying_children,
    evaluate_credits,
)
from fedtax.returns.models import (
    Dependent,
    EducationCreditType,
    EnrollmentStatus,
    PersonalInfo,
    StudentEducationInfo,
    TaxReturn,
)
from fedtax.tax.year_config import FilingStatus, TaxYearConfig


def _inputs(**overrides) -> CreditInputs:
    """Credit inputs for a single filer with matching earned income and AGI."""
    agi = overrides.pop("agi", Decimal("30000"))
    values = {
        "filing_status": FilingStatus.SINGLE,
        "agi": agi,
        "earned_income": agi,
    }
    values.update(overrides)
    return CreditInputs(**values)


# =============================================================================
# Phase-out rules
# =============================================================================


class TestApplyPhaseOut:
    """Tests for the shared phase-out shapes."""

    STEPPED = PhaseOut(PhaseOutKind.STEPPED, Decimal("200000"), rate=Decimal("50"))

    @pytest.mark.parametrize(
        "income,expected",
        [
            (Decimal("200000"), Decimal("2000")),
            (Decimal("200001"), Decimal("1950")),
            (Decimal("201000"), Decimal("1950")),
            (Decimal("201001"), Decimal("1900")),
            (Decimal("260000"), Decimal("0")),
        ],
    )
    def test_stepped_rounds_up_each_thousand(
        self, income: Decimal, expected: Decimal
    ) -> None:
        """Any part of $1,000 over the threshold costs a full step."""
        assert apply_phase_out(Decimal("2000"), income, self.STEPPED) == expected

    def test_linear_range(self) -> None:
        """Halfway through the range leaves half the credit."""
        rule = PhaseOut(PhaseOutKind.LINEAR_RANGE, Decimal("80000"), Decimal("90000"))

        assert apply_phase_out(Decimal("2000"), Decimal("85000"), rule) == Decimal("1000")
        assert apply_phase_out(Decimal("2000"), Decimal("95000"), rule) == Decimal("0")

    def test_linear_rate(self) -> None:
        """Rate-based phase-out subtracts rate times excess."""
        rule = PhaseOut(
            PhaseOutKind.LINEAR_RATE, Decimal("10000"), Decimal("20000"), Decimal("0.10")
        )

        assert apply_phase_out(Decimal("500"), Decimal("12000"), rule) == Decimal("300")
        assert apply_phase_out(Decimal("500"), Decimal("20001"), rule) == Decimal("0")


# =============================================================================
# Child Tax Credit
# =============================================================================


class TestChildTaxCredit:
    """Tests for the CTC and its refundable cap."""

    def test_qualifying_children(self, config: TaxYearConfig) -> None:
        """Children 16 and under who lived with the filer qualify."""
        tax_return = TaxReturn(
            personal_info=PersonalInfo(
                dependents=[
                    Dependent(age=5),
                    Dependent(age=16),
                    Dependent(age=17),
                    Dependent(age=10, lived_with_filer=False),
                ]
            )
        )

        assert count_qualifying_children(tax_return, config) == 2

    def test_full_credit_below_threshold(self, config: TaxYearConfig) -> None:
        """$2,000 per child below the phase-out."""
        line = calculate_child_tax_credit(
            _inputs(agi=Decimal("100000"), num_qualifying_children=2), config
        )

        assert line.kind == CreditKind.CHILD_TAX_CREDIT
        assert line.amount == Decimal("4000")
        assert line.refundable_amount == Decimal("3400")
        assert line.refund_rule == RefundRule.UNUSED

    def test_stepped_phase_out(self, config: TaxYearConfig) -> None:
        """$10,000 over the threshold costs $500."""
        line = calculate_child_tax_credit(
            _inputs(agi=Decimal("210000"), num_qualifying_children=2), config
        )

        assert line.amount == Decimal("3500")

    def test_joint_threshold(self, config: TaxYearConfig) -> None:
        """MFJ filers phase out from $400,000."""
        line = calculate_child_tax_credit(
            _inputs(
                filing_status=FilingStatus.MARRIED_JOINTLY,
                agi=Decimal("300000"),
                num_qualifying_children=1,
            ),
            config,
        )

        assert line.amount == Decimal("2000")

    def test_no_children(self, config: TaxYearConfig) -> None:
        assert calculate_child_tax_credit(_inputs(), config).amount == Decimal("0")


# =============================================================================
# Earned Income Tax Credit
# =============================================================================


class TestEarnedIncomeCredit:
    """Tests for the EITC."""

    def test_two_children_in_phase_out(self, config: TaxYearConfig) -> None:
        """Single, $30,000, two children: max credit less 21.06% of the excess."""
        line = calculate_eitc(
            _inputs(agi=Decimal("30000"), num_qualifying_children=2), config
        )

        # 6960 - (30000 - 22720) * 0.2106
        assert line.amount == Decimal("5426.83")
        assert line.refundable_amount == Decimal("5426.83")
        assert line.refund_rule == RefundRule.FIXED

    def test_phase_in(self, config: TaxYearConfig) -> None:
        """Below the earned income threshold the credit phases in."""
        line = calculate_eitc(_inputs(agi=Decimal("5000")), config)

        assert line.amount == Decimal("382.50")

    def test_investment_income_cutoff(self, config: TaxYearConfig) -> None:
        """Investment income over the limit disqualifies entirely."""
        at_limit = calculate_eitc(
            _inputs(
                agi=Decimal("15000"),
                num_qualifying_children=1,
                investment_income=Decimal("11600"),
            ),
            config,
        )
        over_limit = calculate_eitc(
            _inputs(
                agi=Decimal("15000"),
                num_qualifying_children=1,
                investment_income=Decimal("11601"),
            ),
            config,
        )

        assert at_limit.amount == Decimal("4213")
        assert over_limit.amount == Decimal("0")

    def test_dependent_filer_ineligible(self, config: TaxYearConfig) -> None:
        """A filer claimed as a dependent gets no EITC."""
        line = calculate_eitc(_inputs(agi=Decimal("8000"), claimed_as_dependent=True), config)

        assert line.amount == Decimal("0")

    def test_zero_above_phase_out_end(self, config: TaxYearConfig) -> None:
        line = calculate_eitc(
            _inputs(agi=Decimal("56000"), num_qualifying_children=2), config
        )

        assert line.amount == Decimal("0")

    def test_children_capped_at_three(self, config: TaxYearConfig) -> None:
        """Five children earn the same credit as three."""
        three = calculate_eitc(_inputs(num_qualifying_children=3), config)
        five = calculate_eitc(_inputs(num_qualifying_children=5), config)

        assert five.amount == three.amount

    def test_phase_out_uses_greater_of_agi_and_earned(self, config: TaxYearConfig) -> None:
        """AGI above earned income drives the phase-out."""
        line = calculate_eitc(
            _inputs(
                agi=Decimal("40000"),
                earned_income=Decimal("20000"),
                num_qualifying_children=2,
            ),
            config,
        )

        # 6960 - (40000 - 22720) * 0.2106
        assert line.amount == Decimal("3320.83")

    @pytest.mark.parametrize("children", [0, 1, 2, 3])
    def test_non_increasing_above_phase_out_start(
        self, config: TaxYearConfig, children: int
    ) -> None:
        """Past the plateau, more income never raises the credit."""
        params = config.eitc_parameters_for(FilingStatus.SINGLE, children)
        start = params.phase_out_start
        amounts = [
            calculate_eitc(
                _inputs(agi=start + Decimal(step * 1500), num_qualifying_children=children),
                config,
            ).amount
            for step in range(30)
        ]

        assert amounts == sorted(amounts, reverse=True)
        assert all(amount >= 0 for amount in amounts)


# =============================================================================
# Education credits
# =============================================================================


class TestEducationCredits:
    """Tests for AOTC, LLC, and choosing between them."""

    def test_aotc_full(self, config: TaxYearConfig) -> None:
        """$4,000 of expenses earns the $2,500 maximum, $1,000 refundable."""
        option = calculate_aotc(
            _inputs(agi=Decimal("50000"), qualified_education_expenses=Decimal("4000")),
            config,
        )

        assert option.eligible
        assert option.line.amount == Decimal("2500")
        assert option.line.refundable_amount == Decimal("1000")
        assert option.line.nonrefundable_amount == Decimal("1500")

    def test_aotc_partial_second_tier(self, config: TaxYearConfig) -> None:
        """25% of expenses between $2,000 and $4,000."""
        option = calculate_aotc(
            _inputs(agi=Decimal("50000"), qualified_education_expenses=Decimal("3000")),
            config,
        )

        assert option.line.amount == Decimal("2250")
        assert option.line.refundable_amount == Decimal("900")

    def test_aotc_phase_out(self, config: TaxYearConfig) -> None:
        """Midway through the phase-out range leaves half."""
        option = calculate_aotc(
            _inputs(agi=Decimal("85000"), qualified_education_expenses=Decimal("4000")),
            config,
        )

        assert option.line.amount == Decimal("1250")
        assert option.line.refundable_amount == Decimal("500")

    @pytest.mark.parametrize(
        "student,reason",
        [
            (StudentEducationInfo(aotc_years_claimed=4), "already claimed"),
            (StudentEducationInfo(has_felony_drug_conviction=True), "felony"),
            (StudentEducationInfo(has_completed_four_years=True), "4 years"),
            (StudentEducationInfo(pursuing_degree=False), "degree"),
            (
                StudentEducationInfo(enrollment_status=EnrollmentStatus.LESS_THAN_HALF_TIME),
                "half-time",
            ),
        ],
    )
    def test_aotc_ineligible(
        self, config: TaxYearConfig, student: StudentEducationInfo, reason: str
    ) -> None:
        """Each disqualifier is reported and zeroes the credit."""
        option = calculate_aotc(
            _inputs(
                agi=Decimal("50000"),
                qualified_education_expenses=Decimal("4000"),
                student_info=student,
            ),
            config,
        )

        assert not option.eligible
        assert option.line.amount == Decimal("0")
        assert any(reason in text for text in option.reasons)

    def test_llc(self, config: TaxYearConfig) -> None:
        """20% of up to $10,000, nonrefundable."""
        option = calculate_llc(
            _inputs(agi=Decimal("50000"), qualified_education_expenses=Decimal("12000")),
            config,
        )

        assert option.line.amount == Decimal("2000")
        assert option.line.refundable_amount == Decimal("0")
        assert option.line.refund_rule == RefundRule.NONREFUNDABLE

    def test_llc_income_limit(self, config: TaxYearConfig) -> None:
        """At the end of the range the LLC is unavailable."""
        option = calculate_llc(
            _inputs(agi=Decimal("90000"), qualified_education_expenses=Decimal("5000")),
            config,
        )

        assert not option.eligible
        assert option.line.amount == Decimal("0")

    def test_recommends_aotc(self, config: TaxYearConfig) -> None:
        """AOTC is preferred when the student qualifies."""
        result = calculate_education_credits(
            _inputs(agi=Decimal("50000"), qualified_education_expenses=Decimal("4000")),
            config,
        )

        assert result.recommended_credit == EducationCreditType.AOTC
        assert result.credit_type == EducationCreditType.AOTC
        assert result.credit_amount == Decimal("2500")

    def test_falls_back_to_llc(self, config: TaxYearConfig) -> None:
        """When AOTC is used up, LLC applies."""
        result = calculate_education_credits(
            _inputs(
                agi=Decimal("50000"),
                qualified_education_expenses=Decimal("4000"),
                student_info=StudentEducationInfo(aotc_years_claimed=4),
            ),
            config,
        )

        assert result.credit_type == EducationCreditType.LLC
        assert result.credit_amount == Decimal("800")
        assert any(reason.startswith("AOTC:") for reason in result.ineligibility_reasons)

    def test_eligible_selection_honored(self, config: TaxYearConfig) -> None:
        """An eligible election wins over the recommendation."""
        result = calculate_education_credits(
            _inputs(
                agi=Decimal("50000"),
                qualified_education_expenses=Decimal("4000"),
                selected_education_credit=EducationCreditType.LLC,
            ),
            config,
        )

        assert result.recommended_credit == EducationCreditType.AOTC
        assert result.credit_type == EducationCreditType.LLC
        assert result.credit_amount == Decimal("800")

    def test_no_expenses_no_credit(self, config: TaxYearConfig) -> None:
        result = calculate_education_credits(_inputs(), config)

        assert result.credit_type == EducationCreditType.NONE
        assert result.line is None
        assert result.credit_amount == Decimal("0")


# =============================================================================
# Credits evaluation
# =============================================================================


class TestEvaluateCredits:
    """Tests for evaluating every credit together."""

    def test_lines_in_application_order(self, config: TaxYearConfig) -> None:
        """CTC, then the education credit, then EITC; zero credits omitted."""
        result = evaluate_credits(
            _inputs(
                agi=Decimal("30000"),
                num_qualifying_children=2,
                qualified_education_expenses=Decimal("4000"),
            ),
            config,
        )

        assert [line.kind for line in result.lines] == [
            CreditKind.CHILD_TAX_CREDIT,
            CreditKind.AMERICAN_OPPORTUNITY,
            CreditKind.EARNED_INCOME,
        ]
        assert result.total_credits == Decimal("4000") + Decimal("2500") + Decimal("5426.83")

    def test_no_credits(self, config: TaxYearConfig) -> None:
        """A high earner without children gets nothing."""
        result = evaluate_credits(_inputs(agi=Decimal("150000")), config)

        assert result.lines == ()
        assert result.total_credits == Decimal("0")

    def test_credits_never_negative(self, config: TaxYearConfig) -> None:
        """Every line is non-negative across a range of incomes."""
        for step in range(0, 60):
            result = evaluate_credits(
                _inputs(
                    agi=Decimal(step * 5000),
                    num_qualifying_children=3,
                    qualified_education_expenses=Decimal("6000"),
                ),
                config,
            )
            for line in (result.child_tax_credit, result.earned_income_credit):
                assert line.amount >= 0
                assert line.refundable_amount >= 0


# =============================================================================
# Phase-out properties shared by every credit
# =============================================================================


def _ctc_amount(inputs: CreditInputs, config: TaxYearConfig) -> Decimal:
    return calculate_child_tax_credit(inputs, config).amount


def _aotc_amount(inputs: CreditInputs, config: TaxYearConfig) -> Decimal:
    return calculate_aotc(inputs, config).line.amount


def _llc_amount(inputs: CreditInputs, config: TaxYearConfig) -> Decimal:
    return calculate_llc(inputs, config).line.amount


class TestCreditPhaseOutProperties:
    """Every credit is non-increasing in AGI once its phase-out begins."""

    @pytest.mark.parametrize("status", list(FilingStatus))
    @pytest.mark.parametrize(
        "credit,start_for",
        [
            (_ctc_amount, lambda config, status: config.ctc_threshold_for(status)),
            (_aotc_amount, lambda config, status: config.aotc_phase_out_for(status).start),
            (_llc_amount, lambda config, status: config.llc_phase_out_for(status).start),
        ],
        ids=["ctc", "aotc", "llc"],
    )
    def test_non_increasing_above_phase_out_start(
        self, config: TaxYearConfig, status: FilingStatus, credit, start_for
    ) -> None:
        """Sweeping AGI upward from the threshold never raises the credit."""
        start = start_for(config, status)
        amounts = [
            credit(
                _inputs(
                    filing_status=status,
                    agi=start + Decimal(step * 1250),
                    num_qualifying_children=2,
                    qualified_education_expenses=Decimal("10000"),
                ),
                config,
            )
            for step in range(0, 200)
        ]

        assert amounts == sorted(amounts, reverse=True)
        assert amounts[0] > 0
        assert amounts[-1] == 0
