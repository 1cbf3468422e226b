"""Tests for estimated tax, what-if comparison, and filing requirement."""

from datetime import date
from decimal import Decimal

import pytest

from fedtax.engine.planning import (
    build_scenario_return,
    check_filing_requirement,
    compare_scenarios,
    compare_values,
    estimate_quarterly_tax,
)
from fedtax.returns.models import Income, NonemployeeRecord, TaxReturn, W2Record
from fedtax.tax.year_config import FilingStatus, TaxYearConfig


# =============================================================================
# Estimated quarterly tax
# =============================================================================


class TestEstimateQuarterlyTax:
    """Tests for quarterly estimated payments."""

    def test_self_employed_only(self, config: TaxYearConfig, freelancer_return: TaxReturn) -> None:
        """All income tax is attributed to SE income when there are no wages."""
        result = estimate_quarterly_tax(freelancer_return, config)

        assert result.self_employment_tax == Decimal("5651.82")
        assert result.income_tax_share == Decimal("2422.39")
        assert result.total_estimated_tax == Decimal("8074.21")
        assert result.quarterly_payment == Decimal("2018.55")
        assert result.payments_required

    def test_due_dates(self, config: TaxYearConfig, freelancer_return: TaxReturn) -> None:
        """Four installments on the year's due dates."""
        result = estimate_quarterly_tax(freelancer_return, config)

        assert [payment.quarter for payment in result.payments] == [1, 2, 3, 4]
        assert result.payments[0].due_date == date(2025, 4, 15)
        assert result.payments[-1].due_date == date(2026, 1, 15)

    def test_wages_only(self, config: TaxYearConfig, single_w2_return: TaxReturn) -> None:
        """Without SE income nothing is estimated."""
        result = estimate_quarterly_tax(single_w2_return, config)

        assert result.total_estimated_tax == Decimal("0")
        assert not result.payments_required
        assert result.federal_withholding == Decimal("6000")

    def test_proportional_share(self, config: TaxYearConfig) -> None:
        """With wages too, only part of the income tax is attributed."""
        tax_return = TaxReturn(
            income=Income(
                w2s=[W2Record(wages_tips=Decimal("40000"))],
                form_1099_necs=[NonemployeeRecord(nonemployee_compensation=Decimal("10000"))],
            )
        )

        result = estimate_quarterly_tax(tax_return, config)

        assert Decimal("0") < result.income_tax_share
        assert result.effective_income_tax_rate < Decimal("0.22")

    def test_below_threshold(self, config: TaxYearConfig) -> None:
        """Small SE income stays under the $1,000 threshold."""
        tax_return = TaxReturn(
            income=Income(
                form_1099_necs=[NonemployeeRecord(nonemployee_compensation=Decimal("2000"))]
            )
        )

        result = estimate_quarterly_tax(tax_return, config)

        assert result.total_estimated_tax < Decimal("1000")
        assert not result.payments_required


# =============================================================================
# What-if comparison
# =============================================================================


class TestCompareScenarios:
    """Tests for the what-if calculator."""

    def test_additional_wages(self, config: TaxYearConfig, single_w2_return: TaxReturn) -> None:
        """$10,000 more wages at 12% with $1,500 extra withholding."""
        comparison = compare_scenarios(
            single_w2_return,
            config,
            additional_wages=Decimal("10000"),
            additional_withholding=Decimal("1500"),
        )

        assert comparison.income_tax_change == Decimal("1200.00")
        assert comparison.self_employment_tax_change == Decimal("0")
        assert comparison.withholding_change == Decimal("1500")
        assert comparison.refund_or_owed_change == Decimal("300.00")
        assert comparison.take_home == Decimal("8800.00")
        assert comparison.take_home_pct == Decimal("88")
        assert comparison.effective_rate_on_extra == Decimal("12")
        assert {item.field for item in comparison.variances} == {"income_tax", "total_tax"}

    def test_additional_self_employment(self, config: TaxYearConfig) -> None:
        """Extra gig income carries SE tax."""
        comparison = compare_scenarios(
            TaxReturn(), config, additional_self_employment=Decimal("10000")
        )

        assert comparison.self_employment_tax_change == Decimal("1412.96")
        assert comparison.income_tax_change == Decimal("0")
        assert comparison.take_home == Decimal("8587.04")

    def test_no_change(self, config: TaxYearConfig, single_w2_return: TaxReturn) -> None:
        """No additional income means no differences."""
        comparison = compare_scenarios(single_w2_return, config)

        assert comparison.current == comparison.scenario
        assert comparison.take_home_pct == Decimal("0")
        assert comparison.variances == ()

    def test_scenario_return_leaves_original_untouched(
        self, single_w2_return: TaxReturn
    ) -> None:
        """The what-if copy appends records without editing the original."""
        scenario = build_scenario_return(
            single_w2_return,
            additional_wages=Decimal("5000"),
            additional_self_employment=Decimal("2000"),
        )

        assert len(scenario.income.w2s) == 2
        assert len(scenario.income.form_1099_necs) == 1
        assert len(single_w2_return.income.w2s) == 1
        assert single_w2_return.income.form_1099_necs == []


class TestCompareValues:
    """Tests for variance flagging."""

    def test_new_value_is_full_increase(self) -> None:
        """Zero to positive is a 100% increase."""
        variances = compare_values({"se_tax": Decimal("0")}, {"se_tax": Decimal("50")})

        assert variances[0].variance_pct == Decimal("100")
        assert variances[0].direction == "increase"

    def test_threshold_is_exclusive(self) -> None:
        """Exactly 10% is not flagged."""
        assert compare_values({"tax": Decimal("100")}, {"tax": Decimal("110")}) == []

    def test_decrease(self) -> None:
        variances = compare_values({"tax": Decimal("100")}, {"tax": Decimal("50")})

        assert variances[0].direction == "decrease"


# =============================================================================
# Filing requirement
# =============================================================================


class TestFilingRequirement:
    """Tests for the must-file decision."""

    @pytest.mark.parametrize(
        "status,total,must_file",
        [
            (FilingStatus.SINGLE, Decimal("14999"), False),
            (FilingStatus.SINGLE, Decimal("15000"), True),
            (FilingStatus.MARRIED_JOINTLY, Decimal("29999"), False),
            (FilingStatus.HEAD_OF_HOUSEHOLD, Decimal("22500"), True),
        ],
    )
    def test_non_dependent_threshold(
        self,
        config: TaxYearConfig,
        status: FilingStatus,
        total: Decimal,
        must_file: bool,
    ) -> None:
        """Filing is required once income reaches the standard deduction."""
        result = check_filing_requirement(status, False, total, Decimal("0"), False, config)

        assert result.must_file is must_file

    def test_dependent_earned_income(self, config: TaxYearConfig) -> None:
        result = check_filing_requirement(
            FilingStatus.SINGLE, True, Decimal("15001"), Decimal("0"), False, config
        )

        assert result.must_file
        assert "Earned income" in result.reasons[0]

    def test_dependent_unearned_income(self, config: TaxYearConfig) -> None:
        result = check_filing_requirement(
            FilingStatus.SINGLE, True, Decimal("0"), Decimal("1351"), False, config
        )

        assert result.must_file
        assert "Unearned income" in result.reasons[0]

    def test_dependent_combined_income(self, config: TaxYearConfig) -> None:
        """Total above max(1350, earned + 450) requires filing."""
        result = check_filing_requirement(
            FilingStatus.SINGLE, True, Decimal("1000"), Decimal("1000"), False, config
        )

        assert result.must_file
        assert result.threshold == Decimal("1450")

    def test_should_file_for_withholding(self, config: TaxYearConfig) -> None:
        """Below every threshold but with withholding: should file."""
        result = check_filing_requirement(
            FilingStatus.SINGLE, True, Decimal("500"), Decimal("0"), True, config
        )

        assert not result.must_file
        assert result.should_file
        assert len(result.reasons) == 2

    def test_must_file_overrides_should_file(self, config: TaxYearConfig) -> None:
        result = check_filing_requirement(
            FilingStatus.SINGLE, False, Decimal("40000"), Decimal("0"), True, config
        )

        assert result.must_file
        assert not result.should_file
