import math

import pytest

from keep_or_sell.debt import (
    amortization_schedule,
    annual_balance_trace,
    annuity_payment,
    annual_debt_service,
    compute_debt_service,
    monthly_debt_service,
    periodic_payment,
    periodic_rate,
    periods_per_year,
)
from keep_or_sell.schemas import MortgageInputs, PaymentFrequency, RateConvention


def _mortgage(**overrides) -> MortgageInputs:
    values = dict(
        principal=120_000,
        annual_rate_percent=0,
        amortization_years=10,
        payment_frequency=PaymentFrequency.MONTHLY,
        term_years=5,
    )
    values.update(overrides)
    return MortgageInputs(**values)


class TestPeriodsPerYear:
    @pytest.mark.parametrize(
        "frequency, expected",
        [
            ("weekly", 52),
            ("accelerated-weekly", 52),
            ("bi-weekly", 26),
            ("accelerated-bi-weekly", 26),
            ("semi-monthly", 24),
            ("monthly", 12),
        ],
    )
    def test_table(self, frequency, expected):
        assert periods_per_year(frequency) == expected

    def test_unknown_frequency_falls_back_to_monthly(self):
        assert periods_per_year("fortnightly") == 12
        assert _mortgage(payment_frequency="quarterly").payment_frequency is (
            PaymentFrequency.MONTHLY
        )

    @pytest.mark.parametrize(
        "frequency, label",
        [
            (PaymentFrequency.MONTHLY, "Monthly"),
            (PaymentFrequency.SEMI_MONTHLY, "Semi-monthly"),
            (PaymentFrequency.BI_WEEKLY, "Bi-weekly"),
            (PaymentFrequency.WEEKLY, "Weekly"),
            (PaymentFrequency.ACCELERATED_BI_WEEKLY, "Accelerated bi-weekly"),
            (PaymentFrequency.ACCELERATED_WEEKLY, "Accelerated weekly"),
        ],
    )
    def test_labels(self, frequency, label):
        assert frequency.label == label


class TestPeriodicRate:
    def test_simple_convention_ignores_frequency(self):
        assert periodic_rate(6, "weekly", RateConvention.SIMPLE) == pytest.approx(0.005)
        assert periodic_rate(6, "monthly", RateConvention.SIMPLE) == pytest.approx(0.005)

    def test_semi_annual_compounding(self):
        rate = periodic_rate(6, "monthly", RateConvention.SEMI_ANNUAL_COMPOUNDING)
        assert rate == pytest.approx(1.03 ** (1 / 6) - 1)
        # slightly below the simple monthly rate
        assert rate < 0.005

    def test_semi_annual_compounding_bi_weekly(self):
        rate = periodic_rate(5.2, "bi-weekly", RateConvention.SEMI_ANNUAL_COMPOUNDING)
        assert rate == pytest.approx(1.026 ** (2 / 26) - 1)

    def test_non_finite_rate_is_zero(self):
        assert periodic_rate(float("nan"), "monthly", RateConvention.SIMPLE) == 0
        assert periodic_rate(float("inf"), "weekly", RateConvention.SEMI_ANNUAL_COMPOUNDING) == 0


class TestMonthlyDebtService:
    def test_standard_mortgage(self):
        """$400K loan at 7% for 30 years."""
        assert monthly_debt_service(400_000, 7, 30) == pytest.approx(2661.21, abs=0.01)

    def test_zero_rate(self):
        assert monthly_debt_service(360_000, 0, 30) == 1000

    def test_zero_principal(self):
        assert monthly_debt_service(0, 7, 30) == 0
        assert monthly_debt_service(-5, 7, 30) == 0

    def test_zero_term_uses_single_period(self):
        assert monthly_debt_service(1_000, 0, 0) == 1_000


class TestAnnuityPayment:
    def test_rate_too_small_to_register(self):
        # 1 + 1e-17 == 1.0, so the discount factor never moves
        assert annuity_payment(120_000, 1e-17, 120) == 1_000

    def test_huge_rate_is_interest_only(self):
        payment = annuity_payment(100_000, 1e100, 300)
        assert math.isfinite(payment)
        assert payment == pytest.approx(100_000 * 1e100)

    def test_tiny_annual_rate_through_monthly_service(self):
        assert monthly_debt_service(360_000, 1e-13, 30) == pytest.approx(1_000)


class TestComputeDebtService:
    def test_zero_rate_pays_principal_over_periods(self):
        result = compute_debt_service(_mortgage())
        assert result.periodic_payment == 1_000
        assert result.total_interest_over_term == 0
        assert result.balance_at_term_end == 60_000

    def test_bi_weekly_term_leaves_balance(self, bi_weekly_mortgage):
        result = compute_debt_service(bi_weekly_mortgage)
        assert result.periodic_payment > 0
        assert 0 < result.balance_at_term_end < 800_000
        assert result.total_interest_over_term > 0

    @pytest.mark.parametrize("principal", [0, -10_000, float("nan"), float("inf")])
    def test_degenerate_principal(self, principal):
        result = compute_debt_service(_mortgage(principal=principal, annual_rate_percent=5))
        assert result.periodic_payment == 0
        assert result.total_interest_over_term == 0
        assert result.balance_at_term_end == 0

    def test_accelerated_payments_are_fraction_of_monthly(self):
        monthly = periodic_payment(_mortgage(annual_rate_percent=5.2, amortization_years=25))
        bi_weekly = periodic_payment(
            _mortgage(
                annual_rate_percent=5.2,
                amortization_years=25,
                payment_frequency=PaymentFrequency.ACCELERATED_BI_WEEKLY,
            )
        )
        weekly = periodic_payment(
            _mortgage(
                annual_rate_percent=5.2,
                amortization_years=25,
                payment_frequency=PaymentFrequency.ACCELERATED_WEEKLY,
            )
        )
        assert bi_weekly == pytest.approx(monthly / 2)
        assert weekly == pytest.approx(monthly / 4)

    def test_accelerated_pays_down_faster(self, bi_weekly_mortgage):
        regular = compute_debt_service(bi_weekly_mortgage)
        accelerated = compute_debt_service(
            MortgageInputs(
                principal=bi_weekly_mortgage.principal,
                annual_rate_percent=bi_weekly_mortgage.annual_rate_percent,
                amortization_years=bi_weekly_mortgage.amortization_years,
                payment_frequency=PaymentFrequency.ACCELERATED_BI_WEEKLY,
                term_years=bi_weekly_mortgage.term_years,
            )
        )
        assert accelerated.balance_at_term_end < regular.balance_at_term_end

    def test_conventions_are_separate_code_paths(self):
        inputs = _mortgage(principal=500_000, annual_rate_percent=6, amortization_years=25)
        simple = compute_debt_service(inputs, RateConvention.SIMPLE)
        compounded = compute_debt_service(inputs, RateConvention.SEMI_ANNUAL_COMPOUNDING)
        assert simple.periodic_payment == pytest.approx(monthly_debt_service(500_000, 6, 25))
        assert compounded.periodic_payment < simple.periodic_payment

    def test_annual_debt_service_scales_by_frequency(self, bi_weekly_mortgage):
        result = compute_debt_service(bi_weekly_mortgage)
        assert annual_debt_service(result, "bi-weekly") == pytest.approx(
            result.periodic_payment * 26
        )


class TestAmortizationSchedule:
    def test_term_limits_period_count(self, bi_weekly_mortgage):
        schedule = amortization_schedule(bi_weekly_mortgage)
        assert len(schedule) == 5 * 26

    def test_balance_never_increases(self, bi_weekly_mortgage):
        schedule = amortization_schedule(bi_weekly_mortgage)
        balances = [bi_weekly_mortgage.principal] + [row.balance for row in schedule]
        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
        assert all(balance >= 0 for balance in balances)

    def test_full_term_pays_off(self):
        inputs = _mortgage(principal=250_000, annual_rate_percent=4.5, amortization_years=20, term_years=20)
        schedule = amortization_schedule(inputs)
        assert len(schedule) <= 20 * 12
        assert schedule[-1].balance == pytest.approx(0, abs=1e-6)

    def test_stops_once_paid(self):
        schedule = amortization_schedule(_mortgage(amortization_years=1, term_years=5))
        assert len(schedule) == 12
        assert schedule[-1].balance == 0

    def test_interest_and_principal_split(self):
        inputs = _mortgage(principal=100_000, annual_rate_percent=6, amortization_years=25)
        first = amortization_schedule(inputs)[0]
        rate = 1.03 ** (1 / 6) - 1
        assert first.interest == pytest.approx(100_000 * rate)
        assert first.principal == pytest.approx(periodic_payment(inputs) - first.interest)


class TestAnnualBalanceTrace:
    def test_zero_rate_declines_linearly_and_floors(self):
        trace = annual_balance_trace(120_000, 0, 10, 12)
        assert trace.annual_debt_service == 12_000
        assert trace.balances[:3] == [120_000, 108_000, 96_000]
        assert trace.balances[10:] == [0, 0]

    def test_first_year_is_starting_balance(self):
        trace = annual_balance_trace(1_000_000, 5, 25, 3)
        assert trace.balances[0] == 1_000_000
        assert trace.annual_debt_service == pytest.approx(monthly_debt_service(1_000_000, 5, 25) * 12)

    def test_annuity_due_roll_forward(self):
        trace = annual_balance_trace(1_000_000, 5, 25, 2)
        payment = trace.annual_debt_service
        assert trace.balances[1] == pytest.approx(1_000_000 * 1.05 - payment * 1.05)

    def test_balances_decline_to_zero(self):
        trace = annual_balance_trace(1_000_000, 5, 25, 26)
        assert len(trace.balances) == 26
        pairs = zip(trace.balances, trace.balances[1:])
        assert all(later <= earlier for earlier, later in pairs)
        assert trace.balances[-1] == 0

    def test_no_loan(self):
        trace = annual_balance_trace(0, 5, 25, 4)
        assert trace.balances == [0, 0, 0, 0]
        assert trace.annual_debt_service == 0
        assert trace.balance_at(10) == 0

    def test_non_finite_balance(self):
        trace = annual_balance_trace(math.nan, 5, 25, 2)
        assert trace.balances == [0, 0]

    @pytest.mark.parametrize("rate", [1e-13, 1e200, 1e308])
    def test_extreme_rates_stay_finite(self, rate):
        trace = annual_balance_trace(1_000_000, rate, 25, 21)
        assert len(trace.balances) == 21
        assert trace.balances[0] == 1_000_000
        assert math.isfinite(trace.annual_debt_service)
        assert all(math.isfinite(b) and b >= 0 for b in trace.balances)


class TestExtremeRates:
    @pytest.mark.parametrize("rate", [1e-13, 1e200])
    @pytest.mark.parametrize(
        "frequency", [PaymentFrequency.MONTHLY, PaymentFrequency.ACCELERATED_WEEKLY]
    )
    def test_debt_service_stays_finite(self, rate, frequency):
        inputs = _mortgage(annual_rate_percent=rate, payment_frequency=frequency)
        for convention in RateConvention:
            result = compute_debt_service(inputs, convention)
            assert math.isfinite(result.periodic_payment)
            assert math.isfinite(result.total_interest_over_term)
            assert math.isfinite(result.balance_at_term_end)
