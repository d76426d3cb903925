from __future__ import annotations

from typing import List

from .numeric import compound, pct, round_half_up, safe_number
from .schemas import (
    AmortizationPeriod,
    BalanceTrace,
    DebtServiceResult,
    MortgageInputs,
    PaymentFrequency,
    RateConvention,
)

PERIODS_PER_YEAR = {
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.ACCELERATED_WEEKLY: 52,
    PaymentFrequency.BI_WEEKLY: 26,
    PaymentFrequency.ACCELERATED_BI_WEEKLY: 26,
    PaymentFrequency.SEMI_MONTHLY: 24,
    PaymentFrequency.MONTHLY: 12,
}

# Share of the monthly payment made on each accelerated payment date.
ACCELERATED_DIVISORS = {
    PaymentFrequency.ACCELERATED_BI_WEEKLY: 2,
    PaymentFrequency.ACCELERATED_WEEKLY: 4,
}

SEMI_ANNUAL_COMPOUNDS_PER_YEAR = 2


def periods_per_year(frequency: PaymentFrequency | str) -> int:
    return PERIODS_PER_YEAR[PaymentFrequency.parse(frequency)]


def period_count(years: float, per_year: int) -> int:
    return max(1, round_half_up(safe_number(years) * per_year))


def periodic_rate(
    annual_rate_pct: float,
    frequency: PaymentFrequency | str = PaymentFrequency.MONTHLY,
    convention: RateConvention = RateConvention.SIMPLE,
) -> float:
    """
    Convert an annual nominal percentage into the rate charged per payment.

    ``SIMPLE`` always divides by 12 and ignores ``frequency``.
    ``SEMI_ANNUAL_COMPOUNDING`` follows Canadian mortgage disclosure: the
    nominal rate compounds twice a year and is spread over the payments.
    """
    rate = pct(annual_rate_pct)
    if convention is RateConvention.SIMPLE:
        return rate / 12.0
    if rate <= 0:
        return 0.0
    compounds = SEMI_ANNUAL_COMPOUNDS_PER_YEAR
    growth = compound(1 + rate / compounds, compounds / periods_per_year(frequency))
    return safe_number(growth - 1)


def annuity_payment(principal: float, rate: float, periods: int) -> float:
    if principal <= 0:
        return 0.0
    if rate <= 0:
        return principal / periods
    denominator = 1 - compound(1 + rate, -periods)
    # a rate too small to move 1 + rate amortizes like a zero rate
    if denominator <= 0:
        return principal / periods
    return safe_number(principal * rate / denominator)


def monthly_debt_service(
    loan_amount: float, annual_rate_pct: float, term_years: float
) -> float:
    """Monthly payment under the simple convention used by both engines."""
    principal = safe_number(loan_amount)
    if principal <= 0:
        return 0.0
    months = period_count(term_years, 12)
    rate = periodic_rate(annual_rate_pct, convention=RateConvention.SIMPLE)
    return annuity_payment(principal, rate, months)


def periodic_payment(
    inputs: MortgageInputs,
    convention: RateConvention = RateConvention.SEMI_ANNUAL_COMPOUNDING,
) -> float:
    principal = max(0.0, safe_number(inputs.principal))
    frequency = inputs.payment_frequency
    divisor = ACCELERATED_DIVISORS.get(frequency, 1)
    if divisor > 1:
        frequency = PaymentFrequency.MONTHLY
    periods = period_count(inputs.amortization_years, periods_per_year(frequency))
    rate = periodic_rate(inputs.annual_rate_percent, frequency, convention)
    return annuity_payment(principal, rate, periods) / divisor


def amortization_schedule(
    inputs: MortgageInputs,
    convention: RateConvention = RateConvention.SEMI_ANNUAL_COMPOUNDING,
) -> List[AmortizationPeriod]:
    """Period-by-period trace over the contractual term, stopping at payoff."""
    balance = max(0.0, safe_number(inputs.principal))
    if balance == 0:
        return []
    frequency = inputs.payment_frequency
    rate = periodic_rate(inputs.annual_rate_percent, frequency, convention)
    payment = periodic_payment(inputs, convention)
    term_periods = period_count(inputs.term_years, periods_per_year(frequency))

    schedule: List[AmortizationPeriod] = []
    for period in range(1, term_periods + 1):
        interest = balance * rate
        principal_paid = max(0.0, payment - interest)
        balance = max(0.0, balance - principal_paid)
        schedule.append(
            AmortizationPeriod(
                period=period,
                interest=interest,
                principal=principal_paid,
                balance=balance,
            )
        )
        if balance == 0:
            break
    return schedule


def compute_debt_service(
    inputs: MortgageInputs,
    convention: RateConvention = RateConvention.SEMI_ANNUAL_COMPOUNDING,
) -> DebtServiceResult:
    if safe_number(inputs.principal) <= 0:
        return DebtServiceResult(
            periodic_payment=0.0, total_interest_over_term=0.0, balance_at_term_end=0.0
        )

    schedule = amortization_schedule(inputs, convention)
    return DebtServiceResult(
        periodic_payment=periodic_payment(inputs, convention),
        total_interest_over_term=safe_number(sum(row.interest for row in schedule)),
        balance_at_term_end=schedule[-1].balance,
    )


def annual_debt_service(
    result: DebtServiceResult, frequency: PaymentFrequency | str
) -> float:
    return result.periodic_payment * periods_per_year(frequency)


def annual_balance_trace(
    starting_balance: float,
    annual_rate_pct: float,
    amortization_years: float,
    years: int,
) -> BalanceTrace:
    """
    Year-indexed balances for a loan paid monthly under the simple convention.

    Balances are rolled forward a whole year at a time with the annual
    annuity-due future value of twelve monthly payments, so ``balances[0]`` is
    the starting balance and later entries are floored at zero.
    """
    balance = max(0.0, safe_number(starting_balance))
    annual_payment = safe_number(
        monthly_debt_service(balance, annual_rate_pct, amortization_years) * 12
    )
    rate = pct(annual_rate_pct)

    balances: List[float] = []
    for year in range(years):
        if rate == 0:
            remaining = balance - annual_payment * year
        else:
            growth = compound(1 + rate, year)
            paid = annual_payment * ((growth - 1) / rate) * (1 + rate)
            remaining = balance * growth - paid
        balances.append(max(0.0, safe_number(remaining)))

    return BalanceTrace(balances=balances, annual_debt_service=annual_payment)
