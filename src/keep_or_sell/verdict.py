"""
Investment-quality check for a prospective rental purchase.

The mortgage side uses the semi-annual compounding convention of Canadian
lenders; the operating side annualises the median rent estimate.
"""

from __future__ import annotations

from typing import Dict

from .debt import annual_debt_service, compute_debt_service
from .numeric import pct, safe_number, safe_ratio
from .schemas import (
    InvestmentMetrics,
    MortgageInputs,
    RateConvention,
    RentalEvaluation,
    RentalExpenseInputs,
    RentRange,
    RentSource,
    Verdict,
)

EXCELLENT_CAP_RATE = 0.045
GOOD_CAP_RATE = 0.03

# Monthly rent estimated as a share of price, with a symmetric band.
RENT_TO_PRICE_MONTHLY = 0.003
RENT_BAND = 0.12

# Municipal residential tax rates, percent of assessed value.
CITY_TAX_RATES: Dict[str, float] = {
    "Vancouver": 0.311827,
    "Coquitlam": 0.319627,
    "Port Moody": 0.2566,
    "Port Coquitlam": 0.35148,
}
DEFAULT_CITY = "Vancouver"


def calculate_investment(
    price: float,
    rent_range: RentRange,
    expenses: RentalExpenseInputs,
    debt_service_annual: float,
) -> InvestmentMetrics:
    gross_annual = safe_number(rent_range.median) * 12
    effective_income = gross_annual - gross_annual * pct(expenses.vacancy_percent)

    # management, maintenance and reserves are shares of effective income
    operating_expenses = (
        effective_income * pct(expenses.management_percent)
        + effective_income * pct(expenses.maintenance_percent)
        + effective_income * pct(expenses.reserves_percent)
        + safe_number(expenses.insurance_annual)
        + safe_number(expenses.utilities_annual)
        + safe_number(expenses.property_tax_annual)
        + safe_number(expenses.hoa_monthly) * 12
    )

    debt_service = safe_number(debt_service_annual)
    noi = effective_income - operating_expenses
    cap_rate = safe_ratio(noi, safe_number(price))
    return InvestmentMetrics(
        noi_annual=noi,
        cap_rate=cap_rate,
        cash_flow_annual=noi - debt_service,
        dscr=safe_ratio(noi, debt_service),
        verdict=classify_cap_rate(cap_rate),
    )


def classify_cap_rate(cap_rate: float) -> Verdict:
    if cap_rate >= EXCELLENT_CAP_RATE:
        return Verdict.EXCELLENT
    if cap_rate >= GOOD_CAP_RATE:
        return Verdict.GOOD
    return Verdict.WEAK


def evaluate_rental_purchase(
    price: float,
    rent_range: RentRange,
    expenses: RentalExpenseInputs,
    mortgage: MortgageInputs,
) -> RentalEvaluation:
    """Finance the purchase and grade it in one call."""
    result = compute_debt_service(mortgage, RateConvention.SEMI_ANNUAL_COMPOUNDING)
    yearly_payments = annual_debt_service(result, mortgage.payment_frequency)
    return RentalEvaluation(
        mortgage=result,
        annual_debt_service=yearly_payments,
        investment=calculate_investment(price, rent_range, expenses, yearly_payments),
    )


def estimate_rent_range(price: float) -> RentRange:
    price = safe_number(price)
    base = price * RENT_TO_PRICE_MONTHLY if price > 0 else 0.0
    return RentRange(
        low=base * (1 - RENT_BAND),
        median=base,
        high=base * (1 + RENT_BAND),
        source=RentSource.WEB_ESTIMATE,
    )


def estimate_property_tax(price: float, city: str = DEFAULT_CITY) -> float:
    price = safe_number(price)
    if price <= 0:
        return 0.0
    rate = CITY_TAX_RATES.get(city, CITY_TAX_RATES[DEFAULT_CITY])
    return pct(rate) * price
