"""
Starting input records for the calculators.

The engines never fill in missing fields; callers start from one of these
factories and override what the user changed. Each call returns a fresh
record.
"""

from __future__ import annotations

from .schemas import (
    CurrentPropertyInputs,
    DecisionInputs,
    ExpenseInputs,
    MortgageInputs,
    NewPropertyInputs,
    PaymentFrequency,
    RentalExpenseInputs,
)

DEFAULT_RENTAL_PRICE = 1_100_000


def default_decision_inputs() -> DecisionInputs:
    return DecisionInputs(
        current_property_value=10_000_000,
        current_property_acb=2_000_000,
        current_mortgage_balance=1_000_000,
        current_cap_rate=2,
        current_growth_rate=4,
        new_cap_rate=2,
        new_growth_rate=4,
        marginal_tax_rate=50,
        capital_gains_inclusion_rate=66.6667,
        realtor_fees_percent=2,
        property_transfer_tax_percent=2.8,
        investment_account_roi=5,
        loan_rate=5,
        loan_amortization_years=25,
        client_age=70,
        planning_age=90,
        new_loan_to_value=10,
        decision_margin_percent=2,
    )


def default_mortgage_inputs() -> MortgageInputs:
    return MortgageInputs(
        principal=800_000,
        annual_rate_percent=5.2,
        amortization_years=25,
        payment_frequency=PaymentFrequency.MONTHLY,
        term_years=5,
    )


def default_rental_expenses() -> RentalExpenseInputs:
    return RentalExpenseInputs(
        vacancy_percent=4,
        maintenance_percent=5,
        management_percent=8,
        reserves_percent=3,
        insurance_annual=1_200,
        utilities_annual=1_200,
        hoa_monthly=350,
        property_tax_annual=0,
    )


def empty_expenses() -> ExpenseInputs:
    return ExpenseInputs(
        taxes=0,
        insurance=0,
        maintenance_monthly=0,
        maintenance_percent=0,
        management_percent=0,
        utilities=0,
        hoa=0,
        reserves=0,
    )


def default_current_property() -> CurrentPropertyInputs:
    return CurrentPropertyInputs(
        rent=0,
        other_income=0,
        vacancy_percent=0,
        expenses=empty_expenses(),
        loan_balance=0,
        interest_rate=0,
        monthly_payment=0,
        sale_price=0,
        selling_cost_percent=0,
    )


def default_new_property() -> NewPropertyInputs:
    return NewPropertyInputs(
        purchase_price=0,
        closing_costs=0,
        closing_costs_percent=0,
        rehab=0,
        down_payment_percent=0,
        interest_rate=0,
        loan_term_years=30,
        rent=0,
        other_income=0,
        vacancy_percent=0,
        expenses=empty_expenses(),
    )
