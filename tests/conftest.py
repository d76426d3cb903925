"""Shared fixtures for the engine tests.

Decision fixture: $10M property held since a $2M cost base, $1M mortgage,
client aged 70 planning to 90, sale proceeds redeployed at 10% LTV.
"""

import pytest

from keep_or_sell.defaults import default_decision_inputs
from keep_or_sell.schemas import (
    CurrentPropertyInputs,
    DecisionInputs,
    ExpenseInputs,
    MortgageInputs,
    NewPropertyInputs,
    PaymentFrequency,
)


def no_expenses() -> ExpenseInputs:
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


@pytest.fixture
def decision_inputs() -> DecisionInputs:
    return default_decision_inputs()


@pytest.fixture
def even_decision_inputs() -> DecisionInputs:
    """Selling is tax and cost free and the new property mirrors the old one."""
    return DecisionInputs(
        current_property_value=1_000_000,
        current_property_acb=1_000_000,
        current_mortgage_balance=0,
        current_cap_rate=3,
        current_growth_rate=3,
        new_cap_rate=3,
        new_growth_rate=3,
        marginal_tax_rate=40,
        capital_gains_inclusion_rate=0,
        realtor_fees_percent=0,
        property_transfer_tax_percent=0,
        investment_account_roi=5,
        loan_rate=5,
        loan_amortization_years=25,
        client_age=60,
        planning_age=70,
        new_loan_to_value=0,
        decision_margin_percent=0,
    )


@pytest.fixture
def bi_weekly_mortgage() -> MortgageInputs:
    return MortgageInputs(
        principal=800_000,
        annual_rate_percent=5.2,
        amortization_years=25,
        payment_frequency=PaymentFrequency.BI_WEEKLY,
        term_years=5,
    )


@pytest.fixture
def current_property() -> CurrentPropertyInputs:
    return CurrentPropertyInputs(
        rent=3_000,
        other_income=200,
        vacancy_percent=5,
        expenses=ExpenseInputs(
            taxes=300,
            insurance=100,
            maintenance_monthly=50,
            maintenance_percent=5,
            management_percent=8,
            utilities=0,
            hoa=0,
            reserves=100,
        ),
        loan_balance=200_000,
        interest_rate=4,
        monthly_payment=1_200,
        sale_price=600_000,
        selling_cost_percent=5,
    )


@pytest.fixture
def candidate_property() -> NewPropertyInputs:
    return NewPropertyInputs(
        purchase_price=500_000,
        closing_costs=0,
        closing_costs_percent=2,
        rehab=10_000,
        down_payment_percent=20,
        interest_rate=6,
        loan_term_years=30,
        rent=2_800,
        other_income=0,
        vacancy_percent=0,
        expenses=no_expenses(),
    )
