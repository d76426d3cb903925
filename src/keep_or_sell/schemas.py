from __future__ import annotations

from dataclasses import MISSING, asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

T = TypeVar("T")


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    SEMI_MONTHLY = "semi-monthly"
    BI_WEEKLY = "bi-weekly"
    WEEKLY = "weekly"
    ACCELERATED_BI_WEEKLY = "accelerated-bi-weekly"
    ACCELERATED_WEEKLY = "accelerated-weekly"

    @classmethod
    def parse(cls, value: Any) -> "PaymentFrequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MONTHLY

    @property
    def label(self) -> str:
        prefix = "accelerated-"
        if self.value.startswith(prefix):
            return "Accelerated " + self.value[len(prefix):]
        return self.value.capitalize()


class RateConvention(str, Enum):
    """How an annual nominal rate becomes a periodic rate."""

    SIMPLE = "simple"  # annual / 12
    SEMI_ANNUAL_COMPOUNDING = "semi-annual-compounding"


class Decision(str, Enum):
    YES = "YES"  # sell and buy the replacement property
    NO = "NO"  # keep the current property


class Verdict(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    WEAK = "Weak"


class RentSource(str, Enum):
    WEB_ESTIMATE = "web-estimate"
    PROVIDER_ESTIMATE = "provider-estimate"
    MANUAL = "manual"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _from_mapping(cls: Type[T], data: Mapping[str, Any]) -> T:
    names = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(data) - names)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} fields: {', '.join(unknown)}")
    missing = sorted(
        f.name
        for f in fields(cls)  # type: ignore[arg-type]
        if f.name not in data
        and f.default is MISSING
        and f.default_factory is MISSING
    )
    if missing:
        raise ValueError(f"Missing {cls.__name__} fields: {', '.join(missing)}")
    return cls(**data)


@dataclass
class MortgageInputs:
    principal: float
    annual_rate_percent: float  # e.g., 5.2
    amortization_years: float
    payment_frequency: PaymentFrequency
    term_years: float

    def __post_init__(self) -> None:
        self.payment_frequency = PaymentFrequency.parse(self.payment_frequency)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MortgageInputs":
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class DebtServiceResult:
    periodic_payment: float
    total_interest_over_term: float
    balance_at_term_end: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AmortizationPeriod:
    period: int
    interest: float
    principal: float
    balance: float


@dataclass(frozen=True)
class BalanceTrace:
    """Year-indexed loan balances plus the constant annual payment."""

    balances: List[float]
    annual_debt_service: float

    def balance_at(self, year: int) -> float:
        if 0 <= year < len(self.balances):
            return self.balances[year]
        return 0.0


@dataclass
class ExpenseInputs:
    """Monthly operating costs of a property in the comparison wizard."""

    taxes: float
    insurance: float
    maintenance_monthly: float
    maintenance_percent: float  # of rent
    management_percent: float  # of gross income
    utilities: float
    hoa: float
    reserves: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExpenseInputs":
        return _from_mapping(cls, data)


@dataclass
class CurrentPropertyInputs:
    rent: float
    other_income: float
    vacancy_percent: float
    expenses: ExpenseInputs
    loan_balance: float
    interest_rate: float
    monthly_payment: float
    sale_price: float
    selling_cost_percent: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CurrentPropertyInputs":
        payload = dict(data)
        if isinstance(payload.get("expenses"), Mapping):
            payload["expenses"] = ExpenseInputs.from_dict(payload["expenses"])
        return _from_mapping(cls, payload)


@dataclass
class NewPropertyInputs:
    purchase_price: float
    closing_costs: float  # explicit dollars win over the percentage when > 0
    closing_costs_percent: float
    rehab: float
    down_payment_percent: float
    interest_rate: float
    loan_term_years: float
    rent: float
    other_income: float
    vacancy_percent: float
    expenses: ExpenseInputs

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewPropertyInputs":
        payload = dict(data)
        if isinstance(payload.get("expenses"), Mapping):
            payload["expenses"] = ExpenseInputs.from_dict(payload["expenses"])
        return _from_mapping(cls, payload)


@dataclass(frozen=True)
class PropertyMetrics:
    gross_monthly_income: float
    vacancy_loss_monthly: float
    effective_monthly_income: float
    operating_expenses_monthly: float
    noi_monthly: float
    noi_annual: float
    debt_service_monthly: float
    cash_flow_monthly: float
    cash_flow_annual: float
    cap_rate: float
    cash_invested: float
    cash_on_cash: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComparisonMetrics:
    current: PropertyMetrics
    candidate: PropertyMetrics
    sale_net_proceeds: float
    new_loan_amount: float
    new_monthly_payment: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DecisionInputs:
    """Everything the keep-vs-sell projection needs. Percentages are 0-100."""

    current_property_value: float
    current_property_acb: float
    current_mortgage_balance: float
    current_cap_rate: float
    current_growth_rate: float
    new_cap_rate: float
    new_growth_rate: float
    marginal_tax_rate: float
    capital_gains_inclusion_rate: float
    realtor_fees_percent: float
    property_transfer_tax_percent: float
    investment_account_roi: float
    loan_rate: float
    loan_amortization_years: float
    client_age: float
    planning_age: float
    new_loan_to_value: float
    decision_margin_percent: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DecisionInputs":
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class YearlySnapshot:
    age: int
    property_value: float
    mortgage_balance: float
    net_income: float
    tax_payable: float
    cash_flow: float
    investment_account: float
    strategy_value: float
    capital_gains_tax: float


@dataclass(frozen=True)
class SeriesPoint:
    age: int
    current_value: float
    new_value: float
    delta: float


@dataclass(frozen=True)
class DecisionResult:
    decision: Decision
    decision_reason: str
    margin_percent: float
    planning_age: int
    current_at_planning: YearlySnapshot
    new_at_planning: YearlySnapshot
    break_even_age: Optional[int]
    peak_delta_age: Optional[int]
    peak_delta_value: float
    current_series: List[YearlySnapshot] = field(default_factory=list)
    new_series: List[YearlySnapshot] = field(default_factory=list)
    series: List[SeriesPoint] = field(default_factory=list)

    @property
    def delta_at_planning(self) -> float:
        return self.new_at_planning.strategy_value - self.current_at_planning.strategy_value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RentRange:
    low: float
    median: float
    high: float
    source: RentSource = RentSource.MANUAL

    def __post_init__(self) -> None:
        self.source = RentSource(self.source)


@dataclass
class RentalExpenseInputs:
    """Annualised costs for the rental purchase verdict."""

    vacancy_percent: float
    maintenance_percent: float  # of effective income
    management_percent: float  # of effective income
    reserves_percent: float  # of effective income
    insurance_annual: float
    utilities_annual: float
    hoa_monthly: float
    property_tax_annual: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RentalExpenseInputs":
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class InvestmentMetrics:
    noi_annual: float
    cap_rate: float
    cash_flow_annual: float
    dscr: float
    verdict: Verdict

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RentalEvaluation:
    mortgage: DebtServiceResult
    annual_debt_service: float
    investment: InvestmentMetrics

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ListingExtract:
    """Listing fields scraped from markup, each tagged with a confidence."""

    address: str
    city: str
    bedrooms: float
    bathrooms: float
    sqft: float
    price: float
    hoa: float
    property_tax_annual: float
    rent_range: RentRange
    confidence: Dict[str, Confidence] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppState:
    """Snapshot of the comparison inputs, as persisted between sessions."""

    current: CurrentPropertyInputs
    next: NewPropertyInputs

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppState":
        return cls(
            current=CurrentPropertyInputs.from_dict(data["current"]),
            next=NewPropertyInputs.from_dict(data["next"]),
        )
