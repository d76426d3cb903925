from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import requests
import typer

from .comparison import compute_comparison
from .data_sources import ListingClient, ListingExtractionError, extract_listing
from .debt import compute_debt_service
from .defaults import (
    DEFAULT_RENTAL_PRICE,
    default_current_property,
    default_decision_inputs,
    default_mortgage_inputs,
    default_new_property,
    default_rental_expenses,
)
from .model import compute_decision
from .schemas import (
    AppState,
    DecisionInputs,
    MortgageInputs,
    PaymentFrequency,
    RentRange,
)
from .storage import JsonFileStorage, NoopStorage, Storage
from .verdict import (
    DEFAULT_CITY,
    estimate_property_tax,
    estimate_rent_range,
    evaluate_rental_purchase,
)

app = typer.Typer(help="Decide whether to keep a rental property or sell and buy another.")


def _default_log_level() -> str:
    return os.environ.get("KEEP_OR_SELL_LOG_LEVEL", "WARNING")


def _default_state_file() -> Optional[str]:
    return os.environ.get("KEEP_OR_SELL_STATE_FILE")


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Could not read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a JSON object")
    return data


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


@app.callback()
def main(
    log_level: str = typer.Option(
        default_factory=_default_log_level,
        help="Logging level (env KEEP_OR_SELL_LOG_LEVEL if omitted).",
    ),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def mortgage(
    principal: float = typer.Option(800_000, help="Mortgage amount."),
    rate: float = typer.Option(5.2, help="Annual interest rate in percent."),
    amortization_years: float = typer.Option(25, help="Amortization period in years."),
    frequency: PaymentFrequency = typer.Option(
        PaymentFrequency.MONTHLY, help="Payment frequency."
    ),
    term_years: float = typer.Option(5, help="Contract term in years."),
) -> None:
    """
    Payment, interest and remaining balance for a semi-annually compounded mortgage.
    """
    inputs = MortgageInputs(
        principal=principal,
        annual_rate_percent=rate,
        amortization_years=amortization_years,
        payment_frequency=frequency,
        term_years=term_years,
    )
    result = compute_debt_service(inputs)
    label = inputs.payment_frequency.label
    interest = result.total_interest_over_term
    typer.echo(f"{label} payment: ${result.periodic_payment:,.2f}")
    typer.echo(f"Interest over {term_years:g}-year term: ${interest:,.0f}")
    typer.echo(f"Balance at end of term: ${result.balance_at_term_end:,.0f}")


@app.command()
def decide(
    inputs_file: Optional[Path] = typer.Option(
        None, "--inputs", help="JSON file of decision fields (defaults if omitted)."
    ),
    client_age: Optional[float] = typer.Option(None, help="Override the client age."),
    planning_age: Optional[float] = typer.Option(None, help="Override the planning age."),
    margin: Optional[float] = typer.Option(
        None, help="Override the decision margin in percent."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly comparison series as JSON."
    ),
) -> None:
    """
    Project keeping the current property against selling it and buying another.
    """
    if inputs_file is not None:
        try:
            inputs = DecisionInputs.from_dict(_load_json(inputs_file))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    else:
        inputs = default_decision_inputs()

    overrides = {
        "client_age": client_age,
        "planning_age": planning_age,
        "decision_margin_percent": margin,
    }
    inputs = dataclasses.replace(
        inputs, **{key: value for key, value in overrides.items() if value is not None}
    )
    result = compute_decision(inputs)

    typer.echo(f"Sell and buy: {result.decision.value}")
    typer.echo(result.decision_reason)
    keep_value = result.current_at_planning.strategy_value
    sell_value = result.new_at_planning.strategy_value
    typer.echo(f"Keep strategy at {result.planning_age}: ${keep_value:,.0f}")
    typer.echo(f"Sell strategy at {result.planning_age}: ${sell_value:,.0f}")
    typer.echo(f"Required margin: {result.margin_percent:g}%")
    if result.break_even_age is not None:
        typer.echo(f"Break-even age: {result.break_even_age}")
    else:
        typer.echo("Break-even age: never")
    if result.peak_delta_age is not None:
        typer.echo(
            f"Peak advantage: ${result.peak_delta_value:,.0f} "
            f"at age {result.peak_delta_age}"
        )

    if show_timeline:
        _echo_json([dataclasses.asdict(point) for point in result.series])


@app.command()
def compare(
    inputs_file: Optional[Path] = typer.Option(
        None,
        "--inputs",
        help='JSON file with "current" and "next" property records.',
    ),
    state_file: Optional[str] = typer.Option(
        default_factory=_default_state_file,
        help="Where the last inputs are kept (env KEEP_OR_SELL_STATE_FILE).",
    ),
    save: bool = typer.Option(False, help="Persist the inputs used to the state file."),
) -> None:
    """
    Side-by-side monthly economics of the current and the candidate property.
    """
    storage: Storage = JsonFileStorage(state_file) if state_file else NoopStorage()

    if inputs_file is not None:
        try:
            state = AppState.from_dict(_load_json(inputs_file))
        except (KeyError, TypeError, ValueError) as exc:
            raise typer.BadParameter(f"Invalid comparison inputs: {exc}") from exc
    else:
        state = storage.load() or AppState(
            current=default_current_property(), next=default_new_property()
        )

    result = compute_comparison(state.current, state.next)
    if save:
        storage.save(state)
    _echo_json(result.to_dict())


@app.command()
def verdict(
    price: float = typer.Option(DEFAULT_RENTAL_PRICE, help="Purchase price."),
    median_rent: Optional[float] = typer.Option(
        None, help="Median monthly rent (estimated from price if omitted)."
    ),
    city: str = typer.Option(
        DEFAULT_CITY, help="Municipality for the property tax estimate."
    ),
    property_tax: Optional[float] = typer.Option(
        None, help="Annual property tax, overriding the city estimate."
    ),
    hoa: float = typer.Option(350, help="Monthly strata / HOA fee."),
    rate: float = typer.Option(5.2, help="Mortgage rate in percent."),
    frequency: PaymentFrequency = typer.Option(
        PaymentFrequency.MONTHLY, help="Payment frequency."
    ),
) -> None:
    """
    Grade a prospective rental purchase as Excellent, Good or Weak.
    """
    rent_range = estimate_rent_range(price)
    if median_rent is not None:
        rent_range = RentRange(low=median_rent, median=median_rent, high=median_rent)

    expenses = dataclasses.replace(
        default_rental_expenses(),
        hoa_monthly=hoa,
        property_tax_annual=(
            property_tax if property_tax is not None else estimate_property_tax(price, city)
        ),
    )
    mortgage_inputs = dataclasses.replace(
        default_mortgage_inputs(),
        principal=price,
        annual_rate_percent=rate,
        payment_frequency=frequency,
    )
    evaluation = evaluate_rental_purchase(price, rent_range, expenses, mortgage_inputs)
    metrics = evaluation.investment

    typer.echo(f"Verdict: {metrics.verdict.value}")
    typer.echo(f"NOI: ${metrics.noi_annual:,.0f}")
    typer.echo(f"Cap rate: {metrics.cap_rate:.2%}")
    typer.echo(f"Annual debt service: ${evaluation.annual_debt_service:,.0f}")
    typer.echo(f"Cash flow: ${metrics.cash_flow_annual:,.0f}")
    typer.echo(f"DSCR: {metrics.dscr:.2f}")


@app.command("extract-listing")
def extract_listing_command(
    html_file: Optional[Path] = typer.Option(None, help="Saved listing page."),
    url: Optional[str] = typer.Option(None, help="Listing page to download."),
) -> None:
    """
    Pre-fill purchase inputs from a listing page, with a confidence per field.
    """
    if html_file is None and url is None:
        raise typer.BadParameter("Pass --html-file or --url.")

    try:
        if html_file is not None:
            extract = extract_listing(html_file.read_text(encoding="utf-8"))
        else:
            extract = ListingClient().extract(url)
    except (ListingExtractionError, requests.RequestException, OSError) as exc:
        typer.echo(f"Unable to extract listing: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _echo_json(extract.to_dict())


if __name__ == "__main__":
    app()
