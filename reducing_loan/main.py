"""Command-line interface for the loan calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full reducing-balance schedules or view only the
totals. Results can be printed to the terminal or exported to JSON, CSV, PNG
or PDF files.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .data_models import LoanRequest, ScheduleEntry, ScheduleSummary
from .engine import build_request, compute_request, principal_shortfall
from .export import EXPORT_FORMATS, export_to_csv, export_to_json, summary_to_dict
from .formatter import print_schedule, print_summary
from .utils import NUMBER_PATTERN, InvalidInput

CURRENCY_PREFIXES = {
    "NGN": "₦",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). The result still has to be a whole
    number; that is checked when the request is built.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    if not NUMBER_PATTERN.fullmatch(value):
        raise click.BadParameter(f"Invalid amount: {value}")
    return Decimal(value) * factor


def build_request_from_options(principal: str, rate: str, duration: str) -> LoanRequest:
    try:
        return build_request(parse_amount(principal), rate, duration)
    except InvalidInput as exc:
        raise click.BadParameter(exc.message, param_hint=f"'{exc.field}'" if exc.field else None)


def _compute(
    principal: str, rate: str, duration: str
) -> Tuple[LoanRequest, List[ScheduleEntry], ScheduleSummary]:
    request = build_request_from_options(principal, rate, duration)
    schedule_entries, summary_data = compute_request(request)
    return request, schedule_entries, summary_data


@click.group()
def cli() -> None:
    """A command-line reducing-balance loan calculator."""
    pass


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Total loan amount (e.g. 500000 or 500k)")
@click.option("--rate", "-r", "rate", default="10", show_default=True, help="Monthly interest rate (whole percent)")
@click.option("--duration", "-d", "duration", required=True, help="Loan duration in months")
@click.option(
    "--currency",
    "currency",
    type=click.Choice(sorted(CURRENCY_PREFIXES)),
    default="NGN",
    show_default=True,
    help="Currency symbol used in the summary and exported documents",
)
@click.option("--output", "output", type=str, help="Output file path (.json, .csv, .png or .pdf)")
def schedule(principal: str, rate: str, duration: str, currency: str, output: Optional[str]) -> None:
    """Compute and print the full repayment schedule."""
    request, schedule_entries, summary_data = _compute(principal, rate, duration)
    prefix = CURRENCY_PREFIXES[currency]
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, schedule_entries, summary_data, request)
        elif suffix == ".csv":
            export_to_csv(path, schedule_entries)
        elif suffix.lstrip(".") in EXPORT_FORMATS:
            renderer = EXPORT_FORMATS[suffix.lstrip(".")].render
            path.write_bytes(renderer(schedule_entries, summary_data, request, prefix=prefix))
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv, .png or .pdf")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(summary_data, prefix, shortfall=principal_shortfall(schedule_entries, summary_data))
        print_schedule(schedule_entries)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Total loan amount (e.g. 500000 or 500k)")
@click.option("--rate", "-r", "rate", default="10", show_default=True, help="Monthly interest rate (whole percent)")
@click.option("--duration", "-d", "duration", required=True, help="Loan duration in months")
@click.option(
    "--currency",
    "currency",
    type=click.Choice(sorted(CURRENCY_PREFIXES)),
    default="NGN",
    show_default=True,
    help="Currency symbol used in the summary",
)
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(principal: str, rate: str, duration: str, currency: str, output: Optional[str]) -> None:
    """Compute and print only the totals for a loan."""
    _, schedule_entries, summary_data = _compute(principal, rate, duration)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_to_dict(summary_data)}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(
            summary_data,
            CURRENCY_PREFIXES[currency],
            shortfall=principal_shortfall(schedule_entries, summary_data),
        )


if __name__ == "__main__":
    cli()
