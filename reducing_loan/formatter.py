"""Output helpers for the loan calculator.

This module provides simple functions to render schedules and summaries in a
tabular text format for the terminal. We rely only on built-in printing and
string formatting; the CLI decides what to print and when.
"""

from __future__ import annotations

from typing import Iterable, List

from .data_models import ScheduleEntry, ScheduleSummary
from .utils import format_amount


def print_summary(summary: ScheduleSummary, prefix: str = "", suffix: str = "", shortfall: int = 0) -> None:
    """Print the schedule totals in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Total principal    : {format_amount(summary.total_principal, prefix, suffix)}")
    print(f"Total interest     : {format_amount(summary.total_interest, prefix, suffix)}")
    print(f"Total amount       : {format_amount(summary.total_amount, prefix, suffix)}")
    # Only shown when the principal does not divide evenly by the duration.
    if shortfall:
        print(f"Unscheduled principal: {format_amount(shortfall, prefix, suffix)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the repayment schedule as a simple table."""
    headers = ["Month", "Principal", "Interest", "Amount", "Remaining"]
    print("\t".join(headers))
    for entry in schedule:
        row: List[str] = [
            str(entry.month),
            format_amount(entry.principal_portion),
            format_amount(entry.interest_portion),
            format_amount(entry.payment_amount),
            format_amount(entry.remaining_principal_before_payment),
        ]
        print("\t".join(row))
