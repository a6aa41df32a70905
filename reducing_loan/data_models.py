"""Data models for the reducing-balance loan calculator.

This module defines dataclasses representing the entities used by the
calculator: the validated loan request, the individual schedule entries and
the aggregate summary. All of them are frozen, so a computed schedule can be
handed to the formatter or the exporters without being altered on the way.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoanRequest:
    """The three validated inputs of a calculation.

    Attributes
    ----------
    principal: int
        Amount borrowed, in whole currency units. Always positive.
    monthly_rate_percent: int
        Interest charged each month on the remaining principal, in whole
        percent (``10`` means 10 % per month). Zero or more.
    duration_months: int
        Number of monthly repayments. Always positive.
    """

    principal: int
    monthly_rate_percent: int
    duration_months: int


@dataclass(frozen=True)
class ScheduleEntry:
    """One month of the repayment schedule.

    ``remaining_principal_before_payment`` is the balance on which this
    month's interest was charged, before ``principal_portion`` is repaid.
    """

    month: int
    principal_portion: int
    interest_portion: int
    payment_amount: int
    remaining_principal_before_payment: int


@dataclass(frozen=True)
class ScheduleSummary:
    """Aggregate totals of a schedule.

    ``total_principal`` is the requested principal, not the sum of the
    principal portions; the two differ when the principal does not divide
    evenly by the duration.
    """

    total_principal: int
    total_interest: int
    total_amount: int
