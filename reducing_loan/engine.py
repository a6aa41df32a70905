"""Core calculation engine for the loan calculator.

This module implements the reducing balance method: the principal is repaid
in equal whole-unit portions, and every month interest is charged on the
principal that is still outstanding. Results are returned as a list of
``ScheduleEntry`` objects along with a ``ScheduleSummary``.

All arithmetic is done on integers and every division truncates. The monthly
principal portion is ``principal // duration_months``, and the last month is
not adjusted to absorb the remainder, so when the principal does not divide
evenly the portions add up to slightly less than the principal. See
``principal_shortfall``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

from .data_models import LoanRequest, ScheduleEntry, ScheduleSummary
from .utils import InvalidInput, parse_whole_number

logger = logging.getLogger(__name__)

# Largest value of ``principal * monthly_rate_percent`` accepted, so schedules
# stay identical to those produced with signed 64-bit integer arithmetic.
MAX_INTEREST_PRODUCT = 2**63 - 1


def build_request(principal: Any, monthly_rate_percent: Any, duration_months: Any) -> LoanRequest:
    """Validate raw inputs and return a ``LoanRequest``.

    Each argument may already be an ``int`` or may be a raw value such as a
    form string; see ``parse_whole_number`` for what is accepted.

    Raises
    ------
    InvalidInput
        If any value is missing or unparsable, if the principal or duration
        is not positive, if the rate is negative, or if the interest product
        would not fit in a signed 64-bit integer.
    """
    principal_value = parse_whole_number(principal, "principal")
    rate_value = parse_whole_number(monthly_rate_percent, "monthly_rate_percent")
    duration_value = parse_whole_number(duration_months, "duration_months")

    if principal_value <= 0:
        raise InvalidInput("Principal amount must be greater than zero", field="principal")
    if rate_value < 0:
        raise InvalidInput("Interest rate cannot be negative", field="monthly_rate_percent")
    if duration_value <= 0:
        raise InvalidInput("Duration must be at least one month", field="duration_months")
    if principal_value * rate_value > MAX_INTEREST_PRODUCT:
        raise InvalidInput("Principal and interest rate are too large to calculate")

    return LoanRequest(
        principal=principal_value,
        monthly_rate_percent=rate_value,
        duration_months=duration_value,
    )


def compute_request(request: LoanRequest) -> Tuple[List[ScheduleEntry], ScheduleSummary]:
    """Compute the schedule and summary for an already validated request.

    Parameters
    ----------
    request: LoanRequest
        Output of ``build_request``.

    Returns
    -------
    schedule: List[ScheduleEntry]
        Exactly ``request.duration_months`` entries, month 1 first.
    summary: ScheduleSummary
        Totals. ``total_principal`` is the requested principal.
    """
    monthly_principal = request.principal // request.duration_months
    remaining = request.principal
    total_interest = 0
    schedule: List[ScheduleEntry] = []

    for month in range(1, request.duration_months + 1):
        interest = remaining * request.monthly_rate_percent // 100
        schedule.append(
            ScheduleEntry(
                month=month,
                principal_portion=monthly_principal,
                interest_portion=interest,
                payment_amount=monthly_principal + interest,
                remaining_principal_before_payment=remaining,
            )
        )
        remaining -= monthly_principal
        total_interest += interest

    summary = ScheduleSummary(
        total_principal=request.principal,
        total_interest=total_interest,
        total_amount=request.principal + total_interest,
    )
    logger.debug(
        "Computed %d-month schedule for principal=%d rate=%d%%: interest=%d leftover=%d",
        request.duration_months,
        request.principal,
        request.monthly_rate_percent,
        total_interest,
        remaining,
    )
    return schedule, summary


def compute_schedule(
    principal: Any, monthly_rate_percent: Any, duration_months: Any
) -> Tuple[List[ScheduleEntry], ScheduleSummary]:
    """Validate the inputs and compute the reducing-balance schedule.

    Validation happens before anything is computed, so a caller either gets
    a complete schedule or an ``InvalidInput`` error, never a partial one.

    Example: a principal of 120000 at 10 % over 12 months repays 10000 of
    principal each month; interest falls from 12000 in month 1 to 1000 in
    month 12, for 78000 of interest and 198000 in total.
    """
    request = build_request(principal, monthly_rate_percent, duration_months)
    return compute_request(request)


def principal_shortfall(schedule: List[ScheduleEntry], summary: ScheduleSummary) -> int:
    """Return how much principal the schedule leaves unrepaid.

    This is zero when the principal divides evenly by the duration and
    otherwise equals the truncation remainder (``principal % duration``).
    """
    return summary.total_principal - sum(entry.principal_portion for entry in schedule)
