"""Export helpers for the loan calculator.

The schedule can leave the calculator in four shapes:

* a PNG image of the payment table with a title block,
* a paginated A4 landscape PDF with the same table and a totals footer,
* a JSON document (request, summary and schedule),
* a CSV file of the schedule rows.

Images and documents are drawn with matplotlib's object-oriented ``Figure``
API rather than ``pyplot``, so rendering keeps no global state and is safe to
call from a web request handler.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from .data_models import LoanRequest, ScheduleEntry, ScheduleSummary
from .utils import format_amount

logger = logging.getLogger(__name__)

BRAND_TITLE = "You-First Loans - Payment Schedule"

HEADER_COLOR = "#1f2937"
STRIPE_COLOR = "#f3f4f6"
GRID_COLOR = "#9ca3af"
FOOTER_TEXT_COLOR = "#666666"

# Layout, in inches.
TITLE_HEIGHT = 1.0
FOOTER_HEIGHT = 0.9
ROW_HEIGHT = 0.28
SIDE_MARGIN = 0.4
PNG_WIDTH = 10.0
A4_LANDSCAPE = (11.69, 8.27)
PDF_ROWS_PER_PAGE = 20

# matplotlib refuses images taller than 2**16 pixels.
MAX_PNG_PIXELS = 60000
PNG_DPI = 150


def _plain(text: str) -> str:
    """Escape dollar signs so matplotlib does not read them as mathtext."""
    return text.replace("$", r"\$")


def column_labels(prefix: str = "") -> List[str]:
    unit = f" ({prefix.strip()})" if prefix.strip() else ""
    return [
        "Month",
        f"Principal{unit}",
        f"Interest{unit}",
        f"Amount{unit}",
        f"Remaining Principal{unit}",
    ]


def table_rows(schedule: Sequence[ScheduleEntry]) -> List[List[str]]:
    return [
        [
            str(entry.month),
            format_amount(entry.principal_portion),
            format_amount(entry.interest_portion),
            format_amount(entry.payment_amount),
            format_amount(entry.remaining_principal_before_payment),
        ]
        for entry in schedule
    ]


def total_row(summary: ScheduleSummary) -> List[str]:
    return [
        "TOTAL",
        format_amount(summary.total_principal),
        format_amount(summary.total_interest),
        format_amount(summary.total_amount),
        "-",
    ]


def loan_details_line(request: LoanRequest, prefix: str = "", suffix: str = "") -> str:
    """Return the ``Principal | Interest Rate | Duration`` subtitle."""
    return (
        f"Principal: {format_amount(request.principal, prefix, suffix)} | "
        f"Interest Rate: {request.monthly_rate_percent}% | "
        f"Duration: {request.duration_months} months"
    )


def totals_line(summary: ScheduleSummary, prefix: str = "", suffix: str = "") -> str:
    return (
        f"Total Principal: {format_amount(summary.total_principal, prefix, suffix)} | "
        f"Total Interest: {format_amount(summary.total_interest, prefix, suffix)} | "
        f"Total Amount: {format_amount(summary.total_amount, prefix, suffix)}"
    )


def _draw_page(
    fig: Figure,
    subtitle: str,
    rows: List[List[str]],
    labels: List[str],
    *,
    ends_with_total: bool,
    footer: Sequence[str] = (),
) -> None:
    """Draw the title block, one table and an optional footer onto ``fig``."""
    width, height = fig.get_size_inches()
    fig.text(0.5, 1 - 0.35 / height, BRAND_TITLE, ha="center", va="center", fontsize=16, fontweight="bold")
    fig.text(0.5, 1 - 0.7 / height, _plain(subtitle), ha="center", va="center", fontsize=10)

    table_height = ROW_HEIGHT * (len(rows) + 1)
    top = 1 - TITLE_HEIGHT / height
    ax = fig.add_axes(
        [SIDE_MARGIN / width, top - table_height / height, 1 - 2 * SIDE_MARGIN / width, table_height / height]
    )
    ax.set_axis_off()
    table = ax.table(
        cellText=[[_plain(cell) for cell in row] for row in rows],
        colLabels=[_plain(label) for label in labels],
        cellLoc="right",
        colLoc="center",
        bbox=[0, 0, 1, 1],
    )
    table.auto_set_font_size(False)
    table.set_fontsize(9)
    last_row = len(rows)
    for (row, _col), cell in table.get_celld().items():
        cell.set_edgecolor(GRID_COLOR)
        if row == 0:
            cell.set_facecolor(HEADER_COLOR)
            cell.get_text().set_color("white")
            cell.get_text().set_fontweight("bold")
        elif ends_with_total and row == last_row:
            cell.set_facecolor(STRIPE_COLOR)
            cell.get_text().set_fontweight("bold")
        elif row % 2 == 0:
            cell.set_facecolor(STRIPE_COLOR)

    for index, line in enumerate(footer):
        y = (FOOTER_HEIGHT - 0.3 - index * 0.3) / height
        fig.text(0.5, y, _plain(line), ha="center", va="center", fontsize=9, color=FOOTER_TEXT_COLOR)


def render_png(
    schedule: Sequence[ScheduleEntry],
    summary: ScheduleSummary,
    request: LoanRequest,
    *,
    prefix: str = "",
    suffix: str = "",
) -> bytes:
    """Render the payment table, with its title block, as PNG bytes."""
    rows = table_rows(schedule) + [total_row(summary)]
    height = TITLE_HEIGHT + ROW_HEIGHT * (len(rows) + 1) + SIDE_MARGIN
    fig = Figure(figsize=(PNG_WIDTH, height), facecolor="white")
    _draw_page(fig, loan_details_line(request, prefix, suffix), rows, column_labels(prefix), ends_with_total=True)

    dpi = min(PNG_DPI, MAX_PNG_PIXELS / height)
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=dpi, facecolor="white")
    data = buffer.getvalue()
    logger.info("Rendered PNG schedule: %d months, %d bytes", len(schedule), len(data))
    return data


def render_pdf(
    schedule: Sequence[ScheduleEntry],
    summary: ScheduleSummary,
    request: LoanRequest,
    *,
    prefix: str = "",
    suffix: str = "",
    generated_on: Optional[date] = None,
) -> bytes:
    """Render the schedule as an A4 landscape PDF.

    The table is split into pages of ``PDF_ROWS_PER_PAGE`` months; the header
    is repeated on every page. The last page ends with the TOTAL row and a
    footer with the totals and the generation date.
    """
    generated_on = generated_on or date.today()
    rows = table_rows(schedule)
    chunks = [rows[start:start + PDF_ROWS_PER_PAGE] for start in range(0, len(rows), PDF_ROWS_PER_PAGE)] or [[]]
    labels = column_labels(prefix)
    subtitle = loan_details_line(request, prefix, suffix)

    buffer = io.BytesIO()
    with PdfPages(buffer, metadata={"Title": BRAND_TITLE}) as pdf:
        for page_number, chunk in enumerate(chunks, start=1):
            is_last = page_number == len(chunks)
            fig = Figure(figsize=A4_LANDSCAPE, facecolor="white")
            footer: List[str] = []
            if is_last:
                chunk = chunk + [total_row(summary)]
                footer = [
                    totals_line(summary, prefix, suffix),
                    f"Generated on {generated_on.strftime('%d %B %Y')}",
                ]
            _draw_page(fig, subtitle, chunk, labels, ends_with_total=is_last, footer=footer)
            if len(chunks) > 1:
                fig.text(
                    1 - SIDE_MARGIN / A4_LANDSCAPE[0],
                    0.2 / A4_LANDSCAPE[1],
                    f"Page {page_number} of {len(chunks)}",
                    ha="right",
                    fontsize=8,
                    color=FOOTER_TEXT_COLOR,
                )
            pdf.savefig(fig)
    data = buffer.getvalue()
    logger.info("Rendered PDF schedule: %d months, %d pages, %d bytes", len(schedule), len(chunks), len(data))
    return data


def schedule_to_dicts(schedule: Sequence[ScheduleEntry]) -> List[Dict[str, int]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [asdict(entry) for entry in schedule]


def summary_to_dict(summary: ScheduleSummary) -> Dict[str, int]:
    return asdict(summary)


def export_to_json(
    path: Path,
    schedule: Sequence[ScheduleEntry],
    summary: ScheduleSummary,
    request: Optional[LoanRequest] = None,
) -> None:
    """Export request, summary and schedule to a JSON file."""
    data: Dict[str, Any] = {
        "request": asdict(request) if request else None,
        "summary": summary_to_dict(summary),
        "schedule": schedule_to_dicts(schedule),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: Sequence[ScheduleEntry]) -> None:
    """Export the schedule to a CSV file."""
    header = [
        "Month",
        "Principal",
        "Interest",
        "Amount",
        "Remaining_Principal",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.month,
                    e.principal_portion,
                    e.interest_portion,
                    e.payment_amount,
                    e.remaining_principal_before_payment,
                ]
            )


@dataclass(frozen=True)
class ExportFormat:
    mimetype: str
    filename: str
    render: Callable[..., bytes]


EXPORT_FORMATS: Dict[str, ExportFormat] = {
    "png": ExportFormat("image/png", "You-First-Loan-Table.png", render_png),
    "pdf": ExportFormat("application/pdf", "You-First-Loan-Table.pdf", render_pdf),
}
