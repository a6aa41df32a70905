import csv
import json
from datetime import date

import pytest

from reducing_loan.engine import build_request, compute_request
from reducing_loan.export import (
    EXPORT_FORMATS,
    column_labels,
    export_to_csv,
    export_to_json,
    loan_details_line,
    render_pdf,
    render_png,
    table_rows,
    total_row,
    totals_line,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_table_rows_and_total_row(canonical_result):
    schedule, summary = canonical_result

    rows = table_rows(schedule)
    assert rows[0] == ["1", "10,000", "12,000", "22,000", "120,000"]
    assert rows[-1] == ["12", "10,000", "1,000", "11,000", "10,000"]
    assert total_row(summary) == ["TOTAL", "120,000", "78,000", "198,000", "-"]


def test_column_labels_carry_currency():
    assert column_labels("₦")[1] == "Principal (₦)"
    assert column_labels()[4] == "Remaining Principal"


def test_title_and_footer_lines(canonical_request, canonical_result):
    _, summary = canonical_result

    assert loan_details_line(canonical_request, "₦") == (
        "Principal: ₦120,000 | Interest Rate: 10% | Duration: 12 months"
    )
    assert totals_line(summary, "₦") == (
        "Total Principal: ₦120,000 | Total Interest: ₦78,000 | Total Amount: ₦198,000"
    )


def test_render_png(canonical_request, canonical_result):
    schedule, summary = canonical_result

    content = render_png(schedule, summary, canonical_request, prefix="₦")

    assert content.startswith(PNG_SIGNATURE)


def test_render_pdf_single_page(canonical_request, canonical_result):
    schedule, summary = canonical_result

    content = render_pdf(schedule, summary, canonical_request, prefix="₦", generated_on=date(2024, 5, 1))

    assert content.startswith(b"%PDF")


def test_render_pdf_paginates_long_schedules():
    request = build_request(3600000, 2, 60)
    schedule, summary = compute_request(request)

    short = render_pdf(schedule[:10], summary, request)
    long = render_pdf(schedule, summary, request)

    assert long.startswith(b"%PDF")
    assert len(long) > len(short)


@pytest.mark.parametrize("fmt", sorted(EXPORT_FORMATS))
def test_dollar_prefix_is_rendered_as_text(fmt, canonical_request, canonical_result):
    schedule, summary = canonical_result

    content = EXPORT_FORMATS[fmt].render(schedule, summary, canonical_request, prefix="$")

    assert content


def test_export_formats_table():
    assert EXPORT_FORMATS["png"].mimetype == "image/png"
    assert EXPORT_FORMATS["png"].filename == "You-First-Loan-Table.png"
    assert EXPORT_FORMATS["pdf"].mimetype == "application/pdf"
    assert EXPORT_FORMATS["pdf"].filename == "You-First-Loan-Table.pdf"


def test_export_to_json(tmp_path, uneven_request):
    schedule, summary = compute_request(uneven_request)
    path = tmp_path / "schedule.json"

    export_to_json(path, schedule, summary, uneven_request)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["request"] == {"principal": 100000, "monthly_rate_percent": 10, "duration_months": 7}
    assert data["summary"]["total_principal"] == 100000
    assert len(data["schedule"]) == 7
    assert data["schedule"][0] == {
        "month": 1,
        "principal_portion": 14285,
        "interest_portion": 10000,
        "payment_amount": 24285,
        "remaining_principal_before_payment": 100000,
    }


def test_export_to_csv(tmp_path, canonical_result):
    schedule, _ = canonical_result
    path = tmp_path / "schedule.csv"

    export_to_csv(path, schedule)

    with path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Month", "Principal", "Interest", "Amount", "Remaining_Principal"]
    assert rows[1] == ["1", "10000", "12000", "22000", "120000"]
    assert len(rows) == 13
