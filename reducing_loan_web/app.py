import io
import logging
import os

from flask import Flask, abort, jsonify, render_template, request, send_file, session

from reducing_loan.engine import build_request, compute_request, principal_shortfall
from reducing_loan.export import EXPORT_FORMATS, schedule_to_dicts, summary_to_dict
from reducing_loan.utils import InvalidInput, format_amount

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.config["DEFAULT_CURRENCY"] = os.environ.get("LOAN_DEFAULT_CURRENCY", "NGN").upper()
app.config["DEFAULT_RATE"] = os.environ.get("LOAN_DEFAULT_RATE", "10")
app.config["MAX_DURATION_MONTHS"] = int(os.environ.get("LOAN_MAX_DURATION_MONTHS", "600"))
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")

CURRENCY_OPTIONS = {
    'NGN': {'label': 'Nigerian naira', 'prefix': '₦', 'suffix': ''},
    'USD': {'label': 'US dollar', 'prefix': '$', 'suffix': ''},
    'EUR': {'label': 'Euro', 'prefix': '€', 'suffix': ''},
    'GBP': {'label': 'British pound', 'prefix': '£', 'suffix': ''},
}


@app.template_filter("amount")
def amount_filter(value) -> str:
    return format_amount(value)


def _default_currency() -> str:
    code = app.config["DEFAULT_CURRENCY"]
    return code if code in CURRENCY_OPTIONS else "NGN"


def _normalized_currency(form) -> str:
    code = (form.get("currency") or _default_currency()).upper()
    return code if code in CURRENCY_OPTIONS else _default_currency()


def _within_web_limits(loan_request):
    """Reject durations too long to render inside a request."""
    limit = app.config["MAX_DURATION_MONTHS"]
    if loan_request.duration_months > limit:
        raise InvalidInput(f"Duration cannot exceed {limit} months", field="duration_months")
    return loan_request


def _form_to_request(form):
    return _within_web_limits(
        build_request(
            form.get("principal"),
            form.get("rate"),
            form.get("duration"),
        )
    )


def _remember_request(loan_request) -> None:
    session["last_request"] = {
        "principal": loan_request.principal,
        "rate": loan_request.monthly_rate_percent,
        "duration": loan_request.duration_months,
    }
    session.modified = True


def _previous_request():
    """Return the last successfully calculated request, if it is still valid."""
    saved = session.get("last_request")
    if not saved:
        return None
    try:
        return build_request(saved.get("principal"), saved.get("rate"), saved.get("duration"))
    except InvalidInput:
        session.pop("last_request", None)
        return None


def _form_values(loan_request=None, form=None) -> dict:
    if form is not None:
        return {
            "principal": form.get("principal", ""),
            "rate": form.get("rate", ""),
            "duration": form.get("duration", ""),
        }
    if loan_request is not None:
        return {
            "principal": loan_request.principal,
            "rate": loan_request.monthly_rate_percent,
            "duration": loan_request.duration_months,
        }
    return {"principal": "", "rate": app.config["DEFAULT_RATE"], "duration": ""}


@app.route("/", methods=["GET", "POST"])
def index():
    error = None
    error_field = None
    loan_request = None
    currency_code = _default_currency()

    if request.method == "POST":
        currency_code = _normalized_currency(request.form)
        session["currency"] = currency_code
        try:
            loan_request = _form_to_request(request.form)
            _remember_request(loan_request)
        except InvalidInput as exc:
            logger.warning("Rejected loan input (%s, %s): %s", exc.field, exc.kind, exc.message)
            error = exc.message
            error_field = exc.field
            # Keep showing the last good schedule underneath the error.
            loan_request = _previous_request()
        form_values = _form_values(form=request.form)
    else:
        currency_code = session.get("currency", currency_code)
        form_values = _form_values()

    schedule = None
    summary = None
    shortfall = 0
    if loan_request is not None:
        schedule, summary = compute_request(loan_request)
        shortfall = principal_shortfall(schedule, summary)

    currency_meta = CURRENCY_OPTIONS[currency_code]
    return render_template(
        "index.html",
        loan_request=loan_request,
        schedule=schedule,
        summary=summary,
        shortfall=shortfall,
        error=error,
        error_field=error_field,
        form_values=form_values,
        currency_code=currency_code,
        currency_options=CURRENCY_OPTIONS,
        currency_prefix=currency_meta["prefix"],
        currency_suffix=currency_meta["suffix"],
        asset_version=app.config["ASSET_VERSION"],
    ), (400 if error else 200)


@app.post("/export/<fmt>")
def export(fmt: str):
    export_format = EXPORT_FORMATS.get(fmt.lower())
    if export_format is None:
        abort(404)
    try:
        loan_request = _form_to_request(request.form)
    except InvalidInput as exc:
        logger.warning("Rejected export input (%s, %s): %s", exc.field, exc.kind, exc.message)
        return jsonify({"detail": exc.message, "field": exc.field, "kind": exc.kind}), 400
    currency_meta = CURRENCY_OPTIONS[_normalized_currency(request.form)]
    schedule, summary = compute_request(loan_request)
    content = export_format.render(
        schedule,
        summary,
        loan_request,
        prefix=currency_meta["prefix"],
        suffix=currency_meta["suffix"],
    )
    return send_file(
        io.BytesIO(content),
        mimetype=export_format.mimetype,
        as_attachment=True,
        download_name=export_format.filename,
    )


@app.post("/api/schedule")
def api_schedule():
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    try:
        # Lists, strings and numbers carry no named fields to read.
        if not isinstance(payload, dict):
            raise InvalidInput("Request body must be a JSON object", kind="missing")
        loan_request = _within_web_limits(
            build_request(
                payload.get("principal"),
                payload.get("monthly_rate_percent", payload.get("rate")),
                payload.get("duration_months", payload.get("duration")),
            )
        )
    except InvalidInput as exc:
        return jsonify({"detail": exc.message, "field": exc.field, "kind": exc.kind}), 400
    schedule, summary = compute_request(loan_request)
    return jsonify(
        {
            "request": {
                "principal": loan_request.principal,
                "monthly_rate_percent": loan_request.monthly_rate_percent,
                "duration_months": loan_request.duration_months,
            },
            "summary": summary_to_dict(summary),
            "schedule": schedule_to_dicts(schedule),
            "principal_shortfall": principal_shortfall(schedule, summary),
        }
    )


@app.get("/healthz")
def healthz():
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting Loan Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
