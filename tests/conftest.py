"""Shared fixtures for the loan calculator tests.

Canonical loan: 120,000 borrowed at 10 % a month over 12 months, which
divides evenly (10,000 of principal per month). The uneven loan is
100,000 over 7 months, which leaves a 5-unit truncation remainder.
"""

import pytest

from reducing_loan.engine import build_request, compute_request
from reducing_loan_web.app import app as flask_app


@pytest.fixture
def canonical_request():
    return build_request(120000, 10, 12)


@pytest.fixture
def canonical_result(canonical_request):
    return compute_request(canonical_request)


@pytest.fixture
def uneven_request():
    return build_request(100000, 10, 7)


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as test_client:
        yield test_client
