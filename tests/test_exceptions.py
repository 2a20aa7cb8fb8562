"""Tests for exceptions.py: status mapping, error bodies and Retry-After."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime as http_date

import pytest

from znvault_sdk.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    HttpError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
    ZnVaultError,
    error_from_response,
    parse_error_body,
    parse_retry_after,
)


# ── Status mapping ───────────────────────────────────────────────────

@pytest.mark.parametrize(
    "status, expected",
    [
        (400, ValidationError),
        (401, AuthenticationError),
        (403, AuthorizationError),
        (404, NotFoundError),
        (409, ConflictError),
        (429, RateLimitError),
        (500, ServerError),
        (503, ServerError),
        (418, HttpError),
        (302, HttpError),
    ],
)
def test_every_status_maps_to_one_error(status, expected):
    error = error_from_response(status, b'{"message": "boom"}')
    assert type(error) is expected
    assert isinstance(error, ZnVaultError)
    assert error.status_code == status


def test_validation_error_carries_fields():
    body = b'{"error": "Bad Request", "message": "invalid alias", "fields": {"alias": "required"}}'
    error = error_from_response(400, body)
    assert error.message == "invalid alias"
    assert error.fields == {"alias": "required"}
    assert str(error) == "Validation error: invalid alias"


def test_not_found_carries_resource():
    error = error_from_response(404, b'{"message": "Secret sec-1"}')
    assert error.resource == "Secret sec-1"


def test_http_error_carries_details():
    error = error_from_response(418, b'{"message": "teapot", "details": {"brew": "tea"}}')
    assert error.details == {"brew": "tea"}
    assert str(error) == "HTTP 418: teapot"


# ── Message selection ────────────────────────────────────────────────

def test_message_preferred_over_error():
    error = error_from_response(403, b'{"error": "Forbidden", "message": "not your tenant"}')
    assert error.message == "not your tenant"


def test_error_used_when_message_missing():
    error = error_from_response(401, b'{"error": "Unauthorized"}')
    assert error.message == "Unauthorized"


def test_structured_body_without_text_fields():
    error = error_from_response(409, b'{"statusCode": 409}')
    assert error.message == "Unknown error"


def test_plain_text_body_is_the_message():
    error = error_from_response(502, b"upstream unavailable")
    assert error.message == "upstream unavailable"


def test_empty_body_uses_reason_phrase():
    assert error_from_response(503, b"").message == "Service Unavailable"


def test_blank_body_uses_reason_phrase():
    assert error_from_response(404, b"   ").message == "Not Found"


def test_unknown_status_without_body():
    error = error_from_response(499, b"")
    assert isinstance(error, HttpError)
    assert error.message == "Unknown error"


def test_parse_error_body_rejects_non_json():
    assert parse_error_body(b"<html>oops</html>") is None
    assert parse_error_body(b"") is None


# ── Retry-After ──────────────────────────────────────────────────────

def test_rate_limit_without_header_has_no_retry_after():
    error = error_from_response(429, b"")
    assert error.retry_after is None
    assert str(error) == "Rate limit exceeded"


def test_rate_limit_reads_delta_seconds():
    error = error_from_response(429, b"", {"Retry-After": "30"})
    assert error.retry_after == 30.0
    assert str(error) == "Rate limit exceeded. Retry after 30 seconds"


def test_retry_after_header_is_case_insensitive():
    assert error_from_response(429, b"", {"retry-after": "5"}).retry_after == 5.0


def test_retry_after_http_date():
    when = datetime.now(timezone.utc) + timedelta(seconds=120)
    seconds = parse_retry_after(http_date(when, usegmt=True))
    assert 100 <= seconds <= 120


def test_retry_after_in_the_past_is_zero():
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0


@pytest.mark.parametrize("value", [None, "", "soon"])
def test_unparseable_retry_after(value):
    assert parse_retry_after(value) is None
