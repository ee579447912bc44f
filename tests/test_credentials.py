"""Tests for service account resolution from environment variables."""

import base64
import json

import pytest

from line_kpi.errors import AuthError
from line_kpi.sheets.credentials import (
    Resolved,
    Unresolved,
    load_service_account,
    normalize_private_key,
    resolve_credentials,
)

from .sheet_fixtures import FAKE_KEY


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _blob(email: str = "bot@kpi.iam.gserviceaccount.com", key: str = FAKE_KEY) -> str:
    return json.dumps(
        {
            "type": "service_account",
            "project_id": "kpi-automation",
            "client_email": email,
            "private_key": key.replace("\n", "\\n"),
        }
    )


def test_raw_json_blob():
    result = resolve_credentials({"GOOGLE_SERVICE_ACCOUNT_JSON": _blob()})

    assert isinstance(result, Resolved)
    assert result.source == "GOOGLE_SERVICE_ACCOUNT_JSON"
    assert result.credentials.client_email == "bot@kpi.iam.gserviceaccount.com"
    assert result.credentials.private_key == FAKE_KEY
    assert result.credentials.extra["project_id"] == "kpi-automation"


def test_base64_json_blob():
    result = resolve_credentials({"GOOGLE_SERVICE_ACCOUNT_JSON_BASE64": _b64(_blob())})

    assert isinstance(result, Resolved)
    assert result.credentials.private_key == FAKE_KEY


def test_base64_blob_in_json_var():
    result = resolve_credentials({"GOOGLE_SERVICE_ACCOUNT_JSON": _b64(_blob())})
    assert isinstance(result, Resolved)


def test_combined_blob_wins_over_separate_vars():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_JSON": _blob(email="blob@kpi.iam.gserviceaccount.com"),
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "separate@kpi.iam.gserviceaccount.com",
        "GOOGLE_PRIVATE_KEY": FAKE_KEY,
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Resolved)
    assert result.credentials.client_email == "blob@kpi.iam.gserviceaccount.com"


def test_malformed_blob_does_not_fall_through():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_JSON": "{not json",
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "separate@kpi.iam.gserviceaccount.com",
        "GOOGLE_PRIVATE_KEY": FAKE_KEY,
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Unresolved)
    assert "not valid JSON" in result.reason


def test_separate_vars_with_escaped_newlines():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "bot@kpi.iam.gserviceaccount.com",
        "GOOGLE_PRIVATE_KEY": FAKE_KEY.replace("\n", "\\r\\n").replace("\\r", "\r"),
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Resolved)
    assert result.credentials.private_key == FAKE_KEY
    assert result.source == "GOOGLE_SERVICE_ACCOUNT_EMAIL+GOOGLE_PRIVATE_KEY"


def test_separate_vars_both_base64():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": _b64("bot@kpi.iam.gserviceaccount.com"),
        "GOOGLE_PRIVATE_KEY_BASE64": _b64(FAKE_KEY + "\r\n"),
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Resolved)
    assert result.credentials.client_email == "bot@kpi.iam.gserviceaccount.com"
    assert result.credentials.private_key == FAKE_KEY


def test_private_key_base64_holding_key_file():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "bot@kpi.iam.gserviceaccount.com",
        "GOOGLE_PRIVATE_KEY_BASE64": _b64(_blob()),
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Resolved)
    assert result.credentials.private_key == FAKE_KEY


def test_key_without_pem_header_is_rejected():
    environ = {
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "bot@kpi.iam.gserviceaccount.com",
        "GOOGLE_PRIVATE_KEY_BASE64": _b64("just some text"),
    }
    result = resolve_credentials(environ)

    assert isinstance(result, Unresolved)
    assert "PEM" in result.reason


def test_blob_key_without_pem_header_is_rejected():
    result = resolve_credentials({"GOOGLE_SERVICE_ACCOUNT_JSON": _blob(key="abc")})
    assert isinstance(result, Unresolved)


def test_nothing_configured():
    result = resolve_credentials({})
    assert isinstance(result, Unresolved)
    assert "Missing service account env" in result.reason


def test_load_service_account_raises_auth_error():
    with pytest.raises(AuthError):
        load_service_account({"GOOGLE_SERVICE_ACCOUNT_EMAIL": "bot@kpi.iam.gserviceaccount.com"})


def test_as_info_carries_google_auth_fields():
    credentials = load_service_account({"GOOGLE_SERVICE_ACCOUNT_JSON": _blob()})
    info = credentials.as_info()

    assert info["type"] == "service_account"
    assert info["client_email"] == "bot@kpi.iam.gserviceaccount.com"
    assert info["token_uri"] == "https://oauth2.googleapis.com/token"
    assert info["project_id"] == "kpi-automation"


def test_normalize_private_key():
    assert normalize_private_key("a\\nb\r\n") == "a\nb"
