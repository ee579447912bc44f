import base64
import binascii
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from line_kpi.errors import AuthError

from .models import ServiceAccountInfo


logger = logging.getLogger(__name__)

# Checked in order; the first one that is set is used.
JSON_BLOB_VARS = (
    "GOOGLE_SERVICE_ACCOUNT_JSON_BASE64",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "GOOGLE_SERVICE_ACCOUNT_BASE64",
    "GOOGLE_SERVICE_ACCOUNT",
)
EMAIL_VARS = ("GOOGLE_SERVICE_ACCOUNT_EMAIL", "GOOGLE_CLIENT_EMAIL")
PRIVATE_KEY_VARS = ("GOOGLE_PRIVATE_KEY", "GOOGLE_PRIVATE_KEY_BASE64")

PEM_MARKER = "-----BEGIN"


@dataclass(frozen=True)
class Resolved:
    credentials: ServiceAccountInfo
    source: str


@dataclass(frozen=True)
class Unresolved:
    reason: str


CredentialResult = Resolved | Unresolved


def _pick_env(environ: Mapping[str, str], names: tuple[str, ...]) -> tuple[str, str] | None:
    for name in names:
        value = environ.get(name)
        if value and value.strip():
            return name, value.strip()
    return None


def _b64_to_text(value: str) -> str:
    compact = "".join(value.split())
    return base64.b64decode(compact, validate=True).decode("utf-8")


def normalize_private_key(key: str) -> str:
    """Turn escaped newlines into real ones and drop carriage returns"""
    return key.replace("\\n", "\n").replace("\r", "").strip()


def _is_pem_key(key: str) -> bool:
    return PEM_MARKER in key and "PRIVATE KEY" in key


def _from_json_blob(name: str, raw: str) -> CredentialResult:
    text = raw
    if not raw.startswith("{"):
        try:
            text = _b64_to_text(raw)
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return Unresolved(f"{name} is neither JSON nor base64-encoded JSON")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return Unresolved(f"{name} is not valid JSON")
    if not isinstance(data, dict):
        return Unresolved(f"{name} must hold a JSON object")

    client_email = str(data.pop("client_email", "") or "").strip()
    private_key = normalize_private_key(str(data.pop("private_key", "") or ""))
    if not client_email or not private_key:
        return Unresolved(f"{name} is missing client_email or private_key")
    if not _is_pem_key(private_key):
        return Unresolved(f"private_key in {name} has no PEM header")

    token_uri = data.pop("token_uri", None) or ServiceAccountInfo.token_uri
    return Resolved(
        ServiceAccountInfo(
            client_email=client_email,
            private_key=private_key,
            token_uri=token_uri,
            extra=data,
        ),
        source=name,
    )


def _decode_email(value: str) -> str | None:
    if "@" in value:
        return value
    try:
        decoded = _b64_to_text(value).strip()
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return decoded if "@" in decoded else None


def _decode_private_key(value: str) -> str | None:
    if PEM_MARKER in value:
        return normalize_private_key(value)
    try:
        decoded = _b64_to_text(value).strip()
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    # Some deployments store the whole key file here instead of just the key.
    if decoded.startswith("{"):
        try:
            data = json.loads(decoded)
        except json.JSONDecodeError:
            return None
        decoded = str(data.get("private_key", "")) if isinstance(data, dict) else ""

    return normalize_private_key(decoded)


def _from_separate_vars(environ: Mapping[str, str]) -> CredentialResult:
    email_var = _pick_env(environ, EMAIL_VARS)
    key_var = _pick_env(environ, PRIVATE_KEY_VARS)
    if email_var is None or key_var is None:
        return Unresolved(
            "Missing service account env. Provide GOOGLE_SERVICE_ACCOUNT_JSON_BASE64, "
            "GOOGLE_SERVICE_ACCOUNT_JSON or GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY"
        )

    client_email = _decode_email(email_var[1])
    if client_email is None:
        return Unresolved(f"{email_var[0]} is not an email address")

    private_key = _decode_private_key(key_var[1])
    if not private_key or not _is_pem_key(private_key):
        return Unresolved(f"{key_var[0]} does not contain a PEM private key")

    return Resolved(
        ServiceAccountInfo(client_email=client_email, private_key=private_key),
        source=f"{email_var[0]}+{key_var[0]}",
    )


def resolve_credentials(environ: Mapping[str, str] | None = None) -> CredentialResult:
    """Resolve service account credentials from environment variables.

    A full JSON blob takes precedence over a separate email and private key. The
    first blob variable that is set decides the outcome, even when it is malformed.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``

    Returns:
        ``Resolved`` with the credentials, or ``Unresolved`` with the reason

    """
    environ = os.environ if environ is None else environ

    blob = _pick_env(environ, JSON_BLOB_VARS)
    if blob is not None:
        return _from_json_blob(*blob)

    return _from_separate_vars(environ)


def load_service_account(environ: Mapping[str, str] | None = None) -> ServiceAccountInfo:
    """Resolve credentials or raise AuthError"""
    result = resolve_credentials(environ)
    if isinstance(result, Unresolved):
        logger.error(f"Could not resolve service account: {result.reason}")
        raise AuthError(result.reason)

    logger.info(f"Using service account {result.credentials.client_email} from {result.source}")
    return result.credentials
