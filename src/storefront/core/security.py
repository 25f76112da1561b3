"""Security utilities: password hashing, token lifetimes and log redaction."""

import re
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

import bcrypt

from src.storefront.runtime.context import get_config

CORRELATION_ID_HEADER = "X-Correlation-ID"
REDACTED = "[REDACTED]"

DEFAULT_EXPIRATION_SECONDS = 900

_EXPIRATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt using the configured cost factor.

    Args:
        password: Plain text password
        rounds: Optional cost override (defaults to ``security.bcrypt_rounds``)

    Returns:
        The bcrypt hash as text, salt included
    """
    cost = rounds if rounds is not None else get_config().security.bcrypt_rounds
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=cost)).decode(
        "utf-8"
    )


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def parse_expiration_to_seconds(expiration: str) -> int:
    """Convert a lifetime such as ``"15m"`` or ``"7d"`` into seconds.

    Supports ``s``, ``m``, ``h`` and ``d`` suffixes. Anything else yields the
    15 minute default rather than an error.
    """
    match = _EXPIRATION_PATTERN.match(expiration.strip()) if expiration else None
    if not match:
        return DEFAULT_EXPIRATION_SECONDS
    value, unit = match.groups()
    return int(value) * _UNIT_SECONDS[unit]


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def _lowered(names: Iterable[str]) -> set[str]:
    return {name.lower() for name in names}


def sanitize_body(body: Any, sensitive_fields: Iterable[str] | None = None) -> Any:
    """Return a copy of ``body`` with sensitive values replaced by ``[REDACTED]``.

    Keys are matched case-insensitively at any depth, through nested
    mappings and lists. Non-container values are returned unchanged.
    """
    if sensitive_fields is None:
        sensitive_fields = get_config().security.sensitive_fields
    sensitive = _lowered(sensitive_fields)

    def _walk(value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                key: REDACTED
                if isinstance(key, str) and key.lower() in sensitive
                else _walk(item)
                for key, item in value.items()
            }
        if isinstance(value, list | tuple):
            return [_walk(item) for item in value]
        return value

    return _walk(body)


def sanitize_headers(
    headers: Mapping[str, str], sensitive_headers: Iterable[str] | None = None
) -> dict[str, str]:
    """Return request headers with credentials and cookies redacted."""
    if sensitive_headers is None:
        sensitive_headers = get_config().security.sensitive_headers
    sensitive = _lowered(sensitive_headers)
    return {
        name: REDACTED if name.lower() in sensitive else value
        for name, value in headers.items()
    }
