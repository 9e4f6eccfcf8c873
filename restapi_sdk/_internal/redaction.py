"""Redaction of sensitive header values before they reach debug output."""

from collections.abc import Mapping

REDACT_HEADERS: frozenset[str] = frozenset({
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-auth-token",
    "x-access-token",
    "api-key",
    "token",
    "secret",
    "password",
})

REDACTED_VALUE = "[REDACTED]"


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with sensitive values replaced.

    Header names are matched case-insensitively. The input is never mutated.

    Args:
        headers: Header name to value mapping.

    Returns:
        A new dictionary with sensitive values replaced by "[REDACTED]".
    """
    return {
        name: REDACTED_VALUE if name.lower() in REDACT_HEADERS else value
        for name, value in headers.items()
    }
