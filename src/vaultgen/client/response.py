"""Classify Vault responses as data or failure.

Vault reports business outcomes ("no such policy", "permission denied") as
HTTP statuses with an ``{"errors": [...]}`` body, so the clients never let
``httpx`` raise on status. :func:`interpret_response` makes the decision
instead:

1. No response at all -> :class:`~vaultgen.exceptions.TransportError`.
2. 200 or 204 -> the parsed body, even if it carries ``errors``.
3. A request path matching :data:`HEALTH_PATH_PATTERN` -> the parsed body.
   ``sys/health`` answers 429/473/501/503 for standby, performance standby,
   uninitialised and sealed nodes, and callers want that body.
4. Anything else -> :class:`~vaultgen.exceptions.DomainError` with the first
   ``errors`` entry, or ``Status <code>``.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Pattern

import httpx

from vaultgen.exceptions import DomainError, TransportError
from vaultgen.output import debug

HEALTH_PATH_PATTERN: Pattern[str] = re.compile(r"sys/health")

SUCCESS_STATUSES = frozenset({200, 204})


def interpret_response(
    response: Optional[httpx.Response],
    health_pattern: Pattern[str] = HEALTH_PATH_PATTERN,
) -> Any:
    """Return the body of a successful response or raise.

    Args:
        response: The full response envelope, including the originating
            request.
        health_pattern: Request paths matching this pattern never fail on
            status.

    Returns:
        The parsed body (``dict``, ``list``, text, or ``None``).

    Raises:
        TransportError: If *response* is ``None``.
        DomainError: On a non-success status outside the health exemption.
    """
    if response is None:
        raise TransportError("No response passed")

    status = response.status_code
    debug(f"status {status}")
    body = extract_response_data(response)

    if status in SUCCESS_STATUSES:
        return body

    if health_pattern.search(request_path(response)):
        return body

    if has_errors(body):
        message = str(body["errors"][0])
    else:
        message = f"Status {status}"
    raise DomainError(message, status_code=status, body=body)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Parses JSON first and falls back to raw text (Vault answers some errors
    from its HTTP layer in plain text). Returns ``None`` for an empty body.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text


def has_errors(body: Any) -> bool:
    """True when *body* is a mapping with a non-empty ``errors`` list."""
    if not isinstance(body, dict):
        return False
    errors = body.get("errors")
    return isinstance(errors, list) and len(errors) > 0


def request_path(response: httpx.Response) -> str:
    """Path and query of the request that produced *response* (``""`` if unknown)."""
    try:
        request = response.request
    except RuntimeError:
        return ""
    return request.url.raw_path.decode("ascii", errors="replace")
