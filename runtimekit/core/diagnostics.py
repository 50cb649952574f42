"""
Failure classification for remote resolution and download errors.

classify() maps an exception onto one of a closed set of diagnostic
reports. Rules are checked in order and the first match wins:

1. NetworkError     - timed out, refused, or unresolved host
2. PermissionDenied - HTTP 403
   RateLimited      - HTTP 429
   HttpError        - any other HTTP status
3. AggregateError   - exception group, one attempt per sub-exception
4. MultiError       - exception carrying an ``errors`` list
5. UnknownError     - anything else, with a URL hint from the message

Classification never alters the exception; callers log the report and
re-raise the original error.

Example:
    >>> try:
    ...     fetch_json(url)
    ... except Exception as error:
    ...     log_diagnostics(classify(error))
    ...     raise
"""

import errno
import logging
import re
import socket
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

TIMED_OUT = "ETIMEDOUT"
CONNECTION_REFUSED = "ECONNREFUSED"
NAME_NOT_RESOLVED = "ENOTFOUND"

NETWORK_CODES = {TIMED_OUT, CONNECTION_REFUSED, NAME_NOT_RESOLVED, "EAI_AGAIN"}

_ERRNO_CODES = {
    errno.ETIMEDOUT: TIMED_OUT,
    errno.ECONNREFUSED: CONNECTION_REFUSED,
}

_URL_PATTERN = re.compile(r"https?://[^\s'\"<>]+")

# Guards against cyclic or very deep exception chains
_MAX_CHAIN_DEPTH = 8


# ============================================================================
# Reports
# ============================================================================


@dataclass(frozen=True)
class SubFailure:
    """One constituent failure of an aggregate or multi-error."""

    message: str
    code: Optional[str] = None
    address: Optional[str] = None
    port: Optional[int] = None


@dataclass(frozen=True)
class DiagnosticReport:
    """Base class for all diagnostic categories."""

    message: str


@dataclass(frozen=True)
class NetworkError(DiagnosticReport):
    code: str = TIMED_OUT
    address: Optional[str] = None
    port: Optional[int] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class PermissionDenied(DiagnosticReport):
    status: int = 403


@dataclass(frozen=True)
class RateLimited(DiagnosticReport):
    status: int = 429


@dataclass(frozen=True)
class HttpError(DiagnosticReport):
    status: int = 0


@dataclass(frozen=True)
class AggregateError(DiagnosticReport):
    attempts: Tuple[SubFailure, ...] = ()


@dataclass(frozen=True)
class MultiError(DiagnosticReport):
    errors: Tuple[SubFailure, ...] = ()


@dataclass(frozen=True)
class UnknownError(DiagnosticReport):
    url: Optional[str] = None


# ============================================================================
# Classification
# ============================================================================


def classify(error: BaseException) -> DiagnosticReport:
    """
    Derive a diagnostic report for a failure.

    Args:
        error: Exception raised by a remote resolution or download

    Returns:
        The first matching DiagnosticReport variant
    """
    message = _message(error)

    code = network_code(error)
    if code is not None:
        address, port = endpoint(error)
        timeout = getattr(error, "timeout", None)
        return NetworkError(
            message=message,
            code=code,
            address=address,
            port=port,
            timeout=timeout if isinstance(timeout, (int, float)) else None,
        )

    status = http_status(error)
    if status is not None:
        if status == 403:
            return PermissionDenied(message=message)
        if status == 429:
            return RateLimited(message=message)
        return HttpError(message=message, status=status)

    if isinstance(error, BaseExceptionGroup):
        return AggregateError(
            message=message,
            attempts=tuple(_sub_failure(sub) for sub in error.exceptions),
        )

    errors = getattr(error, "errors", None)
    if isinstance(errors, (list, tuple)) and errors:
        return MultiError(
            message=message, errors=tuple(_sub_failure(sub) for sub in errors)
        )

    return UnknownError(message=message, url=extract_url(message))


def network_code(error: BaseException) -> Optional[str]:
    """
    Find a network-level failure code on an error or its causes.

    Returns:
        'ETIMEDOUT', 'ECONNREFUSED', 'ENOTFOUND' (or another entry of
        NETWORK_CODES), or None
    """
    for candidate in _chain(error):
        code = getattr(candidate, "code", None)
        if isinstance(code, str) and code in NETWORK_CODES:
            return code
        if isinstance(candidate, socket.gaierror):
            return NAME_NOT_RESOLVED
        if isinstance(candidate, OSError) and candidate.errno in _ERRNO_CODES:
            return _ERRNO_CODES[candidate.errno]
        if isinstance(candidate, (TimeoutError, requests.exceptions.Timeout)):
            return TIMED_OUT
    return None


def http_status(error: BaseException) -> Optional[int]:
    """Return the HTTP status carried by a transport-level HTTP failure."""
    if isinstance(error, requests.HTTPError) and error.response is not None:
        return error.response.status_code

    status = getattr(error, "status_code", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def endpoint(error: BaseException) -> Tuple[Optional[str], Optional[int]]:
    """
    Extract the remote address and port a failure refers to, if known.

    Explicit ``address``/``port`` attributes win over the request URL.
    """
    address = getattr(error, "address", None)
    port = getattr(error, "port", None)
    if address or port:
        return address, port

    request = getattr(error, "request", None)
    url = getattr(request, "url", None)
    if isinstance(url, str):
        parsed = urlparse(url)
        default_port = {"https": 443, "http": 80}.get(parsed.scheme)
        return parsed.hostname, parsed.port or default_port

    return None, None


def extract_url(message: str) -> Optional[str]:
    """Best-effort extraction of a URL embedded in an error message."""
    match = _URL_PATTERN.search(message)
    if not match:
        return None
    return match.group(0).rstrip(").,;:")


def _sub_failure(error: BaseException) -> SubFailure:
    code = network_code(error)
    if code is None:
        raw_code = getattr(error, "code", None)
        code = str(raw_code) if raw_code is not None else None
    address, port = endpoint(error)
    return SubFailure(message=_message(error), code=code, address=address, port=port)


def _message(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _chain(error: BaseException) -> Iterator[BaseException]:
    """
    Walk an exception and the exceptions it was raised from or wraps.

    Only explicit causes are followed; __context__ merely records what was
    being handled when the error was raised.
    """
    seen = set()
    pending = [error]
    while pending and len(seen) < _MAX_CHAIN_DEPTH:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        linked = [current.__cause__, getattr(current, "reason", None)]
        linked.extend(arg for arg in current.args if isinstance(arg, BaseException))
        pending.extend(item for item in linked if isinstance(item, BaseException))


# ============================================================================
# Reporting
# ============================================================================


_NETWORK_HINTS = {
    TIMED_OUT: "Connection timed out. Check the endpoint or network stability.",
    CONNECTION_REFUSED: "Connection refused. Check that the endpoint is reachable.",
    NAME_NOT_RESOLVED: "Host name could not be resolved. Check DNS settings.",
}


def log_diagnostics(
    report: DiagnosticReport, log: Optional[logging.Logger] = None
) -> None:
    """
    Log a diagnostic report.

    RateLimited is logged as a warning; every other category as an error.
    """
    log = log or logger

    if isinstance(report, PermissionDenied):
        log.error("HTTP 403: Permission denied or access restricted.")
    elif isinstance(report, RateLimited):
        log.warning("HTTP 429: Rate limit exceeded. Please retry later.")
    elif isinstance(report, HttpError):
        log.error(f"HTTP {report.status}: {report.message}")
    elif isinstance(report, NetworkError):
        log.error(f"Runtime setup failed due to network issue: {report.message}")
        log.error(_NETWORK_HINTS.get(report.code, f"Network error {report.code}."))
        if report.address or report.port:
            log.error(f"Failed to connect to endpoint: {report.address}:{report.port}")
        if report.timeout is not None:
            log.error(f"Configured timeout: {report.timeout}s")
    elif isinstance(report, (AggregateError, MultiError)):
        failures = (
            report.attempts if isinstance(report, AggregateError) else report.errors
        )
        log.error(f"Runtime setup failed: {report.message}")
        log.error("The error contains multiple sub-errors:")
        for index, failure in enumerate(failures, start=1):
            log.error(f"Sub-error {index}:")
            log.error(f"  Message: {failure.message}")
            log.error(f"  Code: {failure.code or 'No sub-error code available'}")
            if failure.address or failure.port:
                log.error(f"  Endpoint: {failure.address}:{failure.port}")
    else:
        log.error(f"Runtime setup failed: {report.message}")
        url = getattr(report, "url", None)
        if url:
            log.error(f"Failing URL: {url}")


__all__ = [
    "SubFailure",
    "DiagnosticReport",
    "NetworkError",
    "PermissionDenied",
    "RateLimited",
    "HttpError",
    "AggregateError",
    "MultiError",
    "UnknownError",
    "classify",
    "network_code",
    "http_status",
    "endpoint",
    "extract_url",
    "log_diagnostics",
]
