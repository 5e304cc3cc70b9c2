"""Helpers for inspecting AWS errors raised by boto3.

``botocore.exceptions.ClientError`` carries the service error code and
message in ``err.response["Error"]``.  Connection failures raised by
botocore before a response exists are reported with the synthetic code
``RequestError`` so that callers can match them like service errors.
Poller exceptions that wrap an underlying error are unwrapped first.
"""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from aws_state_poller.core.constants import THROTTLING_ERROR_CODES

REQUEST_ERROR_CODE = "RequestError"


def _unwrap(err: BaseException | None) -> BaseException | None:
    """Follow ``cause`` / ``last_error`` links down to the provider error."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        if isinstance(err, (ClientError, BotoCoreError)):
            return err
        inner = getattr(err, "cause", None) or getattr(err, "last_error", None)
        if inner is None:
            return err
        err = inner
    return err


def error_code(err: BaseException | None) -> str:
    """Return the AWS error code of *err*, or ``""`` if it has none."""
    err = _unwrap(err)
    if isinstance(err, ClientError):
        return str(err.response.get("Error", {}).get("Code", ""))
    if isinstance(err, BotoConnectionError):
        return REQUEST_ERROR_CODE
    return ""


def error_message(err: BaseException | None) -> str:
    """Return the AWS error message of *err* (falls back to ``str(err)``)."""
    err = _unwrap(err)
    if err is None:
        return ""
    if isinstance(err, ClientError):
        return str(err.response.get("Error", {}).get("Message", ""))
    if isinstance(err, BotoConnectionError):
        return f"send request failed: {err}"
    return str(err)


def error_code_equals(err: BaseException | None, *codes: str) -> bool:
    """Return whether *err* carries one of *codes*."""
    if err is None:
        return False
    return error_code(err) in codes


def error_message_contains(err: BaseException | None, code: str, fragment: str) -> bool:
    """Return whether *err* has *code* and its message contains *fragment*.

    An empty *fragment* matches any message.
    """
    if not error_code_equals(err, code):
        return False
    return fragment in error_message(err)


def is_throttling(err: BaseException | None) -> bool:
    """Return whether *err* is a rate-limiting response."""
    if err is None:
        return False
    if error_code(err) in THROTTLING_ERROR_CODES:
        return True
    return "Throttling" in str(err)
