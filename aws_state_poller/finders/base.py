"""Finder building blocks.

A finder issues exactly one describe call (or one paginated scan).  The
service's "does not exist" errors become ``NotFoundError``; an empty
result becomes ``EmptyResultError`` (a ``NotFoundError`` subclass that
reducers report according to their ``EmptyResultPolicy``).  Any other
error propagates unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from botocore.exceptions import ClientError

from aws_state_poller.core.exceptions import EmptyResultError, NotFoundError, TooManyResultsError
from aws_state_poller.utils.awserr import error_code_equals, error_message_contains

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence


def describe(
    operation: Callable[..., dict[str, Any]],
    request: dict[str, Any],
    *,
    not_found_codes: Sequence[str] = (),
    not_found_messages: Sequence[tuple[str, str]] = (),
) -> dict[str, Any]:
    """Call *operation* with *request*, mapping not-found errors.

    Args:
        operation: A bound boto3 client method.
        request: Keyword arguments for the call.
        not_found_codes: Error codes meaning the resource does not exist.
        not_found_messages: ``(code, message fragment)`` pairs with the
            same meaning, for services that reuse a generic code.

    Returns:
        The raw response.

    Raises:
        NotFoundError: On a matching error code or message.
        botocore.exceptions.ClientError: On any other API error.
    """
    try:
        return operation(**request)
    except ClientError as exc:
        if error_code_equals(exc, *not_found_codes):
            raise NotFoundError(last_error=exc, last_request=request) from exc
        for code, fragment in not_found_messages:
            if error_message_contains(exc, code, fragment):
                raise NotFoundError(last_error=exc, last_request=request) from exc
        raise


def require(value: Any, request: object) -> Any:
    """Return *value*, or raise ``EmptyResultError`` if it is empty."""
    if not value:
        raise EmptyResultError(last_request=request)
    return value


def single(items: Iterable[dict[str, Any] | None], request: object) -> dict[str, Any]:
    """Return the only non-empty item of *items*.

    Raises:
        EmptyResultError: If there are no items.
        TooManyResultsError: If there is more than one.
    """
    found = [item for item in items if item]
    if not found:
        raise EmptyResultError(last_request=request)
    if len(found) > 1:
        raise TooManyResultsError(len(found), last_request=request)
    return found[0]
