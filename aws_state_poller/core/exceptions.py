"""Unified poller exception taxonomy.

Every error raised by finders, reducers, the retry driver and the sweeper
inherits from ``PollerError`` and carries structured context fields, so
callers can make retry decisions and report the resource involved without
string parsing.

Taxonomy categories
-------------------
- ``NotFoundError``:       resource absent; success for deletion flows.
- ``RetryableError``:      transient condition (throttling), retried.
- ``NonRetryableError``:   any other API error; terminates a wait.
- ``WaitTimeoutError``:    deadline exceeded while still pending.
- ``WaitCancelledError``:  external cancellation observed.
- ``SkippableError``:      matches a known ignorable provider error.

Every exception exposes ``to_error_dict()`` for a stable structured
payload suitable for logging.
"""

from __future__ import annotations


class PollerError(Exception):
    """Base exception for all poller-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Component where the error occurred
            (e.g. ``"finder"``, ``"wait"``, ``"sweep"``).
        code: Machine-readable error code (e.g. ``"WAIT_TIMEOUT"``).
        retryable: Whether the retry driver should poll again.
        resource_id: Identifier of the resource involved, if known.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        resource_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.resource_id = resource_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, NotFoundError):
            return "not_found"
        if isinstance(self, WaitTimeoutError):
            return "timeout"
        if isinstance(self, WaitCancelledError):
            return "cancelled"
        if isinstance(self, SkippableError):
            return "skippable"
        if isinstance(self, RetryableError):
            return "retryable"
        if isinstance(self, NonRetryableError):
            return "non_retryable"
        return "retryable" if self.retryable else "non_retryable"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "resource_id": self.resource_id,
        }


# ---------------------------------------------------------------------------
# Category classes
# ---------------------------------------------------------------------------


class NotFoundError(PollerError):
    """The resource does not exist (API not-found code or empty result).

    Attributes:
        last_error: The underlying API error, if any.
        last_request: The request parameters that produced the result.
    """

    default_stage = "finder"
    default_code = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        message: str = "couldn't find resource",
        *,
        last_error: BaseException | None = None,
        last_request: object = None,
        **kwargs: object,
    ) -> None:
        self.last_error = last_error
        self.last_request = last_request
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

    def __str__(self) -> str:
        if self.last_error is not None:
            return f"{self.message}: {self.last_error}"
        return self.message


class RetryableError(PollerError):
    """Transient failure that should drive another attempt."""

    default_code = "RETRYABLE"

    def __init__(
        self,
        message: str = "",
        *,
        cause: BaseException | None = None,
        **kwargs: object,
    ) -> None:
        self.cause = cause
        if not message and cause is not None:
            message = str(cause)
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class NonRetryableError(PollerError):
    """Unrecoverable failure. Terminates a wait immediately."""

    default_code = "NON_RETRYABLE"

    def __init__(
        self,
        message: str = "",
        *,
        cause: BaseException | None = None,
        **kwargs: object,
    ) -> None:
        self.cause = cause
        if not message and cause is not None:
            message = str(cause)
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class UnexpectedStateError(NonRetryableError):
    """A poll produced a status in the failure set or outside the pending set.

    Attributes:
        status: The status that ended the wait.
        expected: The target statuses the caller was waiting for.
    """

    default_stage = "wait"
    default_code = "UNEXPECTED_STATE"

    def __init__(
        self,
        status: str,
        expected: tuple[str, ...] = (),
        *,
        cause: BaseException | None = None,
        resource_id: str = "",
    ) -> None:
        self.status = status
        self.expected = expected
        message = f"unexpected state {status!r}, wanted target {list(expected)!r}"
        if cause is not None:
            message = f"{message}. last error: {cause}"
        super().__init__(message, cause=cause, resource_id=resource_id)


class TooManyResultsError(NonRetryableError):
    """A lookup that must match exactly one resource matched several."""

    default_stage = "finder"
    default_code = "TOO_MANY_RESULTS"

    def __init__(self, count: int, *, last_request: object = None) -> None:
        self.count = count
        self.last_request = last_request
        super().__init__(f"too many results: wanted 1, got {count}")


class WaitTimeoutError(PollerError):
    """The deadline passed while the resource was still pending.

    Distinct from ``NonRetryableError`` so that a caller may choose one
    final manual attempt of the underlying operation.

    Attributes:
        timeout_s: The overall timeout that elapsed.
        last_status: The last status observed (empty if never polled).
        last_error: The last retryable error observed, if any.
    """

    default_stage = "wait"
    default_code = "WAIT_TIMEOUT"

    def __init__(
        self,
        timeout_s: float,
        *,
        last_status: str = "",
        last_error: BaseException | None = None,
        expected: tuple[str, ...] = (),
        resource_id: str = "",
    ) -> None:
        self.timeout_s = timeout_s
        self.last_status = last_status
        self.last_error = last_error
        self.expected = expected
        message = f"timeout while waiting for state to become {list(expected)!r}"
        if last_status:
            message = f"{message} (last state: {last_status!r}, timeout: {timeout_s:g}s)"
        else:
            message = f"{message} (timeout: {timeout_s:g}s)"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message, retryable=False, resource_id=resource_id)


class WaitCancelledError(PollerError):
    """The wait was aborted through its cancellation signal."""

    default_stage = "wait"
    default_code = "WAIT_CANCELLED"


class SkippableError(PollerError):
    """An error matching the table of ignorable provider error signatures.

    Attributes:
        cause: The original provider error.
        error_code: The skip-table entry's error code.
        message_fragment: The skip-table entry's message substring.
    """

    default_stage = "sweep"
    default_code = "SWEEP_SKIPPED"

    def __init__(
        self,
        cause: BaseException,
        *,
        error_code: str,
        message_fragment: str = "",
        resource_id: str = "",
    ) -> None:
        self.cause = cause
        self.error_code = error_code
        self.message_fragment = message_fragment
        super().__init__(
            f"skipping: {cause}",
            retryable=False,
            resource_id=resource_id,
        )


class EmptyResultError(NotFoundError):
    """A describe call succeeded but returned no resource.

    Reducers report this according to their ``EmptyResultPolicy`` instead
    of always treating it as not found.
    """

    default_code = "EMPTY_RESULT"

    def __init__(self, message: str = "empty result", *, last_request: object = None) -> None:
        super().__init__(message, last_request=last_request)
