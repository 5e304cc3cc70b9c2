"""Tests for the poller exception taxonomy.

Validates:
- PollerError structured attributes and ``to_error_dict()`` keys
- Category classification per concrete class
- Message formatting of not-found, unexpected-state and timeout errors
- Every domain error is a PollerError subclass
"""

from __future__ import annotations

from typing import ClassVar

from botocore.exceptions import ClientError

from aws_state_poller.core.config import ConfigValidationError
from aws_state_poller.core.exceptions import (
    EmptyResultError,
    NonRetryableError,
    NotFoundError,
    PollerError,
    RetryableError,
    SkippableError,
    TooManyResultsError,
    UnexpectedStateError,
    WaitCancelledError,
    WaitTimeoutError,
)
from aws_state_poller.models import ModelValidationError
from aws_state_poller.reducers.factory import UnknownReducerError
from aws_state_poller.sweep.orchestrator import SweepError


def _throttled() -> ClientError:
    return ClientError({"Error": {"Code": "Throttling", "Message": "Rate exceeded"}}, "Describe")


class TestPollerErrorBase:
    """PollerError base class behavior."""

    def test_default_attributes(self) -> None:
        err = PollerError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.resource_id == ""

    def test_custom_attributes(self) -> None:
        err = PollerError(
            "fail",
            stage="wait",
            code="X",
            retryable=True,
            resource_id="sg-123",
        )
        assert err.stage == "wait"
        assert err.code == "X"
        assert err.retryable is True
        assert err.resource_id == "sg-123"

    def test_str_is_message(self) -> None:
        assert str(PollerError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        d = PollerError("x", stage="s", code="C", retryable=True, resource_id="id").to_error_dict()
        assert set(d.keys()) == {
            "category",
            "code",
            "stage",
            "message",
            "retryable",
            "resource_id",
        }
        assert d["category"] == "retryable"

    def test_plain_error_is_non_retryable_category(self) -> None:
        assert PollerError("x").category == "non_retryable"


class TestCategories:
    """Each concrete class maps to exactly one category."""

    CASES: ClassVar[list[tuple[PollerError, str]]] = [
        (NotFoundError(), "not_found"),
        (EmptyResultError(), "not_found"),
        (WaitTimeoutError(10), "timeout"),
        (WaitCancelledError("stop"), "cancelled"),
        (SkippableError(ValueError("x"), error_code="UnsupportedOperation"), "skippable"),
        (RetryableError("slow down"), "retryable"),
        (NonRetryableError("bad"), "non_retryable"),
        (UnexpectedStateError("failed"), "non_retryable"),
        (TooManyResultsError(2), "non_retryable"),
    ]

    def test_categories(self) -> None:
        for err, expected in self.CASES:
            assert err.category == expected, type(err).__name__

    def test_retryable_flag_follows_class(self) -> None:
        assert RetryableError("x").retryable is True
        assert NonRetryableError("x").retryable is False
        assert NotFoundError().retryable is False


class TestNotFoundError:
    def test_default_message(self) -> None:
        assert str(NotFoundError()) == "couldn't find resource"

    def test_str_includes_last_error(self) -> None:
        err = NotFoundError(last_error=ValueError("InvalidGroup.NotFound"))
        assert str(err) == "couldn't find resource: InvalidGroup.NotFound"

    def test_carries_last_request(self) -> None:
        err = NotFoundError(last_request={"GroupIds": ["sg-1"]})
        assert err.last_request == {"GroupIds": ["sg-1"]}

    def test_empty_result_is_not_found(self) -> None:
        err = EmptyResultError(last_request={"Ids": ["x"]})
        assert isinstance(err, NotFoundError)
        assert err.code == "EMPTY_RESULT"
        assert str(err) == "empty result"


class TestWrappingErrors:
    def test_retryable_message_from_cause(self) -> None:
        cause = _throttled()
        err = RetryableError(cause=cause)
        assert err.cause is cause
        assert err.message == str(cause)

    def test_non_retryable_message_from_cause(self) -> None:
        err = NonRetryableError(cause=ValueError("AccessDenied"))
        assert err.message == "AccessDenied"

    def test_explicit_message_wins(self) -> None:
        err = NonRetryableError("custom", cause=ValueError("inner"))
        assert err.message == "custom"


class TestUnexpectedStateError:
    def test_message(self) -> None:
        err = UnexpectedStateError("failed", ("available",))
        assert err.status == "failed"
        assert err.expected == ("available",)
        assert str(err) == "unexpected state 'failed', wanted target ['available']"

    def test_message_with_cause(self) -> None:
        err = UnexpectedStateError("failed", ("available",), cause=ValueError("quota"))
        assert str(err).endswith("last error: quota")

    def test_is_non_retryable(self) -> None:
        assert isinstance(UnexpectedStateError("x"), NonRetryableError)
        assert UnexpectedStateError("x").code == "UNEXPECTED_STATE"


class TestTooManyResultsError:
    def test_message(self) -> None:
        err = TooManyResultsError(3, last_request={"Ids": ["a"]})
        assert str(err) == "too many results: wanted 1, got 3"
        assert err.count == 3


class TestWaitTimeoutError:
    def test_message_with_last_status(self) -> None:
        err = WaitTimeoutError(300, last_status="pending", expected=("available",))
        assert str(err) == (
            "timeout while waiting for state to become ['available'] "
            "(last state: 'pending', timeout: 300s)"
        )

    def test_message_without_last_status(self) -> None:
        err = WaitTimeoutError(1.5)
        assert str(err) == "timeout while waiting for state to become [] (timeout: 1.5s)"

    def test_message_includes_last_error(self) -> None:
        err = WaitTimeoutError(10, last_status="deleting", last_error=ValueError("Throttling"))
        assert str(err).endswith(": Throttling")
        assert isinstance(err.last_error, ValueError)

    def test_is_distinct_from_non_retryable(self) -> None:
        assert not isinstance(WaitTimeoutError(1), NonRetryableError)


class TestSkippableError:
    def test_wraps_cause(self) -> None:
        cause = ValueError("AccessDeniedException")
        err = SkippableError(cause, error_code="AccessDeniedException", resource_id="r-1")
        assert err.cause is cause
        assert err.error_code == "AccessDeniedException"
        assert err.message_fragment == ""
        assert str(err) == "skipping: AccessDeniedException"


class TestAllSubclassPollerError:
    """Domain errors from every package share the base class."""

    def test_subclasses(self) -> None:
        for cls in (
            ConfigValidationError,
            ModelValidationError,
            UnknownReducerError,
            SweepError,
            NotFoundError,
            WaitTimeoutError,
        ):
            assert issubclass(cls, PollerError), cls.__name__

    def test_model_validation_error_is_value_error(self) -> None:
        assert issubclass(ModelValidationError, ValueError)
