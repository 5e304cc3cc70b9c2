"""Retry driver: poll until a target status, a failure status or a timeout.

``StateWaiter`` repeatedly invokes a refresher (usually a status reducer)
and compares each ``PollOutcome`` against caller-supplied status sets:

- status in ``target``   → success, the last payload is returned
- status in ``failure``  → ``UnexpectedStateError``, no further polls
- throttling error       → keep polling
- any other error        → ``NonRetryableError``, no further polls
- deadline passed        → ``WaitTimeoutError``
- cancellation signalled → ``WaitCancelledError``

Timing follows ``RetryPolicy``: an initial delay plus jitter, then either a
fixed poll interval or an exponential backoff (0.1 s doubling up to 10 s),
never below ``min_timeout_s``.  Sleeps are clipped to the remaining
budget, so a wait that never converges ends at or after ``timeout_s`` and
within one interval of it.

``retry`` applies the same timing to an arbitrary operation that signals
"try again" by raising ``RetryableError`` (or a throttling ``ClientError``).
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from botocore.exceptions import ClientError

from aws_state_poller.core.constants import INITIAL_BACKOFF_S, MAX_BACKOFF_S
from aws_state_poller.core.exceptions import (
    NonRetryableError,
    NotFoundError,
    RetryableError,
    UnexpectedStateError,
    WaitCancelledError,
    WaitTimeoutError,
)
from aws_state_poller.models.policy import RetryPolicy, WaitResult, WaitState
from aws_state_poller.models.state import CommonStatus
from aws_state_poller.utils.awserr import is_throttling
from aws_state_poller.waiter.clock import SYSTEM_CLOCK, Clock

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from aws_state_poller.models.state import Refresher

logger = logging.getLogger("aws_state_poller.waiter.driver")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------


class Backoff:
    """Computes the waits of one retry loop from a ``RetryPolicy``."""

    def __init__(self, policy: RetryPolicy, rng: random.Random | None = None) -> None:
        self._policy = policy
        self._rng = rng or random.Random()
        self._next = INITIAL_BACKOFF_S

    def initial_delay(self) -> float:
        jitter = 0.0
        if self._policy.delay_jitter_s > 0:
            jitter = self._rng.uniform(0, self._policy.delay_jitter_s)
        return self._policy.delay_s + jitter

    def next_wait(self) -> float:
        if self._policy.poll_interval_s > 0:
            wait = self._policy.poll_interval_s
        else:
            wait = self._next
            self._next = min(self._next * 2, MAX_BACKOFF_S)
        return max(wait, self._policy.min_timeout_s)


class _Deadline:
    """Tracks the time budget of one loop and performs clipped sleeps."""

    def __init__(
        self,
        policy: RetryPolicy,
        clock: Clock,
        cancel: threading.Event | None,
        resource_id: str,
    ) -> None:
        self.clock = clock
        self.cancel = cancel
        self.resource_id = resource_id
        self.start = clock.monotonic()
        self.at = self.start + policy.timeout_s

    @property
    def elapsed(self) -> float:
        return self.clock.monotonic() - self.start

    @property
    def expired(self) -> bool:
        return self.clock.monotonic() >= self.at

    def check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise WaitCancelledError(
                f"wait cancelled after {self.elapsed:.1f}s",
                resource_id=self.resource_id,
            )

    def sleep(self, seconds: float) -> None:
        seconds = min(seconds, max(self.at - self.clock.monotonic(), 0.0))
        if seconds > 0 and self.clock.sleep(seconds, self.cancel):
            self.check_cancelled()
        self.check_cancelled()


def is_retryable(err: BaseException | None) -> bool:
    """Return whether *err* should drive another attempt."""
    if isinstance(err, RetryableError):
        return True
    if isinstance(err, NonRetryableError):
        return False
    return is_throttling(err)


# ---------------------------------------------------------------------------
# State waiter
# ---------------------------------------------------------------------------


@dataclass
class StateWaiter:
    """Waits for a refresher to report one of the target statuses.

    Attributes:
        refresh: Zero-argument callable returning a ``PollOutcome``.
        target: Statuses meaning "done".  Empty means "wait until gone".
        pending: Statuses meaning "keep waiting".  When non-empty, any
            status outside ``pending``/``target``/``failure`` fails the wait.
        failure: Statuses meaning "failed".
        policy: Timing configuration.
        resource_id: Identifier used in logs and error messages.
        cancel: Optional cancellation signal.
        clock: Time source (tests substitute a fake clock).
        rng: Random source for the initial-delay jitter.
        state: Current driver state, updated as the wait progresses.
    """

    refresh: Refresher
    target: Collection[str] = ()
    pending: Collection[str] = ()
    failure: Collection[str] = ()
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    resource_id: str = ""
    cancel: threading.Event | None = None
    clock: Clock = SYSTEM_CLOCK
    rng: random.Random | None = None
    state: WaitState = field(default=WaitState.PENDING, init=False)

    def _fail(self, exc: BaseException) -> BaseException:
        self.state = WaitState.FAILURE
        return exc

    def wait(self) -> WaitResult:
        """Poll until a terminal state is reached.

        Returns:
            ``WaitResult`` carrying the last payload.  The payload is
            ``None`` only when the wait ended because the resource is gone
            and ``target`` is empty or contains ``NotFound``.

        Raises:
            UnexpectedStateError: A failure status, or a status outside a
                non-empty pending set.
            NonRetryableError: The refresher returned a non-retryable error.
            NotFoundError: The resource stayed absent for more than
                ``policy.not_found_checks`` polls while a target was expected.
            WaitTimeoutError: ``policy.timeout_s`` elapsed.
            WaitCancelledError: ``cancel`` was set.
        """
        expected = tuple(str(t) for t in self.target)
        backoff = Backoff(self.policy, self.rng)
        deadline = _Deadline(self.policy, self.clock, self.cancel, self.resource_id)
        self.state = WaitState.PENDING

        polls = 0
        not_found_ticks = 0
        target_ticks = 0
        last_status = ""
        last_error: BaseException | None = None

        logger.debug(
            "wait started | id=%s | target=%s | timeout=%.0fs",
            self.resource_id,
            expected,
            self.policy.timeout_s,
        )
        deadline.sleep(backoff.initial_delay())

        while True:
            deadline.check_cancelled()
            polls += 1
            outcome = self.refresh()
            status = outcome.status
            last_status = status

            if outcome.error is not None:
                if not is_retryable(outcome.error):
                    if status in self.failure:
                        raise self._fail(
                            UnexpectedStateError(
                                status, expected, cause=outcome.error, resource_id=self.resource_id
                            )
                        )
                    if isinstance(outcome.error, NonRetryableError):
                        raise self._fail(outcome.error)
                    raise self._fail(
                        NonRetryableError(cause=outcome.error, resource_id=self.resource_id)
                    ) from outcome.error
                last_error = outcome.error
                target_ticks = 0
                logger.warning(
                    "poll throttled, retrying | id=%s | poll=%d | error=%s",
                    self.resource_id,
                    polls,
                    outcome.error,
                )

            elif status in self.failure:
                raise self._fail(
                    UnexpectedStateError(
                        status, expected, cause=last_error, resource_id=self.resource_id
                    )
                )

            elif outcome.is_not_found:
                target_ticks = 0
                if not self.target or CommonStatus.NOT_FOUND in self.target:
                    return self._succeed(None, status, polls, deadline)
                not_found_ticks += 1
                if not_found_ticks > self.policy.not_found_checks:
                    raise self._fail(
                        NotFoundError(
                            f"couldn't find resource ({not_found_ticks} retries)",
                            last_error=last_error,
                            resource_id=self.resource_id,
                        )
                    )

            elif outcome.payload is None:
                # Gone with a provider status (e.g. "disassociated"): a wait
                # with no target is satisfied.  Otherwise undetermined.
                target_ticks = 0
                if not self.target:
                    return self._succeed(None, status, polls, deadline)

            elif status in self.target:
                not_found_ticks = 0
                target_ticks += 1
                if target_ticks >= self.policy.continuous_target_occurrence:
                    return self._succeed(outcome.payload, status, polls, deadline)

            else:
                not_found_ticks = 0
                target_ticks = 0
                if self.pending and status not in self.pending:
                    raise self._fail(
                        UnexpectedStateError(
                            status, expected, cause=last_error, resource_id=self.resource_id
                        )
                    )

            logger.debug(
                "poll | id=%s | poll=%d | status=%s | elapsed=%.1fs",
                self.resource_id,
                polls,
                status,
                deadline.elapsed,
            )

            if deadline.expired:
                self.state = WaitState.TIMED_OUT
                logger.warning(
                    "wait timed out | id=%s | polls=%d | last_status=%s | timeout=%.0fs",
                    self.resource_id,
                    polls,
                    last_status,
                    self.policy.timeout_s,
                )
                raise WaitTimeoutError(
                    self.policy.timeout_s,
                    last_status=last_status,
                    last_error=last_error,
                    expected=expected,
                    resource_id=self.resource_id,
                )

            deadline.sleep(backoff.next_wait())

    def _succeed(
        self,
        payload: dict | None,
        status: str,
        polls: int,
        deadline: _Deadline,
    ) -> WaitResult:
        self.state = WaitState.TARGET
        elapsed = deadline.elapsed
        logger.info(
            "wait completed | id=%s | status=%s | polls=%d | elapsed=%.1fs",
            self.resource_id,
            status,
            polls,
            elapsed,
        )
        return WaitResult(payload=payload, status=status, polls=polls, elapsed_s=elapsed)


def wait_for_state(
    refresh: Refresher,
    *,
    target: Collection[str],
    pending: Collection[str] = (),
    failure: Collection[str] = (),
    policy: RetryPolicy | None = None,
    resource_id: str = "",
    cancel: threading.Event | None = None,
    clock: Clock = SYSTEM_CLOCK,
) -> WaitResult:
    """Build a ``StateWaiter`` and run it.  See ``StateWaiter.wait``."""
    return StateWaiter(
        refresh=refresh,
        target=target,
        pending=pending,
        failure=failure,
        policy=policy or RetryPolicy(),
        resource_id=resource_id,
        cancel=cancel,
        clock=clock,
    ).wait()


# ---------------------------------------------------------------------------
# Generic retry
# ---------------------------------------------------------------------------


def retry(
    operation: Callable[[], T],
    policy: RetryPolicy | None = None,
    *,
    resource_id: str = "",
    cancel: threading.Event | None = None,
    clock: Clock = SYSTEM_CLOCK,
    rng: random.Random | None = None,
) -> T:
    """Call *operation* until it succeeds, fails fatally, or time runs out.

    *operation* asks for another attempt by raising ``RetryableError``;
    throttling ``ClientError``s are retried as well.  Any other exception
    propagates immediately.

    Raises:
        WaitTimeoutError: The budget elapsed; ``last_error`` holds the
            last retryable error.
        WaitCancelledError: ``cancel`` was set.
    """
    policy = policy or RetryPolicy()
    backoff = Backoff(policy, rng)
    deadline = _Deadline(policy, clock, cancel, resource_id)
    attempts = 0
    deadline.sleep(backoff.initial_delay())

    while True:
        deadline.check_cancelled()
        attempts += 1
        try:
            return operation()
        except RetryableError as exc:
            last_error: BaseException = exc.cause or exc
        except ClientError as exc:
            if not is_throttling(exc):
                raise
            last_error = exc

        logger.warning(
            "retrying | id=%s | attempt=%d | error=%s",
            resource_id,
            attempts,
            last_error,
        )
        if deadline.expired:
            raise WaitTimeoutError(
                policy.timeout_s,
                last_error=last_error,
                resource_id=resource_id,
            ) from last_error
        deadline.sleep(backoff.next_wait())


def retry_when_throttled(
    operation: Callable[[], T],
    timeout_s: float,
    **kwargs: object,
) -> T:
    """Retry *operation* on throttling errors only, for up to *timeout_s*."""
    return retry(operation, RetryPolicy(timeout_s=timeout_s), **kwargs)  # type: ignore[arg-type]


def retry_once_after_timeout(
    operation: Callable[[], T],
    policy: RetryPolicy | None = None,
    *,
    final: Callable[[], T] | None = None,
    **kwargs: object,
) -> T:
    """``retry`` *operation*; on timeout make exactly one more plain attempt.

    The final attempt calls *final* (default: *operation*).  It is not
    retried and its errors propagate unchanged.
    """
    try:
        return retry(operation, policy, **kwargs)  # type: ignore[arg-type]
    except WaitTimeoutError as exc:
        logger.info(
            "retry timed out, making final attempt | id=%s | error=%s",
            exc.resource_id,
            exc.last_error,
        )
        return (final or operation)()


def timed_out(err: BaseException | None) -> bool:
    """Return whether *err* is a retry-driver timeout."""
    return isinstance(err, WaitTimeoutError)
