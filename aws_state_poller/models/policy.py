"""Retry policy and wait result models for the retry driver.

- ``RetryPolicy``: delays, jitter, interval floor and overall timeout
- ``WaitState``: the driver's state machine states
- ``WaitResult``: what a successful wait returns
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from aws_state_poller.core.constants import DEFAULT_NOT_FOUND_CHECKS, DEFAULT_WAIT_TIMEOUT_S
from aws_state_poller.models._validation import check_min, check_positive
from aws_state_poller.models.state import RawResourceState, Status


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Immutable timing configuration for one wait or retry loop.

    All durations are in seconds.

    Attributes:
        timeout_s: Overall time budget, including the initial delay.
        delay_s: Wait before the first attempt.
        delay_jitter_s: Upper bound of a uniform random addition to ``delay_s``.
        min_timeout_s: Floor applied to every wait between attempts.
        poll_interval_s: Fixed wait between attempts.  ``0`` selects the
            exponential backoff (0.1 s doubling, capped at 10 s).
        not_found_checks: Consecutive not-found polls tolerated while
            waiting for a non-deletion target.
        continuous_target_occurrence: Consecutive target polls required
            before the wait succeeds.
    """

    timeout_s: float = DEFAULT_WAIT_TIMEOUT_S
    delay_s: float = 0.0
    delay_jitter_s: float = 0.0
    min_timeout_s: float = 0.0
    poll_interval_s: float = 0.0
    not_found_checks: int = DEFAULT_NOT_FOUND_CHECKS
    continuous_target_occurrence: int = 1

    def __post_init__(self) -> None:
        check_positive("RetryPolicy", "timeout_s", self.timeout_s)
        check_min("RetryPolicy", "delay_s", self.delay_s, 0)
        check_min("RetryPolicy", "delay_jitter_s", self.delay_jitter_s, 0)
        check_min("RetryPolicy", "min_timeout_s", self.min_timeout_s, 0)
        check_min("RetryPolicy", "poll_interval_s", self.poll_interval_s, 0)
        check_min("RetryPolicy", "not_found_checks", self.not_found_checks, 1)
        check_min(
            "RetryPolicy",
            "continuous_target_occurrence",
            self.continuous_target_occurrence,
            1,
        )


class WaitState(enum.Enum):
    """State of the retry driver.

    Values:
        PENDING:   Still polling.
        TARGET:    Reached a target status (terminal success).
        FAILURE:   Reached a failure status or a fatal error.
        TIMED_OUT: The overall timeout elapsed while pending.
    """

    PENDING = "pending"
    TARGET = "target"
    FAILURE = "failure"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True, slots=True)
class WaitResult:
    """Outcome of a successful wait.

    Attributes:
        payload: The last fetched payload (``None`` only for deletion waits).
        status: The target status that ended the wait.
        polls: Number of poll attempts made.
        elapsed_s: Time spent waiting, including the initial delay.
    """

    payload: RawResourceState | None
    status: Status
    polls: int
    elapsed_s: float
    state: WaitState = WaitState.TARGET
