"""Retry driver and named waits.

- StateWaiter / wait_for_state: Poll a refresher until target, failure or timeout
- retry / retry_once_after_timeout: Retry an arbitrary operation
- waits: ``wait_*`` helpers for individual resource kinds
"""

from aws_state_poller.waiter.clock import SYSTEM_CLOCK, Clock, SystemClock
from aws_state_poller.waiter.driver import (
    Backoff,
    StateWaiter,
    is_retryable,
    retry,
    retry_once_after_timeout,
    retry_when_throttled,
    timed_out,
    wait_for_state,
)

__all__ = [
    "SYSTEM_CLOCK",
    "Backoff",
    "Clock",
    "StateWaiter",
    "SystemClock",
    "is_retryable",
    "retry",
    "retry_once_after_timeout",
    "retry_when_throttled",
    "timed_out",
    "wait_for_state",
]
