"""Shared pytest fixtures for the aws_state_poller test suite."""

from __future__ import annotations

import threading
from collections.abc import Callable

import pytest
from botocore.exceptions import ClientError

# ---------------------------------------------------------------------------
# AWS error fixtures
# ---------------------------------------------------------------------------


def make_client_error(
    code: str,
    message: str = "",
    operation: str = "Describe",
) -> ClientError:
    """Build a ``ClientError`` shaped like a real boto3 service error."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture()
def client_error() -> Callable[..., ClientError]:
    """Factory fixture: ``client_error("InvalidGroup.NotFound", "msg")``."""
    return make_client_error


# ---------------------------------------------------------------------------
# Time fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Clock that advances only when slept on.  Records every sleep."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        self.sleeps.append(seconds)
        self.now += seconds
        return cancel is not None and cancel.is_set()


@pytest.fixture()
def fake_clock() -> FakeClock:
    """A clock starting at 0 that never really sleeps."""
    return FakeClock()
