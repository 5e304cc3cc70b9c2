"""Domain models: descriptors, statuses, poll outcomes and retry policies."""

from aws_state_poller.models._validation import ModelValidationError
from aws_state_poller.models.policy import RetryPolicy, WaitResult, WaitState
from aws_state_poller.models.state import (
    CommonStatus,
    EmptyResultPolicy,
    PollOutcome,
    RawResourceState,
    Refresher,
    ResourceDescriptor,
    Status,
)

__all__ = [
    "CommonStatus",
    "EmptyResultPolicy",
    "ModelValidationError",
    "PollOutcome",
    "RawResourceState",
    "Refresher",
    "ResourceDescriptor",
    "RetryPolicy",
    "Status",
    "WaitResult",
    "WaitState",
]
