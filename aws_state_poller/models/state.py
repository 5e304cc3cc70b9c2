"""Typed models exchanged between finders, reducers and the retry driver.

- ``ResourceDescriptor``: identifiers needed to look up one resource
- ``CommonStatus``: statuses shared by every resource family
- ``EmptyResultPolicy``: how a reducer reports an empty describe result
- ``PollOutcome``: the result of a single poll attempt

Design notes:
- All models are frozen dataclasses.
- A status is a plain ``str``.  Families with a known member set expose a
  ``StrEnum`` (their members compare equal to the raw AWS value), dynamic
  provider codes stay as bare strings.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

from aws_state_poller.models._validation import ModelValidationError, check_non_empty

#: A raw describe-response payload, as returned by boto3.
RawResourceState = dict[str, Any]

#: Exact-match status string (a ``StrEnum`` member or a provider code).
Status = str


class CommonStatus(enum.StrEnum):
    """Statuses shared across resource families.

    Values:
        NOT_FOUND: The resource does not exist (or reached a terminal
            deleted lifecycle value).
        UNKNOWN:   The status could not be determined.
        READY:     The resource exists and has no lifecycle field of its own.
    """

    NOT_FOUND = "NotFound"
    UNKNOWN = "Unknown"
    READY = "ready"


class EmptyResultPolicy(enum.Enum):
    """Status reported when a describe call succeeds with an empty payload.

    Values:
        NOT_FOUND: Treat empty as absent (deletion polling).
        UNKNOWN:   Treat empty as undetermined (creation polling).
    """

    NOT_FOUND = CommonStatus.NOT_FOUND
    UNKNOWN = CommonStatus.UNKNOWN


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """Identifiers needed to fetch a single resource.

    Attributes:
        resource_id: Primary identifier (ID, name or ARN).
        parent_id: Identifier of the containing resource, if any
            (e.g. the Client VPN endpoint of a route).
        extra: Additional lookup keys (e.g. ``{"destination": "10.0.0.0/16"}``).
            Copied into a read-only mapping on construction.
    """

    resource_id: str
    parent_id: str = ""
    extra: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        check_non_empty("ResourceDescriptor", "resource_id", self.resource_id)
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def __str__(self) -> str:
        if self.parent_id:
            return f"{self.parent_id}/{self.resource_id}"
        return self.resource_id


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Result of a single poll attempt.

    Attributes:
        payload: The raw resource state, or ``None`` when absent.
        status: The reduced status value.
        error: The error that prevented a successful poll, if any.
    """

    payload: RawResourceState | None
    status: Status
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.status == CommonStatus.NOT_FOUND and self.payload is not None:
            raise ModelValidationError(
                "PollOutcome",
                "payload",
                self.payload,
                "must be None when status is NotFound",
            )

    @property
    def is_not_found(self) -> bool:
        return self.status == CommonStatus.NOT_FOUND

    @classmethod
    def not_found(cls) -> PollOutcome:
        return cls(None, CommonStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: BaseException, status: Status = CommonStatus.UNKNOWN) -> PollOutcome:
        return cls(None, status, error)


class Refresher(Protocol):
    """Any zero-argument callable producing a ``PollOutcome``."""

    def __call__(self) -> PollOutcome: ...
