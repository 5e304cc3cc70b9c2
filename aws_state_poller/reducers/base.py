"""StatusReducer abstract base class.

A status reducer performs exactly one describe call for a resource and
reduces the result to a ``PollOutcome``.  The retry driver interacts only
with the callable interface and never knows which resource family is
behind it.

Reduction rules:
    1. The finder raises ``NotFoundError``   → ``(None, NotFound, None)``.
    2. The finder returns an empty result    → ``(None, empty_status(), None)``.
    3. Any other API error                   → ``(None, Unknown, err)``.
    4. A lifecycle value in ``deleted_states`` → ``(None, NotFound, None)``.
    5. Otherwise                             → ``(payload, lifecycle, None)``.

Reducers never raise for API errors; errors are returned as values.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from botocore.exceptions import BotoCoreError, ClientError

from aws_state_poller.core.exceptions import EmptyResultError, NotFoundError, PollerError
from aws_state_poller.models.state import (
    CommonStatus,
    EmptyResultPolicy,
    PollOutcome,
    RawResourceState,
    ResourceDescriptor,
    Status,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("aws_state_poller.reducers")


class StatusReducer(abc.ABC):
    """Abstract base class for status reducers.

    Concrete implementations override ``find`` and ``status_of``.  The
    constructor receives the boto3 client for the resource's service and
    the ``ResourceDescriptor`` of the resource to poll.

    Example usage::

        reducer = get_reducer("ec2.carrier_gateway", ec2, ResourceDescriptor("cagw-1"))
        outcome = reducer()
    """

    #: Registry key, e.g. ``"ec2.carrier_gateway"``.
    kind: ClassVar[str] = ""
    #: Status reported when the describe call returns nothing.
    empty_policy: ClassVar[EmptyResultPolicy] = EmptyResultPolicy.NOT_FOUND
    #: Provider lifecycle values meaning the resource is gone.
    deleted_states: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, client: Any, descriptor: ResourceDescriptor) -> None:
        self._client = client
        self._descriptor = descriptor

    @property
    def descriptor(self) -> ResourceDescriptor:
        return self._descriptor

    @property
    def client(self) -> Any:
        return self._client

    # ------------------------------------------------------------------
    # Abstract methods
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def find(self) -> RawResourceState | None:
        """Issue the describe call and return the resource payload.

        Raises:
            NotFoundError: When the API reports the resource does not exist.
            botocore.exceptions.ClientError: On any other API error.
        """

    @abc.abstractmethod
    def status_of(self, payload: RawResourceState) -> Status | None:
        """Extract the lifecycle value from *payload* (``None`` if absent)."""

    # ------------------------------------------------------------------
    # Reduction
    # ------------------------------------------------------------------

    def refresh(self) -> PollOutcome:
        """Poll once and reduce the result to a ``PollOutcome``."""
        try:
            payload = self.find()
        except EmptyResultError:
            payload = None
        except NotFoundError:
            logger.debug("poll | kind=%s | id=%s | status=NotFound", self.kind, self._descriptor)
            return PollOutcome.not_found()
        except (ClientError, BotoCoreError, PollerError) as exc:
            logger.debug("poll | kind=%s | id=%s | error=%s", self.kind, self._descriptor, exc)
            return PollOutcome.failed(exc)

        if not payload:
            return PollOutcome(None, self.empty_status())

        return self.reduce(payload)

    def empty_status(self) -> Status:
        """Status reported for an empty describe result."""
        return self.empty_policy.value

    def reduce(self, payload: RawResourceState) -> PollOutcome:
        """Map a non-empty payload to an outcome."""
        status = self.status_of(payload)
        if not status:
            return PollOutcome(payload, CommonStatus.UNKNOWN)
        if status in self.deleted_states:
            return PollOutcome.not_found()
        logger.debug("poll | kind=%s | id=%s | status=%s", self.kind, self._descriptor, status)
        return PollOutcome(payload, status)

    def __call__(self) -> PollOutcome:
        return self.refresh()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._descriptor!s})"


class FieldReducer(StatusReducer):
    """Reducer whose lifecycle value lives at a fixed key path.

    Subclasses set ``finder`` and ``status_path``; ``finder`` receives the
    client and the values returned by ``finder_args``.
    """

    finder: ClassVar[Callable[..., RawResourceState]]
    status_path: ClassVar[tuple[str, ...]] = ()

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.resource_id,)

    def find(self) -> RawResourceState | None:
        return type(self).finder(self._client, *self.finder_args())

    def status_of(self, payload: RawResourceState) -> Status | None:
        value: Any = payload
        for key in self.status_path:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return str(value) if value is not None else None


class ConstantReducer(FieldReducer):
    """Reducer for resources without a lifecycle field: existence is ready."""

    constant_status: ClassVar[Status] = CommonStatus.READY

    def status_of(self, payload: RawResourceState) -> Status | None:
        return self.constant_status
