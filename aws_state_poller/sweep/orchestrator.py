"""Best-effort parallel deletion of leftover test resources.

Every ``SweepResource`` is deleted on its own worker thread.  Throttled
deletes are retried until the sweep timeout, then attempted once more.
Errors matching the skip table are counted as skipped.  Any other
failure is collected without cancelling the remaining deletes, and all
of them are raised together as one ``SweepError`` once every worker has
finished.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aws_state_poller.core.constants import (
    DEFAULT_SWEEP_MAX_WORKERS,
    RESOURCE_PREFIX,
    SWEEP_THROTTLING_RETRY_TIMEOUT_S,
)
from aws_state_poller.core.exceptions import PollerError, RetryableError, SkippableError
from aws_state_poller.models.policy import RetryPolicy
from aws_state_poller.sweep.skip import skip_sweep_error
from aws_state_poller.utils.awserr import is_throttling
from aws_state_poller.waiter.clock import SYSTEM_CLOCK, Clock
from aws_state_poller.waiter.driver import retry_once_after_timeout

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from aws_state_poller.core.config import SweeperConfig
    from aws_state_poller.models.state import ResourceDescriptor

logger = logging.getLogger("aws_state_poller.sweep.orchestrator")


@dataclass(frozen=True)
class SweepResource:
    """A resource to delete and the zero-argument callable that deletes it.

    ``name`` is the resource's user-visible name (tag or name field), used
    by ``select_test_resources``.
    """

    descriptor: ResourceDescriptor
    delete: Callable[[], object]
    name: str = ""


def has_test_prefix(name: str, prefix: str = RESOURCE_PREFIX) -> bool:
    return bool(name) and name.startswith(prefix)


def select_test_resources(
    resources: Iterable[SweepResource],
    prefix: str = RESOURCE_PREFIX,
) -> list[SweepResource]:
    """Keep only resources whose name starts with *prefix*.

    Unnamed resources are dropped.
    """
    selected = []
    ignored = 0
    for resource in resources:
        if has_test_prefix(resource.name, prefix):
            selected.append(resource)
        else:
            ignored += 1
    logger.debug(
        "sweep selection | prefix=%s | selected=%d | ignored=%d",
        prefix,
        len(selected),
        ignored,
    )
    return selected


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Counts for a sweep that finished without failures."""

    deleted: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.deleted + self.skipped


class SweepError(PollerError):
    """One or more resources could not be deleted.

    Attributes:
        errors: ``(descriptor, error)`` pairs in submission order.
        report: Counts for the resources that were deleted or skipped.
    """

    default_stage = "sweep"
    default_code = "SWEEP_FAILED"

    def __init__(
        self,
        errors: list[tuple[ResourceDescriptor, BaseException]],
        report: SweepReport | None = None,
    ) -> None:
        self.errors = list(errors)
        self.report = report or SweepReport()
        details = "\n".join(f"\t* {descriptor}: {err}" for descriptor, err in self.errors)
        super().__init__(f"{len(self.errors)} error(s) occurred while sweeping:\n{details}")


def _delete_with_retry(
    resource: SweepResource,
    policy: RetryPolicy,
    cancel: threading.Event | None,
    clock: Clock,
) -> None:
    resource_id = str(resource.descriptor)

    def attempt() -> object:
        try:
            return resource.delete()
        except Exception as exc:
            if is_throttling(exc):
                logger.info(
                    "sweep throttled, retrying | id=%s | error=%s",
                    resource_id,
                    exc,
                )
                raise RetryableError(cause=exc, resource_id=resource_id) from exc
            raise

    retry_once_after_timeout(
        attempt,
        policy,
        final=resource.delete,
        resource_id=resource_id,
        cancel=cancel,
        clock=clock,
    )


def _sweep_one(
    resource: SweepResource,
    policy: RetryPolicy,
    cancel: threading.Event | None,
    clock: Clock,
) -> bool:
    """Delete one resource.  Return ``True`` if its error was skipped."""
    try:
        _delete_with_retry(resource, policy, cancel, clock)
    except SkippableError as exc:
        logger.warning("sweep skipped | id=%s | error=%s", resource.descriptor, exc.cause)
        return True
    except Exception as exc:
        decision = skip_sweep_error(exc)
        if not decision:
            raise
        logger.warning(
            "sweep skipped | id=%s | code=%s | error=%s",
            resource.descriptor,
            decision.entry.error_code if decision.entry else "",
            exc,
        )
        return True
    logger.debug("sweep deleted | id=%s", resource.descriptor)
    return False


def sweep_orchestrator(
    resources: Iterable[SweepResource],
    policy: RetryPolicy | None = None,
    *,
    max_workers: int = DEFAULT_SWEEP_MAX_WORKERS,
    cancel: threading.Event | None = None,
    clock: Clock = SYSTEM_CLOCK,
) -> SweepReport:
    """Delete *resources* concurrently, best effort.

    Args:
        resources: Resources to delete.
        policy: Throttling retry policy per resource (default: 10 minute
            timeout, exponential backoff).
        max_workers: Worker threads.
        cancel: Optional signal aborting pending retries.
        clock: Time source for retry sleeps.

    Returns:
        ``SweepReport`` with deleted and skipped counts.

    Raises:
        SweepError: At least one delete failed.  Carries every failure.
    """
    items = list(resources)
    if not items:
        return SweepReport()
    policy = policy or RetryPolicy(timeout_s=SWEEP_THROTTLING_RETRY_TIMEOUT_S)

    logger.info("sweep started | resources=%d | workers=%d", len(items), max_workers)

    deleted = 0
    skipped = 0
    errors: list[tuple[ResourceDescriptor, BaseException]] = []

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sweeper") as pool:
        futures = [
            (item, pool.submit(_sweep_one, item, policy, cancel, clock)) for item in items
        ]
        for item, future in futures:
            try:
                was_skipped = future.result()
            except Exception as exc:
                logger.warning("sweep failed | id=%s | error=%s", item.descriptor, exc)
                errors.append((item.descriptor, exc))
                continue
            if was_skipped:
                skipped += 1
            else:
                deleted += 1

    report = SweepReport(deleted=deleted, skipped=skipped)
    logger.info(
        "sweep completed | deleted=%d | skipped=%d | failed=%d",
        deleted,
        skipped,
        len(errors),
    )
    if errors:
        raise SweepError(errors, report)
    return report


def sweep_with_config(
    resources: Iterable[SweepResource],
    config: SweeperConfig,
    **kwargs: object,
) -> SweepReport:
    """Run ``sweep_orchestrator`` with worker count and timeout from *config*."""
    return sweep_orchestrator(
        resources,
        RetryPolicy(timeout_s=config.timeout_s),
        max_workers=config.max_workers,
        **kwargs,  # type: ignore[arg-type]
    )
