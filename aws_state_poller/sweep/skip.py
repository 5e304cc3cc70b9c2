"""Ignorable provider errors during sweeps.

Sweeps run against every region an account can see, so some calls fail
for reasons unrelated to the resource itself: missing endpoints,
operations not offered in a partition, accounts without an API version.
These are matched against an ordered table of
``(error code, message substring)`` signatures; the first matching entry
wins and an error matching no entry is a real failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aws_state_poller.core.exceptions import SkippableError
from aws_state_poller.utils.awserr import REQUEST_ERROR_CODE, error_message_contains

logger = logging.getLogger("aws_state_poller.sweep.skip")


@dataclass(frozen=True, slots=True)
class SkipEntry:
    """One ignorable error signature.  An empty ``message_fragment`` matches any message."""

    error_code: str
    message_fragment: str = ""
    reason: str = ""

    def matches(self, err: BaseException | None) -> bool:
        return error_message_contains(err, self.error_code, self.message_fragment)


SKIP_TABLE: tuple[SkipEntry, ...] = (
    SkipEntry(REQUEST_ERROR_CODE, "send request failed", "missing API endpoint"),
    SkipEntry("UnsupportedOperation", "", "unsupported API call"),
    # Use of cache security groups is not permitted in this API version for your account.
    SkipEntry(
        "InvalidParameterValue",
        "not permitted in this API version for your account",
        "unsupported API version",
    ),
    # Access Denied to API Version: APIGlobalDatabases
    SkipEntry("InvalidParameterValue", "Access Denied to API Version", "unsupported API version"),
    # GovCloud endpoints answer with no message at all.
    SkipEntry("AccessDeniedException", "", "access denied"),
    # vpc link not supported for region us-gov-west-1
    SkipEntry("BadRequestException", "not supported", "unsupported in region"),
    # The action DescribeTransitGatewayAttachments is not valid for this web service
    SkipEntry("InvalidAction", "is not valid", "unsupported action"),
    SkipEntry("InvalidAction", "Unavailable Operation", "unavailable operation"),
    SkipEntry(
        "InvalidKeySigningKeyStatus",
        "cannot be deleted because",
        "key signing key in use",
    ),
    SkipEntry(
        "KeySigningKeyInParentDSRecord",
        "Due to DNS lookup failure",
        "parent DS record lookup failed",
    ),
    # ECR public repositories exist in us-east-1 only.
    SkipEntry(
        "UnsupportedCommandException",
        "command is only supported in",
        "command unsupported in region",
    ),
)


@dataclass(frozen=True, slots=True)
class SkipDecision:
    """Result of checking an error against the skip table.

    Attributes:
        skip: Whether the error can be ignored.
        entry: The first matching entry, or ``None``.
    """

    skip: bool
    entry: SkipEntry | None = None

    def __bool__(self) -> bool:
        return self.skip


def skip_sweep_error(
    err: BaseException | None,
    table: tuple[SkipEntry, ...] = SKIP_TABLE,
) -> SkipDecision:
    """Check *err* against *table*, first match wins."""
    if err is None:
        return SkipDecision(False)
    for entry in table:
        if entry.matches(err):
            return SkipDecision(True, entry)
    return SkipDecision(False)


def raise_if_skippable(err: BaseException, *, resource_id: str = "") -> None:
    """Raise ``SkippableError`` wrapping *err* if it matches the skip table."""
    decision = skip_sweep_error(err)
    if decision.entry is not None:
        logger.warning(
            "sweep error skipped | id=%s | code=%s | reason=%s",
            resource_id,
            decision.entry.error_code,
            decision.entry.reason,
        )
        raise SkippableError(
            err,
            error_code=decision.entry.error_code,
            message_fragment=decision.entry.message_fragment,
            resource_id=resource_id,
        ) from err
