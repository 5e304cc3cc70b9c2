"""Best-effort cleanup of leftover resources.

- orchestrator: Parallel deletes with throttling retry and error aggregation
- skip: Table of ignorable provider errors
- clients: Per-region client registry
"""

from aws_state_poller.sweep.clients import ClientRegistry, RegionalClients
from aws_state_poller.sweep.orchestrator import (
    SweepError,
    SweepReport,
    SweepResource,
    has_test_prefix,
    select_test_resources,
    sweep_orchestrator,
    sweep_with_config,
)
from aws_state_poller.sweep.skip import (
    SKIP_TABLE,
    SkipDecision,
    SkipEntry,
    raise_if_skippable,
    skip_sweep_error,
)

__all__ = [
    "SKIP_TABLE",
    "ClientRegistry",
    "RegionalClients",
    "SkipDecision",
    "SkipEntry",
    "SweepError",
    "SweepReport",
    "SweepResource",
    "has_test_prefix",
    "raise_if_skippable",
    "select_test_resources",
    "skip_sweep_error",
    "sweep_orchestrator",
    "sweep_with_config",
]
