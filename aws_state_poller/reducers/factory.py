"""Reducer factory: selects a status reducer by resource kind.

The factory maintains a registry of known reducers keyed by
``"<service>.<resource>"``.  Built-in reducers are registered lazily on
first use; custom reducers can be added with ``register_reducer``.

Usage::

    from aws_state_poller.reducers.factory import get_reducer

    reducer = get_reducer("firehose.delivery_stream", firehose, ResourceDescriptor("s1"))
    outcome = reducer()
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from aws_state_poller.core.exceptions import PollerError

if TYPE_CHECKING:
    from collections.abc import Callable

    from aws_state_poller.models.state import ResourceDescriptor
    from aws_state_poller.reducers.base import StatusReducer

logger = logging.getLogger(__name__)


class UnknownReducerError(PollerError):
    """Raised when no reducer is registered for a kind."""

    default_stage = "reducer_factory"
    default_code = "UNKNOWN_REDUCER"


# Each entry maps a kind to a zero-argument callable returning the reducer
# *class*, so service modules are only imported when one of their kinds
# is requested.
_REDUCER_REGISTRY: dict[str, Callable[[], type[StatusReducer]]] = {}


def _register_builtin_reducers() -> None:
    """Register the built-in reducers.  Called once on first lookup."""

    def _loader(module_name: str, kind: str) -> Callable[[], type[StatusReducer]]:
        def load() -> type[StatusReducer]:
            module = importlib.import_module(module_name)
            return next(r for r in module.REDUCERS if r.kind == kind)

        return load

    builtin = {
        "aws_state_poller.reducers.ec2": (
            "ec2.carrier_gateway",
            "ec2.client_vpn_endpoint",
            "ec2.client_vpn_authorization_rule",
            "ec2.client_vpn_network_association",
            "ec2.client_vpn_route",
            "ec2.route_table",
            "ec2.route_table_association",
            "ec2.security_group",
            "ec2.subnet_map_public_ip_on_launch",
            "ec2.subnet_map_customer_owned_ip_on_launch",
            "ec2.vpc_peering_connection",
            "ec2.vpn_gateway_vpc_attachment",
            "ec2.managed_prefix_list",
            "ec2.vpc_endpoint",
            "ec2.vpc_endpoint_route_table_association",
            "ec2.ebs_snapshot_import",
            "ec2.host",
            "ec2.local_gateway_route_table_vpc_association",
            "ec2.instance_iam_instance_profile",
            "ec2.route",
            "ec2.transit_gateway_prefix_list_reference",
            "ec2.transit_gateway_route_table_propagation",
            "ec2.vpc_attribute",
        ),
        "aws_state_poller.reducers.services": (
            "firehose.delivery_stream",
            "sfn.state_machine",
            "kinesisanalyticsv2.application",
        ),
    }
    for module_name, kinds in builtin.items():
        for kind in kinds:
            _REDUCER_REGISTRY.setdefault(kind, _loader(module_name, kind))


def _ensure_registry() -> None:
    """Initialise the reducer registry once (idempotent)."""
    if not _REDUCER_REGISTRY:
        _register_builtin_reducers()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_reducer(kind: str, loader: Callable[[], type[StatusReducer]]) -> None:
    """Register a custom reducer.

    Args:
        kind: Reducer kind (e.g. ``"rds.db_instance"``).
        loader: A zero-argument callable that returns the reducer class.

    Raises:
        ValueError: If the kind is empty.
    """
    if not kind:
        msg = "Reducer kind must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _REDUCER_REGISTRY[kind] = loader
    logger.debug("Registered status reducer: %s", kind)


def get_reducer(kind: str, client: Any, descriptor: ResourceDescriptor) -> StatusReducer:
    """Create a status reducer for one resource.

    Raises:
        UnknownReducerError: If *kind* is not registered.
    """
    _ensure_registry()
    loader = _REDUCER_REGISTRY.get(kind)
    if loader is None:
        available = ", ".join(sorted(_REDUCER_REGISTRY))
        msg = f"Unknown status reducer: {kind!r}. Available: {available}"
        raise UnknownReducerError(msg)
    return loader()(client, descriptor)


def list_reducers() -> list[str]:
    """Return the kinds of all registered reducers."""
    _ensure_registry()
    return sorted(_REDUCER_REGISTRY)
