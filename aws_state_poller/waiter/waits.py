"""Named waits: a reducer plus the driver, with per-resource status sets.

Each ``wait_*`` helper builds the reducer for one resource, runs the
retry driver with the pending/target/failure sets that resource needs,
and returns the last payload (``None`` for deletion waits).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from botocore.exceptions import ClientError

from aws_state_poller.core.constants import PROPAGATION_TIMEOUT_S
from aws_state_poller.core.exceptions import RetryableError
from aws_state_poller.models.policy import RetryPolicy
from aws_state_poller.models.state import CommonStatus, RawResourceState, ResourceDescriptor
from aws_state_poller.reducers import ec2, services
from aws_state_poller.utils.awserr import error_message_contains
from aws_state_poller.waiter.driver import retry, wait_for_state

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from aws_state_poller.reducers.base import StatusReducer

logger = logging.getLogger("aws_state_poller.waiter.waits")

T = TypeVar("T")

VPC_PEERING_CONNECTION_DELETED_TIMEOUT_S = 60.0
CARRIER_GATEWAY_AVAILABLE_TIMEOUT_S = 300.0
CARRIER_GATEWAY_DELETED_TIMEOUT_S = 300.0
CLIENT_VPN_ENDPOINT_DELETED_TIMEOUT_S = 300.0
DELIVERY_STREAM_TIMEOUT_S = 1200.0
STATE_MACHINE_DELETED_TIMEOUT_S = 300.0
ROUTE_TABLE_READY_TIMEOUT_S = 300.0
ROUTE_TABLE_DELETED_TIMEOUT_S = 300.0
# Route tables are slow to become visible after creation.
ROUTE_TABLE_NOT_FOUND_CHECKS = 1000
SECURITY_GROUP_CREATED_TIMEOUT_S = 300.0
MANAGED_PREFIX_LIST_TIMEOUT_S = 900.0
VPC_ENDPOINT_TIMEOUT_S = 600.0
EBS_SNAPSHOT_IMPORT_TIMEOUT_S = 3600.0
APPLICATION_TIMEOUT_S = 600.0


def _wait(
    reducer_cls: type[StatusReducer],
    client: Any,
    descriptor: ResourceDescriptor,
    *,
    target: Collection[str] = (),
    pending: Collection[str] = (),
    failure: Collection[str] = (),
    timeout_s: float,
    not_found_checks: int | None = None,
    policy: RetryPolicy | None = None,
    **kwargs: Any,
) -> RawResourceState | None:
    if policy is None:
        if not_found_checks is None:
            policy = RetryPolicy(timeout_s=timeout_s)
        else:
            policy = RetryPolicy(timeout_s=timeout_s, not_found_checks=not_found_checks)
    result = wait_for_state(
        reducer_cls(client, descriptor),
        target=target,
        pending=pending,
        failure=failure,
        policy=policy,
        resource_id=str(descriptor),
        **kwargs,
    )
    return result.payload


# ---------------------------------------------------------------------------
# EC2
# ---------------------------------------------------------------------------


def wait_vpc_peering_connection_deleted(
    client: Any,
    peering_connection_id: str,
    *,
    timeout_s: float = VPC_PEERING_CONNECTION_DELETED_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.VpcPeeringConnectionReducer,
        client,
        ResourceDescriptor(peering_connection_id),
        pending=(ec2.VpcPeeringConnectionStatus.DELETING,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_carrier_gateway_available(
    client: Any,
    carrier_gateway_id: str,
    *,
    timeout_s: float = CARRIER_GATEWAY_AVAILABLE_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        ec2.CarrierGatewayReducer,
        client,
        ResourceDescriptor(carrier_gateway_id),
        pending=(ec2.CarrierGatewayState.PENDING,),
        target=(ec2.CarrierGatewayState.AVAILABLE,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_carrier_gateway_deleted(
    client: Any,
    carrier_gateway_id: str,
    *,
    timeout_s: float = CARRIER_GATEWAY_DELETED_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.CarrierGatewayReducer,
        client,
        ResourceDescriptor(carrier_gateway_id),
        pending=(ec2.CarrierGatewayState.DELETING,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_client_vpn_endpoint_deleted(
    client: Any,
    endpoint_id: str,
    *,
    timeout_s: float = CLIENT_VPN_ENDPOINT_DELETED_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.ClientVpnEndpointReducer,
        client,
        ResourceDescriptor(endpoint_id),
        pending=(ec2.ClientVpnEndpointStatus.DELETING,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_route_table_ready(
    client: Any,
    route_table_id: str,
    *,
    timeout_s: float = ROUTE_TABLE_READY_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        ec2.RouteTableReducer,
        client,
        ResourceDescriptor(route_table_id),
        target=(CommonStatus.READY,),
        timeout_s=timeout_s,
        not_found_checks=ROUTE_TABLE_NOT_FOUND_CHECKS,
        **kwargs,
    )


def wait_route_table_deleted(
    client: Any,
    route_table_id: str,
    *,
    timeout_s: float = ROUTE_TABLE_DELETED_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.RouteTableReducer,
        client,
        ResourceDescriptor(route_table_id),
        pending=(CommonStatus.READY,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_security_group_created(
    client: Any,
    group_id: str,
    *,
    timeout_s: float = SECURITY_GROUP_CREATED_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        ec2.SecurityGroupReducer,
        client,
        ResourceDescriptor(group_id),
        target=(ec2.SecurityGroupStatus.CREATED,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_managed_prefix_list_created(
    client: Any,
    prefix_list_id: str,
    *,
    timeout_s: float = MANAGED_PREFIX_LIST_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        ec2.ManagedPrefixListReducer,
        client,
        ResourceDescriptor(prefix_list_id),
        pending=(ec2.ManagedPrefixListState.CREATE_IN_PROGRESS,),
        target=(ec2.ManagedPrefixListState.CREATE_COMPLETE,),
        failure=(ec2.ManagedPrefixListState.CREATE_FAILED,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_managed_prefix_list_deleted(
    client: Any,
    prefix_list_id: str,
    *,
    timeout_s: float = MANAGED_PREFIX_LIST_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.ManagedPrefixListReducer,
        client,
        ResourceDescriptor(prefix_list_id),
        pending=(ec2.ManagedPrefixListState.DELETE_IN_PROGRESS,),
        failure=(ec2.ManagedPrefixListState.DELETE_FAILED,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_vpc_endpoint_available(
    client: Any,
    vpc_endpoint_id: str,
    *,
    timeout_s: float = VPC_ENDPOINT_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    """Wait for an endpoint to become usable.

    ``pendingacceptance`` counts as done: an endpoint to a service that
    requires acceptance stays there until the service owner acts.
    """
    return _wait(
        ec2.VpcEndpointReducer,
        client,
        ResourceDescriptor(vpc_endpoint_id),
        pending=(ec2.VpcEndpointState.PENDING,),
        target=(ec2.VpcEndpointState.AVAILABLE, ec2.VpcEndpointState.PENDING_ACCEPTANCE),
        failure=(ec2.VpcEndpointState.FAILED, ec2.VpcEndpointState.REJECTED),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_vpc_endpoint_deleted(
    client: Any,
    vpc_endpoint_id: str,
    *,
    timeout_s: float = VPC_ENDPOINT_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        ec2.VpcEndpointReducer,
        client,
        ResourceDescriptor(vpc_endpoint_id),
        pending=(
            ec2.VpcEndpointState.AVAILABLE,
            ec2.VpcEndpointState.PENDING,
            ec2.VpcEndpointState.DELETING,
        ),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_ebs_snapshot_import_complete(
    client: Any,
    import_task_id: str,
    *,
    timeout_s: float = EBS_SNAPSHOT_IMPORT_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        ec2.EbsSnapshotImportReducer,
        client,
        ResourceDescriptor(import_task_id),
        pending=(ec2.SnapshotImportStatus.ACTIVE,),
        target=(ec2.SnapshotImportStatus.COMPLETED,),
        timeout_s=timeout_s,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Other services
# ---------------------------------------------------------------------------


def wait_delivery_stream_active(
    client: Any,
    name: str,
    *,
    timeout_s: float = DELIVERY_STREAM_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    return _wait(
        services.DeliveryStreamReducer,
        client,
        ResourceDescriptor(name),
        pending=(services.DeliveryStreamStatus.CREATING,),
        target=(services.DeliveryStreamStatus.ACTIVE,),
        failure=(services.DeliveryStreamStatus.CREATING_FAILED,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_delivery_stream_deleted(
    client: Any,
    name: str,
    *,
    timeout_s: float = DELIVERY_STREAM_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        services.DeliveryStreamReducer,
        client,
        ResourceDescriptor(name),
        pending=(services.DeliveryStreamStatus.DELETING,),
        failure=(services.DeliveryStreamStatus.DELETING_FAILED,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_state_machine_deleted(
    client: Any,
    state_machine_arn: str,
    *,
    timeout_s: float = STATE_MACHINE_DELETED_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        services.StateMachineReducer,
        client,
        ResourceDescriptor(state_machine_arn),
        pending=(services.StateMachineStatus.ACTIVE, services.StateMachineStatus.DELETING),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_application_ready(
    client: Any,
    name: str,
    *,
    timeout_s: float = APPLICATION_TIMEOUT_S,
    **kwargs: Any,
) -> RawResourceState | None:
    status = services.ApplicationStatus
    return _wait(
        services.ApplicationReducer,
        client,
        ResourceDescriptor(name),
        pending=(
            status.STARTING,
            status.STOPPING,
            status.UPDATING,
            status.FORCE_STOPPING,
            status.ROLLING_BACK,
        ),
        target=(status.READY,),
        timeout_s=timeout_s,
        **kwargs,
    )


def wait_application_deleted(
    client: Any,
    name: str,
    *,
    timeout_s: float = APPLICATION_TIMEOUT_S,
    **kwargs: Any,
) -> None:
    _wait(
        services.ApplicationReducer,
        client,
        ResourceDescriptor(name),
        pending=(services.ApplicationStatus.DELETING,),
        timeout_s=timeout_s,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Eventual consistency
# ---------------------------------------------------------------------------


def propagation_wait(
    operation: Callable[[], T],
    *,
    error_code: str,
    message_fragment: str = "",
    timeout_s: float = PROPAGATION_TIMEOUT_S,
    **kwargs: Any,
) -> T:
    """Retry *operation* while it fails with a not-yet-propagated error.

    Typical use is a call that references a freshly created IAM role:
    the service rejects it with *error_code* until the role is visible.
    Other errors propagate immediately.
    """

    def attempt() -> T:
        try:
            return operation()
        except ClientError as exc:
            if error_message_contains(exc, error_code, message_fragment):
                logger.debug("waiting for propagation | code=%s | error=%s", error_code, exc)
                raise RetryableError(cause=exc) from exc
            raise

    return retry(attempt, RetryPolicy(timeout_s=timeout_s), **kwargs)
