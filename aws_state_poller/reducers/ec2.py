"""EC2 status reducers and their lifecycle value families."""

from __future__ import annotations

import enum
import logging
from typing import Any, ClassVar

from botocore.utils import ArnParser

from aws_state_poller.core.exceptions import NonRetryableError
from aws_state_poller.finders import ec2 as finders
from aws_state_poller.models.state import (
    CommonStatus,
    EmptyResultPolicy,
    PollOutcome,
    RawResourceState,
    Status,
)
from aws_state_poller.reducers.base import ConstantReducer, FieldReducer

logger = logging.getLogger("aws_state_poller.reducers.ec2")

# ---------------------------------------------------------------------------
# Lifecycle families
# ---------------------------------------------------------------------------


class CarrierGatewayState(enum.StrEnum):
    PENDING = "pending"
    AVAILABLE = "available"
    DELETING = "deleting"
    DELETED = "deleted"


class ClientVpnEndpointStatus(enum.StrEnum):
    PENDING_ASSOCIATE = "pending-associate"
    AVAILABLE = "available"
    DELETING = "deleting"
    DELETED = "deleted"


class ClientVpnAuthorizationRuleStatus(enum.StrEnum):
    AUTHORIZING = "authorizing"
    ACTIVE = "active"
    FAILED = "failed"
    REVOKING = "revoking"


class ClientVpnAssociationStatus(enum.StrEnum):
    ASSOCIATING = "associating"
    ASSOCIATED = "associated"
    ASSOCIATION_FAILED = "association-failed"
    DISASSOCIATING = "disassociating"
    DISASSOCIATED = "disassociated"


class ClientVpnRouteStatus(enum.StrEnum):
    CREATING = "creating"
    ACTIVE = "active"
    FAILED = "failed"
    DELETING = "deleting"


class RouteTableAssociationState(enum.StrEnum):
    ASSOCIATING = "associating"
    ASSOCIATED = "associated"
    DISASSOCIATING = "disassociating"
    DISASSOCIATED = "disassociated"
    FAILED = "failed"


class SecurityGroupStatus(enum.StrEnum):
    CREATED = "Created"


class VpcPeeringConnectionStatus(enum.StrEnum):
    """Peering connection status codes.

    See https://docs.aws.amazon.com/vpc/latest/peering/vpc-peering-basics.html#vpc-peering-lifecycle
    """

    INITIATING_REQUEST = "initiating-request"
    PENDING_ACCEPTANCE = "pending-acceptance"
    PROVISIONING = "provisioning"
    ACTIVE = "active"
    DELETING = "deleting"
    DELETED = "deleted"
    REJECTED = "rejected"
    FAILED = "failed"
    EXPIRED = "expired"


class VpnAttachmentState(enum.StrEnum):
    ATTACHING = "attaching"
    ATTACHED = "attached"
    DETACHING = "detaching"
    DETACHED = "detached"


class ManagedPrefixListState(enum.StrEnum):
    CREATE_IN_PROGRESS = "create-in-progress"
    CREATE_COMPLETE = "create-complete"
    CREATE_FAILED = "create-failed"
    MODIFY_IN_PROGRESS = "modify-in-progress"
    MODIFY_COMPLETE = "modify-complete"
    MODIFY_FAILED = "modify-failed"
    RESTORE_IN_PROGRESS = "restore-in-progress"
    RESTORE_COMPLETE = "restore-complete"
    RESTORE_FAILED = "restore-failed"
    DELETE_IN_PROGRESS = "delete-in-progress"
    DELETE_COMPLETE = "delete-complete"
    DELETE_FAILED = "delete-failed"


class VpcEndpointState(enum.StrEnum):
    """VPC endpoint states, lower-cased (the API is inconsistent about case)."""

    PENDING_ACCEPTANCE = "pendingacceptance"
    PENDING = "pending"
    AVAILABLE = "available"
    DELETING = "deleting"
    DELETED = "deleted"
    REJECTED = "rejected"
    FAILED = "failed"
    EXPIRED = "expired"


class SnapshotImportStatus(enum.StrEnum):
    ACTIVE = "active"
    DELETING = "deleting"
    DELETED = "deleted"
    COMPLETED = "completed"


class HostState(enum.StrEnum):
    AVAILABLE = "available"
    UNDER_ASSESSMENT = "under-assessment"
    PERMANENT_FAILURE = "permanent-failure"
    RELEASED = "released"
    RELEASED_PERMANENT_FAILURE = "released-permanent-failure"
    PENDING = "pending"


class TransitGatewayPrefixListReferenceState(enum.StrEnum):
    PENDING = "pending"
    AVAILABLE = "available"
    MODIFYING = "modifying"
    DELETING = "deleting"


class TransitGatewayPropagationState(enum.StrEnum):
    ENABLING = "enabling"
    ENABLED = "enabled"
    DISABLING = "disabling"
    DISABLED = "disabled"


#: Instance profile status of an instance with no profile attached.
NO_INSTANCE_PROFILE: Status = ""


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


class CarrierGatewayReducer(FieldReducer):
    kind = "ec2.carrier_gateway"
    finder = finders.find_carrier_gateway_by_id
    status_path = ("State",)
    deleted_states = frozenset({CarrierGatewayState.DELETED})


class ClientVpnEndpointReducer(FieldReducer):
    kind = "ec2.client_vpn_endpoint"
    finder = finders.find_client_vpn_endpoint_by_id
    status_path = ("Status", "Code")
    deleted_states = frozenset({ClientVpnEndpointStatus.DELETED})


class ClientVpnAuthorizationRuleReducer(FieldReducer):
    """Descriptor: ``parent_id`` is the endpoint, ``resource_id`` the target
    network CIDR, ``extra["access_group_id"]`` the optional group."""

    kind = "ec2.client_vpn_authorization_rule"
    finder = finders.find_client_vpn_authorization_rule
    status_path = ("Status", "Code")

    def finder_args(self) -> tuple[str, ...]:
        d = self._descriptor
        return (d.parent_id, d.resource_id, d.extra.get("access_group_id", ""))


class ClientVpnNetworkAssociationReducer(FieldReducer):
    kind = "ec2.client_vpn_network_association"
    finder = finders.find_client_vpn_network_association
    status_path = ("Status", "Code")

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class ClientVpnRouteReducer(FieldReducer):
    """Descriptor: ``parent_id`` is the endpoint, ``resource_id`` the
    destination CIDR, ``extra["target_subnet_id"]`` the target subnet."""

    kind = "ec2.client_vpn_route"
    finder = finders.find_client_vpn_route
    status_path = ("Status", "Code")

    def finder_args(self) -> tuple[str, ...]:
        d = self._descriptor
        return (d.parent_id, d.resource_id, d.extra.get("target_subnet_id", ""))


class RouteTableReducer(ConstantReducer):
    kind = "ec2.route_table"
    finder = finders.find_route_table_by_id


class RouteTableAssociationReducer(FieldReducer):
    kind = "ec2.route_table_association"
    finder = finders.find_route_table_association_by_id
    status_path = ("AssociationState", "State")


class SecurityGroupReducer(ConstantReducer):
    kind = "ec2.security_group"
    finder = finders.find_security_group_by_id
    constant_status = SecurityGroupStatus.CREATED


class SubnetMapPublicIpOnLaunchReducer(FieldReducer):
    """Reports the subnet's ``MapPublicIpOnLaunch`` as ``"true"``/``"false"``."""

    kind = "ec2.subnet_map_public_ip_on_launch"
    finder = finders.find_subnet_by_id
    attribute: ClassVar[str] = "MapPublicIpOnLaunch"

    def status_of(self, payload: RawResourceState) -> Status | None:
        return "true" if payload.get(self.attribute) else "false"


class SubnetMapCustomerOwnedIpOnLaunchReducer(SubnetMapPublicIpOnLaunchReducer):
    kind = "ec2.subnet_map_customer_owned_ip_on_launch"
    attribute = "MapCustomerOwnedIpOnLaunch"


class VpcPeeringConnectionReducer(FieldReducer):
    """Terminal ``deleted``/``expired``/``rejected``/``failed`` codes reduce to
    NotFound.  ``failed`` is logged with the provider's message first."""

    kind = "ec2.vpc_peering_connection"
    finder = finders.find_vpc_peering_connection_by_id
    status_path = ("Status", "Code")
    deleted_states = frozenset(
        {
            VpcPeeringConnectionStatus.DELETED,
            VpcPeeringConnectionStatus.EXPIRED,
            VpcPeeringConnectionStatus.REJECTED,
            VpcPeeringConnectionStatus.FAILED,
        }
    )

    def reduce(self, payload: RawResourceState) -> PollOutcome:
        # Consistency lag: the connection may be returned before its status.
        if not payload.get("Status"):
            return PollOutcome.not_found()
        if self.status_of(payload) == VpcPeeringConnectionStatus.FAILED:
            logger.warning(
                "VPC peering connection failed | id=%s | message=%s",
                self._descriptor,
                payload["Status"].get("Message", ""),
            )
        return super().reduce(payload)


class VpnGatewayVpcAttachmentReducer(FieldReducer):
    """Descriptor: ``parent_id`` is the VPN gateway, ``resource_id`` the VPC."""

    kind = "ec2.vpn_gateway_vpc_attachment"
    finder = finders.find_vpn_gateway_vpc_attachment
    status_path = ("State",)
    deleted_states = frozenset({VpnAttachmentState.DETACHED})

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class ManagedPrefixListReducer(FieldReducer):
    kind = "ec2.managed_prefix_list"
    finder = finders.find_managed_prefix_list_by_id
    status_path = ("State",)


class VpcEndpointReducer(FieldReducer):
    kind = "ec2.vpc_endpoint"
    finder = finders.find_vpc_endpoint_by_id
    status_path = ("State",)
    deleted_states = frozenset({VpcEndpointState.DELETED})

    def status_of(self, payload: RawResourceState) -> Status | None:
        state = super().status_of(payload)
        return state.lower() if state else None


class VpcEndpointRouteTableAssociationReducer(ConstantReducer):
    """Descriptor: ``parent_id`` is the VPC endpoint, ``resource_id`` the route table."""

    kind = "ec2.vpc_endpoint_route_table_association"
    finder = finders.find_vpc_endpoint_route_table_association

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class EbsSnapshotImportReducer(FieldReducer):
    """Creation polling: an empty result is ``Unknown``, not ``NotFound``.

    A task entering ``deleting`` can never complete, so it is surfaced as
    an error alongside its status.
    """

    kind = "ec2.ebs_snapshot_import"
    empty_policy = EmptyResultPolicy.UNKNOWN
    status_path = ("Status",)

    def find(self) -> RawResourceState | None:
        task: dict[str, Any] = finders.find_import_snapshot_task(
            self._client, self._descriptor.resource_id
        )
        return task.get("SnapshotTaskDetail")

    def reduce(self, payload: RawResourceState) -> PollOutcome:
        status = self.status_of(payload) or CommonStatus.UNKNOWN
        if status == SnapshotImportStatus.DELETING:
            return PollOutcome(
                payload,
                status,
                NonRetryableError(
                    "Snapshot import task is deleting",
                    resource_id=self._descriptor.resource_id,
                ),
            )
        return PollOutcome(payload, status)


class HostReducer(FieldReducer):
    kind = "ec2.host"
    finder = finders.find_host_by_id
    status_path = ("State",)
    deleted_states = frozenset(
        {HostState.RELEASED, HostState.RELEASED_PERMANENT_FAILURE}
    )


class LocalGatewayRouteTableVpcAssociationReducer(FieldReducer):
    """An association missing from the result reports ``disassociated``."""

    kind = "ec2.local_gateway_route_table_vpc_association"
    finder = finders.find_local_gateway_route_table_vpc_association
    status_path = ("State",)

    def empty_status(self) -> Status:
        return RouteTableAssociationState.DISASSOCIATED


def instance_profile_name(arn: str) -> str:
    """Return the name of the IAM instance profile *arn*.

    Raises:
        ValueError: If *arn* is not an instance profile ARN.
    """
    resource = ArnParser().parse_arn(arn)["resource"]
    prefix = "instance-profile/"
    if not resource.startswith(prefix):
        msg = f"incorrect IAM Instance Profile ARN resource ({resource}), expected prefix {prefix}"
        raise ValueError(msg)
    return resource.rsplit("/", 1)[-1]


class InstanceIamInstanceProfileReducer(FieldReducer):
    """Status is the name of the attached instance profile.

    ``NO_INSTANCE_PROFILE`` (an empty string) when none is attached.  A
    malformed profile ARN is returned as an error alongside ``Unknown``.
    """

    kind = "ec2.instance_iam_instance_profile"
    finder = finders.find_instance_by_id

    def status_of(self, payload: RawResourceState) -> Status | None:
        arn = (payload.get("IamInstanceProfile") or {}).get("Arn")
        if not arn:
            return NO_INSTANCE_PROFILE
        return instance_profile_name(arn)

    def reduce(self, payload: RawResourceState) -> PollOutcome:
        try:
            status = self.status_of(payload)
        except ValueError as exc:
            return PollOutcome(
                payload,
                CommonStatus.UNKNOWN,
                NonRetryableError(cause=exc, resource_id=self._descriptor.resource_id),
            )
        logger.debug("poll | kind=%s | id=%s | profile=%s", self.kind, self._descriptor, status)
        return PollOutcome(payload, status)


class RouteReducer(ConstantReducer):
    """Descriptor: ``parent_id`` is the route table, ``resource_id`` the
    destination (IPv4 CIDR, IPv6 CIDR or prefix list ID)."""

    kind = "ec2.route"
    finder = finders.find_route

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class TransitGatewayPrefixListReferenceReducer(FieldReducer):
    """Descriptor: ``parent_id`` is the transit gateway route table,
    ``resource_id`` the prefix list."""

    kind = "ec2.transit_gateway_prefix_list_reference"
    finder = finders.find_transit_gateway_prefix_list_reference
    status_path = ("State",)

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class TransitGatewayRouteTablePropagationReducer(FieldReducer):
    """Descriptor: ``parent_id`` is the transit gateway route table,
    ``resource_id`` the attachment."""

    kind = "ec2.transit_gateway_route_table_propagation"
    finder = finders.find_transit_gateway_route_table_propagation
    status_path = ("State",)

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.parent_id, self._descriptor.resource_id)


class VpcAttributeReducer(FieldReducer):
    """Reports a boolean VPC attribute as ``"true"``/``"false"``.

    Descriptor: ``resource_id`` is the VPC, ``extra["attribute"]`` the API
    attribute name (``enableDnsSupport``, ``enableDnsHostnames``, ...).
    """

    kind = "ec2.vpc_attribute"
    finder = finders.find_vpc_attribute

    def finder_args(self) -> tuple[str, ...]:
        return (self._descriptor.resource_id, self._descriptor.extra.get("attribute", ""))

    def status_of(self, payload: RawResourceState) -> Status | None:
        return "true" if payload.get("Value") else "false"


REDUCERS: tuple[type[FieldReducer], ...] = (
    CarrierGatewayReducer,
    ClientVpnEndpointReducer,
    ClientVpnAuthorizationRuleReducer,
    ClientVpnNetworkAssociationReducer,
    ClientVpnRouteReducer,
    RouteTableReducer,
    RouteTableAssociationReducer,
    SecurityGroupReducer,
    SubnetMapPublicIpOnLaunchReducer,
    SubnetMapCustomerOwnedIpOnLaunchReducer,
    VpcPeeringConnectionReducer,
    VpnGatewayVpcAttachmentReducer,
    ManagedPrefixListReducer,
    VpcEndpointReducer,
    VpcEndpointRouteTableAssociationReducer,
    EbsSnapshotImportReducer,
    HostReducer,
    LocalGatewayRouteTableVpcAssociationReducer,
    InstanceIamInstanceProfileReducer,
    RouteReducer,
    TransitGatewayPrefixListReferenceReducer,
    TransitGatewayRouteTablePropagationReducer,
    VpcAttributeReducer,
)
