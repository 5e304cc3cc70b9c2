"""Tests for status reducers.

Verifies the reduction rules: not found, empty result policy, API errors
returned as values, terminal deleted lifecycle values, and idempotence.
"""

from __future__ import annotations

import unittest
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from aws_state_poller.core.exceptions import NonRetryableError
from aws_state_poller.models import CommonStatus, PollOutcome, ResourceDescriptor
from aws_state_poller.reducers import ec2, services


def _client_error(code: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Describe")


def _peering(code: str | None, message: str = "") -> dict:
    connection: dict = {"VpcPeeringConnectionId": "pcx-1"}
    if code is not None:
        connection["Status"] = {"Code": code, "Message": message}
    return {"VpcPeeringConnections": [connection]}


class TestReductionRules(unittest.TestCase):
    """Rules shared by every reducer, exercised through the carrier gateway."""

    def setUp(self) -> None:
        self.client = MagicMock()
        self.reducer = ec2.CarrierGatewayReducer(self.client, ResourceDescriptor("cagw-1"))

    def _returns(self, *gateways: dict) -> None:
        self.client.describe_carrier_gateways.return_value = {"CarrierGateways": list(gateways)}

    def test_lifecycle_value(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1", "State": "available"})
        outcome = self.reducer()
        assert outcome.status == "available"
        assert outcome.payload == {"CarrierGatewayId": "cagw-1", "State": "available"}
        assert outcome.error is None

    def test_not_found_code(self) -> None:
        self.client.describe_carrier_gateways.side_effect = _client_error(
            "InvalidCarrierGatewayID.NotFound"
        )
        assert self.reducer() == PollOutcome(None, CommonStatus.NOT_FOUND, None)

    def test_empty_result_is_not_found(self) -> None:
        self._returns()
        assert self.reducer() == PollOutcome(None, "NotFound", None)

    def test_deleted_state_is_not_found(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1", "State": "deleted"})
        assert self.reducer() == PollOutcome.not_found()

    def test_api_error_returned_as_value(self) -> None:
        err = _client_error("AccessDenied", "denied")
        self.client.describe_carrier_gateways.side_effect = err
        outcome = self.reducer()
        assert outcome.payload is None
        assert outcome.status == CommonStatus.UNKNOWN
        assert outcome.error is err

    def test_missing_status_field_is_unknown(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1"})
        outcome = self.reducer()
        assert outcome.status == CommonStatus.UNKNOWN
        assert outcome.payload is not None

    def test_too_many_results_returned_as_error(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1"}, {"CarrierGatewayId": "cagw-1"})
        outcome = self.reducer()
        assert outcome.error is not None
        assert "too many results" in str(outcome.error)

    def test_idempotent(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1", "State": "pending"})
        first = self.reducer()
        second = self.reducer()
        assert first == second
        assert self.client.describe_carrier_gateways.call_count == 2

    def test_refresh_is_single_describe_call(self) -> None:
        self._returns({"CarrierGatewayId": "cagw-1", "State": "pending"})
        self.reducer.refresh()
        self.client.describe_carrier_gateways.assert_called_once_with(CarrierGatewayIds=["cagw-1"])


class TestVpcPeeringConnectionReducer:
    @pytest.mark.parametrize("code", ["deleted", "expired", "rejected", "failed"])
    def test_terminal_codes_are_not_found(self, code: str) -> None:
        client = MagicMock()
        client.describe_vpc_peering_connections.return_value = _peering(code, "reason")
        reducer = ec2.VpcPeeringConnectionReducer(client, ResourceDescriptor("pcx-1"))
        assert reducer() == PollOutcome(None, CommonStatus.NOT_FOUND, None)

    def test_active(self) -> None:
        client = MagicMock()
        client.describe_vpc_peering_connections.return_value = _peering("active")
        outcome = ec2.VpcPeeringConnectionReducer(client, ResourceDescriptor("pcx-1"))()
        assert outcome.status == ec2.VpcPeeringConnectionStatus.ACTIVE

    def test_missing_status_is_not_found(self) -> None:
        client = MagicMock()
        client.describe_vpc_peering_connections.return_value = _peering(None)
        outcome = ec2.VpcPeeringConnectionReducer(client, ResourceDescriptor("pcx-1"))()
        assert outcome.is_not_found

    def test_failed_logs_provider_message(self, caplog: pytest.LogCaptureFixture) -> None:
        client = MagicMock()
        client.describe_vpc_peering_connections.return_value = _peering("failed", "CIDR overlap")
        with caplog.at_level("WARNING", logger="aws_state_poller.reducers.ec2"):
            ec2.VpcPeeringConnectionReducer(client, ResourceDescriptor("pcx-1"))()
        assert "CIDR overlap" in caplog.text


class TestEc2Reducers:
    def test_client_vpn_endpoint_nested_status(self) -> None:
        client = MagicMock()
        client.describe_client_vpn_endpoints.return_value = {
            "ClientVpnEndpoints": [{"Status": {"Code": "pending-associate"}}]
        }
        outcome = ec2.ClientVpnEndpointReducer(client, ResourceDescriptor("cvpn-1"))()
        assert outcome.status == ec2.ClientVpnEndpointStatus.PENDING_ASSOCIATE

    def test_client_vpn_route_uses_descriptor_parts(self) -> None:
        client = MagicMock()
        client.describe_client_vpn_routes.return_value = {
            "Routes": [{"Status": {"Code": "active"}}]
        }
        descriptor = ResourceDescriptor(
            "10.0.0.0/16", parent_id="cvpn-1", extra={"target_subnet_id": "subnet-1"}
        )
        outcome = ec2.ClientVpnRouteReducer(client, descriptor)()
        assert outcome.status == "active"
        kwargs = client.describe_client_vpn_routes.call_args.kwargs
        assert kwargs["ClientVpnEndpointId"] == "cvpn-1"
        assert {"Name": "target-subnet", "Values": ["subnet-1"]} in kwargs["Filters"]

    def test_route_table_is_ready_when_found(self) -> None:
        client = MagicMock()
        client.describe_route_tables.return_value = {"RouteTables": [{"RouteTableId": "rtb-1"}]}
        outcome = ec2.RouteTableReducer(client, ResourceDescriptor("rtb-1"))()
        assert outcome.status == CommonStatus.READY

    def test_security_group_created(self) -> None:
        client = MagicMock()
        client.describe_security_groups.return_value = {"SecurityGroups": [{"GroupId": "sg-1"}]}
        outcome = ec2.SecurityGroupReducer(client, ResourceDescriptor("sg-1"))()
        assert outcome.status == "Created"

    @pytest.mark.parametrize(("value", "expected"), [(True, "true"), (False, "false")])
    def test_subnet_map_public_ip(self, value: bool, expected: str) -> None:
        client = MagicMock()
        client.describe_subnets.return_value = {
            "Subnets": [{"SubnetId": "subnet-1", "MapPublicIpOnLaunch": value}]
        }
        outcome = ec2.SubnetMapPublicIpOnLaunchReducer(client, ResourceDescriptor("subnet-1"))()
        assert outcome.status == expected

    def test_subnet_customer_owned_ip_missing_is_false(self) -> None:
        client = MagicMock()
        client.describe_subnets.return_value = {"Subnets": [{"SubnetId": "subnet-1"}]}
        reducer = ec2.SubnetMapCustomerOwnedIpOnLaunchReducer(client, ResourceDescriptor("subnet-1"))
        assert reducer().status == "false"

    def test_vpn_attachment_detached_is_not_found(self) -> None:
        client = MagicMock()
        client.describe_vpn_gateways.return_value = {
            "VpnGateways": [{"VpcAttachments": [{"VpcId": "vpc-1", "State": "detached"}]}]
        }
        descriptor = ResourceDescriptor("vpc-1", parent_id="vgw-1")
        assert ec2.VpnGatewayVpcAttachmentReducer(client, descriptor)().is_not_found

    def test_vpn_attachment_missing_is_not_found(self) -> None:
        client = MagicMock()
        client.describe_vpn_gateways.return_value = {"VpnGateways": [{"VpcAttachments": []}]}
        descriptor = ResourceDescriptor("vpc-1", parent_id="vgw-1")
        assert ec2.VpnGatewayVpcAttachmentReducer(client, descriptor)().is_not_found

    def test_vpc_endpoint_state_lowercased(self) -> None:
        client = MagicMock()
        client.describe_vpc_endpoints.return_value = {
            "VpcEndpoints": [{"VpcEndpointId": "vpce-1", "State": "PendingAcceptance"}]
        }
        outcome = ec2.VpcEndpointReducer(client, ResourceDescriptor("vpce-1"))()
        assert outcome.status == ec2.VpcEndpointState.PENDING_ACCEPTANCE

    def test_vpc_endpoint_deleted_is_not_found(self) -> None:
        client = MagicMock()
        client.describe_vpc_endpoints.return_value = {
            "VpcEndpoints": [{"VpcEndpointId": "vpce-1", "State": "Deleted"}]
        }
        assert ec2.VpcEndpointReducer(client, ResourceDescriptor("vpce-1"))().is_not_found

    def test_host_released_is_not_found(self) -> None:
        client = MagicMock()
        client.describe_hosts.return_value = {"Hosts": [{"HostId": "h-1", "State": "released"}]}
        assert ec2.HostReducer(client, ResourceDescriptor("h-1"))().is_not_found


class TestEbsSnapshotImportReducer:
    def _reducer(self, tasks: list[dict]) -> ec2.EbsSnapshotImportReducer:
        client = MagicMock()
        client.describe_import_snapshot_tasks.return_value = {"ImportSnapshotTasks": tasks}
        return ec2.EbsSnapshotImportReducer(client, ResourceDescriptor("import-snap-1"))

    def test_empty_result_is_unknown(self) -> None:
        outcome = self._reducer([])()
        assert outcome == PollOutcome(None, CommonStatus.UNKNOWN, None)

    def test_completed(self) -> None:
        outcome = self._reducer([{"SnapshotTaskDetail": {"Status": "completed"}}])()
        assert outcome.status == ec2.SnapshotImportStatus.COMPLETED
        assert outcome.payload == {"Status": "completed"}

    def test_deleting_carries_error(self) -> None:
        outcome = self._reducer([{"SnapshotTaskDetail": {"Status": "deleting"}}])()
        assert outcome.status == "deleting"
        assert isinstance(outcome.error, NonRetryableError)


class TestLocalGatewayRouteTableVpcAssociationReducer:
    def _reducer(self, associations: list[dict]) -> ec2.LocalGatewayRouteTableVpcAssociationReducer:
        client = MagicMock()
        client.describe_local_gateway_route_table_vpc_associations.return_value = {
            "LocalGatewayRouteTableVpcAssociations": associations
        }
        return ec2.LocalGatewayRouteTableVpcAssociationReducer(
            client, ResourceDescriptor("lgw-vpc-assoc-1")
        )

    def test_state(self) -> None:
        outcome = self._reducer(
            [{"LocalGatewayRouteTableVpcAssociationId": "lgw-vpc-assoc-1", "State": "associated"}]
        )()
        assert outcome.status == "associated"
        assert outcome.payload is not None

    def test_missing_association_is_disassociated(self) -> None:
        outcome = self._reducer([])()
        assert outcome == PollOutcome(None, ec2.RouteTableAssociationState.DISASSOCIATED, None)

    def test_other_association_ignored(self) -> None:
        outcome = self._reducer(
            [{"LocalGatewayRouteTableVpcAssociationId": "lgw-vpc-assoc-2", "State": "associated"}]
        )()
        assert outcome.status == "disassociated"
        assert outcome.payload is None


class TestInstanceIamInstanceProfileReducer:
    def _reducer(self, instance: dict) -> ec2.InstanceIamInstanceProfileReducer:
        client = MagicMock()
        client.describe_instances.return_value = {"Reservations": [{"Instances": [instance]}]}
        return ec2.InstanceIamInstanceProfileReducer(client, ResourceDescriptor("i-1"))

    def test_profile_name_from_arn(self) -> None:
        outcome = self._reducer(
            {
                "InstanceId": "i-1",
                "IamInstanceProfile": {
                    "Arn": "arn:aws:iam::123456789012:instance-profile/team/tf-acc-test-profile"
                },
            }
        )()
        assert outcome.status == "tf-acc-test-profile"
        assert outcome.error is None

    def test_no_profile_attached(self) -> None:
        outcome = self._reducer({"InstanceId": "i-1"})()
        assert outcome.status == ec2.NO_INSTANCE_PROFILE == ""
        assert outcome.payload == {"InstanceId": "i-1"}

    def test_malformed_arn_carries_error(self) -> None:
        outcome = self._reducer(
            {"InstanceId": "i-1", "IamInstanceProfile": {"Arn": "arn:aws:iam::123456789012:role/r"}}
        )()
        assert outcome.status == CommonStatus.UNKNOWN
        assert isinstance(outcome.error, NonRetryableError)

    def test_terminated_instance_is_not_found(self) -> None:
        outcome = self._reducer({"InstanceId": "i-1", "State": {"Name": "terminated"}})()
        assert outcome.is_not_found

    def test_instance_not_found_code(self, client_error: Callable[..., ClientError]) -> None:
        client = MagicMock()
        client.describe_instances.side_effect = client_error("InvalidInstanceID.NotFound")
        reducer = ec2.InstanceIamInstanceProfileReducer(client, ResourceDescriptor("i-1"))
        assert reducer().is_not_found

    @pytest.mark.parametrize(
        ("arn", "expected"),
        [
            ("arn:aws:iam::123456789012:instance-profile/name", "name"),
            ("arn:aws-us-gov:iam::123456789012:instance-profile/a/b/name", "name"),
        ],
    )
    def test_instance_profile_name(self, arn: str, expected: str) -> None:
        assert ec2.instance_profile_name(arn) == expected

    @pytest.mark.parametrize("arn", ["not-an-arn", "arn:aws:iam::123456789012:role/name"])
    def test_instance_profile_name_rejects(self, arn: str) -> None:
        with pytest.raises(ValueError):
            ec2.instance_profile_name(arn)


class TestRouteReducer:
    def _client(self) -> MagicMock:
        client = MagicMock()
        client.describe_route_tables.return_value = {
            "RouteTables": [
                {
                    "RouteTableId": "rtb-1",
                    "Routes": [
                        {"DestinationCidrBlock": "10.0.0.0/16", "GatewayId": "local"},
                        {"DestinationIpv6CidrBlock": "::/0", "GatewayId": "igw-1"},
                        {"DestinationPrefixListId": "pl-1", "GatewayId": "vgw-1"},
                    ],
                }
            ]
        }
        return client

    @pytest.mark.parametrize("destination", ["10.0.0.0/16", "::/0", "pl-1"])
    def test_ready_for_each_destination_type(self, destination: str) -> None:
        descriptor = ResourceDescriptor(destination, parent_id="rtb-1")
        outcome = ec2.RouteReducer(self._client(), descriptor)()
        assert outcome.status == CommonStatus.READY
        assert outcome.payload is not None

    def test_missing_route_is_not_found(self) -> None:
        descriptor = ResourceDescriptor("192.168.0.0/24", parent_id="rtb-1")
        assert ec2.RouteReducer(self._client(), descriptor)().is_not_found


class TestTransitGatewayReducers:
    def test_prefix_list_reference_state(self) -> None:
        client = MagicMock()
        client.get_transit_gateway_prefix_list_references.return_value = {
            "TransitGatewayPrefixListReferences": [{"PrefixListId": "pl-1", "State": "modifying"}]
        }
        descriptor = ResourceDescriptor("pl-1", parent_id="tgw-rtb-1")
        outcome = ec2.TransitGatewayPrefixListReferenceReducer(client, descriptor)()
        assert outcome.status == ec2.TransitGatewayPrefixListReferenceState.MODIFYING
        kwargs = client.get_transit_gateway_prefix_list_references.call_args.kwargs
        assert kwargs["TransitGatewayRouteTableId"] == "tgw-rtb-1"

    def test_prefix_list_reference_missing_is_not_found(self) -> None:
        client = MagicMock()
        client.get_transit_gateway_prefix_list_references.return_value = {
            "TransitGatewayPrefixListReferences": []
        }
        descriptor = ResourceDescriptor("pl-1", parent_id="tgw-rtb-1")
        assert ec2.TransitGatewayPrefixListReferenceReducer(client, descriptor)().is_not_found

    def test_route_table_propagation_state(self) -> None:
        client = MagicMock()
        client.get_transit_gateway_route_table_propagations.return_value = {
            "TransitGatewayRouteTablePropagations": [
                {"TransitGatewayAttachmentId": "tgw-attach-2", "State": "disabled"},
                {"TransitGatewayAttachmentId": "tgw-attach-1", "State": "enabled"},
            ]
        }
        descriptor = ResourceDescriptor("tgw-attach-1", parent_id="tgw-rtb-1")
        outcome = ec2.TransitGatewayRouteTablePropagationReducer(client, descriptor)()
        assert outcome.status == ec2.TransitGatewayPropagationState.ENABLED


class TestVpcAttributeReducer:
    @pytest.mark.parametrize(("value", "expected"), [(True, "true"), (False, "false")])
    def test_boolean_attribute(self, value: bool, expected: str) -> None:
        client = MagicMock()
        client.describe_vpc_attribute.return_value = {
            "VpcId": "vpc-1",
            "EnableDnsHostnames": {"Value": value},
        }
        descriptor = ResourceDescriptor("vpc-1", extra={"attribute": "enableDnsHostnames"})
        outcome = ec2.VpcAttributeReducer(client, descriptor)()
        assert outcome.status == expected
        client.describe_vpc_attribute.assert_called_once_with(
            VpcId="vpc-1", Attribute="enableDnsHostnames"
        )

    def test_vpc_not_found(self, client_error: Callable[..., ClientError]) -> None:
        client = MagicMock()
        client.describe_vpc_attribute.side_effect = client_error("InvalidVpcID.NotFound")
        descriptor = ResourceDescriptor("vpc-1", extra={"attribute": "enableDnsSupport"})
        assert ec2.VpcAttributeReducer(client, descriptor)().is_not_found


class TestServiceReducers:
    def test_delivery_stream(self) -> None:
        client = MagicMock()
        client.describe_delivery_stream.return_value = {
            "DeliveryStreamDescription": {"DeliveryStreamStatus": "CREATING"}
        }
        outcome = services.DeliveryStreamReducer(client, ResourceDescriptor("s1"))()
        assert outcome.status == services.DeliveryStreamStatus.CREATING

    def test_state_machine_not_found(self, client_error: Callable[..., ClientError]) -> None:
        client = MagicMock()
        client.describe_state_machine.side_effect = client_error("StateMachineDoesNotExist")
        assert services.StateMachineReducer(client, ResourceDescriptor("arn:sm"))().is_not_found

    def test_application(self) -> None:
        client = MagicMock()
        client.describe_application.return_value = {
            "ApplicationDetail": {"ApplicationStatus": "READY"}
        }
        outcome = services.ApplicationReducer(client, ResourceDescriptor("app"))()
        assert outcome.status == services.ApplicationStatus.READY
