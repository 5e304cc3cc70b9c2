"""EC2 finders.

Each finder returns the raw resource dict (boto3 response shape), raises
``NotFoundError`` when the API reports the resource missing, or
``EmptyResultError`` when the describe call matches nothing.
"""

from __future__ import annotations

from typing import Any

from aws_state_poller.core.exceptions import EmptyResultError, NotFoundError
from aws_state_poller.finders.base import describe, require, single

# ---------------------------------------------------------------------------
# Not-found error codes
# ---------------------------------------------------------------------------

ERR_CARRIER_GATEWAY_NOT_FOUND = "InvalidCarrierGatewayID.NotFound"
ERR_CLIENT_VPN_ENDPOINT_NOT_FOUND = "InvalidClientVpnEndpointId.NotFound"
ERR_CLIENT_VPN_ASSOCIATION_NOT_FOUND = "InvalidClientVpnAssociationId.NotFound"
ERR_CLIENT_VPN_AUTHORIZATION_RULE_NOT_FOUND = "InvalidClientVpnEndpointAuthorizationRuleNotFound"
ERR_CLIENT_VPN_ROUTE_NOT_FOUND = "InvalidClientVpnRouteNotFound"
ERR_ROUTE_TABLE_NOT_FOUND = "InvalidRouteTableID.NotFound"
ERR_ASSOCIATION_NOT_FOUND = "InvalidAssociationID.NotFound"
ERR_SECURITY_GROUP_NOT_FOUND = "InvalidGroup.NotFound"
ERR_SECURITY_GROUP_ID_NOT_FOUND = "InvalidSecurityGroupID.NotFound"
ERR_SUBNET_NOT_FOUND = "InvalidSubnetID.NotFound"
ERR_VPC_PEERING_CONNECTION_NOT_FOUND = "InvalidVpcPeeringConnectionID.NotFound"
ERR_VPN_GATEWAY_NOT_FOUND = "InvalidVpnGatewayID.NotFound"
ERR_PREFIX_LIST_NOT_FOUND = "InvalidPrefixListID.NotFound"
ERR_VPC_ENDPOINT_NOT_FOUND = "InvalidVpcEndpointId.NotFound"
ERR_HOST_NOT_FOUND = "InvalidHostID.NotFound"
ERR_INSTANCE_NOT_FOUND = "InvalidInstanceID.NotFound"
ERR_VPC_NOT_FOUND = "InvalidVpcID.NotFound"


def find_carrier_gateway_by_id(client: Any, carrier_gateway_id: str) -> dict[str, Any]:
    request = {"CarrierGatewayIds": [carrier_gateway_id]}
    output = describe(
        client.describe_carrier_gateways,
        request,
        not_found_codes=(ERR_CARRIER_GATEWAY_NOT_FOUND,),
    )
    return single(output.get("CarrierGateways", []), request)


def find_client_vpn_endpoint_by_id(client: Any, endpoint_id: str) -> dict[str, Any]:
    request = {"ClientVpnEndpointIds": [endpoint_id]}
    output = describe(
        client.describe_client_vpn_endpoints,
        request,
        not_found_codes=(ERR_CLIENT_VPN_ENDPOINT_NOT_FOUND,),
    )
    return single(output.get("ClientVpnEndpoints", []), request)


def find_client_vpn_authorization_rule(
    client: Any,
    endpoint_id: str,
    target_network_cidr: str,
    access_group_id: str = "",
) -> dict[str, Any]:
    """Find the authorization rule for *target_network_cidr* on an endpoint.

    An empty *access_group_id* matches rules that authorize all groups.
    """
    filters = [{"Name": "destination-cidr", "Values": [target_network_cidr]}]
    if access_group_id:
        filters.append({"Name": "group-id", "Values": [access_group_id]})
    request = {"ClientVpnEndpointId": endpoint_id, "Filters": filters}
    output = describe(
        client.describe_client_vpn_authorization_rules,
        request,
        not_found_codes=(
            ERR_CLIENT_VPN_ENDPOINT_NOT_FOUND,
            ERR_CLIENT_VPN_AUTHORIZATION_RULE_NOT_FOUND,
        ),
    )
    return single(output.get("AuthorizationRules", []), request)


def find_client_vpn_network_association(
    client: Any,
    endpoint_id: str,
    association_id: str,
) -> dict[str, Any]:
    request = {"ClientVpnEndpointId": endpoint_id, "AssociationIds": [association_id]}
    output = describe(
        client.describe_client_vpn_target_networks,
        request,
        not_found_codes=(
            ERR_CLIENT_VPN_ASSOCIATION_NOT_FOUND,
            ERR_CLIENT_VPN_ENDPOINT_NOT_FOUND,
        ),
    )
    return single(output.get("ClientVpnTargetNetworks", []), request)


def find_client_vpn_route(
    client: Any,
    endpoint_id: str,
    destination_cidr: str,
    target_subnet_id: str,
) -> dict[str, Any]:
    request = {
        "ClientVpnEndpointId": endpoint_id,
        "Filters": [
            {"Name": "destination-cidr", "Values": [destination_cidr]},
            {"Name": "target-subnet", "Values": [target_subnet_id]},
        ],
    }
    output = describe(
        client.describe_client_vpn_routes,
        request,
        not_found_codes=(ERR_CLIENT_VPN_ENDPOINT_NOT_FOUND, ERR_CLIENT_VPN_ROUTE_NOT_FOUND),
    )
    return single(output.get("Routes", []), request)


def find_route_table_by_id(client: Any, route_table_id: str) -> dict[str, Any]:
    request = {"RouteTableIds": [route_table_id]}
    output = describe(
        client.describe_route_tables,
        request,
        not_found_codes=(ERR_ROUTE_TABLE_NOT_FOUND,),
    )
    return single(output.get("RouteTables", []), request)


def find_route_table_association_by_id(client: Any, association_id: str) -> dict[str, Any]:
    """Find a route table association by searching the owning route table."""
    request = {
        "Filters": [
            {"Name": "association.route-table-association-id", "Values": [association_id]},
        ],
    }
    output = describe(
        client.describe_route_tables,
        request,
        not_found_codes=(ERR_ROUTE_TABLE_NOT_FOUND, ERR_ASSOCIATION_NOT_FOUND),
    )
    for table in output.get("RouteTables", []):
        for association in table.get("Associations", []):
            if association.get("RouteTableAssociationId") == association_id:
                return association
    raise EmptyResultError(last_request=request)


def find_security_group_by_id(client: Any, group_id: str) -> dict[str, Any]:
    request = {"GroupIds": [group_id]}
    output = describe(
        client.describe_security_groups,
        request,
        not_found_codes=(ERR_SECURITY_GROUP_NOT_FOUND, ERR_SECURITY_GROUP_ID_NOT_FOUND),
    )
    return single(output.get("SecurityGroups", []), request)


def find_subnet_by_id(client: Any, subnet_id: str) -> dict[str, Any]:
    request = {"SubnetIds": [subnet_id]}
    output = describe(
        client.describe_subnets,
        request,
        not_found_codes=(ERR_SUBNET_NOT_FOUND,),
    )
    return single(output.get("Subnets", []), request)


def find_vpc_peering_connection_by_id(client: Any, connection_id: str) -> dict[str, Any]:
    request = {"VpcPeeringConnectionIds": [connection_id]}
    output = describe(
        client.describe_vpc_peering_connections,
        request,
        not_found_codes=(ERR_VPC_PEERING_CONNECTION_NOT_FOUND,),
    )
    return single(output.get("VpcPeeringConnections", []), request)


def find_vpn_gateway_vpc_attachment(
    client: Any,
    vpn_gateway_id: str,
    vpc_id: str,
) -> dict[str, Any]:
    request = {"VpnGatewayIds": [vpn_gateway_id]}
    output = describe(
        client.describe_vpn_gateways,
        request,
        not_found_codes=(ERR_VPN_GATEWAY_NOT_FOUND,),
    )
    gateway = single(output.get("VpnGateways", []), request)
    for attachment in gateway.get("VpcAttachments", []):
        if attachment.get("VpcId") == vpc_id:
            return attachment
    raise EmptyResultError(last_request=request)


def find_managed_prefix_list_by_id(client: Any, prefix_list_id: str) -> dict[str, Any]:
    request = {"PrefixListIds": [prefix_list_id]}
    output = describe(
        client.describe_managed_prefix_lists,
        request,
        not_found_codes=(ERR_PREFIX_LIST_NOT_FOUND,),
    )
    return single(output.get("PrefixLists", []), request)


def find_vpc_endpoint_by_id(client: Any, vpc_endpoint_id: str) -> dict[str, Any]:
    request = {"VpcEndpointIds": [vpc_endpoint_id]}
    output = describe(
        client.describe_vpc_endpoints,
        request,
        not_found_codes=(ERR_VPC_ENDPOINT_NOT_FOUND,),
    )
    return single(output.get("VpcEndpoints", []), request)


def find_vpc_endpoint_route_table_association(
    client: Any,
    vpc_endpoint_id: str,
    route_table_id: str,
) -> dict[str, Any]:
    """Return the VPC endpoint if *route_table_id* is associated with it."""
    endpoint = find_vpc_endpoint_by_id(client, vpc_endpoint_id)
    if route_table_id not in endpoint.get("RouteTableIds", []):
        raise NotFoundError(
            f"VPC Endpoint ({vpc_endpoint_id}) Route Table ({route_table_id}) "
            "Association not found",
        )
    return endpoint


def find_import_snapshot_task(client: Any, import_task_id: str) -> dict[str, Any]:
    request = {"ImportTaskIds": [import_task_id]}
    output = describe(client.describe_import_snapshot_tasks, request)
    return single(output.get("ImportSnapshotTasks", []), request)


def find_host_by_id(client: Any, host_id: str) -> dict[str, Any]:
    request = {"HostIds": [host_id]}
    output = describe(
        client.describe_hosts,
        request,
        not_found_codes=(ERR_HOST_NOT_FOUND,),
    )
    return single(output.get("Hosts", []), request)


def find_local_gateway_route_table_vpc_association(
    client: Any, association_id: str
) -> dict[str, Any]:
    request = {"LocalGatewayRouteTableVpcAssociationIds": [association_id]}
    output = describe(client.describe_local_gateway_route_table_vpc_associations, request)
    for association in output.get("LocalGatewayRouteTableVpcAssociations", []):
        if not association:
            continue
        if association.get("LocalGatewayRouteTableVpcAssociationId") == association_id:
            return association
    raise EmptyResultError(last_request=request)


def find_instance_by_id(client: Any, instance_id: str) -> dict[str, Any]:
    """Find an instance.  Terminated instances count as not found."""
    request = {"InstanceIds": [instance_id]}
    output = describe(
        client.describe_instances,
        request,
        not_found_codes=(ERR_INSTANCE_NOT_FOUND,),
    )
    instances = [
        instance
        for reservation in output.get("Reservations", [])
        for instance in reservation.get("Instances", [])
    ]
    instance = single(instances, request)
    if instance.get("State", {}).get("Name") == "terminated":
        raise NotFoundError(f"EC2 Instance ({instance_id}) is terminated", last_request=request)
    return instance


def find_route(client: Any, route_table_id: str, destination: str) -> dict[str, Any]:
    """Find the route for *destination* in a route table.

    *destination* is matched against the IPv4 CIDR, IPv6 CIDR and prefix
    list destination of each route.
    """
    table = find_route_table_by_id(client, route_table_id)
    for route in table.get("Routes", []):
        destinations = (
            route.get("DestinationCidrBlock"),
            route.get("DestinationIpv6CidrBlock"),
            route.get("DestinationPrefixListId"),
        )
        if destination in destinations:
            return route
    raise NotFoundError(
        f"Route in Route Table ({route_table_id}) with destination ({destination}) not found",
    )


def find_transit_gateway_prefix_list_reference(
    client: Any,
    route_table_id: str,
    prefix_list_id: str,
) -> dict[str, Any]:
    request = {
        "TransitGatewayRouteTableId": route_table_id,
        "Filters": [{"Name": "prefix-list-id", "Values": [prefix_list_id]}],
    }
    output = describe(
        client.get_transit_gateway_prefix_list_references,
        request,
        not_found_codes=(ERR_ROUTE_TABLE_NOT_FOUND,),
    )
    for reference in output.get("TransitGatewayPrefixListReferences", []):
        if reference and reference.get("PrefixListId") == prefix_list_id:
            return reference
    raise EmptyResultError(last_request=request)


def find_transit_gateway_route_table_propagation(
    client: Any,
    route_table_id: str,
    attachment_id: str,
) -> dict[str, Any]:
    request = {
        "TransitGatewayRouteTableId": route_table_id,
        "Filters": [{"Name": "transit-gateway-attachment-id", "Values": [attachment_id]}],
    }
    output = describe(
        client.get_transit_gateway_route_table_propagations,
        request,
        not_found_codes=(ERR_ROUTE_TABLE_NOT_FOUND,),
    )
    for propagation in output.get("TransitGatewayRouteTablePropagations", []):
        if propagation and propagation.get("TransitGatewayAttachmentId") == attachment_id:
            return propagation
    raise EmptyResultError(last_request=request)


def find_vpc_attribute(client: Any, vpc_id: str, attribute: str) -> dict[str, Any]:
    """Return the ``{"Value": bool}`` block of a VPC attribute.

    *attribute* is the API name (``enableDnsSupport``); the response key
    is the same name with a capital first letter.
    """
    request = {"VpcId": vpc_id, "Attribute": attribute}
    output = describe(
        client.describe_vpc_attribute,
        request,
        not_found_codes=(ERR_VPC_NOT_FOUND,),
    )
    return require(output.get(attribute[:1].upper() + attribute[1:]), request)
