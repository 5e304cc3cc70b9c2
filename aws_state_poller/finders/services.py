"""Finders for non-EC2 services.

Kinesis Firehose, Step Functions, Kinesis Analytics v2, CodePipeline,
Cognito user pools, AppSync and Directory Service.
"""

from __future__ import annotations

import logging
from typing import Any

from aws_state_poller.core.exceptions import NotFoundError
from aws_state_poller.finders.base import describe, require, single

logger = logging.getLogger(__name__)

ERR_RESOURCE_NOT_FOUND = "ResourceNotFoundException"
ERR_STATE_MACHINE_DOES_NOT_EXIST = "StateMachineDoesNotExist"
ERR_INVALID_ARGUMENT = "InvalidArgumentException"
ERR_APPSYNC_NOT_FOUND = "NotFoundException"
ERR_ENTITY_DOES_NOT_EXIST = "EntityDoesNotExistException"

COGNITO_USER_POOLS_PAGE_SIZE = 60

# ---------------------------------------------------------------------------
# Kinesis Firehose
# ---------------------------------------------------------------------------


def find_delivery_stream_by_name(client: Any, name: str) -> dict[str, Any]:
    request = {"DeliveryStreamName": name}
    output = describe(
        client.describe_delivery_stream,
        request,
        not_found_codes=(ERR_RESOURCE_NOT_FOUND,),
    )
    return require(output.get("DeliveryStreamDescription"), request)


# ---------------------------------------------------------------------------
# Step Functions
# ---------------------------------------------------------------------------


def find_state_machine_by_arn(client: Any, arn: str) -> dict[str, Any]:
    request = {"stateMachineArn": arn}
    output = describe(
        client.describe_state_machine,
        request,
        not_found_codes=(ERR_STATE_MACHINE_DOES_NOT_EXIST,),
    )
    state_machine = {k: v for k, v in output.items() if k != "ResponseMetadata"}
    require(state_machine.get("stateMachineArn"), request)
    return state_machine


# ---------------------------------------------------------------------------
# Kinesis Analytics v2
# ---------------------------------------------------------------------------


def find_application_detail_by_name(client: Any, name: str) -> dict[str, Any]:
    request = {"ApplicationName": name}
    output = describe(
        client.describe_application,
        request,
        not_found_codes=(ERR_RESOURCE_NOT_FOUND,),
    )
    return require(output.get("ApplicationDetail"), request)


def find_snapshot_details(
    client: Any,
    application_name: str,
    snapshot_name: str,
) -> dict[str, Any]:
    request = {"ApplicationName": application_name, "SnapshotName": snapshot_name}
    output = describe(
        client.describe_application_snapshot,
        request,
        not_found_codes=(ERR_RESOURCE_NOT_FOUND,),
        not_found_messages=((ERR_INVALID_ARGUMENT, "does not exist"),),
    )
    return require(output.get("SnapshotDetails"), request)


# ---------------------------------------------------------------------------
# CodePipeline
# ---------------------------------------------------------------------------


def find_webhook_by_arn(client: Any, arn: str) -> dict[str, Any]:
    """Scan ``ListWebhooks`` for the webhook with *arn*.

    The CodePipeline API has no describe call for a single webhook.
    """
    paginator = client.get_paginator("list_webhooks")
    for page in paginator.paginate():
        for webhook in page.get("webhooks", []):
            if webhook.get("arn") == arn:
                return webhook
    raise NotFoundError(f"No webhook with ARN {arn} found")


# ---------------------------------------------------------------------------
# Cognito Identity Provider
# ---------------------------------------------------------------------------


def find_user_pool_ids_by_name(client: Any, name: str) -> list[str]:
    """Return the IDs of every user pool named *name*, sorted.

    Raises:
        NotFoundError: If no user pool has that name.
    """
    paginator = client.get_paginator("list_user_pools")
    ids = [
        pool["Id"]
        for page in paginator.paginate(MaxResults=COGNITO_USER_POOLS_PAGE_SIZE)
        for pool in page.get("UserPools", [])
        if pool.get("Name") == name
    ]
    if not ids:
        raise NotFoundError(f"No cognito user pool found with name: {name}")
    logger.debug("user pools | name=%s | matches=%d", name, len(ids))
    return sorted(ids)


# ---------------------------------------------------------------------------
# AppSync
# ---------------------------------------------------------------------------


def find_function_by_id(client: Any, api_id: str, function_id: str) -> dict[str, Any]:
    request = {"apiId": api_id, "functionId": function_id}
    output = describe(
        client.get_function,
        request,
        not_found_codes=(ERR_APPSYNC_NOT_FOUND,),
    )
    return require(output.get("functionConfiguration"), request)


# ---------------------------------------------------------------------------
# Directory Service
# ---------------------------------------------------------------------------


def find_log_subscription_by_directory_id(client: Any, directory_id: str) -> dict[str, Any]:
    request = {"DirectoryId": directory_id}
    output = describe(
        client.list_log_subscriptions,
        request,
        not_found_codes=(ERR_ENTITY_DOES_NOT_EXIST,),
    )
    return single(output.get("LogSubscriptions", []), request)
