"""Status reducers for Kinesis Firehose, Step Functions and Kinesis Analytics v2."""

from __future__ import annotations

import enum

from aws_state_poller.finders import services as finders
from aws_state_poller.reducers.base import FieldReducer


class DeliveryStreamStatus(enum.StrEnum):
    CREATING = "CREATING"
    CREATING_FAILED = "CREATING_FAILED"
    DELETING = "DELETING"
    DELETING_FAILED = "DELETING_FAILED"
    ACTIVE = "ACTIVE"


class StateMachineStatus(enum.StrEnum):
    ACTIVE = "ACTIVE"
    DELETING = "DELETING"


class ApplicationStatus(enum.StrEnum):
    DELETING = "DELETING"
    STARTING = "STARTING"
    STOPPING = "STOPPING"
    READY = "READY"
    RUNNING = "RUNNING"
    UPDATING = "UPDATING"
    AUTOSCALING = "AUTOSCALING"
    FORCE_STOPPING = "FORCE_STOPPING"
    ROLLING_BACK = "ROLLING_BACK"
    MAINTENANCE = "MAINTENANCE"
    ROLLED_BACK = "ROLLED_BACK"


class DeliveryStreamReducer(FieldReducer):
    kind = "firehose.delivery_stream"
    finder = finders.find_delivery_stream_by_name
    status_path = ("DeliveryStreamStatus",)


class StateMachineReducer(FieldReducer):
    kind = "sfn.state_machine"
    finder = finders.find_state_machine_by_arn
    status_path = ("status",)


class ApplicationReducer(FieldReducer):
    kind = "kinesisanalyticsv2.application"
    finder = finders.find_application_detail_by_name
    status_path = ("ApplicationStatus",)


REDUCERS: tuple[type[FieldReducer], ...] = (
    DeliveryStreamReducer,
    StateMachineReducer,
    ApplicationReducer,
)
