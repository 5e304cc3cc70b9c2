"""Tests for the reducer factory (registry, lookup, custom registration)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aws_state_poller.models import ResourceDescriptor
from aws_state_poller.reducers import ConstantReducer, StatusReducer
from aws_state_poller.reducers.ec2 import CarrierGatewayReducer
from aws_state_poller.reducers.factory import (
    _REDUCER_REGISTRY,
    UnknownReducerError,
    get_reducer,
    list_reducers,
    register_reducer,
)
from aws_state_poller.reducers.services import StateMachineReducer


class _CustomReducer(ConstantReducer):
    kind = "test.custom"

    @staticmethod
    def finder(client: object, resource_id: str) -> dict:
        return {"Id": resource_id}


@pytest.fixture()
def _restore_registry():
    saved = dict(_REDUCER_REGISTRY)
    yield
    _REDUCER_REGISTRY.clear()
    _REDUCER_REGISTRY.update(saved)


class TestGetReducer:
    def test_builtin_ec2(self) -> None:
        reducer = get_reducer("ec2.carrier_gateway", MagicMock(), ResourceDescriptor("cagw-1"))
        assert isinstance(reducer, CarrierGatewayReducer)
        assert reducer.descriptor.resource_id == "cagw-1"

    def test_builtin_service(self) -> None:
        reducer = get_reducer("sfn.state_machine", MagicMock(), ResourceDescriptor("arn:sm"))
        assert isinstance(reducer, StateMachineReducer)

    def test_unknown_kind(self) -> None:
        with pytest.raises(UnknownReducerError, match="Unknown status reducer: 'nope.thing'"):
            get_reducer("nope.thing", MagicMock(), ResourceDescriptor("x"))

    def test_every_listed_kind_resolves(self) -> None:
        for kind in list_reducers():
            reducer = get_reducer(kind, MagicMock(), ResourceDescriptor("id-1", parent_id="p-1"))
            assert isinstance(reducer, StatusReducer)
            assert reducer.kind == kind


class TestListReducers:
    def test_sorted_and_complete(self) -> None:
        kinds = list_reducers()
        assert kinds == sorted(kinds)
        assert "ec2.vpc_peering_connection" in kinds
        assert "firehose.delivery_stream" in kinds
        assert "kinesisanalyticsv2.application" in kinds


@pytest.mark.usefixtures("_restore_registry")
class TestRegisterReducer:
    def test_register_custom(self) -> None:
        register_reducer("test.custom", lambda: _CustomReducer)
        reducer = get_reducer("test.custom", MagicMock(), ResourceDescriptor("c-1"))
        outcome = reducer()
        assert outcome.status == "ready"
        assert outcome.payload == {"Id": "c-1"}
        assert "test.custom" in list_reducers()

    def test_custom_does_not_hide_builtins(self) -> None:
        register_reducer("test.custom", lambda: _CustomReducer)
        assert "ec2.carrier_gateway" in list_reducers()

    def test_empty_kind_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            register_reducer("", lambda: _CustomReducer)
