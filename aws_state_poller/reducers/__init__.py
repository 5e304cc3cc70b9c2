"""Status reducers.

A reducer polls one resource once and maps the describe response to a
coarse status:

- StatusReducer: Abstract base class defining the reduction rules
- FieldReducer / ConstantReducer: Reducers driven by a finder and a key path
- ec2 / services: Built-in reducers per resource family

Reducers are selected by kind through the factory.
"""

from aws_state_poller.reducers.base import ConstantReducer, FieldReducer, StatusReducer
from aws_state_poller.reducers.factory import (
    UnknownReducerError,
    get_reducer,
    list_reducers,
    register_reducer,
)

__all__ = [
    "ConstantReducer",
    "FieldReducer",
    "StatusReducer",
    "UnknownReducerError",
    "get_reducer",
    "list_reducers",
    "register_reducer",
]
