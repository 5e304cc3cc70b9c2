"""Finders: one describe call plus mapping of "does not exist" errors.

Every finder returns the raw resource dict or raises ``NotFoundError``;
other API errors propagate unchanged.
"""

from aws_state_poller.finders.base import describe, require, single

__all__ = [
    "describe",
    "require",
    "single",
]
