"""AWS Resource State Poller.

Reduces AWS describe responses to coarse lifecycle statuses, waits for
resources to reach a target status with bounded retries, and deletes
leftover test resources in parallel on a best-effort basis.
"""

__version__ = "0.1.0"
