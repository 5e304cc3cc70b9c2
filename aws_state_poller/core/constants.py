"""Shared poller constants: single source of truth.

Centralises timeouts, environment variable names, and the sweeper's
resource prefix so waits, finders and the sweeper agree on them.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Retry driver defaults (seconds)
# ---------------------------------------------------------------------------

DEFAULT_WAIT_TIMEOUT_S: float = 300.0
"""Overall timeout used when a caller supplies no ``RetryPolicy``."""

DEFAULT_NOT_FOUND_CHECKS: int = 20
"""Consecutive not-found polls tolerated while waiting for a target state."""

INITIAL_BACKOFF_S: float = 0.1
MAX_BACKOFF_S: float = 10.0

PROPAGATION_TIMEOUT_S: float = 120.0
"""Maximum time to wait for eventually-consistent changes to propagate."""

# ---------------------------------------------------------------------------
# Sweeper
# ---------------------------------------------------------------------------

SWEEP_THROTTLING_RETRY_TIMEOUT_S: float = 600.0
RESOURCE_PREFIX: str = "tf-acc-test"
DEFAULT_SWEEP_MAX_WORKERS: int = 8
DEFAULT_ASSUME_ROLE_DURATION_S: int = 3600
MIN_ASSUME_ROLE_DURATION_S: int = 900
MAX_ASSUME_ROLE_DURATION_S: int = 43200
DEFAULT_CLIENT_MAX_ATTEMPTS: int = 5

# ---------------------------------------------------------------------------
# Environment variable names
# ---------------------------------------------------------------------------

ENV_PROFILE = "AWS_PROFILE"
ENV_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_SESSION_TOKEN = "AWS_SESSION_TOKEN"
ENV_CONTAINER_CREDENTIALS_FULL_URI = "AWS_CONTAINER_CREDENTIALS_FULL_URI"
ENV_ASSUME_ROLE_ARN = "TF_AWS_ASSUME_ROLE_ARN"
ENV_ASSUME_ROLE_DURATION = "TF_AWS_ASSUME_ROLE_DURATION"
ENV_ASSUME_ROLE_EXTERNAL_ID = "TF_AWS_ASSUME_ROLE_EXTERNAL_ID"
ENV_ASSUME_ROLE_SESSION_NAME = "TF_AWS_ASSUME_ROLE_SESSION_NAME"
ENV_SWEEP_MAX_WORKERS = "SWEEP_MAX_WORKERS"
ENV_SWEEP_TIMEOUT_SECONDS = "SWEEP_TIMEOUT_SECONDS"

CREDENTIAL_ENV_VARS: tuple[str, ...] = (
    ENV_PROFILE,
    ENV_ACCESS_KEY_ID,
    ENV_CONTAINER_CREDENTIALS_FULL_URI,
)

# ---------------------------------------------------------------------------
# Throttling error codes: the list in botocore's standard retry mode
# (``botocore.retries.standard._THROTTLED_ERROR_CODES``).
# ---------------------------------------------------------------------------

THROTTLING_ERROR_CODES: frozenset[str] = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottledException",
        "TooManyRequestsException",
        "ProvisionedThroughputExceededException",
        "TransactionInProgressException",
        "RequestLimitExceeded",
        "BandwidthLimitExceeded",
        "LimitExceededException",
        "RequestThrottled",
        "SlowDown",
        "PriorRequestNotComplete",
        "EC2ThrottledException",
    }
)
