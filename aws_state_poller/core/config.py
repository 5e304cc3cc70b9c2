"""Sweeper configuration loaded from environment variables.

Credentials source selection and role-assumption parameters are read once
when the sweeper starts; nothing here is polled afterwards.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if no credentials
    source is configured, if static keys are incomplete, or if a numeric
    value is out of its valid range.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from aws_state_poller.core import constants as c
from aws_state_poller.core.exceptions import PollerError


class ConfigValidationError(PollerError):
    """Raised when configuration values are missing or out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class SweeperConfig:
    """Immutable sweeper configuration.

    Attributes:
        profile: Named shared-credentials profile (``AWS_PROFILE``).
        access_key_id: Static access key (``AWS_ACCESS_KEY_ID``).
        secret_access_key: Static secret key (``AWS_SECRET_ACCESS_KEY``).
        session_token: Optional static session token.
        container_credentials_uri: Container credentials endpoint.
        assume_role_arn: Role to assume before creating clients (empty = none).
        assume_role_duration_s: Assumed-role session duration in seconds.
        assume_role_external_id: External ID passed to ``AssumeRole``.
        assume_role_session_name: Session name passed to ``AssumeRole``.
        max_workers: Concurrent delete workers.
        timeout_s: Throttling retry timeout per swept resource.
    """

    profile: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""
    container_credentials_uri: str = ""
    assume_role_arn: str = ""
    assume_role_duration_s: int = c.DEFAULT_ASSUME_ROLE_DURATION_S
    assume_role_external_id: str = ""
    assume_role_session_name: str = ""
    max_workers: int = c.DEFAULT_SWEEP_MAX_WORKERS
    timeout_s: float = c.SWEEP_THROTTLING_RETRY_TIMEOUT_S

    @property
    def credentials_source(self) -> str:
        """Return which credentials source is configured."""
        if self.access_key_id:
            return "static"
        if self.profile:
            return "profile"
        if self.container_credentials_uri:
            return "container"
        return ""

    @classmethod
    def from_env(cls) -> SweeperConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If no credentials source is set, static
                credentials are incomplete, or a numeric value is invalid.
        """
        config = cls(
            profile=os.getenv(c.ENV_PROFILE, ""),
            access_key_id=os.getenv(c.ENV_ACCESS_KEY_ID, ""),
            secret_access_key=os.getenv(c.ENV_SECRET_ACCESS_KEY, ""),
            session_token=os.getenv(c.ENV_SESSION_TOKEN, ""),
            container_credentials_uri=os.getenv(c.ENV_CONTAINER_CREDENTIALS_FULL_URI, ""),
            assume_role_arn=os.getenv(c.ENV_ASSUME_ROLE_ARN, ""),
            assume_role_duration_s=_int_env(
                c.ENV_ASSUME_ROLE_DURATION, c.DEFAULT_ASSUME_ROLE_DURATION_S
            ),
            assume_role_external_id=os.getenv(c.ENV_ASSUME_ROLE_EXTERNAL_ID, ""),
            assume_role_session_name=os.getenv(c.ENV_ASSUME_ROLE_SESSION_NAME, ""),
            max_workers=_int_env(c.ENV_SWEEP_MAX_WORKERS, c.DEFAULT_SWEEP_MAX_WORKERS),
            timeout_s=_float_env(c.ENV_SWEEP_TIMEOUT_SECONDS, c.SWEEP_THROTTLING_RETRY_TIMEOUT_S),
        )
        _validate(config)
        return config


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigValidationError(key, raw, "must be an integer") from exc


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigValidationError(key, raw, "must be a number") from exc


def _validate(config: SweeperConfig) -> None:
    """Validate credentials selection and ranges.  Raises ``ConfigValidationError``."""
    if not config.credentials_source:
        raise ConfigValidationError(
            "/".join(c.CREDENTIAL_ENV_VARS),
            "",
            "one of these must be set for credentials for running sweepers",
        )

    if config.access_key_id and not config.secret_access_key:
        raise ConfigValidationError(
            c.ENV_SECRET_ACCESS_KEY,
            "",
            f"static credentials value required when using {c.ENV_ACCESS_KEY_ID}",
        )

    if config.assume_role_arn and not (
        c.MIN_ASSUME_ROLE_DURATION_S
        <= config.assume_role_duration_s
        <= c.MAX_ASSUME_ROLE_DURATION_S
    ):
        raise ConfigValidationError(
            c.ENV_ASSUME_ROLE_DURATION,
            config.assume_role_duration_s,
            f"must be between {c.MIN_ASSUME_ROLE_DURATION_S} and "
            f"{c.MAX_ASSUME_ROLE_DURATION_S} (seconds)",
        )

    if config.max_workers < 1:
        raise ConfigValidationError(
            c.ENV_SWEEP_MAX_WORKERS,
            config.max_workers,
            "must be >= 1",
        )

    if config.timeout_s <= 0:
        raise ConfigValidationError(
            c.ENV_SWEEP_TIMEOUT_SECONDS,
            config.timeout_s,
            "must be > 0 (seconds)",
        )
