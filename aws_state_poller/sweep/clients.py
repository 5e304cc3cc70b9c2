"""Per-region AWS clients shared by concurrent sweepers.

``ClientRegistry`` builds at most one client bundle per region, however
many sweeper threads ask for it at once.  The default factory creates a
``boto3.Session`` from ``SweeperConfig`` (assuming a role through STS
when one is configured) and hands out service clients from it.

Usage::

    registry = ClientRegistry.from_config(SweeperConfig.from_env())
    ec2 = registry.get("us-west-2").client("ec2")
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config

from aws_state_poller.core.constants import DEFAULT_CLIENT_MAX_ATTEMPTS
from aws_state_poller.utils.partitions import partition, partition_dns_suffix

if TYPE_CHECKING:
    from collections.abc import Callable

    from aws_state_poller.core.config import SweeperConfig

logger = logging.getLogger("aws_state_poller.sweep.clients")

DEFAULT_SESSION_NAME = "aws-state-poller-sweeper"


def client_config() -> Config:
    """botocore configuration applied to every sweeper client."""
    return Config(retries={"max_attempts": DEFAULT_CLIENT_MAX_ATTEMPTS, "mode": "standard"})


def build_session(config: SweeperConfig, region: str) -> boto3.Session:
    """Create a session for *region* from *config*.

    Container credentials need no explicit wiring: boto3's default chain
    reads ``AWS_CONTAINER_CREDENTIALS_FULL_URI`` itself.
    """
    kwargs: dict[str, Any] = {"region_name": region}
    if config.credentials_source == "static":
        kwargs["aws_access_key_id"] = config.access_key_id
        kwargs["aws_secret_access_key"] = config.secret_access_key
        if config.session_token:
            kwargs["aws_session_token"] = config.session_token
    elif config.credentials_source == "profile":
        kwargs["profile_name"] = config.profile

    session = boto3.Session(**kwargs)
    if not config.assume_role_arn:
        return session

    params: dict[str, Any] = {
        "RoleArn": config.assume_role_arn,
        "RoleSessionName": config.assume_role_session_name or DEFAULT_SESSION_NAME,
        "DurationSeconds": config.assume_role_duration_s,
    }
    if config.assume_role_external_id:
        params["ExternalId"] = config.assume_role_external_id

    logger.info(
        "assuming role | region=%s | role=%s | duration=%ds",
        region,
        config.assume_role_arn,
        config.assume_role_duration_s,
    )
    credentials = session.client("sts", config=client_config()).assume_role(**params)[
        "Credentials"
    ]
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region,
    )


class RegionalClients:
    """Service clients for one region, created on first use.

    Cached clients are returned without locking; only the first request
    for a service takes the lock.
    """

    def __init__(self, session: boto3.Session, region: str) -> None:
        self.session = session
        self.region = region
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def partition(self) -> str:
        return partition(self.region)

    @property
    def dns_suffix(self) -> str:
        return partition_dns_suffix(self.region)

    def client(self, service: str) -> Any:
        client = self._clients.get(service)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(service)
            if client is None:
                client = self.session.client(
                    service, region_name=self.region, config=client_config()
                )
                self._clients[service] = client
        return client


def session_client_factory(config: SweeperConfig) -> Callable[[str], RegionalClients]:
    """Return a registry factory building ``RegionalClients`` from *config*."""

    def factory(region: str) -> RegionalClients:
        return RegionalClients(build_session(config, region), region)

    return factory


class ClientRegistry:
    """Region → client map with exactly-once construction per region.

    Reads of an existing entry take no lock.  A missing entry is built
    under a per-region lock, so different regions are initialised in
    parallel while concurrent callers for the same region wait for the
    single construction.  A factory that raises leaves no entry behind;
    the next caller tries again.
    """

    def __init__(self, factory: Callable[[str], Any]) -> None:
        self._factory = factory
        self._clients: dict[str, Any] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @classmethod
    def from_config(cls, config: SweeperConfig) -> ClientRegistry:
        return cls(session_client_factory(config))

    def _lock_for(self, region: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(region, threading.Lock())

    def get(self, region: str) -> Any:
        client = self._clients.get(region)
        if client is not None:
            return client

        with self._lock_for(region):
            client = self._clients.get(region)
            if client is None:
                logger.debug(
                    "creating sweeper client | region=%s | partition=%s",
                    region,
                    partition(region),
                )
                client = self._factory(region)
                self._clients[region] = client
        return client

    def __contains__(self, region: object) -> bool:
        return region in self._clients

    def __len__(self) -> int:
        return len(self._clients)
