"""AWS partition lookup by region name.

Partition IDs and DNS suffixes come from the endpoint data shipped with
botocore, so new partitions are picked up by upgrading botocore.
"""

from __future__ import annotations

import functools

from botocore.exceptions import UnknownRegionError
from botocore.loaders import create_loader
from botocore.regions import EndpointResolver

DEFAULT_PARTITION = "aws"
DEFAULT_DNS_SUFFIX = "amazonaws.com"


@functools.lru_cache(maxsize=1)
def _resolver() -> EndpointResolver:
    return EndpointResolver(create_loader().load_data("endpoints"))


def partition(region: str) -> str:
    """Return the partition ID for *region* (``"aws"`` when unknown)."""
    if not region:
        return DEFAULT_PARTITION
    try:
        return _resolver().get_partition_for_region(region)
    except UnknownRegionError:
        return DEFAULT_PARTITION


def partition_dns_suffix(region: str) -> str:
    """Return the DNS suffix for *region* (``"amazonaws.com"`` when unknown)."""
    suffix = _resolver().get_partition_dns_suffix(partition(region))
    return suffix or DEFAULT_DNS_SUFFIX
