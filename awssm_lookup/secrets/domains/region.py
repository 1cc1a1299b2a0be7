"""Effective AWS region resolution from ordered candidate sources."""
import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import boto3
from botocore.utils import InstanceMetadataRegionFetcher

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-2"
DEFAULT_SOURCE_NAME = "default"
EXPLICIT_SOURCE_NAME = "explicit"


@dataclass(frozen=True)
class RegionSource:
    """A named provider that may know the region, or return None."""
    name: str
    fetch: Callable[[], Optional[str]]

    def __call__(self) -> Optional[str]:
        return self.fetch()


def describe_region(explicit: Optional[str], sources: Iterable[RegionSource]) -> Tuple[str, str]:
    """
    Resolve the region and report which source supplied it.

    Sources are consulted in order; the first non-empty value wins. A source
    that raises is logged and skipped.

    Returns:
        (region, source name)
    """
    if explicit:
        return explicit, EXPLICIT_SOURCE_NAME

    for source in sources:
        try:
            value = source()
        except Exception as e:
            logger.warning(f"Region source '{source.name}' failed, skipping: {e}")
            continue
        if value and value.strip():
            logger.debug(f"Region {value.strip()} from source '{source.name}'")
            return value.strip(), source.name

    logger.debug(f"No region source had a value, using default {DEFAULT_REGION}")
    return DEFAULT_REGION, DEFAULT_SOURCE_NAME


def resolve_region(explicit: Optional[str], sources: Iterable[RegionSource]) -> str:
    """Effective region: ``explicit`` verbatim, else the first source with a value."""
    return describe_region(explicit, sources)[0]


@lru_cache(maxsize=None)
def instance_metadata_region() -> Optional[str]:
    """
    Region of the EC2 instance we are running on, via IMDS.

    Asked once per process; a host without IMDS keeps answering None.
    """
    return InstanceMetadataRegionFetcher().retrieve_region()


def environment_region() -> Optional[str]:
    return os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")


def profile_region() -> Optional[str]:
    """Region configured for the active AWS profile (~/.aws/config)."""
    return boto3.session.Session().region_name


def default_region_sources(config: Dict[str, Any]) -> List[RegionSource]:
    """
    Standard source order, highest priority first.

    1. instance_metadata - EC2 placement (disabled by ``instance_metadata: false``)
    2. environment - AWS_REGION / AWS_DEFAULT_REGION
    3. aws_profile - region of the active boto3 profile
    4. config_file - ``region`` from the config file
    """
    sources = []
    if config.get("instance_metadata", True):
        sources.append(RegionSource("instance_metadata", instance_metadata_region))
    sources.append(RegionSource("environment", environment_region))
    sources.append(RegionSource("aws_profile", profile_region))
    sources.append(RegionSource("config_file", lambda: config.get("region")))
    return sources
