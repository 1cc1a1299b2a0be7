"""Workflow for secret resolution with caching and on-demand creation."""
import time
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from ..domains.aws_client import AWSSecretClient, DEFAULT_RETRY_MAX_ATTEMPTS
from ..domains.cache import SecretCache
from ..domains.config_loader import (
    CREATE_OPTION_TYPES,
    LOOKUP_OPTION_TYPES,
    check_option_types,
    create_defaults,
    load_config,
    lookup_defaults,
)
from ..domains.errors import SecretNotFoundError
from ..domains.models import CacheEntry, CacheKey, CreateOptions, LookupRequest, Sensitive
from ..domains.password_policy import create_secret
from ..domains.region import RegionSource, default_region_sources, resolve_region

logger = logging.getLogger(__name__)

# Module-level cache: per-process, shared by every call that doesn't pass its own
_secret_cache = SecretCache()

_default_client: Optional[AWSSecretClient] = None


def default_cache() -> SecretCache:
    return _secret_cache


def _get_client(config: Optional[Dict[str, Any]] = None) -> AWSSecretClient:
    """Lazy-create the shared client, honouring retry_max_attempts from config."""
    global _default_client

    if _default_client is None:
        if config is None:
            config = load_config()
        _default_client = AWSSecretClient(
            retry_max_attempts=config.get("retry_max_attempts", DEFAULT_RETRY_MAX_ATTEMPTS)
        )
    return _default_client


def _fetch(request: LookupRequest, key: CacheKey, cache: SecretCache, client: Any,
           clock: Callable[[], float]) -> Sensitive:
    try:
        value = client.get_secret_value(request.id, request.version, key.region)
    except SecretNotFoundError:
        options = request.effective_create_options
        if not options.create_missing:
            raise
        logger.info(f"Secret {request.id} not found in {key.region}, creating it")
        value = create_secret(client, request.id, key.region, options)

    cache.put(key, CacheEntry(value=value, fetched_at=clock()), force=request.ignore_cache)
    logger.debug(f"New value for {request.id} stored in cache")
    return value


def _cached(request: LookupRequest, key: CacheKey, cache: SecretCache, now: float) -> Optional[Sensitive]:
    if request.ignore_cache:
        logger.debug(f"Ignoring cache for {request.id}")
        return None

    entry = cache.get(key)
    if entry is None:
        logger.debug(f"Cache miss for {request.id}")
        return None

    if entry.is_fresh(now, request.cache_stale):
        logger.debug(f"Returning cached value for {request.id} that is still fresh")
        return entry.value

    logger.debug(f"Cached value for {request.id} is stale ({entry.age(now):.0f}s old), fetching new one")
    return None


def resolve(request: LookupRequest,
            cache: Optional[SecretCache] = None,
            client: Any = None,
            region_sources: Optional[Iterable[RegionSource]] = None,
            clock: Callable[[], float] = time.monotonic,
            single_flight: bool = False,
            config: Optional[Dict[str, Any]] = None) -> Sensitive:
    """
    Resolve a secret, serving it from cache while it is fresh.

    Args:
        request: What to look up and how
        cache: Cache handle (defaults to the per-process cache)
        client: Secret store client (defaults to a shared AWSSecretClient)
        region_sources: Candidate region sources, used only when request.region is unset
        clock: Returns the current time in seconds; only ever compared with itself
        single_flight: Serialize fetches of the same key so concurrent callers fetch once
        config: Already-loaded config; the file is read only if this is None and it is needed

    Returns:
        The secret, wrapped as Sensitive

    Raises:
        SecretNotFoundError: Secret missing and creation disabled
        SecretServiceError: Any other failure from the secrets service
        SecretCreateError: The missing secret could not be created

    Behavior:
        - An entry is fresh while (now - fetched_at) < request.cache_stale
        - ignore_cache skips the read but still refreshes the entry on success
        - Failures never write to the cache
    """
    if cache is None:
        cache = _secret_cache

    region = request.region
    if not region:
        if region_sources is None:
            if config is None:
                config = load_config()
            region_sources = default_region_sources(config)
        region = resolve_region(None, region_sources)

    key = CacheKey(request.id, request.version, region)

    cached = _cached(request, key, cache, clock())
    if cached is not None:
        return cached

    if client is None:
        client = _get_client(config)

    if not single_flight:
        return _fetch(request, key, cache, client, clock)

    with cache.lock_for(key):
        # Another caller may have fetched while we waited
        cached = _cached(request, key, cache, clock())
        if cached is not None:
            return cached
        return _fetch(request, key, cache, client, clock)


def lookup(secret_id: str,
           version: Optional[str] = None,
           region: Optional[str] = None,
           cache_stale: Optional[float] = None,
           ignore_cache: Optional[bool] = None,
           *,
           create_options: Optional[CreateOptions] = None,
           cache: Optional[SecretCache] = None,
           client: Any = None,
           region_sources: Optional[Iterable[RegionSource]] = None,
           clock: Callable[[], float] = time.monotonic,
           single_flight: bool = False,
           config: Optional[Dict[str, Any]] = None) -> Sensitive:
    """
    Look up a secret with positional arguments.

    Arguments left as None take their defaults from the config file, then
    from the built-in defaults (30 minute staleness, cache enabled, create
    missing secrets). The config file is read at most once per call, and
    not at all when every argument it could supply is given.
    """
    needs_config = (
        cache_stale is None
        or ignore_cache is None
        or create_options is None
        or (not region and region_sources is None)
        or (client is None and _default_client is None)
    )
    if config is None and needs_config:
        config = load_config()

    defaults = lookup_defaults(config) if config is not None else {}
    request = LookupRequest(
        id=secret_id,
        version=version,
        region=region,
        cache_stale=defaults["cache_stale"] if cache_stale is None else float(cache_stale),
        ignore_cache=defaults["ignore_cache"] if ignore_cache is None else ignore_cache,
        create_options=create_options if create_options is not None else defaults["create_options"],
    )
    return resolve(request, cache=cache, client=client, region_sources=region_sources,
                   clock=clock, single_flight=single_flight, config=config)


def lookup_with_options(secret_id: str, options: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Sensitive:
    """
    Look up a secret with a hash of options.

    Example:
        lookup_with_options("db/password", {"region": "us-east-1", "version": "AWSPREVIOUS"})

    Options may hold version, region, cache_stale, ignore_cache and any
    CreateOptions field (create_missing, password_length, ...). A None value
    means unset. Remaining keyword arguments (cache, client, ...) are passed
    through to lookup().

    Raises:
        ValueError: On unrecognized option keys or values of the wrong type
    """
    options = dict(options or {})
    unknown = set(options) - set(LOOKUP_OPTION_TYPES) - CreateOptions.field_names()
    if unknown:
        raise ValueError(f"Unknown lookup option(s): {', '.join(sorted(unknown))}")
    check_option_types(options, LOOKUP_OPTION_TYPES)
    check_option_types(options, CREATE_OPTION_TYPES)

    create_overrides = {
        k: v for k, v in options.items()
        if k in CreateOptions.field_names() and v is not None
    }
    create_options = None
    if create_overrides:
        config = kwargs.get("config")
        if config is None:
            config = kwargs["config"] = load_config()
        create_options = CreateOptions.from_dict(create_overrides, base=create_defaults(config))

    return lookup(
        secret_id,
        version=options.get("version"),
        region=options.get("region"),
        cache_stale=options.get("cache_stale"),
        ignore_cache=options.get("ignore_cache"),
        create_options=create_options,
        **kwargs,
    )
