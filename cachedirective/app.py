"""The cache application and its per-route middleware configuration."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from .dispenser import Dispenser
from .parser import parse_configuration
from .types import (
    API,
    CacheKey,
    CacheProvider,
    Configuration,
    DefaultCache,
    Key,
    Timeout,
)
from .usage_pool import STORED_PROVIDERS_KEY, StorageProviders, UsagePool

MODULE_NAME = "cache"
DEFAULT_GLOBAL_TTL = 120.0

usage_pool = UsagePool()


class InvalidConfigurationError(ValueError):
    """The cache configuration cannot be used."""


@dataclass
class CacheApp:
    """The global cache settings shared by every route."""

    default_cache: DefaultCache = field(default_factory=DefaultCache)
    storers: list[Any] = field(default_factory=list)
    surrogate_storage: Any = None
    cache_keys: list[CacheKey] | None = None
    api: API = field(default_factory=API)
    log_level: str = ""
    pool: UsagePool = field(default_factory=lambda: usage_pool, repr=False, compare=False)

    def start(self) -> None:
        """Reset the registered storage providers and check the default cache."""
        self.pool.delete(STORED_PROVIDERS_KEY)
        self.pool.load_or_store(STORED_PROVIDERS_KEY, StorageProviders())
        if self.default_cache.ttl == 0:
            raise InvalidConfigurationError("Invalid/Incomplete default cache declaration")


@dataclass
class CacheMiddleware:
    """The cache handler of one route, merged with the global settings."""

    configuration: Configuration | None = None
    log_level: str = ""
    allowed_http_verbs: list[str] = field(default_factory=list)
    headers: list[str] | None = None
    badger: CacheProvider = field(default_factory=CacheProvider)
    key: Key = field(default_factory=Key)
    cache_keys: list[CacheKey] | None = None
    nuts: CacheProvider = field(default_factory=CacheProvider)
    otter: CacheProvider = field(default_factory=CacheProvider)
    etcd: CacheProvider = field(default_factory=CacheProvider)
    redis: CacheProvider = field(default_factory=CacheProvider)
    olric: CacheProvider = field(default_factory=CacheProvider)
    timeout: Timeout = field(default_factory=Timeout)
    ttl: float = 0.0
    stale: float = 0.0
    storers: list[str] = field(default_factory=list)
    default_cache_control: str = ""
    cache_name: str = ""

    def configuration_property_mapper(self) -> Configuration:
        """Build the configuration from the flat fields when none was given."""
        if self.configuration is None:
            distributed = bool(
                self.olric.url
                or self.olric.path
                or self.olric.configuration is not None
                or self.etcd.configuration is not None
                or self.redis.url
                or self.redis.configuration is not None
            )
            default_cache = DefaultCache(
                badger=self.badger,
                nuts=self.nuts,
                otter=self.otter,
                key=self.key,
                default_cache_control=self.default_cache_control,
                cache_name=self.cache_name,
                distributed=distributed,
                headers=self.headers,
                olric=self.olric,
                etcd=self.etcd,
                redis=self.redis,
                timeout=self.timeout,
                ttl=self.ttl,
                stale=self.stale,
                storers=self.storers,
            )
            self.configuration = Configuration(
                cache_keys=self.cache_keys,
                default_cache=default_cache,
                log_level=self.log_level,
            )
        return self.configuration

    def from_app(self, app: CacheApp) -> Configuration:
        """Fill what the route leaves unset from the global app settings."""
        if self.configuration is None:
            self.configuration = Configuration(urls={})
        cfg = self.configuration

        if app.default_cache.ttl == 0:
            return cfg

        cfg.api = app.api

        if not cfg.cache_keys:
            cfg.cache_keys = []
        if self.cache_keys is None:
            self.cache_keys = app.cache_keys
        cfg.cache_keys = [
            *cfg.cache_keys,
            *(CacheKey(entry.pattern, entry.key) for entry in cfg.cache_keys),
        ]

        current = cfg.default_cache
        snapshot = dataclasses.replace(current, timeout=dataclasses.replace(current.timeout))
        app_cache = app.default_cache

        current.allowed_http_verbs = [
            *current.allowed_http_verbs,
            *app_cache.allowed_http_verbs,
        ]
        current.cdn = app_cache.cdn
        if snapshot.headers is None:
            current.headers = app_cache.headers
        if not cfg.log_level:
            cfg.log_level = app.log_level
        if snapshot.ttl == 0:
            current.ttl = app_cache.ttl
        if snapshot.stale == 0:
            current.stale = app_cache.stale
        if not snapshot.storers:
            current.storers = app_cache.storers
        if snapshot.timeout.backend == 0:
            current.timeout.backend = app_cache.timeout.backend
        if not snapshot.mode:
            current.mode = app_cache.mode
        if snapshot.timeout.cache == 0:
            current.timeout.cache = app_cache.timeout.cache
        if snapshot.key.is_empty():
            current.key = app_cache.key
        if not snapshot.default_cache_control:
            current.default_cache_control = app_cache.default_cache_control
        if snapshot.max_body_bytes == 0:
            current.max_body_bytes = app_cache.max_body_bytes
        if not snapshot.cache_name:
            current.cache_name = app_cache.cache_name
        providers = ("badger", "etcd", "nats", "nuts", "olric", "otter", "redis")
        if all(getattr(snapshot, name).is_empty() for name in providers):
            current.distributed = app_cache.distributed
            for name in ("olric", "redis", "etcd", "badger", "nuts", "otter"):
                setattr(current, name, getattr(app_cache, name))
        if not snapshot.regex.exclude:
            current.regex.exclude = app_cache.regex.exclude

        return cfg


def parse_global_option(text: str) -> CacheApp:
    """Read the global ``cache`` option into a CacheApp.

    Raises DispenserError when the option is malformed.
    """
    cfg = Configuration(
        default_cache=DefaultCache(
            allowed_http_verbs=[],
            distributed=False,
            headers=[],
            ttl=DEFAULT_GLOBAL_TTL,
        ),
        urls={},
    )
    parse_configuration(cfg, Dispenser(text), True)
    return CacheApp(
        default_cache=cfg.default_cache,
        api=cfg.api,
        cache_keys=cfg.cache_keys,
        log_level=cfg.log_level,
    )


def parse_handler_directive(text: str) -> CacheMiddleware:
    """Read a route's ``cache`` directive into a CacheMiddleware.

    Raises DispenserError when the directive is malformed.
    """
    cfg = Configuration(default_cache=DefaultCache(allowed_http_verbs=[]))
    parse_configuration(cfg, Dispenser(text), False)
    return CacheMiddleware(configuration=cfg)