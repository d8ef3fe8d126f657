"""Configuration records for the HTTP cache directive."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass
class CacheProvider:
    """A storage backend declaration."""

    found: bool = False
    url: str = ""
    path: str = ""
    configuration: Any = None
    uuid: str = ""

    def is_empty(self) -> bool:
        """True when the provider was not declared."""
        return not self.found


@dataclass
class Key:
    """How the cache key of a request is built."""

    disable_body: bool = False
    disable_host: bool = False
    disable_method: bool = False
    disable_query: bool = False
    disable_scheme: bool = False
    hash: bool = False
    hide: bool = False
    template: str = ""
    headers: list[str] | None = None

    def is_empty(self) -> bool:
        """True when no key option has been set."""
        return not (
            self.disable_body
            or self.disable_host
            or self.disable_method
            or self.disable_query
            or self.disable_scheme
            or self.hash
            or self.hide
            or self.headers
            or self.template
        )


@dataclass
class APIEndpoint:
    """One API endpoint toggle and its base path."""

    enable: bool = False
    base_path: str = ""


@dataclass
class API:
    """API endpoints exposed by the cache."""

    base_path: str = ""
    debug: APIEndpoint = field(default_factory=APIEndpoint)
    prometheus: APIEndpoint = field(default_factory=APIEndpoint)
    souin: APIEndpoint = field(default_factory=APIEndpoint)


@dataclass
class CDN:
    """CDN integration settings."""

    api_key: str = ""
    dynamic: bool = False
    hostname: str = ""
    network: str = ""
    provider: str = ""
    strategy: str = ""


@dataclass
class Regex:
    """Request URIs matching ``exclude`` are not cached."""

    exclude: str = ""


@dataclass
class Timeout:
    """Backend and cache timeouts, in seconds."""

    backend: float = 0.0
    cache: float = 0.0


@dataclass
class CacheKey:
    """A key override applied to requests whose URI matches ``pattern``."""

    pattern: re.Pattern
    key: Key = field(default_factory=Key)

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)


@dataclass
class DefaultCache:
    """The default cache settings; durations are in seconds."""

    allowed_http_verbs: list[str] = field(default_factory=list)
    badger: CacheProvider = field(default_factory=CacheProvider)
    cache_name: str = ""
    cdn: CDN = field(default_factory=CDN)
    default_cache_control: str = ""
    max_body_bytes: int = 0
    distributed: bool = False
    headers: list[str] | None = None
    key: Key = field(default_factory=Key)
    mode: str = ""
    olric: CacheProvider = field(default_factory=CacheProvider)
    redis: CacheProvider = field(default_factory=CacheProvider)
    etcd: CacheProvider = field(default_factory=CacheProvider)
    nats: CacheProvider = field(default_factory=CacheProvider)
    nuts: CacheProvider = field(default_factory=CacheProvider)
    otter: CacheProvider = field(default_factory=CacheProvider)
    regex: Regex = field(default_factory=Regex)
    storers: list[str] = field(default_factory=list)
    timeout: Timeout = field(default_factory=Timeout)
    ttl: float = 0.0
    stale: float = 0.0
    disable_coalescing: bool = False


@dataclass
class Configuration:
    """The whole cache configuration."""

    plugin_name: ClassVar[str] = "caddy"

    default_cache: DefaultCache = field(default_factory=DefaultCache)
    api: API = field(default_factory=API)
    cache_keys: list[CacheKey] | None = None
    urls: dict[str, Any] = field(default_factory=dict)
    log_level: str = ""
    surrogate_keys: dict[str, Any] = field(default_factory=dict)
    logger: logging.Logger | None = None