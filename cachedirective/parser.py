"""Turn cache directive blocks into a Configuration."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from typing import Any

from .dispenser import Dispenser
from .durations import parse_duration
from .types import API, CDN, APIEndpoint, CacheKey, CacheProvider, Configuration, Key, Timeout

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})

_BADGER_STRINGS = frozenset({"Dir", "ValueDir"})
_BADGER_FLAGS = frozenset(
    {
        "SyncWrites", "ReadOnly", "InMemory", "MetricsEnabled", "CompactL0OnClose",
        "LmaxCompaction", "VerifyValueChecksum", "BypassLockGuard", "DetectConflicts",
    }
)
_BADGER_INTS = frozenset(
    {
        "NumVersionsToKeep", "NumGoroutines", "MemTableSize", "BaseTableSize",
        "BaseLevelSize", "LevelSizeMultiplier", "TableSizeMultiplier", "MaxLevels",
        "ValueThreshold", "NumMemtables", "BlockSize", "BlockCacheSize", "IndexCacheSize",
        "NumLevelZeroTables", "NumLevelZeroTablesStall", "ValueLogFileSize",
        "NumCompactors", "ZSTDCompressionLevel", "ChecksumVerificationMode",
        "NamespaceOffset",
    }
)
_BADGER_UINTS = frozenset({"Compression", "ValueLogMaxEntries"})
_BADGER_FLOATS = frozenset({"VLogPercentile", "BloomFalsePositive"})

_REDIS_ADDRESSES = frozenset({"Addrs", "InitAddress"})
_REDIS_FLAGS = frozenset(
    {
        "SendToReplicas", "ShuffleInit", "ClientNoTouch", "DisableRetry", "DisableCache",
        "AlwaysPipelining", "AlwaysRESP2", "ForceSingleClient", "ReplicaOnly",
        "ClientNoEvict", "ContextTimeoutEnabled", "PoolFIFO", "ReadOnly",
        "RouteByLatency", "RouteRandomly", "DisableIndentity",
    }
)
_REDIS_INTS = frozenset(
    {
        "SelectDB", "CacheSizeEachConn", "RingScaleEachConn", "ReadBufferEachConn",
        "WriteBufferEachConn", "BlockingPoolSize", "PipelineMultiplex", "DB", "Protocol",
        "MaxRetries", "PoolSize", "MinIdleConns", "MaxIdleConns", "MaxActiveConns",
        "MaxRedirects",
    }
)
_REDIS_DURATIONS = frozenset(
    {
        "ConnWriteTimeout", "MaxFlushDelay", "MinRetryBackoff", "MaxRetryBackoff",
        "DialTimeout", "ReadTimeout", "WriteTimeout", "PoolTimeout", "ConnMaxIdleTime",
        "ConnMaxLifetime",
    }
)


def _atoi(value: Any) -> int:
    """A signed integer, clamped to 64 bits; 0 when the text is not one."""
    if not isinstance(value, str) or not _SIGNED.fullmatch(value):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(value)))


def _parse_uint(value: Any, bits: int) -> int:
    """An unsigned integer, clamped to ``bits``; 0 when the text is not one."""
    if not isinstance(value, str) or not _UNSIGNED.fullmatch(value):
        return 0
    return min(int(value), (1 << bits) - 1)


def _parse_float(value: Any) -> float:
    if not isinstance(value, str) or not value or value != value.strip() or "_" in value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        pass
    if "p" in value.lower():
        try:
            return float.fromhex(value)
        except (ValueError, OverflowError):
            pass
    return 0.0


def _duration_or(value: Any, default: float) -> float:
    if not isinstance(value, str):
        return default
    try:
        return parse_duration(value)
    except ValueError:
        return default


def _as_list_text(values: list[str]) -> str:
    return "[" + " ".join(values) + "]"


def _first_arg(dispenser: Dispenser, directive: str) -> str:
    args = dispenser.remaining_args()
    if not args:
        raise dispenser.error(f"missing argument for {directive}")
    return args[0]


def _directives(dispenser: Dispenser) -> Iterator[str]:
    """Yield each directive of the block opened at the current token."""
    nesting = dispenser.nesting()
    while dispenser.next_block(nesting):
        yield dispenser.val()


def parse_block_recursively(dispenser: Dispenser) -> dict[str, Any]:
    """Read a nested block into a dict.

    A directive with one argument maps to that string, with several to the
    list of them, and with none to the dict of its own block.
    """
    values: dict[str, Any] = {}
    for name in _directives(dispenser):
        if name in ("{", "}"):
            continue
        args = dispenser.remaining_args()
        if len(args) == 1:
            values[name] = args[0]
        elif args:
            values[name] = args
        else:
            values[name] = parse_block_recursively(dispenser)
    return values


def parse_badger_configuration(values: dict[str, Any]) -> dict[str, Any]:
    """Convert the known badger options to their types, in place."""
    for name, value in list(values.items()):
        if name in _BADGER_STRINGS:
            continue
        if name in _BADGER_FLAGS:
            values[name] = True
        elif name in _BADGER_INTS:
            values[name] = _atoi(value)
        elif name in _BADGER_UINTS:
            values[name] = _parse_uint(value, 32)
        elif name in _BADGER_FLOATS:
            values[name] = _parse_float(value)
        elif name == "EncryptionKey":
            values[name] = value.encode() if isinstance(value, str) else b""
        elif name == "EncryptionKeyRotationDuration":
            values[name] = _duration_or(value, 0.0)
    return values


def parse_redis_configuration(values: dict[str, Any]) -> dict[str, Any]:
    """Convert the known redis options to their types, in place."""
    for name, value in list(values.items()):
        if name in _REDIS_ADDRESSES:
            if isinstance(value, str):
                values[name] = [value]
        elif name in _REDIS_FLAGS:
            values[name] = True
        elif name in _REDIS_INTS:
            if value is False:
                values[name] = 0
            elif value is True:
                values[name] = 1
            else:
                values[name] = _atoi(value)
        elif name in _REDIS_DURATIONS:
            values[name] = _duration_or(value, 0.0)
    return values


def _parse_key(dispenser: Dispenser, unsupported: Callable[[str], str]) -> Key:
    key = Key()
    for directive in _directives(dispenser):
        if directive == "disable_body":
            key.disable_body = True
        elif directive == "disable_host":
            key.disable_host = True
        elif directive == "disable_method":
            key.disable_method = True
        elif directive == "disable_query":
            key.disable_query = True
        elif directive == "disable_scheme":
            key.disable_scheme = True
        elif directive == "template":
            key.template = _first_arg(dispenser, directive)
        elif directive == "hash":
            key.hash = True
        elif directive == "hide":
            key.hide = True
        elif directive == "headers":
            key.headers = dispenser.remaining_args()
        else:
            raise dispenser.error(unsupported(directive))
    return key


def _parse_endpoint(dispenser: Dispenser, name: str) -> APIEndpoint:
    endpoint = APIEndpoint(enable=True)
    for directive in _directives(dispenser):
        if directive == "basepath":
            endpoint.base_path = _first_arg(dispenser, directive)
        else:
            raise dispenser.error(f"unsupported {name} directive: {directive}")
    return endpoint


def _parse_provider(
    dispenser: Dispenser,
    name: str,
    allowed: frozenset[str],
    convert: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> CacheProvider:
    provider = CacheProvider(found=True)
    for directive in _directives(dispenser):
        if directive not in allowed:
            raise dispenser.error(f"unsupported {name} directive: {directive}")
        if directive == "url":
            provider.url = _first_arg(dispenser, directive)
        elif directive == "path":
            provider.path = _first_arg(dispenser, directive)
        else:
            block = parse_block_recursively(dispenser)
            provider.configuration = convert(block) if convert else block
    return provider


_Handler = Callable[[Configuration, Dispenser, bool], None]


def _allowed_http_verbs(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.allowed_http_verbs = [
        *cfg.default_cache.allowed_http_verbs,
        *d.remaining_args(),
    ]


def _api(cfg: Configuration, d: Dispenser, is_global: bool) -> None:
    if not is_global:
        raise d.error("'api' block must be global")
    api = API()
    for directive in _directives(d):
        if directive == "basepath":
            api.base_path = _first_arg(d, directive)
        elif directive in ("debug", "prometheus", "souin"):
            setattr(api, directive, _parse_endpoint(d, directive))
        else:
            raise d.error(f"unsupported api directive: {directive}")
    cfg.api = api


def _badger(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.badger = _parse_provider(
        d, "badger", frozenset({"path", "configuration"}), parse_badger_configuration
    )


def _cache_keys(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cache_keys = list(cfg.cache_keys) if cfg.cache_keys is not None else []
    for pattern in _directives(d):
        key = _parse_key(
            d, lambda directive: f"unsupported cache_keys ({pattern}) directive: {directive}"
        )
        try:
            compiled = re.compile(pattern)
        except re.error as exc:
            raise d.error(f"invalid cache_keys pattern {pattern}: {exc}") from exc
        cache_keys.append(CacheKey(compiled, key))
    cfg.cache_keys = cache_keys


def _cache_name(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.cache_name = _first_arg(d, "cache_name")


def _cdn(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cdn = CDN(dynamic=True)
    for directive in _directives(d):
        if directive == "dynamic":
            args = d.remaining_args()
            cdn.dynamic = args[0] in _TRUE_WORDS if args else True
        elif directive in ("api_key", "hostname", "network", "provider", "strategy"):
            setattr(cdn, directive, _first_arg(d, directive))
        else:
            raise d.error(f"unsupported cdn directive: {directive}")
    cfg.default_cache.cdn = cdn


def _default_cache_control(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.default_cache_control = " ".join(d.remaining_args())


def _max_cacheable_body_bytes(cfg: Configuration, d: Dispenser, _: bool) -> None:
    args = d.remaining_args()
    text = args[0] if args else ""
    if not _UNSIGNED.fullmatch(text) or int(text) >= 1 << 64:
        raise d.error(f"unsupported max_cacheable_body_bytes: {_as_list_text(args)}")
    cfg.default_cache.max_body_bytes = int(text)


def _etcd(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.distributed = True
    cfg.default_cache.etcd = _parse_provider(d, "etcd", frozenset({"configuration"}))


def _headers(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.headers = [*(cfg.default_cache.headers or []), *d.remaining_args()]


def _key(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.key = _parse_key(
        d, lambda directive: f"unsupported key directive: {directive}"
    )


def _log_level(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.log_level = _first_arg(d, "log_level")


def _mode(cfg: Configuration, d: Dispenser, _: bool) -> None:
    args = d.remaining_args()
    if len(args) > 1:
        raise d.error(f"mode must contains only one arg: {_as_list_text(args)} given")
    if not args:
        raise d.error("missing argument for mode")
    cfg.default_cache.mode = args[0]


def _nats(cfg: Configuration, d: Dispenser, _: bool) -> None:
    # The declaration lands in the nuts slot, as the directive always did.
    cfg.default_cache.nuts = _parse_provider(d, "nats", frozenset({"url", "configuration"}))


def _nuts(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.nuts = _parse_provider(
        d, "nuts", frozenset({"url", "path", "configuration"})
    )


def _otter(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.otter = _parse_provider(d, "otter", frozenset({"configuration"}))


def _olric(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.distributed = True
    cfg.default_cache.olric = _parse_provider(
        d, "olric", frozenset({"url", "path", "configuration"})
    )


def _redis(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.distributed = True
    cfg.default_cache.redis = _parse_provider(
        d, "redis", frozenset({"url", "path", "configuration"}), parse_redis_configuration
    )


def _regex(cfg: Configuration, d: Dispenser, _: bool) -> None:
    for directive in _directives(d):
        if directive == "exclude":
            cfg.default_cache.regex.exclude = _first_arg(d, directive)
        else:
            raise d.error(f"unsupported regex directive: {directive}")


def _stale(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.stale = _duration_or(_first_arg(d, "stale"), cfg.default_cache.stale)


def _storers(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.storers = d.remaining_args()


def _timeout(cfg: Configuration, d: Dispenser, _: bool) -> None:
    timeout = Timeout()
    for directive in _directives(d):
        if directive in ("backend", "cache"):
            setattr(timeout, directive, _duration_or(_first_arg(d, directive), 0.0))
        else:
            raise d.error(f"unsupported timeout directive: {directive}")
    cfg.default_cache.timeout = timeout


def _ttl(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.ttl = _duration_or(_first_arg(d, "ttl"), cfg.default_cache.ttl)


def _disable_coalescing(cfg: Configuration, d: Dispenser, _: bool) -> None:
    cfg.default_cache.disable_coalescing = True


_ROOT_HANDLERS: dict[str, _Handler] = {
    "allowed_http_verbs": _allowed_http_verbs,
    "api": _api,
    "badger": _badger,
    "cache_keys": _cache_keys,
    "cache_name": _cache_name,
    "cdn": _cdn,
    "default_cache_control": _default_cache_control,
    "max_cacheable_body_bytes": _max_cacheable_body_bytes,
    "etcd": _etcd,
    "headers": _headers,
    "key": _key,
    "log_level": _log_level,
    "mode": _mode,
    "nats": _nats,
    "nuts": _nuts,
    "otter": _otter,
    "olric": _olric,
    "redis": _redis,
    "regex": _regex,
    "stale": _stale,
    "storers": _storers,
    "timeout": _timeout,
    "ttl": _ttl,
    "disable_coalescing": _disable_coalescing,
}


def parse_configuration(
    cfg: Configuration, dispenser: Dispenser, is_global: bool
) -> Configuration:
    """Apply every cache block read from ``dispenser`` to ``cfg`` and return it.

    Raises DispenserError on an unknown directive, a missing argument, or an
    ``api`` block outside the global options.
    """
    while dispenser.next():
        nesting = dispenser.nesting()
        while dispenser.next_block(nesting):
            option = dispenser.val()
            handler = _ROOT_HANDLERS.get(option)
            if handler is None:
                raise dispenser.error(f"unsupported root directive: {option}")
            handler(cfg, dispenser, is_global)
    return cfg