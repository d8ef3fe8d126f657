"""Identifiers of the storage backends declared in a default cache."""

from __future__ import annotations

from typing import Any

from .durations import format_duration
from .types import DefaultCache

_DEFAULT_NUTS_DIR = "/tmp/souin-nuts"
_DEFAULT_REDIS_DB = "0"
_DEFAULT_REDIS_CLIENT_NAME = "souin-redis"


def _sprint(value: Any) -> str:
    """Render a configuration value the way it appears in an identifier."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return "[" + " ".join(str(byte) for byte in value) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_sprint(item) for item in value) + "]"
    if isinstance(value, dict):
        pairs = (f"{_sprint(k)}:{_sprint(v)}" for k, v in sorted(value.items(), key=str))
        return "map[" + " ".join(pairs) + "]"
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def _options(configuration: Any) -> dict[str, Any]:
    return configuration if isinstance(configuration, dict) else {}


def _join_addresses(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ",".join(str(item) for item in value)


def _badger_uuid(default_cache: DefaultCache, stale: str) -> str:
    options = _options(default_cache.badger.configuration)
    directory = ""
    value_directory = ""
    if "Dir" in options:
        directory = value_directory = _sprint(options["Dir"])
    if "ValueDir" in options:
        value_directory = _sprint(options["ValueDir"])
    return f"BADGER-{directory}-{value_directory}-{stale}"


def _etcd_uuid(default_cache: DefaultCache, stale: str) -> str:
    etcd = default_cache.etcd
    options = _options(etcd.configuration)
    endpoints = _sprint(options["Endpoints"]) if "Endpoints" in options else etcd.url
    username = _sprint(options["Username"]) if "Username" in options else ""
    secret = _sprint(options["Password"]) if "Password" in options else ""
    return f"ETCD-{endpoints}-{username}-{secret}-{stale}"


def _nuts_uuid(default_cache: DefaultCache, stale: str) -> str:
    nuts = default_cache.nuts
    directory = _DEFAULT_NUTS_DIR
    if nuts.configuration is not None:
        options = _options(nuts.configuration)
        if "Dir" in options:
            directory = _sprint(options["Dir"])
    elif nuts.path:
        directory = nuts.path
    return f"NUTS-{directory}-{stale}"


def _redis_uuid(default_cache: DefaultCache, stale: str) -> str:
    redis = default_cache.redis
    options = _options(redis.configuration)
    address = redis.url
    username = ""
    database = _DEFAULT_REDIS_DB
    client_name = _DEFAULT_REDIS_CLIENT_NAME
    if "Username" in options:
        username = _sprint(options["Username"])
    if "ClientName" in options:
        client_name = _sprint(options["ClientName"])
    if "InitAddress" in options:
        address = _join_addresses(options["InitAddress"])
    if "SelectDB" in options:
        database = _sprint(options["SelectDB"])
    if "Addrs" in options:
        address = _join_addresses(options["Addrs"])
    if "DB" in options:
        database = _sprint(options["DB"])
    return f"REDIS-{address}-{username}-{database}-{client_name}-{stale}"


def storage_uuids(default_cache: DefaultCache) -> dict[str, str]:
    """Compute and assign the identifier of every declared storage provider.

    Returns the identifiers keyed by provider name. The nats and olric
    identifiers are recorded on the nuts slot, where those declarations live.
    """
    stale = format_duration(default_cache.stale)
    uuids: dict[str, str] = {}

    if default_cache.badger.found:
        uuids["badger"] = default_cache.badger.uuid = _badger_uuid(default_cache, stale)
    if default_cache.etcd.found:
        uuids["etcd"] = default_cache.etcd.uuid = _etcd_uuid(default_cache, stale)
    if default_cache.nats.found:
        uuids["nats"] = default_cache.nuts.uuid = f"NATS-{default_cache.nats.url}-{stale}"
    if default_cache.nuts.found:
        uuids["nuts"] = default_cache.nuts.uuid = _nuts_uuid(default_cache, stale)
    if default_cache.olric.found:
        uuids["olric"] = default_cache.nuts.uuid = f"OLRIC-{default_cache.olric.url}-{stale}"
    if default_cache.otter.found:
        uuids["otter"] = default_cache.otter.uuid = f"OTTER-{stale}"
    if default_cache.redis.found:
        uuids["redis"] = default_cache.redis.uuid = _redis_uuid(default_cache, stale)

    return uuids