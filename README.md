# cachedirective

`cachedirective` reads the configuration of an HTTP cache layer written as
nested `name args { ... }` blocks, turns it into plain Python dataclasses,
and merges a route-level `cache` directive with the global `cache` option.

## Installation

```
pip install cachedirective
```

The package has no runtime dependencies.

## What is in it

- `cachedirective.dispenser`: `tokenize` splits text into tokens (words,
  double-quoted strings with escapes, backtick-quoted raw strings, braces;
  `#` starts a comment). `Dispenser` walks them with `next`, `val`,
  `nesting`, `next_block` and `remaining_args`; `Dispenser.error` builds a
  `DispenserError` carrying the line number.
- `cachedirective.durations`: `parse_duration` reads durations such as
  `1h30m`, `1.5s` or `300ms` and returns seconds as a float (raising
  `ValueError` on bad input); `format_duration` writes seconds back as
  `1h0m0s`, `1.5s`, `300ms` and so on.
- `cachedirective.types`: the dataclasses `Configuration`, `DefaultCache`,
  `Key`, `CacheKey`, `CacheProvider`, `API`, `APIEndpoint`, `CDN`, `Regex`
  and `Timeout`. Durations are stored in seconds.
- `cachedirective.parser`: `parse_configuration(cfg, dispenser, is_global)`
  applies every directive to a `Configuration`. Supported directives are
  `allowed_http_verbs`, `api`, `badger`, `cache_keys`, `cache_name`, `cdn`,
  `default_cache_control`, `disable_coalescing`, `etcd`, `headers`, `key`,
  `log_level`, `max_cacheable_body_bytes`, `mode`, `nats`, `nuts`, `olric`,
  `otter`, `redis`, `regex`, `stale`, `storers`, `timeout` and `ttl`.
  `parse_block_recursively`, `parse_badger_configuration` and
  `parse_redis_configuration` turn a storage `configuration` block into a
  dict with typed values.
- `cachedirective.storages`: `storage_uuids(default_cache)` computes the
  identifier of each declared storage backend, stores it on the provider
  and returns them keyed by provider name.
- `cachedirective.usage_pool`: `UsagePool`, a thread-safe reference-counted
  mapping; `StorageProviders`, the set of registered storage keys; and
  `cleanup(pool)`, which releases the pool entries no provider registered.
- `cachedirective.app`: `CacheApp` (the global settings),
  `CacheMiddleware` (one route's settings), `parse_global_option`,
  `parse_handler_directive` and `InvalidConfigurationError`.

## Parsing a global option and a route directive

```python
from cachedirective.app import parse_global_option, parse_handler_directive

app = parse_global_option("""
cache {
    ttl 120s
    stale 5s
    key {
        disable_query
    }
}
""")
app.start()  # raises InvalidConfigurationError when the default TTL is 0

middleware = parse_handler_directive("""
cache {
    key {
        headers Authorization Content-Type
    }
}
""")
configuration = middleware.from_app(app)
```

`parse_global_option` starts from a default TTL of 120 seconds. In
`from_app`, values the route leaves unset (TTL, stale, storers, timeouts,
mode, key, default Cache-Control, body size limit, cache name, exclusion
regex, headers, log level) are taken from the global option, allowed verbs
are appended, and the storage providers are taken from the global option
only when the route declares none. An `api` block is accepted only in the
global option; an unknown directive or a missing argument raises
`DispenserError`.

`CacheMiddleware.configuration_property_mapper` builds a `Configuration`
from the middleware's flat fields when no configuration has been set.

## Storage identifiers

```python
from cachedirective.app import parse_global_option
from cachedirective.storages import storage_uuids

app = parse_global_option("""
cache {
    stale 5s
    otter
}
""")
storage_uuids(app.default_cache)  # {"otter": "OTTER-5s"}
```

A `nats` declaration is stored in the `nuts` slot of `DefaultCache`, and
the nats and olric identifiers are recorded on that slot too.

## Working with the lower-level pieces

```python
from cachedirective.dispenser import Dispenser, tokenize
from cachedirective.durations import format_duration, parse_duration
from cachedirective.parser import parse_configuration
from cachedirective.types import Configuration

cfg = parse_configuration(Configuration(), Dispenser(tokenize("cache {\n ttl 10s\n}")), True)
cfg.default_cache.ttl    # 10.0

parse_duration("1h2m3s")  # 3723.0
format_duration(3723)     # "1h2m3s"
```

## What it does not do

This package only reads, checks and merges configuration. It does not
serve HTTP, store or look up responses, emit `Cache-Status` headers, or
connect to any storage backend: `storage_uuids` only computes identifiers
for the backends that are declared.

## Running the tests

```
pip install -e ".[test]"
pytest
```