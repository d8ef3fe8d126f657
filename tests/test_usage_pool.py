from cachedirective.usage_pool import (
    COALESCING_KEY,
    STORED_PROVIDERS_KEY,
    SURROGATE_KEY,
    StorageProviders,
    UsagePool,
    cleanup,
)


def test_load_or_store_stores_then_loads():
    pool = UsagePool()
    first = object()
    second = object()
    assert pool.load_or_store("key", first) == (first, False)
    value, loaded = pool.load_or_store("key", second)
    assert value is first
    assert loaded is True


def test_delete_counts_references():
    pool = UsagePool()
    pool.load_or_store("key", "value")
    pool.load_or_store("key", "other")
    assert pool.delete("key") is False
    assert "key" in pool
    assert pool.delete("key") is True
    assert "key" not in pool


def test_delete_missing_key_is_false():
    assert UsagePool().delete("missing") is False


def test_delete_calls_destruct_on_last_reference():
    calls = []

    class Resource:
        def destruct(self):
            calls.append(self)

    resource = Resource()
    pool = UsagePool()
    pool.load_or_store("resource", resource)
    pool.delete("resource")
    assert calls == [resource]


def test_keys_is_a_snapshot():
    pool = UsagePool()
    pool.load_or_store("a", 1)
    pool.load_or_store("b", 2)
    snapshot = pool.keys()
    pool.delete("a")
    assert sorted(snapshot) == ["a", "b"]
    assert pool.keys() == ["b"]
    assert len(pool) == 1


def test_storage_providers_membership():
    providers = StorageProviders()
    providers.add("BADGER-/tmp-/tmp-0s")
    assert "BADGER-/tmp-/tmp-0s" in providers
    assert "REDIS" not in providers


def test_cleanup_releases_unregistered_entries():
    pool = UsagePool()
    providers = StorageProviders()
    providers.add("kept")
    pool.load_or_store(STORED_PROVIDERS_KEY, providers)
    pool.load_or_store(COALESCING_KEY, "coalescing")
    pool.load_or_store(SURROGATE_KEY, "surrogate")
    pool.load_or_store("kept", "storage")
    pool.load_or_store("stray", "storage")

    removed = cleanup(pool)

    assert removed == ["stray"]
    assert "stray" not in pool
    assert "kept" in pool
    assert COALESCING_KEY in pool
    assert SURROGATE_KEY in pool
    assert STORED_PROVIDERS_KEY in pool


def test_cleanup_creates_provider_registry_when_missing():
    pool = UsagePool()
    pool.load_or_store("stray", "storage")
    removed = cleanup(pool)
    assert removed == ["stray"]
    assert pool.keys() == [STORED_PROVIDERS_KEY]
    registry, loaded = pool.load_or_store(STORED_PROVIDERS_KEY, None)
    assert loaded is True
    assert isinstance(registry, StorageProviders)