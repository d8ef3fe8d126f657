from cachedirective.storages import storage_uuids
from cachedirective.types import CacheProvider, DefaultCache


def test_no_provider_gives_no_identifier():
    cache = DefaultCache()
    assert storage_uuids(cache) == {}
    assert cache.badger.uuid == ""
    assert cache.redis.uuid == ""


def test_badger_uses_dir_for_both_directories():
    cache = DefaultCache(
        badger=CacheProvider(found=True, configuration={"Dir": "/data"})
    )
    uuids = storage_uuids(cache)
    assert uuids["badger"] == "BADGER-/data-/data-0s"
    assert cache.badger.uuid == uuids["badger"]


def test_badger_value_dir_overrides_second_directory():
    cache = DefaultCache(
        badger=CacheProvider(
            found=True, configuration={"Dir": "/data", "ValueDir": "/vlog"}
        )
    )
    uuid = storage_uuids(cache)["badger"]
    assert uuid.startswith("BADGER-/data-/vlog-")


def test_redis_defaults():
    cache = DefaultCache(
        redis=CacheProvider(found=True, url="127.0.0.1:6379"), stale=5.0
    )
    assert storage_uuids(cache)["redis"] == "REDIS-127.0.0.1:6379--0-souin-redis-5s"


def test_redis_addresses_and_database_from_configuration():
    cache = DefaultCache(
        redis=CacheProvider(
            found=True,
            url="ignored:1",
            configuration={"Addrs": ["a:1", "b:2"], "DB": 3, "ClientName": "client"},
        )
    )
    uuid = storage_uuids(cache)["redis"]
    assert "a:1,b:2" in uuid
    assert "ignored:1" not in uuid
    assert "-3-client-" in uuid


def test_nats_identifier_lands_on_nuts_slot():
    cache = DefaultCache(nats=CacheProvider(found=True, url="nats://localhost"))
    uuids = storage_uuids(cache)
    assert cache.nuts.uuid == uuids["nats"]
    assert cache.nuts.uuid.startswith("NATS-nats://localhost-")
    assert cache.nats.uuid == ""


def test_olric_identifier_lands_on_nuts_slot():
    cache = DefaultCache(olric=CacheProvider(found=True, url="olric:3320"))
    uuids = storage_uuids(cache)
    assert cache.nuts.uuid == uuids["olric"]
    assert cache.olric.uuid == ""
    assert "olric:3320" in uuids["olric"]


def test_nuts_default_directory_and_path():
    cache = DefaultCache(nuts=CacheProvider(found=True))
    assert storage_uuids(cache)["nuts"].startswith("NUTS-/tmp/souin-nuts-")

    cache = DefaultCache(nuts=CacheProvider(found=True, path="/var/nuts"))
    assert storage_uuids(cache)["nuts"].startswith("NUTS-/var/nuts-")


def test_otter_identifier():
    cache = DefaultCache(otter=CacheProvider(found=True))
    assert storage_uuids(cache) == {"otter": "OTTER-0s"}


def test_etcd_reads_configuration():
    cache = DefaultCache(
        etcd=CacheProvider(
            found=True,
            configuration={"Endpoints": ["e1", "e2"], "Username": "user"},
        )
    )
    uuid = storage_uuids(cache)["etcd"]
    assert uuid.startswith("ETCD-[e1 e2]-user-")
    assert cache.etcd.uuid == uuid