import json

import pytest

from ticket_12306.exceptions import CacheIOError, FetchError
from ticket_12306.services.station_cache import FileStationStorage, StationCache

DAY = 24 * 3600


def make_cache(source, storage, clock):
    return StationCache(source=source, storage=storage, clock=clock, ttl_seconds=7 * DAY)


@pytest.mark.asyncio
async def test_first_load_fetches_and_writes_envelope(source, storage, clock):
    cache = make_cache(source, storage, clock)

    directory = await cache.load()

    assert source.calls == 1
    assert len(directory) == 8
    envelope = json.loads(storage.text)
    assert envelope["fetched_at"] == clock.now
    assert len(envelope["directory"]["stations"]) == 8


@pytest.mark.asyncio
async def test_fresh_cache_is_reused_without_network(source, storage, clock):
    cache = make_cache(source, storage, clock)
    await cache.load()

    clock.advance(6 * DAY)
    directory = await cache.load()

    assert source.calls == 1
    assert directory.get_city_primary("上海").code == "SHH"


@pytest.mark.asyncio
async def test_expired_cache_triggers_rebuild(source, storage, clock):
    cache = make_cache(source, storage, clock)
    await cache.load()

    clock.advance(7 * DAY + 1)
    await cache.load()

    assert source.calls == 2
    assert len(storage.writes) == 2
    assert json.loads(storage.text)["fetched_at"] == clock.now


@pytest.mark.asyncio
async def test_force_refresh_ignores_valid_cache(source, storage, clock):
    cache = make_cache(source, storage, clock)
    await cache.load()

    await cache.load(force_refresh=True)

    assert source.calls == 2


@pytest.mark.asyncio
async def test_unreadable_cache_falls_back_to_fetch(source, storage, clock):
    storage.fail_read = True
    cache = make_cache(source, storage, clock)

    directory = await cache.load()

    assert source.calls == 1
    assert len(directory) == 8


@pytest.mark.asyncio
async def test_corrupt_cache_falls_back_to_fetch(source, storage, clock):
    storage.text = "{not json"
    cache = make_cache(source, storage, clock)

    await cache.load()

    assert source.calls == 1
    assert json.loads(storage.text)["fetched_at"] == clock.now


@pytest.mark.asyncio
async def test_write_failure_still_returns_directory(source, storage, clock):
    storage.fail_write = True
    cache = make_cache(source, storage, clock)

    directory = await cache.load()

    assert len(directory) == 8
    assert storage.text is None


@pytest.mark.asyncio
async def test_fetch_error_propagates(source, storage, clock):
    source.error = FetchError(message="请求失败")
    cache = make_cache(source, storage, clock)

    with pytest.raises(FetchError):
        await cache.load()
    assert storage.writes == []


@pytest.mark.asyncio
async def test_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "stations.json"
    storage = FileStationStorage(path)

    assert await storage.read() is None
    await storage.write('{"a": 1}')
    await storage.write('{"a": 2}')

    assert await storage.read() == '{"a": 2}'
    # 临时文件已被替换，不残留
    assert [p.name for p in path.parent.iterdir()] == ["stations.json"]


@pytest.mark.asyncio
async def test_file_storage_read_error(tmp_path):
    # 路径是目录时读取失败
    storage = FileStationStorage(tmp_path)
    with pytest.raises(CacheIOError):
        await storage.read()


@pytest.mark.asyncio
async def test_file_storage_write_error_leaves_artifact_untouched(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    storage = FileStationStorage(blocker / "stations.json")

    with pytest.raises(CacheIOError):
        await storage.write("{}")
    assert blocker.read_text(encoding="utf-8") == "x"


@pytest.mark.asyncio
async def test_cache_with_file_storage(tmp_path, source, clock):
    path = tmp_path / "stations.json"
    await make_cache(source, FileStationStorage(path), clock).load()

    # 新的实例从文件读取
    directory = await make_cache(source, FileStationStorage(path), clock).load()

    assert source.calls == 1
    assert directory.get_by_name("杭州南").code == "XHH"
