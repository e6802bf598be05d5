"""Tests for the TTL JSON file cache used by the platform client."""

import json
import time

import pytest

from exchange_clients.cache import JsonFileCache


def write_cache(path, data, age_seconds):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "lastUpdated": int((time.time() - age_seconds) * 1000),
        "data": data,
    }))


@pytest.mark.asyncio
async def test_fresh_cache_skips_fetch(tmp_path):
    write_cache(tmp_path / "prices.json", {"perps/ubtc": "100"}, age_seconds=5)
    calls = []

    async def fetch():
        calls.append(1)
        return {"perps/ubtc": "200"}

    cache = JsonFileCache(tmp_path)
    assert await cache.get_or_fetch("prices.json", 30, fetch) == {"perps/ubtc": "100"}
    assert calls == []


@pytest.mark.asyncio
async def test_stale_cache_refetches_and_writes(tmp_path):
    write_cache(tmp_path / "prices.json", {"perps/ubtc": "100"}, age_seconds=60)

    async def fetch():
        return {"perps/ubtc": "200"}

    cache = JsonFileCache(tmp_path)
    assert await cache.get_or_fetch("prices.json", 30, fetch) == {"perps/ubtc": "200"}
    assert cache.read("prices.json")["data"] == {"perps/ubtc": "200"}


@pytest.mark.asyncio
async def test_fetch_error_falls_back_to_expired_data(tmp_path):
    write_cache(tmp_path / "markets.json", [{"denom": "perps/ubtc"}], age_seconds=7200)

    async def fetch():
        raise ConnectionError("node down")

    cache = JsonFileCache(tmp_path)
    assert await cache.get_or_fetch("markets.json", 3600, fetch) == [{"denom": "perps/ubtc"}]


@pytest.mark.asyncio
async def test_fetch_error_without_cache_returns_none(tmp_path):
    async def fetch():
        raise ConnectionError("node down")

    assert await JsonFileCache(tmp_path).get_or_fetch("markets.json", 3600, fetch) is None


def test_unreadable_cache_file_is_ignored(tmp_path):
    (tmp_path / "prices.json").write_text("garbage")
    assert JsonFileCache(tmp_path).read("prices.json") is None
