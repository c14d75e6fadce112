import asyncio
import json

import httpx
import pytest

from mesalink.client.api import MesaLinkApi
from mesalink.client.session_cache import SessionCache, parse_expires_at, storage_key
from mesalink.client.storage import MemoryStorage
from mesalink.main import app

RESTAURANT_ID = "8f0b7a52-3c1e-4a53-9a41-0d4e2b7f6c11"
TABLE_ID = "1d2c3b4a-5e6f-4a7b-8c9d-0e1f2a3b4c5d"
NOW_MS = 1_767_268_800_000.0  # 2026-01-01T12:00:00Z
EXPIRES_AT = "2026-01-01T15:00:00Z"


class Recorder:
    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self.body = body if body is not None else {"sessionToken": "novo-token", "expiresAt": EXPIRES_AT}
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


def make_cache(handler, storage=None, **kwargs):
    api = MesaLinkApi("http://testserver/api/v1", transport=httpx.MockTransport(handler))
    kwargs.setdefault("persistent_table_ids", [])
    return SessionCache(api, storage or MemoryStorage(), clock=lambda: NOW_MS, **kwargs)


def store(storage, **record):
    storage.set_item(storage_key(TABLE_ID), json.dumps(record))


def test_parse_expires_at():
    assert parse_expires_at(EXPIRES_AT) == NOW_MS + 3 * 60 * 60 * 1000
    assert parse_expires_at("2026-01-01T15:00:00") == NOW_MS + 3 * 60 * 60 * 1000
    assert parse_expires_at("amanhã") is None
    assert parse_expires_at(None) is None


@pytest.mark.asyncio
async def test_fetches_and_persists_new_session():
    handler = Recorder()
    storage = MemoryStorage()
    cache = make_cache(handler, storage)

    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)

    assert session.session_token == "novo-token"
    assert json.loads(handler.requests[0].content) == {
        "restaurantId": RESTAURANT_ID,
        "tableId": TABLE_ID,
        "persistent": False,
    }
    assert json.loads(storage.get_item(storage_key(TABLE_ID))) == {
        "sessionToken": "novo-token",
        "expiresAt": EXPIRES_AT,
        "expiresAtMs": NOW_MS + 3 * 60 * 60 * 1000,
    }


@pytest.mark.asyncio
async def test_reuses_valid_cached_session_without_request():
    handler = Recorder()
    storage = MemoryStorage()
    store(storage, sessionToken="em-cache", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS + 120_000)
    cache = make_cache(handler, storage)

    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)

    assert session.session_token == "em-cache"
    assert handler.requests == []


@pytest.mark.asyncio
async def test_refreshes_inside_buffer_margin():
    handler = Recorder()
    storage = MemoryStorage()
    store(storage, sessionToken="quase-vencido", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS + 30_000)
    cache = make_cache(handler, storage)

    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)

    assert session.session_token == "novo-token"
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_force_refresh_always_requests():
    handler = Recorder()
    storage = MemoryStorage()
    store(storage, sessionToken="em-cache", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS + 3_600_000)
    cache = make_cache(handler, storage)

    await cache.ensure(RESTAURANT_ID, TABLE_ID, force_refresh=True)
    assert len(handler.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "{nao e json",
        json.dumps(["lista"]),
        json.dumps({"expiresAt": EXPIRES_AT, "expiresAtMs": NOW_MS + 3_600_000}),
        json.dumps({"sessionToken": "t", "expiresAt": "", "expiresAtMs": NOW_MS + 3_600_000}),
        json.dumps({"sessionToken": "t", "expiresAt": "quando?", "expiresAtMs": "muito"}),
    ],
)
async def test_corrupted_cache_is_treated_as_absent(raw):
    handler = Recorder()
    storage = MemoryStorage({storage_key(TABLE_ID): raw})
    cache = make_cache(handler, storage)

    assert cache.get_valid(TABLE_ID) is None
    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)
    assert session.session_token == "novo-token"


def test_non_numeric_expiry_falls_back_to_expires_at():
    storage = MemoryStorage()
    store(storage, sessionToken="t", expiresAt=EXPIRES_AT, expiresAtMs="x")
    cache = make_cache(Recorder(), storage)
    assert cache.read(TABLE_ID).expires_at_ms == parse_expires_at(EXPIRES_AT)


def test_get_valid_ignores_buffer_but_not_expiry():
    storage = MemoryStorage()
    cache = make_cache(Recorder(), storage)

    store(storage, sessionToken="t", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS + 1_000)
    assert cache.get_valid(TABLE_ID) == "t"

    store(storage, sessionToken="t", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS)
    assert cache.get_valid(TABLE_ID) is None


@pytest.mark.asyncio
async def test_server_error_returns_last_known_session():
    handler = Recorder(status_code=500, body={"message": "Erro interno"})
    storage = MemoryStorage()
    store(storage, sessionToken="vencido", expiresAt=EXPIRES_AT, expiresAtMs=NOW_MS - 1)
    cache = make_cache(handler, storage)

    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)
    assert session.session_token == "vencido"


@pytest.mark.asyncio
async def test_network_failure_without_cache_returns_none():
    handler = Recorder(error=httpx.ConnectError("sem rede"))
    cache = make_cache(handler)
    assert await cache.ensure(RESTAURANT_ID, TABLE_ID) is None


@pytest.mark.asyncio
async def test_unparseable_server_expiry_uses_buffer():
    handler = Recorder(body={"sessionToken": "novo-token", "expiresAt": "logo"})
    cache = make_cache(handler, buffer_ms=60_000)

    session = await cache.ensure(RESTAURANT_ID, TABLE_ID)
    assert session.expires_at_ms == NOW_MS + 60_000


@pytest.mark.asyncio
async def test_persistent_allow_list_sets_flag():
    handler = Recorder()
    cache = make_cache(handler, persistent_table_ids=[TABLE_ID])

    await cache.ensure(RESTAURANT_ID, TABLE_ID)
    assert json.loads(handler.requests[0].content)["persistent"] is True


@pytest.mark.asyncio
async def test_cancelled_request_leaves_cache_untouched():
    started = asyncio.Event()

    async def slow_handler(request):
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json={"sessionToken": "tarde", "expiresAt": EXPIRES_AT})

    storage = MemoryStorage()
    cache = make_cache(slow_handler, storage)
    cancel_event = asyncio.Event()

    async def cancel_soon():
        await started.wait()
        cancel_event.set()

    canceller = asyncio.create_task(cancel_soon())
    result = await asyncio.wait_for(cache.ensure(RESTAURANT_ID, TABLE_ID, cancel_event=cancel_event), timeout=5)
    await canceller

    assert result is None
    assert storage.get_item(storage_key(TABLE_ID)) is None


@pytest.mark.asyncio
async def test_against_application(restaurant_id, table, db):
    api = MesaLinkApi("http://testserver/api/v1", transport=httpx.ASGITransport(app=app))
    cache = SessionCache(api, MemoryStorage(), persistent_table_ids=[])
    try:
        first = await cache.ensure(str(restaurant_id), str(table.id))
        second = await cache.ensure(str(restaurant_id), str(table.id), force_refresh=True)
    finally:
        await api.aclose()

    db.refresh(table)
    assert first.session_token == second.session_token == table.session_token
    assert cache.get_valid(str(table.id)) == table.session_token
