import asyncio

import pytest
from aiohttp import test_utils, web

from core.errors import EmptyPoolError, PoolFetchError
from services.backend import BackendClient, parse_pool
from stages.entity import RarityTier

ROWS = [
    {"id": "koi", "name_ko": "잉어", "rarity": "희귀"},
    {"id": "betta", "name_ko": "베타", "rarity": "common"},
    {"id": "koi", "name_ko": "잉어", "rarity": "희귀"},
    {"id": "ghost", "name_ko": None, "rarity": "epic"},
    {"id": "turtle", "name_ko": "거북", "rarity": "전설"},
]


def run_against(app, scenario):
    """Start `app` on a local port and run scenario(client, seen) against it."""
    async def _run():
        server = test_utils.TestServer(app)
        await server.start_server()
        client = BackendClient(
            base_url=str(server.make_url("/")), api_key="anon-key", couple_id="c-1",
        )
        try:
            return await scenario(client)
        finally:
            await client.close()
            await server.close()
    return asyncio.run(_run())


def catalog_app(rows, seen, status=200):
    async def entities(request):
        seen.append({"query": dict(request.query), "apikey": request.headers.get("apikey")})
        if status != 200:
            return web.Response(status=status, text="boom")
        return web.json_response(rows)

    app = web.Application()
    app.router.add_get("/rest/v1/aquarium_entities", entities)
    return app


def wallet_app(seen, status=200):
    async def rpc(request):
        seen.append((request.match_info["name"], await request.json()))
        return web.Response(status=status)

    app = web.Application()
    app.router.add_post("/rest/v1/rpc/{name}", rpc)
    return app


def test_parse_pool_drops_nameless_and_duplicate_rows():
    pool = parse_pool(ROWS)
    assert [e.id for e in pool] == ["koi", "betta", "turtle"]
    assert pool[0].rarity is RarityTier.RARE
    assert pool[2].image_ref == "/aquarium/legend/turtle.png"


def test_fetch_entity_pool_sends_filters():
    seen = []
    pool = run_against(catalog_app(ROWS, seen), lambda c: c.fetch_entity_pool())
    assert [e.display_name for e in pool] == ["잉어", "베타", "거북"]
    assert seen[0]["query"] == {
        "select": "id,name_ko,rarity", "name_ko": "not.is.null", "limit": "120",
    }
    assert seen[0]["apikey"] == "anon-key"


def test_fetch_entity_pool_http_error():
    with pytest.raises(PoolFetchError):
        run_against(catalog_app(ROWS, [], status=500), lambda c: c.fetch_entity_pool())


def test_fetch_entity_pool_empty_catalog():
    with pytest.raises(EmptyPoolError):
        run_against(catalog_app([], []), lambda c: c.fetch_entity_pool())


def raw_catalog_app(response):
    async def entities(request):
        return response()

    app = web.Application()
    app.router.add_get("/rest/v1/aquarium_entities", entities)
    return app


def test_fetch_entity_pool_rejects_invalid_json():
    app = raw_catalog_app(lambda: web.Response(text="{oops", content_type="application/json"))
    with pytest.raises(PoolFetchError):
        run_against(app, lambda c: c.fetch_entity_pool())


def test_fetch_entity_pool_rejects_object_body():
    app = raw_catalog_app(lambda: web.json_response({"message": "permission denied"}))
    with pytest.raises(PoolFetchError):
        run_against(app, lambda c: c.fetch_entity_pool())


def test_parse_pool_skips_rows_that_are_not_objects():
    pool = parse_pool(["koi", None, 3, {"id": "koi", "name_ko": "잉어"}])
    assert [e.id for e in pool] == ["koi"]


def test_grant_currency_posts_rpc():
    seen = []
    assert run_against(wallet_app(seen), lambda c: c.grant_currency(35)) is True
    assert seen == [("add_gold", {"p_couple_id": "c-1", "p_amount": 35})]


def test_spend_refused_returns_false():
    seen = []
    assert run_against(wallet_app(seen, status=400), lambda c: c.spend_currency(25)) is False
    assert seen == [("spend_gold", {"p_couple_id": "c-1", "p_amount": 25})]


def test_zero_grant_sends_nothing():
    seen = []
    assert run_against(wallet_app(seen), lambda c: c.grant_currency(0)) is True
    assert seen == []


def test_negative_amounts_rejected():
    client = BackendClient(base_url="http://127.0.0.1:9", api_key="", couple_id="c-1")
    with pytest.raises(ValueError):
        asyncio.run(client.grant_currency(-1))


def test_unreachable_backend():
    async def scenario():
        client = BackendClient(base_url="http://127.0.0.1:9", api_key="", couple_id="c-1",
                               timeout_s=2)
        try:
            granted = await client.grant_currency(5)
            with pytest.raises(PoolFetchError):
                await client.fetch_entity_pool()
            return granted
        finally:
            await client.close()

    assert asyncio.run(scenario()) is False
