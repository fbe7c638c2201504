from __future__ import annotations

import json
import unittest

import httpx
import pytest

from clara.config_api import (
    ConfigStoreClient,
    DisplayConfig,
    create_config,
    delete_config,
    fetch_config,
    parse_config,
    parse_config_list,
    replace_config,
    to_display_config,
)

URI = "http://store.test/api/lighting/cfg-1"


class TestDisplayConfig(unittest.TestCase):
    def test_to_display_config(self):
        doc = {"id": "x", "name": "y", "extra": 1}
        cfg = to_display_config(doc)
        self.assertEqual(cfg, DisplayConfig(id="x", name="y", formatted=json.dumps(doc, indent=2)))

    def test_missing_fields_are_none(self):
        cfg = to_display_config({"patterns": []})
        self.assertIsNone(cfg.id)
        self.assertIsNone(cfg.name)

    def test_parse_config_and_list(self):
        one = parse_config('{"id": "a", "name": "Porch"}')
        self.assertEqual((one.id, one.name), ("a", "Porch"))
        many = parse_config_list('[{"id": "a", "name": "Porch"}, {"id": "b", "name": "Tree"}]')
        self.assertEqual([c.id for c in many], ["a", "b"])
        self.assertEqual(many[1].formatted, '{\n  "id": "b",\n  "name": "Tree"\n}')

    def test_parse_config_rejects_bad_json(self):
        with self.assertRaises(ValueError):
            parse_config("not json")


def _recording_client(seen: list, status: int = 200, payload=None) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json=payload if payload is not None else {})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_store_client_verbs():
    seen: list = []
    async with _recording_client(seen, payload={"id": "cfg-1", "name": "Porch"}) as http:
        store = ConfigStoreClient(http)
        resp = await store.fetch(URI)
        assert parse_config(resp.text).name == "Porch"
        await store.create(URI, {"id": "cfg-1"})
        await store.replace(URI, '{"id": "cfg-1", "name": "Tree"}')
        await store.delete(URI)
        await store.close()
        assert not http.is_closed

    assert [r.method for r in seen] == ["GET", "POST", "PUT", "DELETE"]
    assert all(str(r.url) == URI for r in seen)
    post, put = seen[1], seen[2]
    assert post.headers["content-type"] == "application/json"
    assert json.loads(post.content) == {"id": "cfg-1"}
    assert put.headers["content-type"] == "application/json"
    assert put.content == b'{"id": "cfg-1", "name": "Tree"}'
    assert "content-type" not in seen[0].headers


@pytest.mark.asyncio
async def test_module_helpers_return_raw_response():
    seen: list = []
    async with _recording_client(seen, status=404, payload={"error": "missing"}) as http:
        # no status checking: a 404 comes back as-is
        resp = await fetch_config(URI, client=http)
        assert resp.status_code == 404
        resp = await create_config(URI, "{}", client=http)
        assert resp.status_code == 404
        await replace_config(URI, {"id": "cfg-1"}, client=http)
        await delete_config(URI, client=http)

    assert [r.method for r in seen] == ["GET", "POST", "PUT", "DELETE"]


@pytest.mark.asyncio
async def test_store_client_owns_lazily_created_client():
    store = ConfigStoreClient()
    http = store.client
    assert store.client is http
    await store.close()
    assert http.is_closed
