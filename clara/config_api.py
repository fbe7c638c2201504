from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from clara.lighting_config import format_config


JSON_HEADERS = {"Content-Type": "application/json"}

Body = Union[str, bytes, Dict[str, Any]]


@dataclass(frozen=True)
class DisplayConfig:
    id: Any
    name: Any
    formatted: str


def to_display_config(doc: Dict[str, Any]) -> DisplayConfig:
    return DisplayConfig(id=doc.get("id"), name=doc.get("name"), formatted=format_config(doc))


def parse_config(data: str) -> DisplayConfig:
    return to_display_config(json.loads(data))


def parse_config_list(data: str) -> List[DisplayConfig]:
    return [to_display_config(c) for c in json.loads(data)]


def _encode_body(body: Body) -> bytes:
    if isinstance(body, dict):
        return json.dumps(body, ensure_ascii=False).encode("utf-8")
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


class ConfigStoreClient:
    """Async CRUD client for a remote lighting config store.

    One ``httpx.AsyncClient`` is created lazily and reused across calls. There
    is no retry, timeout or status checking: each method returns the raw
    ``httpx.Response`` and callers sequence dependent requests themselves.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=None)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ConfigStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch(self, uri: str) -> httpx.Response:
        return await self.client.get(uri)

    async def create(self, uri: str, body: Body) -> httpx.Response:
        return await self.client.post(uri, content=_encode_body(body), headers=JSON_HEADERS)

    async def replace(self, uri: str, body: Body) -> httpx.Response:
        return await self.client.put(uri, content=_encode_body(body), headers=JSON_HEADERS)

    async def delete(self, uri: str) -> httpx.Response:
        return await self.client.delete(uri)


async def fetch_config(uri: str, *, client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
    async with ConfigStoreClient(client) as store:
        return await store.fetch(uri)


async def create_config(uri: str, body: Body, *, client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
    async with ConfigStoreClient(client) as store:
        return await store.create(uri, body)


async def replace_config(uri: str, body: Body, *, client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
    async with ConfigStoreClient(client) as store:
        return await store.replace(uri, body)


async def delete_config(uri: str, *, client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
    async with ConfigStoreClient(client) as store:
        return await store.delete(uri)
