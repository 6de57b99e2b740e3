from __future__ import annotations

# pylint: disable=redefined-outer-name

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer
from fakes import BUCKET, FakeItemStore

from pyancla.config import StoreConfig


@pytest.fixture
def fake_store() -> FakeItemStore:
    return FakeItemStore()


@pytest_asyncio.fixture
async def store_server(fake_store: FakeItemStore) -> AsyncIterator[TestServer]:
    server = TestServer(fake_store.make_app())
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def config(store_server: TestServer) -> StoreConfig:
    return StoreConfig(base_url=str(store_server.make_url("/")), bucket=BUCKET, request_timeout=5.0)


@pytest.fixture
def offline_config() -> StoreConfig:
    return StoreConfig(base_url="http://store.invalid", bucket=BUCKET)
