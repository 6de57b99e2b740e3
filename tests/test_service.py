from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from fakes import FakeItemStore

from pyancla.config import StoreConfig
from pyancla.exceptions import (
    BadRequestError,
    ItemConversionError,
    ListenerNotStoppedError,
    StoreAuthenticationError,
    WebhookPushError,
    WebhookRemoveError,
    WebhooksFetchError,
)
from pyancla.listener import ListenerState
from pyancla.metrics import PollOutcome
from pyancla.models.webhook import Webhook
from pyancla.service import WebhookService, webhook_id
from pyancla.watch import WatchFunc

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _webhook(url: str = "https://hooks.example.com/events") -> Webhook:
    return Webhook(
        address="10.0.0.1",
        config={"url": url, "content_type": "application/json"},
        events=["device-status/.*"],
        until=NOW + timedelta(minutes=5),
    )


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_add_then_list(config: StoreConfig, fake_store: FakeItemStore) -> None:
    webhook = _webhook()

    async with WebhookService(config, now=lambda: NOW) as service:
        await service.add("alice", webhook)
        webhooks = await service.all_webhooks()

    assert webhooks == [webhook]
    stored = fake_store.items[webhook_id(webhook.config.url)]
    assert stored["ttl"] == 300
    assert fake_store.owners[0] == "alice"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_add_wraps_store_errors(config: StoreConfig, fake_store: FakeItemStore) -> None:
    fake_store.fail_status = 400

    async with WebhookService(config) as service:
        with pytest.raises(WebhookPushError) as exc_info:
            await service.add("alice", _webhook())

    assert isinstance(exc_info.value.__cause__, BadRequestError)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_all_webhooks_wraps_fetch_errors(config: StoreConfig, fake_store: FakeItemStore) -> None:
    fake_store.fail_status = 401

    async with WebhookService(config) as service:
        with pytest.raises(WebhooksFetchError) as exc_info:
            await service.all_webhooks()

    assert isinstance(exc_info.value.__cause__, StoreAuthenticationError)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_all_webhooks_rejects_foreign_items(config: StoreConfig, fake_store: FakeItemStore) -> None:
    fake_store.items["x"] = {"id": "x", "data": {"events": 42}}

    async with WebhookService(config) as service:
        with pytest.raises(ItemConversionError):
            await service.all_webhooks()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_remove(config: StoreConfig, fake_store: FakeItemStore) -> None:
    webhook = _webhook()

    async with WebhookService(config, now=lambda: NOW) as service:
        await service.add("alice", webhook)
        removed = await service.remove("alice", webhook.config.url)
        with pytest.raises(WebhookRemoveError):
            await service.remove("alice", webhook.config.url)

    assert removed == webhook
    assert fake_store.items == {}


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_watches_receive_polled_webhooks(config: StoreConfig, fake_store: FakeItemStore) -> None:
    seen: list[list[Webhook]] = []
    config = replace(config, pull_interval=0.02)

    async with WebhookService(config, watches=[WatchFunc(seen.append)], now=lambda: NOW) as service:
        assert service.listener.state is ListenerState.RUNNING
        with pytest.raises(ListenerNotStoppedError):
            await service.listener.start()

        await service.add("alice", _webhook("https://a.example.com"))
        await service.add("bob", _webhook("https://b.example.com"))

        async def _until_two() -> None:
            while not seen or len(seen[-1]) != 2:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_until_two(), 2.0)

    assert service.listener.state is ListenerState.STOPPED
    assert {w.config.url for w in seen[-1]} == {"https://a.example.com", "https://b.example.com"}
    assert service.measures.registry.get_sample_value("webhook_list_size_value") == 2
    assert service.measures.poll_count(PollOutcome.SUCCESS) >= 1
