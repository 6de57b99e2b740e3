"""Webhook registry built on top of the item store client and listener."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pyancla.auth import AuthDecorator
from pyancla.client import StoreClient
from pyancla.config import StoreConfig
from pyancla.exceptions import (
    AnclaError,
    NonSuccessPushResultError,
    WebhookConversionError,
    WebhookPushError,
    WebhookRemoveError,
    WebhooksFetchError,
)
from pyancla.listener import ListenerClient
from pyancla.metrics import Measures
from pyancla.models.item import Item, PushResult
from pyancla.models.webhook import Webhook
from pyancla.watch import Watch, WebhookListener, item_to_webhook, items_to_webhooks, webhook_list_size_watch

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def webhook_id(url: str) -> str:
    """Item ID of the webhook delivering to *url* (SHA-256 hex digest)."""
    return hashlib.sha256(url.encode()).hexdigest()


def webhook_to_item(now: Callable[[], datetime], webhook: Webhook) -> Item:
    """Wrap *webhook* in an item whose TTL runs until ``webhook.until``."""
    try:
        data = webhook.model_dump(mode="json", by_alias=True)
    except ValueError as exc:
        raise WebhookConversionError(f"failed to convert webhook to item: {exc}") from exc

    seconds_to_expiry = (webhook.until - now()).total_seconds()
    ttl = int(max(0.0, seconds_to_expiry))

    return Item(id=webhook_id(webhook.config.url), data=data, ttl=ttl)


class WebhookService:
    """Registers webhooks and keeps watches informed of the current set.

    Usage::

        async with WebhookService(config, watches=[my_watch]) as service:
            await service.add("owner", webhook)
            webhooks = await service.all_webhooks()

    Entering the context starts the background listener; leaving it
    stops the listener and closes the store client.
    """

    def __init__(
        self,
        config: StoreConfig,
        *,
        watches: Sequence[Watch] = (),
        session: aiohttp.ClientSession | None = None,
        auth: AuthDecorator | None = None,
        measures: Measures | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._measures = measures if measures is not None else Measures()
        self._store = StoreClient(config, session=session, auth=auth)
        all_watches = [*watches, webhook_list_size_watch(self._measures.webhook_list_size)]
        self._listener = ListenerClient(
            WebhookListener(all_watches),
            self._store,
            pull_interval=config.pull_interval,
            measures=self._measures,
        )
        self._now = now

    @property
    def store(self) -> StoreClient:
        return self._store

    @property
    def listener(self) -> ListenerClient:
        return self._listener

    @property
    def measures(self) -> Measures:
        return self._measures

    async def __aenter__(self) -> WebhookService:
        await self._store.__aenter__()
        try:
            await self._listener.start()
        except BaseException:
            await self._store.close()
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        try:
            if self._listener.is_running:
                await self._listener.stop()
        finally:
            await self._store.close()

    async def add(self, owner: str, webhook: Webhook) -> None:
        """Register *webhook* on behalf of *owner*."""
        item = webhook_to_item(self._now, webhook)
        try:
            result = await self._store.push_item(owner, item)
        except AnclaError as exc:
            raise WebhookPushError(f"failed to add webhook to registry: {exc}") from exc

        if result not in (PushResult.CREATED, PushResult.UPDATED):
            raise NonSuccessPushResultError(f"got a push result but was not of success type: {result!r}")
        _logger.debug("Webhook for %s %s", webhook.config.url, result)

    async def all_webhooks(self) -> list[Webhook]:
        """List all webhooks currently registered in the bucket."""
        try:
            items = await self._store.get_items("")
        except AnclaError as exc:
            raise WebhooksFetchError(f"failed to fetch webhooks: {exc}") from exc
        return items_to_webhooks(items)

    async def remove(self, owner: str, url: str) -> Webhook:
        """Remove the webhook delivering to *url* and return it."""
        try:
            item = await self._store.remove_item(webhook_id(url), owner)
        except AnclaError as exc:
            raise WebhookRemoveError(f"failed to remove webhook from registry: {exc}") from exc
        return item_to_webhook(item)
