"""Fan-out of the polled webhook list to interested watches."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from prometheus_client import Gauge
from pydantic import ValidationError

from pyancla.exceptions import ItemConversionError
from pyancla.models.item import Item
from pyancla.models.webhook import Webhook

_logger = logging.getLogger(__name__)


class Watch(Protocol):
    """Receives the latest known list of webhooks.

    Every call carries the complete list, so implementations should
    replace their state rather than patch it.
    """

    def update(self, webhooks: list[Webhook]) -> None:
        ...


class WatchFunc:
    """Allows a bare callable to pass as a :class:`Watch`."""

    def __init__(self, func: Callable[[list[Webhook]], None]) -> None:
        self._func = func

    def update(self, webhooks: list[Webhook]) -> None:
        self._func(webhooks)


def webhook_list_size_watch(gauge: Gauge) -> Watch:
    """Watch that keeps *gauge* at the size of the webhook list."""
    return WatchFunc(lambda webhooks: gauge.set(len(webhooks)))


def item_to_webhook(item: Item) -> Webhook:
    try:
        return Webhook.model_validate(item.data)
    except ValidationError as exc:
        raise ItemConversionError(f"failed to convert item {item.id!r} to webhook: {exc}") from exc


def items_to_webhooks(items: Iterable[Item]) -> list[Webhook]:
    """Convert all *items*; the first bad item fails the whole list."""
    return [item_to_webhook(item) for item in items]


class WebhookListener:
    """Listener converting polled items to webhooks for every watch.

    A list containing an item that is not a webhook is dropped as a
    whole and no watch is called for that poll.
    """

    def __init__(self, watches: Sequence[Watch] = ()) -> None:
        self._watches = tuple(watches)

    @property
    def watches(self) -> tuple[Watch, ...]:
        return self._watches

    def update(self, items: list[Item]) -> None:
        try:
            webhooks = items_to_webhooks(items)
        except ItemConversionError:
            _logger.error("Failed to convert items to webhooks", exc_info=True)
            return

        for watch in self._watches:
            watch.update(webhooks)
