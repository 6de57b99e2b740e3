"""Data models for pyancla."""

from pyancla.models.item import Item, ItemList, PushResult
from pyancla.models.webhook import DeliveryConfig, MetadataMatcherConfig, Webhook

__all__ = [
    "DeliveryConfig",
    "Item",
    "ItemList",
    "MetadataMatcherConfig",
    "PushResult",
    "Webhook",
]
