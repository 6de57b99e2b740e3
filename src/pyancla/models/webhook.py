"""Webhook registration payload stored as :attr:`Item.data`."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import Field, SerializerFunctionWrapHandler, field_validator, model_serializer

from pyancla.models._base import AnclaBaseModel


def _drop_empty(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    for key in keys:
        if not data.get(key):
            data.pop(key, None)
    return data


class DeliveryConfig(AnclaBaseModel):
    """Where and how events are delivered."""

    url: str = ""
    content_type: str = ""
    secret: str = ""
    alt_urls: list[str] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _drop_empty(handler(self), "secret", "alt_urls")


class MetadataMatcherConfig(AnclaBaseModel):
    """Regular expressions matched against event metadata."""

    device_id: list[str] = Field(default_factory=list)


class Webhook(AnclaBaseModel):
    """All the information needed to serve events to a webhook listener.

    Parameters
    ----------
    address : str
        Origin address of the subscription request.
    config : DeliveryConfig
        Delivery target.
    failure_url : str
        URL notified when the subscriber is cut off. Empty disables it.
    events : list[str]
        Regular expressions matched against the event type.
    matcher : MetadataMatcherConfig
        Regular expressions matched against event metadata.
    duration : int
        Subscription length in nanoseconds. Deprecated, kept for wire
        compatibility.
    until : datetime
        Time the subscription expires. A value without an offset is
        taken as UTC.
    """

    address: str = Field(default="", alias="registered_from_address")
    config: DeliveryConfig = Field(default_factory=DeliveryConfig)
    failure_url: str = ""
    events: list[str] = Field(default_factory=list)
    matcher: MetadataMatcherConfig = Field(default_factory=MetadataMatcherConfig)
    duration: int = 0
    until: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, tz=UTC))

    @field_validator("until")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Timestamps without an offset are UTC on the wire.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if not self.matcher.device_id:
            data.pop("matcher", None)
        return data
