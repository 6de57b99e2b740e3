"""Item store record model."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, TypeAdapter

from pyancla.models._base import AnclaBaseModel


class PushResult(enum.Enum):
    """Outcome of a successful push."""

    CREATED = "created"
    UPDATED = "updated"
    NONE = ""

    def __str__(self) -> str:
        return self.value


class Item(AnclaBaseModel):
    """A stored key-value record.

    Parameters
    ----------
    id : str
        Stable, content-derived identifier of the record.
    data : dict
        Opaque JSON payload.
    ttl : int or None
        Seconds to live. ``None`` means the client does not ask the
        store to expire the record.
    """

    id: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    ttl: int | None = None

    def to_json(self) -> bytes:
        """Encode the item for the wire, omitting an unset TTL."""
        return self.model_dump_json(exclude_none=True).encode()


ItemList = TypeAdapter(list[Item])
"""Adapter decoding a JSON array of items."""
