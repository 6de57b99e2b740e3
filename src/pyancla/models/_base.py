"""Base model for item store payloads.

Every pyancla model inherits from :class:`AnclaBaseModel` which
provides:

* frozen instances, since the store is the source of truth and the
  client only ever holds transient copies.
* ``populate_by_name`` so models can be built either from the wire
  JSON keys or from the Python field names.
* ``extra="ignore"`` so newer store versions adding fields do not
  break older clients.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AnclaBaseModel(BaseModel):
    """Base for item store payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
