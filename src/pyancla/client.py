"""High-level async client for the item store."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from pyancla._transport import HttpStoreTransport, StoreResponse, StoreTransport
from pyancla.auth import AuthDecorator
from pyancla.config import StoreConfig
from pyancla.exceptions import (
    AnclaError,
    AnclaStoreError,
    BadRequestError,
    ItemDataEmptyError,
    ItemEncodeError,
    ItemIDEmptyError,
    NonSuccessStatusError,
    ResponseDecodeError,
    StoreAuthenticationError,
)
from pyancla.models.item import Item, ItemList, PushResult

_logger = logging.getLogger(__name__)


class Reader(Protocol):
    """Fetches the current items of a bucket."""

    async def get_items(self, owner: str = "") -> list[Item]:
        ...


class Pusher(Protocol):
    """Writes and removes items."""

    async def push_item(self, owner: str, item: Item) -> PushResult:
        ...

    async def remove_item(self, item_id: str, owner: str) -> Item:
        ...


def translate_status_code(code: int) -> type[AnclaStoreError]:
    """Map a non-success HTTP status code to the matching error type."""
    if code == 400:
        return BadRequestError
    if code in (401, 403):
        return StoreAuthenticationError
    return NonSuccessStatusError


def _status_error(response: StoreResponse) -> AnclaStoreError:
    error_cls = translate_status_code(response.status)
    return error_cls(status_code=response.status, error_header=response.error_header)


def validate_push_item(item: Item) -> None:
    """Raise if *item* cannot be pushed. Runs before any network I/O."""
    if not item.id:
        raise ItemIDEmptyError()
    if not item.data:
        raise ItemDataEmptyError()


class StoreClient:
    """Async client for the item store.

    Usage::

        async with StoreClient(config) as client:
            items = await client.get_items()
            result = await client.push_item("owner", item)
    """

    def __init__(
        self,
        config: StoreConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        auth: AuthDecorator | None = None,
        transport: StoreTransport | None = None,
    ) -> None:
        config.validate()
        self._config = config
        self._auth = auth
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._external_transport = transport is not None
        self._bucket_url = f"{config.store_url}/{config.bucket}"

    @property
    def config(self) -> StoreConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> StoreClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpStoreTransport(
                self._http_session,
                auth=self._auth,
                request_timeout=self._config.request_timeout,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> StoreTransport:
        if self._transport is None:
            raise AnclaError("Client not initialized. Use 'async with StoreClient(...) as client:'")
        return self._transport

    def _item_url(self, item_id: str) -> str:
        return f"{self._bucket_url}/{item_id}"

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    async def get_items(self, owner: str = "", *, timeout: float | None = None) -> list[Item]:
        """Fetch all items of the configured bucket.

        An empty *owner* sends no owner header, so the store returns the
        unscoped list of the whole bucket. Listeners rely on this.
        """
        transport = self._require_transport()
        response = await transport.send("GET", self._bucket_url, owner=owner, timeout=timeout)

        if response.status != 200:
            _logger.error(
                "Item store responded with non-200 response for get_items request: code=%s errorHeader=%s",
                response.status,
                response.error_header,
            )
            raise _status_error(response)

        # An empty bucket may come back as a JSON null.
        if response.body.strip() == b"null":
            return []
        try:
            return ItemList.validate_json(response.body)
        except ValidationError as exc:
            raise ResponseDecodeError(f"get_items: failed unmarshaling JSON response payload: {exc}") from exc

    async def push_item(self, owner: str, item: Item, *, timeout: float | None = None) -> PushResult:
        """Create the item, or replace it when it already exists.

        Returns :attr:`PushResult.CREATED` on HTTP 201 and
        :attr:`PushResult.UPDATED` on HTTP 200.
        """
        validate_push_item(item)

        try:
            body = item.to_json()
        except (ValueError, TypeError) as exc:
            raise ItemEncodeError(f"failed marshaling item as JSON payload: {exc}") from exc

        transport = self._require_transport()
        response = await transport.send("PUT", self._item_url(item.id), owner=owner, body=body, timeout=timeout)

        if response.status == 201:
            return PushResult.CREATED
        if response.status == 200:
            return PushResult.UPDATED

        _logger.error(
            "Item store responded with a non-successful status code for a push_item request: code=%s errorHeader=%s",
            response.status,
            response.error_header,
        )
        raise _status_error(response)

    async def remove_item(self, item_id: str, owner: str, *, timeout: float | None = None) -> Item:
        """Remove the item and return the copy the store echoes back."""
        if not item_id:
            raise ItemIDEmptyError()

        transport = self._require_transport()
        response = await transport.send("DELETE", self._item_url(item_id), owner=owner, timeout=timeout)

        if response.status != 200:
            _logger.error(
                "Item store responded with a non-successful status code for a remove_item request: "
                "code=%s errorHeader=%s",
                response.status,
                response.error_header,
            )
            raise _status_error(response)

        try:
            return Item.model_validate_json(response.body)
        except ValidationError as exc:
            raise ResponseDecodeError(f"remove_item: failed unmarshaling JSON response payload: {exc}") from exc
