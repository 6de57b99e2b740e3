"""HTTP transport for the item store with owner and auth decoration."""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Protocol
from urllib.parse import urlsplit

import aiohttp

from pyancla._constants import DEFAULT_REQUEST_TIMEOUT, ITEM_OWNER_HEADER, STORE_ERROR_HEADER, USER_AGENT
from pyancla.auth import AuthDecorator
from pyancla.exceptions import (
    AuthDecoratorError,
    RequestBuildError,
    RequestExecutionError,
    ResponseReadError,
)

_logger = logging.getLogger(__name__)

# RFC 9110 token characters.
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


@dataclasses.dataclass(frozen=True)
class StoreResponse:
    """Status, store error header and fully drained body of one response."""

    status: int
    error_header: str = ""
    body: bytes = b""


class StoreTransport(Protocol):
    """Structural transport interface used by :class:`~pyancla.client.StoreClient`.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpStoreTransport`) concrete.
    """

    async def send(
        self,
        method: str,
        url: str,
        *,
        owner: str = "",
        body: bytes | None = None,
        timeout: float | None = None,
    ) -> StoreResponse:
        ...


class HttpStoreTransport:
    """Executes a single request against the item store.

    No retries and no caching: a failure at any stage is raised to the
    caller as a distinct :class:`~pyancla.exceptions.AnclaTransportError`.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        auth: AuthDecorator | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._http = http_session
        self._auth = auth
        self._request_timeout = request_timeout

    def _build_headers(self, method: str, url: str, owner: str, body: bytes | None) -> dict[str, str]:
        if not _METHOD_RE.match(method):
            raise RequestBuildError(f"failed creating an HTTP request: invalid method {method!r}", url=url)
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise RequestBuildError(f"failed creating an HTTP request: invalid URL {url!r}", url=url)

        headers: dict[str, str] = {"user-agent": USER_AGENT}
        if body is not None:
            headers["content-type"] = "application/json"
        if owner:
            headers[ITEM_OWNER_HEADER] = owner
        return headers

    async def send(
        self,
        method: str,
        url: str,
        *,
        owner: str = "",
        body: bytes | None = None,
        timeout: float | None = None,
    ) -> StoreResponse:
        """Send one request and return the raw outcome.

        1. Validate method and URL
        2. Attach the owner header when *owner* is not empty
        3. Let the auth decorator add credentials
        4. Execute the request
        5. Capture status, the store error header and the body
        """
        headers = self._build_headers(method, url, owner, body)

        if self._auth is not None:
            try:
                await self._auth.decorate(headers)
            except Exception as exc:
                raise AuthDecoratorError(f"failed decorating auth header: {exc}", url=url) from exc

        client_timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else self._request_timeout)

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=client_timeout,
            ) as resp:
                status = resp.status
                error_header = resp.headers.get(STORE_ERROR_HEADER, "")
                try:
                    payload = await resp.read()
                except (aiohttp.ClientError, TimeoutError) as exc:
                    raise ResponseReadError(
                        f"failed while reading http response body: {exc}",
                        url=url,
                    ) from exc
        except ResponseReadError:
            raise
        except ValueError as exc:
            # aiohttp rejects some malformed requests only once it builds them
            raise RequestBuildError(f"failed creating an HTTP request: {exc}", url=url) from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise RequestExecutionError(
                f"http client failed while sending request: {exc!r}",
                url=url,
            ) from exc

        return StoreResponse(status=status, error_header=error_header, body=payload)
