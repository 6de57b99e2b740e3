"""Authorization decoration for outgoing item store requests."""

from __future__ import annotations

import base64
import inspect
from collections.abc import Awaitable, MutableMapping
from typing import Protocol


class AuthDecorator(Protocol):
    """Adds credentials to an outgoing request.

    Implementations receive the mutable header mapping of the request
    that is about to be sent. Raising aborts the request before any
    network I/O happens.
    """

    async def decorate(self, headers: MutableMapping[str, str]) -> None:
        ...


class Acquirer(Protocol):
    """Acquires the credential used in the authorization header."""

    def acquire(self) -> str | Awaitable[str]:
        ...


class BearerAuth:
    """Sets ``Authorization: Bearer <token>`` from an :class:`Acquirer`."""

    def __init__(self, acquirer: Acquirer) -> None:
        self._acquirer = acquirer

    async def decorate(self, headers: MutableMapping[str, str]) -> None:
        token = self._acquirer.acquire()
        if inspect.isawaitable(token):
            token = await token
        if not token:
            raise ValueError("acquirer returned an empty token")
        headers["Authorization"] = f"Bearer {token}"


class BasicAuth:
    """Sets ``Authorization: Basic <credentials>``."""

    def __init__(self, username: str, password: str) -> None:
        credentials = f"{username}:{password}".encode()
        self._value = f"Basic {base64.b64encode(credentials).decode('ascii')}"

    async def decorate(self, headers: MutableMapping[str, str]) -> None:
        headers["Authorization"] = self._value


class StaticTokenAcquirer:
    """Acquirer returning a fixed token."""

    def __init__(self, token: str) -> None:
        self._token = token

    def acquire(self) -> str:
        return self._token
