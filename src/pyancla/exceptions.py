"""Custom exception hierarchy for pyancla.

Lower layers are always chained (``raise ... from exc``) so callers can
inspect ``__cause__`` to tell a store that is unreachable apart from one
that answered with garbage.
"""

from __future__ import annotations


class AnclaError(Exception):
    """Base exception for all pyancla errors."""


class AnclaConfigError(AnclaError):
    """Invalid or missing configuration.

    ``errors`` holds every violation found during validation, not just
    the first one.
    """

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Item preconditions
# ---------------------------------------------------------------------------


class ItemValidationError(AnclaError, ValueError):
    """An item failed a client-side precondition check."""


class ItemIDEmptyError(ItemValidationError):
    """Item ID is required."""

    def __init__(self, message: str = "item ID is required") -> None:
        super().__init__(message)


class ItemDataEmptyError(ItemValidationError):
    """Data field in item is required."""

    def __init__(self, message: str = "data field in item is required") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class AnclaTransportError(AnclaError):
    """HTTP-level failure before a usable response was obtained."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class RequestBuildError(AnclaTransportError):
    """Failed creating an HTTP request (bad method or URL)."""


class AuthDecoratorError(AnclaTransportError):
    """The auth decorator failed; no request was sent."""


class RequestExecutionError(AnclaTransportError):
    """The HTTP client failed while sending the request."""


class ResponseReadError(AnclaTransportError):
    """Failed while reading the HTTP response body."""


# ---------------------------------------------------------------------------
# Remote store status classification
# ---------------------------------------------------------------------------


class AnclaStoreError(AnclaError):
    """The item store responded with a non-success status code."""

    def __init__(
        self,
        message: str = "item store responded with a non-success status code",
        *,
        status_code: int | None = None,
        error_header: str = "",
    ) -> None:
        self.status_code = status_code
        self.error_header = error_header
        if status_code is not None:
            message = f"{message}: received status {status_code}"
        super().__init__(message)


class BadRequestError(AnclaStoreError):
    """The item store rejected the request as invalid (HTTP 400)."""

    def __init__(
        self,
        message: str = "item store rejected the request as invalid",
        *,
        status_code: int | None = None,
        error_header: str = "",
    ) -> None:
        super().__init__(message, status_code=status_code, error_header=error_header)


class StoreAuthenticationError(AnclaStoreError):
    """Failed to authenticate with the item store (HTTP 401/403)."""

    def __init__(
        self,
        message: str = "failed to authenticate with the item store",
        *,
        status_code: int | None = None,
        error_header: str = "",
    ) -> None:
        super().__init__(message, status_code=status_code, error_header=error_header)


class NonSuccessStatusError(AnclaStoreError):
    """Any other non-success status code."""


# ---------------------------------------------------------------------------
# JSON encoding/decoding
# ---------------------------------------------------------------------------


class AnclaCodecError(AnclaError):
    """JSON encode or decode failure."""


class ItemEncodeError(AnclaCodecError):
    """Failed marshaling an item as a JSON payload."""


class ResponseDecodeError(AnclaCodecError):
    """Failed unmarshaling a JSON response payload."""


# ---------------------------------------------------------------------------
# Listener state machine
# ---------------------------------------------------------------------------


class ListenerStateError(AnclaError):
    """Start/stop was called from the wrong listener state."""


class ListenerNotStoppedError(ListenerStateError):
    """Listener is either running or starting."""

    def __init__(self, message: str = "listener is either running or starting") -> None:
        super().__init__(message)


class ListenerNotRunningError(ListenerStateError):
    """Listener is either stopped or stopping."""

    def __init__(self, message: str = "listener is either stopped or stopping") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Webhook service
# ---------------------------------------------------------------------------


class WebhookError(AnclaError):
    """Base for webhook registry failures."""


class WebhookConversionError(WebhookError):
    """Failed to convert a webhook to a store item."""


class ItemConversionError(WebhookError):
    """Failed to convert a store item to a webhook."""


class WebhookPushError(WebhookError):
    """Failed to add a webhook to the registry."""


class WebhookRemoveError(WebhookError):
    """Failed to remove a webhook from the registry."""


class WebhooksFetchError(WebhookError):
    """Failed to fetch webhooks."""


class NonSuccessPushResultError(WebhookError):
    """Got a push result but it was not of a success type."""
