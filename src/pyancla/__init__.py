"""pyancla - Async client for webhook registrations kept in a remote item store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyancla")
except PackageNotFoundError:
    __version__ = "0+local"
from pyancla.auth import AuthDecorator, BasicAuth, BearerAuth, StaticTokenAcquirer
from pyancla.client import Pusher, Reader, StoreClient, translate_status_code
from pyancla.config import MetricNames, StoreConfig
from pyancla.exceptions import (
    AnclaCodecError,
    AnclaConfigError,
    AnclaError,
    AnclaStoreError,
    AnclaTransportError,
    AuthDecoratorError,
    BadRequestError,
    ItemConversionError,
    ItemDataEmptyError,
    ItemEncodeError,
    ItemIDEmptyError,
    ItemValidationError,
    ListenerNotRunningError,
    ListenerNotStoppedError,
    ListenerStateError,
    NonSuccessPushResultError,
    NonSuccessStatusError,
    RequestBuildError,
    RequestExecutionError,
    ResponseDecodeError,
    ResponseReadError,
    StoreAuthenticationError,
    WebhookConversionError,
    WebhookError,
    WebhookPushError,
    WebhookRemoveError,
    WebhooksFetchError,
)
from pyancla.listener import Listener, ListenerClient, ListenerFunc, ListenerState
from pyancla.metrics import Measures, PollOutcome
from pyancla.models import DeliveryConfig, Item, MetadataMatcherConfig, PushResult, Webhook
from pyancla.service import WebhookService, webhook_to_item
from pyancla.watch import Watch, WatchFunc, WebhookListener, webhook_list_size_watch

__all__ = [
    "__version__",
    "AnclaCodecError",
    "AnclaConfigError",
    "AnclaError",
    "AnclaStoreError",
    "AnclaTransportError",
    "AuthDecorator",
    "AuthDecoratorError",
    "BadRequestError",
    "BasicAuth",
    "BearerAuth",
    "DeliveryConfig",
    "Item",
    "ItemConversionError",
    "ItemDataEmptyError",
    "ItemEncodeError",
    "ItemIDEmptyError",
    "ItemValidationError",
    "Listener",
    "ListenerClient",
    "ListenerFunc",
    "ListenerNotRunningError",
    "ListenerNotStoppedError",
    "ListenerState",
    "ListenerStateError",
    "Measures",
    "MetadataMatcherConfig",
    "MetricNames",
    "NonSuccessPushResultError",
    "NonSuccessStatusError",
    "PollOutcome",
    "PushResult",
    "Pusher",
    "Reader",
    "RequestBuildError",
    "RequestExecutionError",
    "ResponseDecodeError",
    "ResponseReadError",
    "StaticTokenAcquirer",
    "StoreAuthenticationError",
    "StoreClient",
    "StoreConfig",
    "Watch",
    "WatchFunc",
    "WebhookConversionError",
    "WebhookError",
    "WebhookListener",
    "WebhookPushError",
    "WebhookRemoveError",
    "WebhookService",
    "WebhooksFetchError",
    "translate_status_code",
    "webhook_list_size_watch",
    "webhook_to_item",
]
