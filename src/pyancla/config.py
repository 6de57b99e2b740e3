"""Client configuration for pyancla."""

from __future__ import annotations

import dataclasses
import os
from typing import Any
from urllib.parse import urlsplit

from pyancla._constants import (
    DEFAULT_PULL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    OUTCOME_LABEL,
    POLLS_TOTAL_COUNTER,
    POLLS_TOTAL_COUNTER_HELP,
    STORE_API_PATH,
    WEBHOOK_LIST_SIZE_GAUGE,
    WEBHOOK_LIST_SIZE_GAUGE_HELP,
)
from pyancla.exceptions import AnclaConfigError


@dataclasses.dataclass(frozen=True)
class MetricNames:
    """Names and help strings of the metrics exported by the listener.

    The defaults match what existing dashboards for the item store
    listener expect.
    """

    polls_total: str = POLLS_TOTAL_COUNTER
    polls_total_help: str = POLLS_TOTAL_COUNTER_HELP
    webhook_list_size: str = WEBHOOK_LIST_SIZE_GAUGE
    webhook_list_size_help: str = WEBHOOK_LIST_SIZE_GAUGE_HELP
    outcome_label: str = OUTCOME_LABEL


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Item store client configuration.

    Parameters
    ----------
    base_url : str
        Address of the item store, e.g. ``"https://store.example.com"``.
    bucket : str
        Partition of the store's key space holding the items.
    api_path : str
        Store API path joined onto ``base_url``.
    request_timeout : float
        Total timeout in seconds for a single store request.
    pull_interval : float
        Seconds between two polls of the listener. ``0`` selects the
        default of 5 seconds.
    """

    base_url: str
    bucket: str
    api_path: str = STORE_API_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    pull_interval: float = DEFAULT_PULL_INTERVAL

    @property
    def store_url(self) -> str:
        """``base_url`` joined with ``api_path``."""
        return f"{self.base_url.rstrip('/')}/{self.api_path.strip('/')}"

    def validate(self) -> None:
        """Check every field and raise one error listing all violations."""
        errors: list[str] = []

        if not self.base_url:
            errors.append("empty string base_url")
        else:
            parts = urlsplit(self.base_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                errors.append(f"base_url must be an absolute http(s) URL, got {self.base_url!r}")

        if not self.api_path:
            errors.append("empty string api_path")
        if not self.bucket:
            errors.append("empty string bucket")
        if self.request_timeout <= 0:
            errors.append(f"request_timeout must be positive, got {self.request_timeout}")
        if self.pull_interval < 0:
            errors.append(f"negative pull_interval {self.pull_interval}")

        if errors:
            raise AnclaConfigError("ancla client configuration error", errors=errors)

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``ANCLA_STORE_BASE_URL``, ``ANCLA_STORE_BUCKET`` and the
        optional ``ANCLA_STORE_API_PATH``, ``ANCLA_REQUEST_TIMEOUT`` and
        ``ANCLA_PULL_INTERVAL``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "ANCLA_STORE_BASE_URL": "base_url",
            "ANCLA_STORE_BUCKET": "bucket",
            "ANCLA_STORE_API_PATH": "api_path",
        }
        config_kwargs: dict[str, Any] = {"base_url": "", "bucket": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # numeric fields, handle separately
        timeout_env = env.get("ANCLA_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        interval_env = env.get("ANCLA_PULL_INTERVAL")
        if interval_env is not None and "pull_interval" not in overrides:
            config_kwargs["pull_interval"] = float(interval_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
