"""Prometheus instrumentation for the listener."""

from __future__ import annotations

import enum

from prometheus_client import CollectorRegistry, Counter, Gauge

from pyancla.config import MetricNames


class PollOutcome(str, enum.Enum):
    """Label value recorded once per poll cycle."""

    SUCCESS = "success"
    FAILURE = "failure"


class Measures:
    """Metrics used by the listener and the webhook watches.

    Metrics are registered on *registry*. When omitted a private
    registry is used, so several instances never collide; pass
    ``prometheus_client.REGISTRY`` to export them from the process.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        names: MetricNames | None = None,
    ) -> None:
        self.names = names or MetricNames()
        self.registry = registry if registry is not None else CollectorRegistry()
        self.polls_total = Counter(
            self.names.polls_total,
            self.names.polls_total_help,
            labelnames=(self.names.outcome_label,),
            registry=self.registry,
        )
        self.webhook_list_size = Gauge(
            self.names.webhook_list_size,
            self.names.webhook_list_size_help,
            registry=self.registry,
        )

    def record_poll(self, outcome: PollOutcome) -> None:
        self.polls_total.labels(**{self.names.outcome_label: outcome.value}).inc()

    def poll_count(self, outcome: PollOutcome) -> float:
        """Current value of the poll counter for *outcome*."""
        sample = self.names.polls_total
        if not sample.endswith("_total"):
            sample = f"{sample}_total"
        value = self.registry.get_sample_value(sample, {self.names.outcome_label: outcome.value})
        return value or 0.0
