"""
Defines Prometheus metrics for the application.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, multiple app instances) must not
# raise "Duplicated timeseries" from the default registry.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "comparisons_total": Counter(
            "landingqa_comparisons_total",
            "Completed comparison requests by overall status",
            ["status"],
        ),
        "comparison_duration_seconds": Histogram(
            "landingqa_comparison_duration_seconds",
            "Wall time of one comparison request",
            buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
        ),
        "fetch_attempts_total": Counter(
            "landingqa_fetch_attempts_total",
            "Page fetch attempts by outcome",
            ["outcome"],
        ),
        "fetch_latency_seconds": Histogram(
            "landingqa_fetch_latency_seconds",
            "Time taken to fetch a page including redirects and retries",
            buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        ),
        "redirect_hops": Histogram(
            "landingqa_redirect_hops",
            "Number of redirects followed to reach the final page",
            buckets=[0, 1, 2, 3, 5, 10],
        ),
        "auxiliary_failures_total": Counter(
            "landingqa_auxiliary_failures_total",
            "Best-effort checks that degraded to unavailable",
            ["check"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
