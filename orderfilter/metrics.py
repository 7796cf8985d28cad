"""Prometheus counters for filter construction and validation outcomes.

Counters are fetched-or-created against a registry so re-importing this
module (or constructing several filters) never registers a metric twice.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Dict, Tuple

from prometheus_client import REGISTRY as global_registry
from prometheus_client import CollectorRegistry, Counter

__all__ = [
    "get_or_create_counter",
    "record_construction",
    "record_validation",
    "reset_metrics",
    "VALIDATIONS",
    "FILTER_CONSTRUCTIONS",
]

_METRIC_CACHE: Dict[Tuple[CollectorRegistry, str], Counter] = {}


def get_or_create_counter(
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> Counter:
    """Return an existing counter or register a new one."""

    reg = registry or global_registry
    labels = tuple(labelnames or ())
    key = (reg, name)
    cached = _METRIC_CACHE.get(key)
    if cached is not None and tuple(cached._labelnames) == labels:  # type: ignore[attr-defined]
        return cached

    existing = reg._names_to_collectors.get(name)  # type: ignore[attr-defined]
    if isinstance(existing, Counter) and tuple(existing._labelnames) == labels:  # type: ignore[attr-defined]
        metric = existing
    else:
        if existing is not None:
            reg.unregister(existing)
        metric = Counter(name, documentation, labels, registry=reg)
    _METRIC_CACHE[key] = metric
    return metric


VALIDATIONS = get_or_create_counter(
    "orderfilter_validations_total",
    "Total number of documents validated by order filters.",
    labelnames=("kind", "outcome"),
)

FILTER_CONSTRUCTIONS = get_or_create_counter(
    "orderfilter_filter_constructions_total",
    "Total number of order filter constructions.",
    labelnames=("outcome",),
)


def record_validation(kind: str, outcome: str) -> None:
    VALIDATIONS.labels(kind=kind, outcome=outcome).inc()


def record_construction(outcome: str) -> None:
    FILTER_CONSTRUCTIONS.labels(outcome=outcome).inc()


def reset_metrics() -> None:
    """Clear every labelled series; intended for tests."""

    for metric in (VALIDATIONS, FILTER_CONSTRUCTIONS):
        metric.clear()
