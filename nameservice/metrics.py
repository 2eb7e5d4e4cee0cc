# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Prometheus metrics for the name service.

This module defines counters and histograms for the core flows:
  • commitments:    commitment submissions per outcome
  • reveals:        reveal (consume) attempts per outcome
  • registrations:  paid register / renew calls
  • resolutions:    dispatcher results per outcome
  • gateway_seconds: latency of Gateway Executor round trips

Label cardinality is intentionally low: every label has a small, closed
vocabulary and unknown values are folded into ``invalid``.

Usage
-----
    from nameservice.metrics import METRICS

    METRICS.record_commitment("accepted")
    with METRICS.gateway_timer():
        values, context = await gateway.execute(request)
"""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Iterable, Iterator

from prometheus_client import REGISTRY, Counter, Histogram

_COMMITMENT_OUTCOMES = ("accepted", "duplicate", "invalid")
_REVEAL_OUTCOMES = ("accepted", "not_found", "too_new", "invalid")
_REGISTRATION_KINDS = ("register", "renew", "invalid")
_RESOLUTION_OUTCOMES = ("immediate", "pending", "unmatched", "error", "invalid")

_GATEWAY_BUCKETS = (
    0.005, 0.01, 0.025, 0.05,
    0.1, 0.25, 0.5,
    1.0, 2.5, 5.0, 10.0, 30.0,
)


def _fold(value: str, vocabulary: tuple) -> str:
    return value if value in vocabulary else "invalid"


class Metrics:
    """
    Container for all name service Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem.
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "animica",
        subsystem: str = "nameservice",
        registry=REGISTRY,
        gateway_buckets: Iterable[float] = _GATEWAY_BUCKETS,
    ) -> None:
        common = dict(namespace=namespace, subsystem=subsystem, registry=registry)
        self.commitments_total = Counter(
            "commitments_total",
            "Commitment submissions processed, labeled by outcome.",
            labelnames=("outcome",),
            **common,
        )
        self.reveals_total = Counter(
            "reveals_total",
            "Reveal attempts against recorded commitments, labeled by outcome.",
            labelnames=("outcome",),
            **common,
        )
        self.registrations_total = Counter(
            "registrations_total",
            "Successful paid registrar calls, labeled by kind.",
            labelnames=("kind",),
            **common,
        )
        self.resolutions_total = Counter(
            "resolutions_total",
            "Credential resolutions, labeled by outcome.",
            labelnames=("outcome",),
            **common,
        )
        self.gateway_seconds = Histogram(
            "gateway_seconds",
            "Gateway Executor round-trip time (seconds).",
            buckets=tuple(gateway_buckets),
            **common,
        )

    def record_commitment(self, outcome: str) -> None:
        self.commitments_total.labels(outcome=_fold(outcome, _COMMITMENT_OUTCOMES)).inc()

    def record_reveal(self, outcome: str) -> None:
        self.reveals_total.labels(outcome=_fold(outcome, _REVEAL_OUTCOMES)).inc()

    def record_registration(self, kind: str) -> None:
        self.registrations_total.labels(kind=_fold(kind, _REGISTRATION_KINDS)).inc()

    def record_resolution(self, outcome: str) -> None:
        self.resolutions_total.labels(outcome=_fold(outcome, _RESOLUTION_OUTCOMES)).inc()

    @contextmanager
    def gateway_timer(self) -> Iterator[None]:
        """Time one Gateway Executor round trip, including failed ones."""
        start = perf_counter()
        try:
            yield
        finally:
            self.gateway_seconds.observe(perf_counter() - start)


# Singleton used by most components
METRICS = Metrics()

__all__ = ["Metrics", "METRICS"]
