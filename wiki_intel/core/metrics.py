from __future__ import annotations

from prometheus_client import Counter, Histogram

ENTRYPOINT_INVOCATIONS_TOTAL = Counter(
    "wiki_intel_entrypoint_invocations_total",
    "Entrypoint invocations grouped by outcome",
    labelnames=("entrypoint", "outcome"),
)

ENTRYPOINT_LATENCY_SECONDS = Histogram(
    "wiki_intel_entrypoint_latency_seconds",
    "Latency for each entrypoint invocation",
    labelnames=("entrypoint",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, float("inf")),
)

UPSTREAM_REQUESTS_TOTAL = Counter(
    "wiki_intel_upstream_requests_total",
    "Outbound requests to Wikipedia and Wikidata grouped by host and outcome",
    labelnames=("host", "outcome"),
)

PAYMENTS_TOTAL = Counter(
    "wiki_intel_payments_total",
    "Payment gate decisions grouped by entrypoint and outcome",
    labelnames=("entrypoint", "outcome"),
)


def observe_entrypoint(*, entrypoint: str, outcome: str, latency: float | None = None) -> None:
    ENTRYPOINT_INVOCATIONS_TOTAL.labels(entrypoint=entrypoint, outcome=outcome).inc()
    if latency is not None:
        ENTRYPOINT_LATENCY_SECONDS.labels(entrypoint=entrypoint).observe(max(latency, 0.0))


def increment_upstream_request(*, host: str, outcome: str) -> None:
    UPSTREAM_REQUESTS_TOTAL.labels(host=host or "unknown", outcome=outcome).inc()


def increment_payment(*, entrypoint: str, outcome: str) -> None:
    PAYMENTS_TOTAL.labels(entrypoint=entrypoint, outcome=outcome).inc()


__all__ = [
    "ENTRYPOINT_INVOCATIONS_TOTAL",
    "ENTRYPOINT_LATENCY_SECONDS",
    "UPSTREAM_REQUESTS_TOTAL",
    "PAYMENTS_TOTAL",
    "observe_entrypoint",
    "increment_upstream_request",
    "increment_payment",
]
