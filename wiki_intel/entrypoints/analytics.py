from __future__ import annotations

from typing import Any

from pydantic import Field

from ..core.config import get_settings
from ..schemas.knowledge import CamelModel
from ..services.analytics import PaymentTracker, get_payment_tracker
from .base import Entrypoint, EntrypointInput


class AnalyticsSummaryInput(EntrypointInput):
    window_ms: int | None = Field(default=None, ge=1, description="Time window in ms")


class AnalyticsSummaryOutput(CamelModel):
    outgoing_total: str
    incoming_total: str
    net_total: str
    outgoing_count: int
    incoming_count: int
    window_start_ms: int | None = None
    window_end_ms: int


class AnalyticsUnavailable(CamelModel):
    error: str = "Analytics not available"
    payments: list[Any] = Field(default_factory=list)


class AnalyticsTransactionsInput(EntrypointInput):
    window_ms: int | None = Field(default=None, ge=1)
    limit: int = Field(50, ge=1)


class AnalyticsTransactionsOutput(CamelModel):
    transactions: list[dict[str, Any]]


class AnalyticsCsvInput(EntrypointInput):
    window_ms: int | None = Field(default=None, ge=1)


class AnalyticsCsvOutput(CamelModel):
    csv: str


class _TrackerEntrypoint(Entrypoint):
    price = 0

    def __init__(self, tracker: PaymentTracker | None = None) -> None:
        self._tracker = tracker

    @property
    def tracker(self) -> PaymentTracker | None:
        if self._tracker is not None:
            return self._tracker
        return get_payment_tracker(get_settings())


class AnalyticsSummaryEntrypoint(_TrackerEntrypoint):
    key = "analytics"
    description = "Payment analytics summary"
    InputModel = AnalyticsSummaryInput
    OutputModel = AnalyticsSummaryOutput

    async def _invoke(self, payload_model: AnalyticsSummaryInput) -> AnalyticsSummaryOutput | AnalyticsUnavailable:
        tracker = self.tracker
        if tracker is None:
            return AnalyticsUnavailable()
        summary = await tracker.summary(payload_model.window_ms)
        return AnalyticsSummaryOutput(
            outgoing_total=str(summary["outgoingTotal"]),
            incoming_total=str(summary["incomingTotal"]),
            net_total=str(summary["netTotal"]),
            outgoing_count=summary["outgoingCount"],
            incoming_count=summary["incomingCount"],
            window_start_ms=summary["windowStartMs"],
            window_end_ms=summary["windowEndMs"],
        )


class AnalyticsTransactionsEntrypoint(_TrackerEntrypoint):
    key = "analytics-transactions"
    description = "Recent payment transactions"
    InputModel = AnalyticsTransactionsInput
    OutputModel = AnalyticsTransactionsOutput

    async def _invoke(self, payload_model: AnalyticsTransactionsInput) -> AnalyticsTransactionsOutput:
        tracker = self.tracker
        if tracker is None:
            return AnalyticsTransactionsOutput(transactions=[])
        records = await tracker.transactions(payload_model.window_ms)
        return AnalyticsTransactionsOutput(
            transactions=[record.to_dict() for record in records[: payload_model.limit]]
        )


class AnalyticsCsvEntrypoint(_TrackerEntrypoint):
    key = "analytics-csv"
    description = "Export payment data as CSV"
    InputModel = AnalyticsCsvInput
    OutputModel = AnalyticsCsvOutput

    async def _invoke(self, payload_model: AnalyticsCsvInput) -> AnalyticsCsvOutput:
        tracker = self.tracker
        if tracker is None:
            return AnalyticsCsvOutput(csv="")
        return AnalyticsCsvOutput(csv=await tracker.export_csv(payload_model.window_ms))


ANALYTICS_ENTRYPOINT_CLASSES: tuple[type[Entrypoint], ...] = (
    AnalyticsSummaryEntrypoint,
    AnalyticsTransactionsEntrypoint,
    AnalyticsCsvEntrypoint,
)


__all__ = [
    "AnalyticsSummaryEntrypoint",
    "AnalyticsTransactionsEntrypoint",
    "AnalyticsCsvEntrypoint",
    "ANALYTICS_ENTRYPOINT_CLASSES",
]
