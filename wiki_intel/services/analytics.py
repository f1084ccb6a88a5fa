from __future__ import annotations

import asyncio
import csv
import io
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable
from uuid import uuid4

from ..core.config import AnalyticsSettings, Settings
from ..core.logging import get_logger

logger = get_logger(name=__name__)

CSV_COLUMNS = ("id", "timestamp", "direction", "amount", "entrypoint", "payer", "network", "transaction")


class PaymentDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


@dataclass(slots=True, frozen=True)
class PaymentRecord:
    direction: PaymentDirection
    amount: int
    entrypoint: str
    network: str
    payer: str | None = None
    transaction: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    record_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def timestamp_ms(self) -> int:
        return int(self.timestamp.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "direction": self.direction.value,
            "amount": str(self.amount),
            "entrypoint": self.entrypoint,
            "payer": self.payer,
            "network": self.network,
            "transaction": self.transaction,
            "timestamp": self.timestamp.isoformat(),
        }


class PaymentTracker:
    """Process-local ledger of settled payments backing the analytics entrypoints."""

    def __init__(self, settings: AnalyticsSettings) -> None:
        self._records: deque[PaymentRecord] = deque(maxlen=settings.max_transactions)
        self._lock = asyncio.Lock()

    async def record(self, record: PaymentRecord) -> None:
        async with self._lock:
            self._records.append(record)
        logger.info(
            "payment_recorded",
            direction=record.direction.value,
            amount=record.amount,
            entrypoint=record.entrypoint,
            payer=record.payer,
        )

    async def clear(self) -> None:
        async with self._lock:
            self._records.clear()

    async def transactions(self, window_ms: int | None = None) -> list[PaymentRecord]:
        """Records inside the window, newest first."""
        async with self._lock:
            records = list(self._records)
        if window_ms is not None:
            cutoff = _now_ms() - window_ms
            records = [item for item in records if item.timestamp_ms >= cutoff]
        return list(reversed(records))

    async def summary(self, window_ms: int | None = None) -> dict[str, Any]:
        records = await self.transactions(window_ms)
        incoming = [item.amount for item in records if item.direction is PaymentDirection.INCOMING]
        outgoing = [item.amount for item in records if item.direction is PaymentDirection.OUTGOING]
        now = _now_ms()
        return {
            "outgoingTotal": sum(outgoing),
            "incomingTotal": sum(incoming),
            "netTotal": sum(incoming) - sum(outgoing),
            "outgoingCount": len(outgoing),
            "incomingCount": len(incoming),
            "windowStartMs": now - window_ms if window_ms is not None else None,
            "windowEndMs": now,
        }

    async def export_csv(self, window_ms: int | None = None) -> str:
        return render_csv(await self.transactions(window_ms))


def render_csv(records: Iterable[PaymentRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for record in records:
        row = record.to_dict()
        writer.writerow({column: "" if row[column] is None else row[column] for column in CSV_COLUMNS})
    return buffer.getvalue()


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


_tracker_singleton: PaymentTracker | None = None


def get_payment_tracker(settings: Settings) -> PaymentTracker | None:
    """Shared tracker, or ``None`` when analytics are disabled."""
    global _tracker_singleton
    if not settings.analytics.enabled:
        return None
    if _tracker_singleton is None:
        _tracker_singleton = PaymentTracker(settings.analytics)
    return _tracker_singleton


__all__ = [
    "PaymentDirection",
    "PaymentRecord",
    "PaymentTracker",
    "render_csv",
    "get_payment_tracker",
]
