from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends

from .core.config import Settings, get_settings
from .core.payments import PaymentGate, get_payment_gate


async def get_app_settings() -> AsyncIterator[Settings]:
    yield get_settings()


async def get_gate(
    settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[PaymentGate]:
    yield get_payment_gate(settings)
