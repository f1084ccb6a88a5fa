"""x402 payment gate for priced entrypoints.

A caller pays by sending a base64-encoded JSON payment in the ``X-PAYMENT`` header.
The gate asks the configured facilitator to verify it before the entrypoint runs and
to settle it afterwards; settled payments are recorded in the analytics tracker.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from ..entrypoints.base import Entrypoint
from ..services.analytics import PaymentDirection, PaymentRecord, PaymentTracker, get_payment_tracker
from .config import PaymentSettings, Settings
from .exceptions import FacilitatorError, PaymentRequiredError, PaymentVerificationError
from .logging import get_logger
from .metrics import increment_payment

logger = get_logger(name=__name__)

X402_VERSION = 1
PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"


def decode_payment_header(raw: str) -> dict[str, Any]:
    try:
        decoded = base64.b64decode(raw.strip(), validate=True)
        payment = json.loads(decoded)
    except (binascii.Error, ValueError) as exc:
        raise PaymentVerificationError("Malformed X-PAYMENT header") from exc
    if not isinstance(payment, dict):
        raise PaymentVerificationError("Malformed X-PAYMENT header")
    return payment


def encode_payment_response(settlement: Mapping[str, Any]) -> str:
    return base64.b64encode(json.dumps(dict(settlement), separators=(",", ":")).encode("utf-8")).decode("ascii")


class FacilitatorClient:
    def __init__(self, settings: PaymentSettings) -> None:
        self._base_url = settings.facilitator_url.rstrip("/")
        self._timeout = settings.timeout_seconds

    async def verify(self, payment: Mapping[str, Any], requirements: Mapping[str, Any]) -> dict[str, Any]:
        return await self._post("/verify", payment, requirements)

    async def settle(self, payment: Mapping[str, Any], requirements: Mapping[str, Any]) -> dict[str, Any]:
        return await self._post("/settle", payment, requirements)

    async def _post(self, path: str, payment: Mapping[str, Any], requirements: Mapping[str, Any]) -> dict[str, Any]:
        body = {
            "x402Version": X402_VERSION,
            "paymentPayload": dict(payment),
            "paymentRequirements": dict(requirements),
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(f"{self._base_url}{path}", json=body)
        except httpx.HTTPError as exc:
            raise FacilitatorError(f"Facilitator {path} failed: {exc}") from exc
        if not response.is_success:
            raise FacilitatorError(f"Facilitator {path} -> {response.status_code}: {response.text[:200]}")
        data = response.json()
        if not isinstance(data, dict):
            raise FacilitatorError(f"Facilitator {path} returned a non-object body")
        return data


@dataclass(slots=True, frozen=True)
class VerifiedPayment:
    payment: dict[str, Any]
    requirements: dict[str, Any]
    payer: str | None


@dataclass(slots=True, frozen=True)
class PaymentReceipt:
    payer: str | None
    transaction: str | None
    network: str
    header_value: str


class PaymentGate:
    def __init__(
        self,
        settings: PaymentSettings,
        *,
        facilitator: FacilitatorClient | None = None,
        tracker: PaymentTracker | None = None,
    ) -> None:
        self._settings = settings
        self._facilitator = facilitator or FacilitatorClient(settings)
        self._tracker = tracker

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def requires_payment(self, entrypoint: Entrypoint) -> bool:
        return self.enabled and not entrypoint.is_free()

    def requirements(self, entrypoint: Entrypoint, resource: str) -> dict[str, Any]:
        return {
            "scheme": "exact",
            "network": self._settings.network,
            "maxAmountRequired": str(entrypoint.price),
            "resource": resource,
            "description": entrypoint.description,
            "mimeType": "application/json",
            "payTo": self._settings.pay_to,
            "maxTimeoutSeconds": self._settings.max_timeout_seconds,
            "asset": self._settings.asset,
        }

    async def authorize(
        self,
        entrypoint: Entrypoint,
        header_value: str | None,
        *,
        resource: str,
    ) -> VerifiedPayment | None:
        """Verify the caller's payment; ``None`` when the entrypoint needs none."""
        if not self.requires_payment(entrypoint):
            return None
        requirements = self.requirements(entrypoint, resource)
        if not header_value:
            increment_payment(entrypoint=entrypoint.key, outcome="required")
            raise PaymentRequiredError("X-PAYMENT header is required", requirements=requirements)

        try:
            payment = decode_payment_header(header_value)
        except PaymentVerificationError as exc:
            increment_payment(entrypoint=entrypoint.key, outcome="malformed")
            raise PaymentVerificationError(str(exc), requirements=requirements) from exc

        verdict = await self._facilitator.verify(payment, requirements)
        if not verdict.get("isValid"):
            reason = str(verdict.get("invalidReason") or "Payment rejected by facilitator")
            increment_payment(entrypoint=entrypoint.key, outcome="invalid")
            logger.info("payment_rejected", entrypoint=entrypoint.key, reason=reason)
            raise PaymentVerificationError(reason, requirements=requirements)
        increment_payment(entrypoint=entrypoint.key, outcome="verified")
        return VerifiedPayment(payment=payment, requirements=requirements, payer=verdict.get("payer"))

    async def settle(self, entrypoint: Entrypoint, verified: VerifiedPayment) -> PaymentReceipt:
        settlement = await self._facilitator.settle(verified.payment, verified.requirements)
        if not settlement.get("success"):
            reason = str(settlement.get("errorReason") or "Payment settlement failed")
            increment_payment(entrypoint=entrypoint.key, outcome="settle_failed")
            raise PaymentVerificationError(reason, requirements=verified.requirements)

        payer = settlement.get("payer") or verified.payer
        network = settlement.get("network") or self._settings.network
        receipt = PaymentReceipt(
            payer=payer,
            transaction=settlement.get("transaction"),
            network=network,
            header_value=encode_payment_response(settlement),
        )
        if self._tracker is not None:
            await self._tracker.record(
                PaymentRecord(
                    direction=PaymentDirection.INCOMING,
                    amount=entrypoint.price,
                    entrypoint=entrypoint.key,
                    network=network,
                    payer=payer,
                    transaction=receipt.transaction,
                )
            )
        increment_payment(entrypoint=entrypoint.key, outcome="settled")
        return receipt


def payment_required_body(error: str, requirements: Mapping[str, Any] | None) -> dict[str, Any]:
    return {
        "x402Version": X402_VERSION,
        "error": error,
        "accepts": [dict(requirements)] if requirements else [],
    }


_gate_singleton: PaymentGate | None = None


def get_payment_gate(settings: Settings) -> PaymentGate:
    global _gate_singleton
    if _gate_singleton is None:
        if settings.payments.enabled and not settings.payments.pay_to:
            raise ValueError("payments.pay_to must be configured when payments are enabled")
        _gate_singleton = PaymentGate(settings.payments, tracker=get_payment_tracker(settings))
    return _gate_singleton


def reset_payment_gate() -> None:
    global _gate_singleton
    _gate_singleton = None


__all__ = [
    "X402_VERSION",
    "PAYMENT_HEADER",
    "PAYMENT_RESPONSE_HEADER",
    "FacilitatorClient",
    "PaymentGate",
    "PaymentReceipt",
    "VerifiedPayment",
    "decode_payment_header",
    "encode_payment_response",
    "get_payment_gate",
    "payment_required_body",
    "reset_payment_gate",
]
