from __future__ import annotations

import time
import uuid
from typing import Any

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.exceptions import EntrypointNotFoundError, FacilitatorError, PaymentError, UpstreamAPIError
from ..core.logging import get_logger
from ..core.metrics import observe_entrypoint
from ..core.payments import (
    PAYMENT_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PaymentGate,
    payment_required_body,
)
from ..dependencies import get_gate
from ..entrypoints.registry import bootstrap_entrypoint_registry, entrypoint_registry

router = APIRouter(tags=["entrypoints"])
logger = get_logger(name=__name__)


def _unwrap_input(payload: dict[str, Any] | None) -> dict[str, Any]:
    if not payload:
        return {}
    if len(payload) == 1 and isinstance(payload.get("input"), dict):
        return payload["input"]
    return payload


@router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, Any]:
    bootstrap_entrypoint_registry()
    return {"status": "ok", "entrypoints": entrypoint_registry.list()}


@router.get("/entrypoints", summary="List available entrypoints")
async def list_entrypoints() -> dict[str, Any]:
    bootstrap_entrypoint_registry()
    descriptors: list[dict[str, Any]] = []
    for _, entrypoint in entrypoint_registry.items():
        descriptor = entrypoint.descriptor()
        descriptors.append(
            {
                "key": descriptor.key,
                "description": descriptor.description,
                "price": descriptor.price,
                "input_schema": descriptor.input_schema,
                "output_schema": descriptor.output_schema,
            }
        )
    return {"entrypoints": descriptors}


@router.post("/entrypoints/{key}/invoke", summary="Invoke an entrypoint")
async def invoke_entrypoint(
    key: str,
    request: Request,
    payload: dict[str, Any] | None = Body(default=None),
    gate: PaymentGate = Depends(get_gate),
) -> Any:
    bootstrap_entrypoint_registry()
    try:
        entrypoint = entrypoint_registry.require(key)
    except EntrypointNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    trace_id = uuid.uuid4().hex
    started = time.perf_counter()
    logger.info(
        "entrypoint_invocation_started",
        entrypoint=entrypoint.key,
        trace_id=trace_id,
        price=entrypoint.price,
    )

    try:
        model = entrypoint.parse_input(_unwrap_input(payload))
    except ValidationError as exc:
        observe_entrypoint(entrypoint=entrypoint.key, outcome="invalid_input")
        logger.warning(
            "entrypoint_invocation_validation_error",
            entrypoint=entrypoint.key,
            trace_id=trace_id,
            errors=len(exc.errors()),
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc

    headers: dict[str, str] = {}
    try:
        verified = await gate.authorize(
            entrypoint,
            request.headers.get(PAYMENT_HEADER),
            resource=str(request.url),
        )
        output = await entrypoint.run(model)
        if verified is not None:
            receipt = await gate.settle(entrypoint, verified)
            headers[PAYMENT_RESPONSE_HEADER] = receipt.header_value
    except PaymentError as exc:
        observe_entrypoint(entrypoint=entrypoint.key, outcome="payment_required")
        logger.info(
            "entrypoint_payment_required",
            entrypoint=entrypoint.key,
            trace_id=trace_id,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            content=payment_required_body(str(exc), exc.requirements),
        )
    except (UpstreamAPIError, FacilitatorError, httpx.HTTPError) as exc:
        duration = time.perf_counter() - started
        observe_entrypoint(entrypoint=entrypoint.key, outcome="upstream_error", latency=duration)
        logger.warning(
            "entrypoint_invocation_upstream_error",
            entrypoint=entrypoint.key,
            trace_id=trace_id,
            duration=duration,
            error=str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - safety net for unexpected entrypoint errors
        duration = time.perf_counter() - started
        observe_entrypoint(entrypoint=entrypoint.key, outcome="failure", latency=duration)
        logger.exception(
            "entrypoint_invocation_failed",
            entrypoint=entrypoint.key,
            trace_id=trace_id,
            duration=duration,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    duration = time.perf_counter() - started
    observe_entrypoint(entrypoint=entrypoint.key, outcome="success", latency=duration)
    logger.info(
        "entrypoint_invocation_completed",
        entrypoint=entrypoint.key,
        trace_id=trace_id,
        duration=duration,
        paid=bool(headers),
    )
    return JSONResponse(content={"output": output}, headers=headers)
