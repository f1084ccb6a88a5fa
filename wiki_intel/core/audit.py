from __future__ import annotations

import hashlib
import re
import uuid
from time import perf_counter
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from .exceptions import PaymentVerificationError
from .logging import get_logger
from .payments import PAYMENT_HEADER, PAYMENT_RESPONSE_HEADER, decode_payment_header

REQUEST_ID_HEADER = "X-Request-ID"
_INVOKE_PATH = re.compile(r"^/entrypoints/(?P<key>[^/]+)/invoke/?$")


def _payer_from_header(raw: str | None) -> str | None:
    """Best-effort payer address from an ``X-PAYMENT`` header, for the audit trail only."""
    if not raw:
        return None
    try:
        payment = decode_payment_header(raw)
    except PaymentVerificationError:
        return None
    payload: Any = payment.get("payload")
    authorization = payload.get("authorization") if isinstance(payload, dict) else None
    payer = authorization.get("from") if isinstance(authorization, dict) else None
    return str(payer) if payer else None


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one ``audit_log`` event per entrypoint invocation.

    Every response on an invoke path carries an ``X-Request-ID`` header, reusing the
    caller's value when one was sent.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._logger = get_logger(name="audit")

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        match = _INVOKE_PATH.match(request.url.path)
        if match is None:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = perf_counter()
        body = await request.body()
        payment_header = request.headers.get(PAYMENT_HEADER)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        self._logger.info(
            "audit_log",
            request_id=request_id,
            entrypoint=match.group("key"),
            status=response.status_code,
            payment_offered=payment_header is not None,
            payment_settled=PAYMENT_RESPONSE_HEADER in response.headers,
            payer=_payer_from_header(payment_header),
            payload_sha256=hashlib.sha256(body).hexdigest() if body else None,
            payload_bytes=len(body),
            client_ip=request.client.host if request.client else None,
            duration_ms=round((perf_counter() - started) * 1000, 3),
        )
        return response


__all__ = ["AuditLoggingMiddleware", "REQUEST_ID_HEADER"]
