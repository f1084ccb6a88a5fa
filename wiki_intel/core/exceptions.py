from __future__ import annotations

from typing import Any, Mapping


class WikiIntelError(RuntimeError):
    """Base class for service failures."""


class UpstreamAPIError(WikiIntelError):
    """Raised when Wikipedia or Wikidata answers with a non-success status."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"API error: {status_code}")
        self.status_code = status_code
        self.url = url


class EntrypointNotFoundError(WikiIntelError):
    """Raised when a requested entrypoint key is not registered."""


class PaymentError(WikiIntelError):
    """Base class for payment gate failures; always answered with HTTP 402."""

    def __init__(self, message: str, *, requirements: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.requirements = dict(requirements) if requirements else None


class PaymentRequiredError(PaymentError):
    """Raised when a priced entrypoint is called without a payment header."""


class PaymentVerificationError(PaymentError):
    """Raised when the facilitator rejects or cannot parse a payment."""


class FacilitatorError(WikiIntelError):
    """Raised when the payment facilitator is unreachable or answers with an error status."""


__all__ = [
    "WikiIntelError",
    "UpstreamAPIError",
    "EntrypointNotFoundError",
    "PaymentError",
    "PaymentRequiredError",
    "PaymentVerificationError",
    "FacilitatorError",
]
