"""Self-description documents: the agent card, the ERC-8004 registration file and the icon."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse, JSONResponse

from ..core.config import Settings
from ..dependencies import get_app_settings
from ..entrypoints.registry import bootstrap_entrypoint_registry, entrypoint_registry

router = APIRouter(tags=["manifest"])

ERC8004_REGISTRATION_TYPE = "https://eips.ethereum.org/EIPS/eip-8004#registration-v1"
A2A_PROTOCOL_VERSION = "0.3.0"


def _price_range(prices: list[int]) -> str:
    paid = sorted(price for price in prices if price > 0)
    if not paid:
        return "free"
    # USDC prices carry six decimals.
    return f"${paid[0] / 1_000_000:g}-${paid[-1] / 1_000_000:g} per query"


def build_agent_card(settings: Settings) -> dict[str, Any]:
    bootstrap_entrypoint_registry()
    base_url = settings.base_url
    entrypoints: dict[str, Any] = {}
    for key, entrypoint in entrypoint_registry.items():
        entrypoints[key] = {
            "description": entrypoint.description,
            "price": str(entrypoint.price),
            "free": entrypoint.is_free(),
            "invoke": f"{base_url}/entrypoints/{key}/invoke",
        }
    card: dict[str, Any] = {
        "name": settings.service.name,
        "version": settings.service.version,
        "description": settings.service.description,
        "url": base_url,
        "protocolVersion": A2A_PROTOCOL_VERSION,
        "entrypoints": entrypoints,
    }
    if settings.payments.enabled:
        card["payments"] = {
            "protocol": "x402",
            "network": settings.payments.network,
            "asset": settings.payments.asset,
            "payTo": settings.payments.pay_to,
            "facilitatorUrl": settings.payments.facilitator_url,
        }
    return card


def build_registration(settings: Settings) -> dict[str, Any]:
    bootstrap_entrypoint_registry()
    base_url = settings.base_url
    prices = [entrypoint.price for _, entrypoint in entrypoint_registry.items()]
    return {
        "type": ERC8004_REGISTRATION_TYPE,
        "name": settings.service.name,
        "description": f"{settings.service.description} Pricing: {_price_range(prices)}.",
        "image": f"{base_url}/icon.png",
        "services": [
            {"name": "web", "endpoint": base_url},
            {"name": "A2A", "endpoint": f"{base_url}/.well-known/agent.json", "version": A2A_PROTOCOL_VERSION},
        ],
        "x402Support": True,
        "active": True,
        "registrations": [],
        "supportedTrust": ["reputation"],
    }


@router.get("/.well-known/agent.json")
async def agent_card(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    return build_agent_card(settings)


@router.get("/.well-known/erc8004.json")
async def erc8004_registration(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    return build_registration(settings)


@router.get("/icon.png", response_model=None)
async def icon(settings: Settings = Depends(get_app_settings)) -> FileResponse | JSONResponse:
    path = settings.service.icon_path
    if not path.is_file():
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Icon not found"})
    return FileResponse(path, media_type="image/png")
