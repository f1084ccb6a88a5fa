from __future__ import annotations

import httpx
import pytest

from wiki_intel.core.metrics import increment_payment, increment_upstream_request, observe_entrypoint


@pytest.mark.asyncio
async def test_metrics_endpoint_includes_custom_series(monkeypatch: pytest.MonkeyPatch) -> None:
    from wiki_intel import main

    monkeypatch.setattr(main.settings.observability, "prometheus_enabled", True, raising=False)

    observe_entrypoint(entrypoint="search", outcome="success", latency=0.3)
    increment_upstream_request(host="www.wikidata.org", outcome="success")
    increment_payment(entrypoint="batch", outcome="settled")

    transport = httpx.ASGITransport(app=main.app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/metrics")
    finally:
        await transport.aclose()

    assert response.status_code == 200
    assert response.headers.get("content-type", "").startswith("text/plain")

    body = response.text
    assert 'wiki_intel_entrypoint_invocations_total{entrypoint="search",outcome="success"}' in body
    assert "wiki_intel_entrypoint_latency_seconds_bucket" in body
    assert 'wiki_intel_upstream_requests_total{host="www.wikidata.org",outcome="success"}' in body
    assert 'wiki_intel_payments_total{entrypoint="batch",outcome="settled"}' in body


@pytest.mark.asyncio
async def test_metrics_endpoint_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    from wiki_intel import main

    monkeypatch.setattr(main.settings.observability, "prometheus_enabled", False, raising=False)

    transport = httpx.ASGITransport(app=main.app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/metrics")
    finally:
        await transport.aclose()

    assert response.status_code == 404
