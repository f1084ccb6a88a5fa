"""HTTP client helper for the Wikipedia and Wikidata upstreams."""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..core.config import get_settings
from ..core.exceptions import UpstreamAPIError
from ..core.logging import get_logger
from ..core.metrics import increment_upstream_request

logger = get_logger(name=__name__)


async def fetch_json(url: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """GET ``url`` with the service User-Agent and return the decoded JSON body.

    Redirects are followed; a final non-2xx answer raises :class:`UpstreamAPIError`.
    There is no retry.
    """
    upstream = get_settings().upstream
    headers = {"User-Agent": upstream.user_agent, "Accept": "application/json"}
    async with httpx.AsyncClient(timeout=upstream.timeout_seconds, headers=headers, follow_redirects=True) as client:
        try:
            resp = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            increment_upstream_request(host=httpx.URL(url).host, outcome="transport_error")
            logger.warning("upstream_transport_error", url=url, error=str(exc))
            raise
    host = resp.request.url.host
    if not resp.is_success:
        increment_upstream_request(host=host, outcome="error")
        logger.info("upstream_error_status", url=str(resp.request.url), status=resp.status_code)
        raise UpstreamAPIError(resp.status_code, url=str(resp.request.url))
    increment_upstream_request(host=host, outcome="success")
    logger.debug("upstream_request_completed", url=str(resp.request.url), status=resp.status_code)
    return resp.json()
