"""Wikipedia REST API adapter."""
from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from ..core.config import get_settings
from ..core.exceptions import UpstreamAPIError
from ..core.logging import get_logger
from ..schemas.knowledge import Summary
from .http import fetch_json
from .wikidata import DEFAULT_LANGUAGE

logger = get_logger(name=__name__)


def summary_url(title: str, language: str = DEFAULT_LANGUAGE) -> str:
    host = get_settings().upstream.wikipedia_host_template.format(language=language)
    return f"{host}/api/rest_v1/page/summary/{quote(title, safe='')}"


def _mapping_or_none(value: Any) -> Optional[dict[str, Any]]:
    return dict(value) if isinstance(value, Mapping) and value else None


async def get_summary(title: str, language: str = DEFAULT_LANGUAGE) -> Optional[Summary]:
    """Return the page summary for ``title``; ``None`` means the article could not be fetched."""
    try:
        data = await fetch_json(summary_url(title, language))
    except (UpstreamAPIError, httpx.HTTPError) as exc:
        logger.info("wikipedia_summary_unavailable", title=title, language=language, error=str(exc))
        return None
    if not isinstance(data, Mapping):
        return None

    thumbnail = data.get("thumbnail")
    content_urls = data.get("content_urls")
    return Summary(
        title=data.get("title"),
        description=data.get("description") or None,
        extract=data.get("extract"),
        thumbnail=thumbnail.get("source") if isinstance(thumbnail, Mapping) else None,
        content_urls=_mapping_or_none(content_urls.get("desktop")) if isinstance(content_urls, Mapping) else None,
        coordinates=_mapping_or_none(data.get("coordinates")),
        wikidata_id=data.get("wikibase_item") or None,
    )
