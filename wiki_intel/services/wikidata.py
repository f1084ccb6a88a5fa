"""Wikidata action API adapter: entity search, entity detail and related entities."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from ..core.config import get_settings
from ..core.logging import get_logger
from ..schemas.knowledge import EntityDetail, RelatedEntity, SearchResult
from .http import fetch_json

logger = get_logger(name=__name__)

DEFAULT_LANGUAGE = "en"
MAX_RELATED = 10

# Statement properties kept in EntityDetail.claims, in output order.
CLAIM_PROPERTIES: Dict[str, str] = {
    "P31": "instanceOf",
    "P279": "subclassOf",
    "P361": "partOf",
    "P527": "hasParts",
    "P17": "country",
    "P131": "locatedIn",
    "P569": "dateOfBirth",
    "P570": "dateOfDeath",
    "P18": "image",
    "P856": "officialWebsite",
}

ENTITY_ID_PATTERN = re.compile(r"^Q\d+$")


def entity_url(entity_id: str) -> str:
    return f"{get_settings().upstream.wikidata_entity_url}/{entity_id}"


def wikipedia_article_url(label: str) -> str:
    """Guessed English article URL for a search hit; it may not resolve."""
    host = get_settings().upstream.wikipedia_host_template.format(language=DEFAULT_LANGUAGE)
    return f"{host}/wiki/{label.replace(' ', '_')}"


def localized_value(values: Any, language: str) -> Optional[str]:
    """Pick ``values[language].value`` falling back to the default language."""
    if not isinstance(values, Mapping):
        return None
    for code in (language, DEFAULT_LANGUAGE):
        entry = values.get(code)
        if isinstance(entry, Mapping) and entry.get("value"):
            return str(entry["value"])
    return None


def coerce_claim_value(claim: Any) -> Optional[str]:
    """Reduce a statement to a scalar, or ``None`` when its value shape is not recognised."""
    if not isinstance(claim, Mapping):
        return None
    mainsnak = claim.get("mainsnak")
    datavalue = mainsnak.get("datavalue") if isinstance(mainsnak, Mapping) else None
    if not isinstance(datavalue, Mapping):
        return None
    value = datavalue.get("value")
    match datavalue.get("type"):
        case "wikibase-entityid" if isinstance(value, Mapping):
            candidate = value.get("id")
        case "time" if isinstance(value, Mapping):
            candidate = value.get("time")
        case "string":
            candidate = value
        case _:
            return None
    if isinstance(candidate, str) and candidate:
        return candidate
    return None


def extract_claims(raw_claims: Any) -> Dict[str, List[str]]:
    claims: Dict[str, List[str]] = {}
    if not isinstance(raw_claims, Mapping):
        return claims
    for prop, name in CLAIM_PROPERTIES.items():
        statements = raw_claims.get(prop)
        if not isinstance(statements, list):
            continue
        values = [value for value in map(coerce_claim_value, statements) if value is not None]
        if values:
            claims[name] = values
    return claims


async def search_entities(query: str, limit: int = 10, language: str = DEFAULT_LANGUAGE) -> List[SearchResult]:
    params = {
        "action": "wbsearchentities",
        "search": query,
        "language": language,
        "format": "json",
        "limit": limit,
    }
    data = await fetch_json(get_settings().upstream.wikidata_api_url, params=params)
    hits = (data or {}).get("search")
    if not isinstance(hits, list):
        return []
    results: List[SearchResult] = []
    for item in hits:
        if not isinstance(item, Mapping) or not item.get("id"):
            continue
        label = item.get("label")
        results.append(
            SearchResult(
                id=item["id"],
                label=label,
                description=item.get("description") or None,
                url=entity_url(item["id"]),
                wikipedia_url=wikipedia_article_url(label) if item.get("url") and label else None,
            )
        )
    logger.debug("wikidata_search_completed", query=query, hits=len(results))
    return results


async def get_entity(entity_id: str, language: str = DEFAULT_LANGUAGE) -> Optional[EntityDetail]:
    params = {
        "action": "wbgetentities",
        "ids": entity_id,
        "languages": language,
        "format": "json",
    }
    data = await fetch_json(get_settings().upstream.wikidata_api_url, params=params)
    entities = (data or {}).get("entities")
    entity = entities.get(entity_id) if isinstance(entities, Mapping) else None
    if not isinstance(entity, Mapping) or "missing" in entity:
        logger.info("wikidata_entity_not_found", entity_id=entity_id)
        return None

    aliases = entity.get("aliases") or {}
    raw_aliases = aliases.get(language) if isinstance(aliases, Mapping) else None
    sitelinks = entity.get("sitelinks")
    return EntityDetail(
        id=entity_id,
        label=localized_value(entity.get("labels"), language),
        description=localized_value(entity.get("descriptions"), language),
        aliases=[
            str(alias["value"])
            for alias in raw_aliases or []
            if isinstance(alias, Mapping) and alias.get("value")
        ],
        claims=extract_claims(entity.get("claims")),
        sitelinks=len(sitelinks) if isinstance(sitelinks, Mapping) else 0,
        url=entity_url(entity_id),
    )


def related_entity_ids(entity: EntityDetail, limit: int = MAX_RELATED) -> List[str]:
    """Entity ids referenced by ``entity``'s claims, first-seen order, source excluded."""
    seen = dict.fromkeys(
        value
        for values in entity.claims.values()
        for value in values
        if ENTITY_ID_PATTERN.match(value) and value != entity.id
    )
    return list(seen)[:limit]


async def fetch_related(entity: EntityDetail, language: str = DEFAULT_LANGUAGE) -> List[RelatedEntity]:
    ids = related_entity_ids(entity)
    if not ids:
        return []
    params = {
        "action": "wbgetentities",
        "ids": "|".join(ids),
        "languages": language,
        "props": "labels|descriptions",
        "format": "json",
    }
    data = await fetch_json(get_settings().upstream.wikidata_api_url, params=params)
    entities = (data or {}).get("entities")
    if not isinstance(entities, Mapping):
        return []
    related: List[RelatedEntity] = []
    for related_id, payload in entities.items():
        # Deleted items come back flagged "missing" and are listed under their bare id.
        if not isinstance(payload, Mapping):
            payload = {}
        related.append(
            RelatedEntity(
                id=related_id,
                label=localized_value(payload.get("labels"), language) or related_id,
                description=localized_value(payload.get("descriptions"), language),
            )
        )
    return related


async def get_related_entities(entity_id: str, language: str = DEFAULT_LANGUAGE) -> List[RelatedEntity]:
    entity = await get_entity(entity_id, language)
    if entity is None:
        return []
    return await fetch_related(entity, language)
