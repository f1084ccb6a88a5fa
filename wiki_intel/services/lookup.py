"""Multi-query lookup combining Wikidata search with Wikipedia summaries."""
from __future__ import annotations

import asyncio
from typing import List, Sequence

from ..schemas.knowledge import BatchEntity, BatchEntry
from .wikidata import DEFAULT_LANGUAGE, search_entities
from .wikipedia import get_summary


async def lookup_one(query: str, language: str = DEFAULT_LANGUAGE) -> BatchEntry:
    matches = await search_entities(query, 1, language)
    if not matches:
        return BatchEntry(query=query, found=False)

    best = matches[0]
    summary = await get_summary(best.label, language) if best.label else None
    return BatchEntry(
        query=query,
        found=True,
        entity=BatchEntity(
            id=best.id,
            label=best.label,
            description=best.description,
            summary=summary.extract if summary is not None else None,
            thumbnail=summary.thumbnail if summary is not None else None,
        ),
    )


async def batch_lookup(queries: Sequence[str], language: str = DEFAULT_LANGUAGE) -> List[BatchEntry]:
    """Look up every query concurrently; the result order matches ``queries``."""
    return list(await asyncio.gather(*(lookup_one(query, language) for query in queries)))
