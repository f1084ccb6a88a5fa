from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Frozen model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SearchResult(CamelModel):
    id: str = Field(..., min_length=1)
    label: str | None = None
    description: str | None = None
    url: str
    wikipedia_url: str | None = None


class Summary(CamelModel):
    title: str | None = None
    description: str | None = None
    extract: str | None = None
    thumbnail: str | None = None
    content_urls: dict[str, Any] | None = None
    coordinates: dict[str, Any] | None = None
    wikidata_id: str | None = None


class EntityDetail(CamelModel):
    id: str
    label: str | None = None
    description: str | None = None
    aliases: list[str] = Field(default_factory=list)
    claims: dict[str, list[str]] = Field(default_factory=dict)
    sitelinks: int = Field(0, ge=0)
    url: str


class RelatedEntity(CamelModel):
    id: str
    label: str
    description: str | None = None


class BatchEntity(CamelModel):
    id: str
    label: str | None = None
    description: str | None = None
    summary: str | None = None
    thumbnail: str | None = None


class BatchEntry(CamelModel):
    query: str
    found: bool
    entity: BatchEntity | None = None


__all__ = [
    "CamelModel",
    "SearchResult",
    "Summary",
    "EntityDetail",
    "RelatedEntity",
    "BatchEntity",
    "BatchEntry",
]
