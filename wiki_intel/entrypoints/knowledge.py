from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from pydantic import Field, model_serializer

from ..schemas.knowledge import BatchEntry, CamelModel, EntityDetail, RelatedEntity, SearchResult, Summary
from ..services import lookup, wikidata, wikipedia
from .base import Entrypoint, EntrypointInput, utc_now

LANGUAGE_PATTERN = r"^[a-z][a-z0-9-]{1,15}$"
OVERVIEW_SAMPLE_QUERY = "artificial intelligence"


def _language_field() -> Any:
    return Field("en", pattern=LANGUAGE_PATTERN, description="Wikipedia/Wikidata language code")


class FetchedOutput(CamelModel):
    fetched_at: datetime = Field(default_factory=utc_now)


class OverviewInput(EntrypointInput):
    pass


class OverviewOutput(FetchedOutput):
    service: str
    description: str
    capabilities: list[str]
    sample_search: list[SearchResult]
    data_sources: list[str]


class OverviewEntrypoint(Entrypoint):
    key = "overview"
    description = "Free overview - sample entity lookup to try before you buy"
    price = 0
    InputModel = OverviewInput
    OutputModel = OverviewOutput

    async def _invoke(self, payload_model: OverviewInput) -> OverviewOutput:
        sample = await wikidata.search_entities(OVERVIEW_SAMPLE_QUERY, 3)
        return OverviewOutput(
            service="wiki-intel",
            description="Wikipedia & Wikidata knowledge intelligence for AI agents",
            capabilities=["entity search", "summaries", "structured data", "related entities", "batch lookup"],
            sample_search=sample,
            data_sources=["Wikipedia REST API", "Wikidata API"],
        )


class SearchInput(EntrypointInput):
    query: str = Field(..., min_length=1, description="Search query")
    limit: int = Field(10, ge=1, le=50)
    language: str = _language_field()


class SearchOutput(FetchedOutput):
    query: str
    count: int
    results: list[SearchResult]


class SearchEntrypoint(Entrypoint):
    key = "search"
    description = "Search for entities by name/keyword across Wikidata"
    price = 1000
    InputModel = SearchInput
    OutputModel = SearchOutput

    async def _invoke(self, payload_model: SearchInput) -> SearchOutput:
        results = await wikidata.search_entities(payload_model.query, payload_model.limit, payload_model.language)
        results = results[: payload_model.limit]
        return SearchOutput(query=payload_model.query, count=len(results), results=results)


class SummaryInput(EntrypointInput):
    title: str = Field(..., min_length=1, description='Wikipedia article title (e.g., "Elon Musk")')
    language: str = _language_field()


class SummaryOutput(Summary, FetchedOutput):
    pass


class SummaryNotFound(CamelModel):
    error: str = "Article not found"
    title: str


class SummaryEntrypoint(Entrypoint):
    key = "summary"
    description = "Get Wikipedia summary for an entity by title"
    price = 2000
    InputModel = SummaryInput
    OutputModel = SummaryOutput

    async def _invoke(self, payload_model: SummaryInput) -> SummaryOutput | SummaryNotFound:
        summary = await wikipedia.get_summary(payload_model.title, payload_model.language)
        if summary is None:
            return SummaryNotFound(title=payload_model.title)
        return SummaryOutput(**summary.model_dump())


class DetailsInput(EntrypointInput):
    entity_id: str = Field(..., min_length=1, description='Wikidata entity ID (e.g., "Q937" for Albert Einstein)')
    language: str = _language_field()


class DetailsOutput(EntityDetail, FetchedOutput):
    pass


class DetailsNotFound(CamelModel):
    error: str = "Entity not found"
    entity_id: str


class DetailsEntrypoint(Entrypoint):
    key = "details"
    description = "Get structured Wikidata entity details by Wikidata ID"
    price = 2000
    InputModel = DetailsInput
    OutputModel = DetailsOutput

    async def _invoke(self, payload_model: DetailsInput) -> DetailsOutput | DetailsNotFound:
        entity = await wikidata.get_entity(payload_model.entity_id, payload_model.language)
        if entity is None:
            return DetailsNotFound(entity_id=payload_model.entity_id)
        return DetailsOutput(**entity.model_dump())


class SourceEntity(CamelModel):
    id: str
    label: str | None = None


class RelatedInput(EntrypointInput):
    entity_id: str = Field(..., min_length=1, description='Wikidata entity ID (e.g., "Q937")')
    language: str = _language_field()


class RelatedOutput(FetchedOutput):
    source_entity: SourceEntity | None
    related_count: int
    related_entities: list[RelatedEntity]


class RelatedEntrypoint(Entrypoint):
    key = "related"
    description = "Get entities related to a given Wikidata entity"
    price = 3000
    InputModel = RelatedInput
    OutputModel = RelatedOutput

    async def _invoke(self, payload_model: RelatedInput) -> RelatedOutput:
        # The source detail is fetched once and reused for discovery.
        entity = await wikidata.get_entity(payload_model.entity_id, payload_model.language)
        related = await wikidata.fetch_related(entity, payload_model.language) if entity is not None else []
        return RelatedOutput(
            source_entity=SourceEntity(id=entity.id, label=entity.label) if entity is not None else None,
            related_count=len(related),
            related_entities=related,
        )


class BatchInput(EntrypointInput):
    queries: list[str] = Field(..., min_length=1, max_length=10, description="Array of entity names to look up")
    language: str = _language_field()


class BatchResultEntry(BatchEntry):
    @model_serializer(mode="wrap")
    def _omit_missing_entity(self, handler: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
        data = handler(self)
        if self.entity is None:
            data.pop("entity", None)
        return data


class BatchOutput(FetchedOutput):
    queries_count: int
    found_count: int
    results: list[BatchResultEntry]


class BatchEntrypoint(Entrypoint):
    key = "batch"
    description = "Look up multiple entities at once with summaries"
    price = 5000
    InputModel = BatchInput
    OutputModel = BatchOutput

    async def _invoke(self, payload_model: BatchInput) -> BatchOutput:
        entries = await lookup.batch_lookup(payload_model.queries, payload_model.language)
        results = [BatchResultEntry(**entry.model_dump()) for entry in entries]
        return BatchOutput(
            queries_count=len(payload_model.queries),
            found_count=sum(1 for entry in results if entry.found),
            results=results,
        )


KNOWLEDGE_ENTRYPOINT_CLASSES: tuple[type[Entrypoint], ...] = (
    OverviewEntrypoint,
    SearchEntrypoint,
    SummaryEntrypoint,
    DetailsEntrypoint,
    RelatedEntrypoint,
    BatchEntrypoint,
)


__all__ = [
    "OverviewEntrypoint",
    "SearchEntrypoint",
    "SummaryEntrypoint",
    "DetailsEntrypoint",
    "RelatedEntrypoint",
    "BatchEntrypoint",
    "KNOWLEDGE_ENTRYPOINT_CLASSES",
]
