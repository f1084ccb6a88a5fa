from __future__ import annotations

import pytest
from pydantic import ValidationError
from pytest_httpx import HTTPXMock

from tests.helpers.payloads import (
    ENTITY_URL,
    SEARCH_URL,
    einstein_payload,
    entity_url_for,
    labels,
    search_hit,
    search_url_for,
    summary_payload,
    summary_url_for,
)
from wiki_intel.entrypoints.knowledge import (
    KNOWLEDGE_ENTRYPOINT_CLASSES,
    BatchEntrypoint,
    DetailsEntrypoint,
    OverviewEntrypoint,
    RelatedEntrypoint,
    SearchEntrypoint,
    SummaryEntrypoint,
)


def test_knowledge_entrypoint_prices() -> None:
    prices = {cls.key: cls.price for cls in KNOWLEDGE_ENTRYPOINT_CLASSES}

    assert prices == {
        "overview": 0,
        "search": 1000,
        "summary": 2000,
        "details": 2000,
        "related": 3000,
        "batch": 5000,
    }
    assert OverviewEntrypoint.is_free()
    assert not BatchEntrypoint.is_free()


def test_descriptor_publishes_camel_case_schemas() -> None:
    descriptor = DetailsEntrypoint.descriptor()

    assert descriptor.key == "details"
    assert descriptor.price == 2000
    assert "entityId" in descriptor.input_schema["properties"]
    assert descriptor.input_schema["required"] == ["entityId"]
    assert "fetchedAt" in descriptor.output_schema["properties"]


@pytest.mark.parametrize("limit", [0, 51])
def test_search_limit_out_of_range_is_rejected(limit: int) -> None:
    with pytest.raises(ValidationError):
        SearchEntrypoint().parse_input({"query": "ai", "limit": limit})


def test_search_requires_query() -> None:
    with pytest.raises(ValidationError):
        SearchEntrypoint().parse_input({"limit": 5})


def test_unknown_input_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SummaryEntrypoint().parse_input({"title": "Berlin", "format": "html"})


def test_language_code_is_validated() -> None:
    with pytest.raises(ValidationError):
        DetailsEntrypoint().parse_input({"entityId": "Q1", "language": "../../etc"})


def test_batch_accepts_ten_queries_and_rejects_eleven() -> None:
    entrypoint = BatchEntrypoint()

    model = entrypoint.parse_input({"queries": [f"q{n}" for n in range(10)]})
    assert len(model.queries) == 10

    with pytest.raises(ValidationError):
        entrypoint.parse_input({"queries": [f"q{n}" for n in range(11)]})
    with pytest.raises(ValidationError):
        entrypoint.parse_input({"queries": []})


@pytest.mark.asyncio
async def test_overview_returns_sample_search(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=search_url_for("artificial intelligence"),
        json={"search": [search_hit("Q11660", "artificial intelligence"), search_hit("Q2539", "machine learning")]},
    )

    output = await OverviewEntrypoint().invoke({})

    assert output["service"] == "wiki-intel"
    assert [item["id"] for item in output["sampleSearch"]] == ["Q11660", "Q2539"]
    assert output["dataSources"] == ["Wikipedia REST API", "Wikidata API"]
    assert "fetchedAt" in output
    assert httpx_mock.get_requests()[0].url.params["limit"] == "3"


@pytest.mark.asyncio
async def test_search_output_shape(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=SEARCH_URL,
        json={"search": [search_hit("Q937", "Albert Einstein", "German-born theoretical physicist")]},
    )

    output = await SearchEntrypoint().invoke({"query": "einstein", "limit": 5})

    assert output["query"] == "einstein"
    assert output["count"] == 1
    assert output["results"][0] == {
        "id": "Q937",
        "label": "Albert Einstein",
        "description": "German-born theoretical physicist",
        "url": "https://www.wikidata.org/wiki/Q937",
        "wikipediaUrl": "https://en.wikipedia.org/wiki/Albert_Einstein",
    }


@pytest.mark.asyncio
async def test_search_never_returns_more_than_limit(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=SEARCH_URL,
        json={"search": [search_hit(f"Q{n}", f"item {n}") for n in range(1, 6)]},
    )

    output = await SearchEntrypoint().invoke({"query": "item", "limit": 2})

    assert output["count"] == 2
    assert [item["id"] for item in output["results"]] == ["Q1", "Q2"]


@pytest.mark.asyncio
async def test_summary_found(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=summary_url_for("Berlin"),
        json=summary_payload("Berlin", "Berlin is the capital of Germany.", wikidata_id="Q64"),
    )

    output = await SummaryEntrypoint().invoke({"title": "Berlin"})

    assert output["title"] == "Berlin"
    assert output["extract"] == "Berlin is the capital of Germany."
    assert output["wikidataId"] == "Q64"
    assert "fetchedAt" in output


@pytest.mark.asyncio
async def test_summary_not_found(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=summary_url_for("Nowhere Land"), status_code=404)

    output = await SummaryEntrypoint().invoke({"title": "Nowhere Land"})

    assert output == {"error": "Article not found", "title": "Nowhere Land"}


@pytest.mark.asyncio
async def test_details_found(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=entity_url_for("Q937"), json=einstein_payload())

    output = await DetailsEntrypoint().invoke({"entityId": "Q937"})

    assert output["id"] == "Q937"
    assert output["label"] == "Albert Einstein"
    assert output["sitelinks"] == 3
    assert output["claims"]["instanceOf"] == ["Q5"]
    assert "country" not in output["claims"]


@pytest.mark.asyncio
async def test_details_not_found(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=ENTITY_URL, json={"entities": {"Q999999999": {"id": "Q999999999", "missing": ""}}})

    output = await DetailsEntrypoint().invoke({"entityId": "Q999999999"})

    assert output == {"error": "Entity not found", "entityId": "Q999999999"}


@pytest.mark.asyncio
async def test_related_reuses_source_entity(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=entity_url_for("Q937"), json=einstein_payload())
    httpx_mock.add_response(
        url=entity_url_for("Q5|Q64"),
        json={
            "entities": {
                "Q5": {"id": "Q5", "labels": labels(en="human")},
                "Q64": {"id": "Q64", "labels": labels(en="Berlin")},
            }
        },
    )

    output = await RelatedEntrypoint().invoke({"entityId": "Q937"})

    assert output["sourceEntity"] == {"id": "Q937", "label": "Albert Einstein"}
    assert output["relatedCount"] == 2
    assert [item["label"] for item in output["relatedEntities"]] == ["human", "Berlin"]
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_related_for_missing_entity(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=ENTITY_URL, json={"entities": {"Q0": {"id": "Q0", "missing": ""}}})

    output = await RelatedEntrypoint().invoke({"entityId": "Q0"})

    assert output["sourceEntity"] is None
    assert output["relatedCount"] == 0
    assert output["relatedEntities"] == []


@pytest.mark.asyncio
async def test_batch_counts_and_omits_entity_for_misses(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=search_url_for("berlin"), json={"search": [search_hit("Q64", "Berlin")]})
    httpx_mock.add_response(url=search_url_for("qwxyz"), json={"search": []})
    httpx_mock.add_response(url=summary_url_for("Berlin"), json=summary_payload("Berlin", "Capital of Germany."))

    output = await BatchEntrypoint().invoke({"queries": ["berlin", "qwxyz"]})

    assert output["queriesCount"] == 2
    assert output["foundCount"] == 1
    found, missing = output["results"]
    assert found["query"] == "berlin"
    assert found["entity"]["summary"] == "Capital of Germany."
    assert missing == {"query": "qwxyz", "found": False}


@pytest.mark.asyncio
async def test_summary_of_redirect_title_resolves_article(httpx_mock: HTTPXMock) -> None:
    canonical = summary_url_for("Albert_Einstein")
    httpx_mock.add_response(url=summary_url_for("Einstein"), status_code=302, headers={"Location": canonical})
    httpx_mock.add_response(url=canonical, json=summary_payload("Albert Einstein", "Physicist."))

    output = await SummaryEntrypoint().invoke({"title": "Einstein"})

    assert "error" not in output
    assert output["title"] == "Albert Einstein"
    assert output["extract"] == "Physicist."
