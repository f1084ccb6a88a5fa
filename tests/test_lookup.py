from __future__ import annotations

import asyncio

import httpx
import pytest
from pytest_httpx import HTTPXMock

from tests.helpers.payloads import search_hit, search_url_for, summary_payload, summary_url_for
from wiki_intel.services.lookup import batch_lookup, lookup_one


pytestmark = pytest.mark.asyncio


async def test_lookup_one_combines_search_and_summary(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=search_url_for("einstein"),
        json={"search": [search_hit("Q937", "Albert Einstein", "German-born theoretical physicist")]},
    )
    httpx_mock.add_response(
        url=summary_url_for("Albert Einstein"),
        json=summary_payload("Albert Einstein", "Physicist.", thumbnail="https://upload.wikimedia.org/e.jpg"),
    )

    entry = await lookup_one("einstein")

    assert entry.found is True
    assert entry.entity is not None
    assert entry.entity.id == "Q937"
    assert entry.entity.summary == "Physicist."
    assert entry.entity.thumbnail == "https://upload.wikimedia.org/e.jpg"
    assert httpx_mock.get_requests()[0].url.params["limit"] == "1"


async def test_lookup_one_keeps_entity_when_summary_is_missing(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=search_url_for("obscure"), json={"search": [search_hit("Q1", "Obscure Thing")]})
    httpx_mock.add_response(url=summary_url_for("Obscure Thing"), status_code=404)

    entry = await lookup_one("obscure")

    assert entry.found is True
    assert entry.entity is not None
    assert entry.entity.summary is None
    assert entry.entity.thumbnail is None


async def test_lookup_one_without_match(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=search_url_for("qwxyz"), json={"search": []})

    entry = await lookup_one("qwxyz")

    assert entry.found is False
    assert entry.entity is None
    assert len(httpx_mock.get_requests()) == 1


async def test_batch_lookup_preserves_query_order(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=search_url_for("berlin"), json={"search": [search_hit("Q64", "Berlin")]})
    httpx_mock.add_response(url=search_url_for("nowhere land"), json={"search": []})
    httpx_mock.add_response(url=search_url_for("paris"), json={"search": [search_hit("Q90", "Paris")]})
    httpx_mock.add_response(url=summary_url_for("Berlin"), json=summary_payload("Berlin", "Capital of Germany."))
    httpx_mock.add_response(url=summary_url_for("Paris"), json=summary_payload("Paris", "Capital of France."))

    entries = await batch_lookup(["berlin", "nowhere land", "paris"])

    assert [entry.query for entry in entries] == ["berlin", "nowhere land", "paris"]
    assert [entry.found for entry in entries] == [True, False, True]
    assert entries[0].entity.summary == "Capital of Germany."
    assert entries[2].entity.summary == "Capital of France."


async def test_batch_lookup_order_is_independent_of_completion_order(httpx_mock: HTTPXMock) -> None:
    completed: list[str] = []

    def delayed_search(query: str, entity_id: str, label: str, delay: float):
        async def respond(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(delay)
            completed.append(query)
            return httpx.Response(200, json={"search": [search_hit(entity_id, label)]})

        return respond

    httpx_mock.add_callback(delayed_search("slow", "Q1", "Slow Topic", 0.2), url=search_url_for("slow"))
    httpx_mock.add_callback(delayed_search("medium", "Q2", "Medium Topic", 0.1), url=search_url_for("medium"))
    httpx_mock.add_callback(delayed_search("fast", "Q3", "Fast Topic", 0.0), url=search_url_for("fast"))
    for label in ("Slow Topic", "Medium Topic", "Fast Topic"):
        httpx_mock.add_response(url=summary_url_for(label), json=summary_payload(label, f"{label} extract."))

    entries = await batch_lookup(["slow", "medium", "fast"])

    assert completed == ["fast", "medium", "slow"]
    assert [entry.query for entry in entries] == ["slow", "medium", "fast"]
    assert [entry.entity.id for entry in entries] == ["Q1", "Q2", "Q3"]
    assert [entry.entity.summary for entry in entries] == [
        "Slow Topic extract.",
        "Medium Topic extract.",
        "Fast Topic extract.",
    ]
