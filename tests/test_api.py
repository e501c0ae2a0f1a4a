from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from corroborate.config import settings
from corroborate.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_report_route_builds_artifact(client, housing_payload) -> None:
    response = client.post("/api/report", json={**housing_payload, "citationStyle": "ieee", "exportFormat": "markdown"})

    assert response.status_code == 200
    body = response.json()
    [theme] = body["synthesis"]["keyThemes"]
    assert theme["consensus"] == "conflicting"
    assert len(body["synthesis"]["controversies"]) == 1
    assert body["bibliography"]["style"] == "ieee"
    assert body["export"]["mimeType"] == "text/markdown"
    assert body["report"]["metadata"]["sourceCount"] == 3


def test_report_route_rejects_bad_input(client, housing_payload) -> None:
    assert client.post("/api/report", json={**housing_payload, "query": " "}).status_code == 400
    assert client.post("/api/report", json={**housing_payload, "citationStyle": "vancouver"}).status_code == 400
    assert client.post("/api/report", json={"query": "q"}).status_code == 422


def test_knowledge_graph_route(client) -> None:
    sources = [
        {"id": "a", "url": "https://a.example.org", "title": "A", "content": "Acme Corp grew 10% this year."},
        {"id": "b", "url": "https://b.example.org", "title": "B", "content": "Analysts at Acme Corp expect 4% growth."},
    ]
    response = client.post("/api/knowledge-graph", json={"sources": sources})

    assert response.status_code == 200
    graph = response.json()
    entities = [n for n in graph["nodes"] if n["type"] == "entity"]
    assert [n["label"] for n in entities] == ["Acme Corp"]
    assert graph["metadata"]["sourceNodes"] == 2
    assert not [e for e in graph["edges"] if e["type"] == "contradicts"]


def test_knowledge_graph_route_links_supplied_contradictions(client) -> None:
    sources = [
        {"id": "a", "url": "https://a.example.org", "content": "Acme Corp grew 10% this year."},
        {"id": "b", "url": "https://b.example.org", "content": "Acme Corp shrank 4% this year."},
    ]
    contradictions = [{"claim": "Acme growth", "sourceUrls": ["https://a.example.org", "https://b.example.org"]}]
    response = client.post("/api/knowledge-graph", json={"sources": sources, "contradictions": contradictions})

    assert response.status_code == 200
    edges = [e for e in response.json()["edges"] if e["type"] == "contradicts"]
    assert [(e["source"], e["target"]) for e in edges] == [("source-0", "source-1")]


def test_knowledge_graph_route_rejects_malformed_facts(client) -> None:
    for fact in ("just a string", {"claim": "c", "confidence": 7}):
        source = {"id": "a", "url": "https://a.example.org", "keyFacts": [fact]}
        response = client.post("/api/knowledge-graph", json={"sources": [source]})
        assert response.status_code == 400
        assert "malformed" in response.json()["detail"]


def test_bibliography_route(client) -> None:
    citations = [
        {"id": "z", "title": "Zoning", "authors": ["Amy Zed"], "url": "https://z.org", "publishedDate": "2020-01-01"},
        {"id": "d", "title": "Report X", "authors": ["Jane A. Doe"], "url": "https://d.org", "publishedDate": "2023-01-01"},
    ]
    response = client.post("/api/bibliography", json={"citations": citations, "style": "mla"})

    assert response.status_code == 200
    body = response.json()
    assert [e["id"] for e in body["entries"]] == ["d", "z"]
    assert body["entries"][0]["formatted"].startswith("Doe, Jane A.")
    assert body["warnings"] == []
    assert "Modern Language Association" in body["guidelines"]


def test_bibliography_route_rejects_unknown_style(client) -> None:
    response = client.post("/api/bibliography", json={"citations": [{"id": "a"}], "style": "vancouver"})
    assert response.status_code == 400


def test_research_route_requires_search_key(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "exa_api_key", "")
    response = client.post("/api/research", json={"query": "housing"})
    assert response.status_code == 503
