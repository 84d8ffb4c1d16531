"""
Test Suite for the HTTP Layer

Routes are exercised through FastAPI's TestClient with the network-bound
collaborators patched at the main module.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

import main
from ai_service import _fallback_result
from comparison import DuelResult, score_site
from models import normalize_facts
from scraper import FetchError, PageAnalysis


@pytest.fixture
def client():
    return TestClient(main.app)


def _analysis(url: str, facts: dict) -> PageAnalysis:
    return PageAnalysis(url=url, facts=normalize_facts(facts), warnings=["Site is not using HTTPS"])


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestInterpretEndpoint:
    def test_empty_payload(self, client):
        response = client.post("/interpret", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 34
        assert len(data["summary"]["actions"]) == 4
        assert data["seoBreakdown"]["summary"]["weakestArea"] == "onPage"
        assert data["seoBreakdown"]["onPage"]["priority"] == "critical"

    def test_no_body(self, client):
        response = client.post("/interpret")

        assert response.status_code == 200
        assert response.json()["score"] == 34

    def test_good_payload(self, client, good_facts):
        data = client.post("/interpret", json=good_facts).json()

        assert data["score"] == 96
        first = data["sections"][0]["metrics"][0]
        assert first["status"] == "good"
        assert "plainExplanation" in first
        assert "whyItMatters" in first


class TestAnalyzeEndpoint:
    def test_success(self, client, good_facts):
        with patch("main.analyze_page", return_value=_analysis("https://example.com", good_facts)):
            response = client.post("/analyze", json={"url": "example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["url"] == "https://example.com"
        assert data["onpage"]["headings"]["h1Count"] == 1
        assert data["onpage"]["images"]["altStats"]["total"] == 4
        assert data["technical"]["mobileFriendly"] is True
        assert data["trust"]["internalLinks"] == 12
        assert data["warnings"] == ["Site is not using HTTPS"]

    def test_empty_url(self, client):
        response = client.post("/analyze", json={"url": "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "URL is required"

    def test_fetch_failure(self, client):
        error = FetchError("https://example.com", "Failed to fetch URL: 500 Internal Server Error")
        with patch("main.analyze_page", side_effect=error):
            response = client.post("/analyze", json={"url": "example.com"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to fetch URL: 500 Internal Server Error"


class TestCompareEndpoint:
    def test_success(self, client, good_facts):
        duel = DuelResult(
            user=score_site(_analysis("https://mine.com", good_facts)),
            competitor=score_site(_analysis("https://theirs.com", {})),
        )
        with patch("main.compare_sites", return_value=duel) as compare:
            response = client.post("/compare", json={"userUrl": "mine.com", "competitorUrl": "theirs.com"})

        compare.assert_called_once_with("mine.com", "theirs.com")
        assert response.status_code == 200
        data = response.json()
        assert data["userScore"] == 96
        assert data["compScore"] == 34
        assert data["userWins"] is True
        assert data["user"]["snapshot"]["isTitleGood"] is True
        assert data["competitor"]["report"]["seoBreakdown"]["summary"]["weakestArea"] == "onPage"
        assert data["competitor"]["facts"]["onpage"]["title"]["exists"] is False

    def test_missing_url(self, client):
        response = client.post("/compare", json={"userUrl": "mine.com", "competitorUrl": ""})

        assert response.status_code == 400

    def test_fetch_failure(self, client):
        error = FetchError("https://theirs.com", "Failed to fetch URL: 404 Not Found")
        with patch("main.compare_sites", side_effect=error):
            response = client.post("/compare", json={"userUrl": "mine.com", "competitorUrl": "theirs.com"})

        assert response.status_code == 502


class TestCompareAiEndpoint:
    def test_fallback_shape(self, client):
        with patch("main.compare_with_ai", return_value=_fallback_result()):
            response = client.post("/compare/ai", json={"userUrl": "mine.com", "competitorUrl": "theirs.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["userScore"] == 75
        assert data["compScore"] == 60
        assert data["userWins"] is True
        assert data["source"] == "fallback"
        assert data["metrics"]["user"]["isTitleGood"] is True
        assert data["metrics"]["comp"]["headings"] == "Unstructured"
