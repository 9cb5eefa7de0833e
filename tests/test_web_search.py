"""Tests for the web search subgraph and the Tavily client."""

import asyncio
import json
from unittest.mock import patch

import httpx
from langchain_core.messages import HumanMessage

from oc.web_search.graph import graph as web_search_graph
from oc.web_search.nodes import SearchDecision, query_generator, tavily_search

from tests.fakes import FakeChatModel

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _client_with(handler):
    """AsyncClient factory whose requests are answered by `handler`."""
    def factory(**kwargs):
        return _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler), **kwargs)
    return factory


def _results_handler(requests):
    def handler(request):
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={"results": [
            {"title": "Stripe pricing", "url": "https://stripe.com/pricing", "content": "2.9% + 30c", "score": 0.9},
            {"title": "Empty", "url": "https://example.com", "content": ""},
        ]})
    return handler


class TestTavilySearch:
    def test_results_parsed(self, mock_config, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "test-key")
        requests = []

        with patch("oc.web_search.nodes.httpx.AsyncClient", side_effect=_client_with(_results_handler(requests))):
            results = asyncio.run(tavily_search("saas pricing benchmarks"))

        assert [r.title for r in results] == ["Stripe pricing"]
        assert results[0].score == 0.9
        assert requests[0]["query"] == "saas pricing benchmarks"
        assert requests[0]["max_results"] == 5

    def test_http_error_gives_no_results(self, mock_config, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "test-key")

        def handler(request):
            return httpx.Response(500, json={"error": "boom"})

        with patch("oc.web_search.nodes.httpx.AsyncClient", side_effect=_client_with(handler)):
            assert asyncio.run(tavily_search("anything")) == []

    def test_missing_key_skips_request(self, mock_config, monkeypatch):
        monkeypatch.delenv("TAVILY_API_KEY", raising=False)

        with patch("oc.web_search.nodes.httpx.AsyncClient") as client:
            assert asyncio.run(tavily_search("anything")) == []
        client.assert_not_called()


class TestQueryGenerator:
    def test_query_stripped(self, fake_models, run_config):
        fake_models["small"] = FakeChatModel(responses=["  saas pricing 2026  "])

        result = asyncio.run(query_generator({"messages": [HumanMessage(content="pricing?")]}, run_config))

        assert result == {"query": "saas pricing 2026"}
        assert "The current date is" in fake_models["small"].calls[0][0]["content"]


class TestWebSearchGraph:
    def test_no_search_needed(self, fake_models, run_config):
        fake_models["small"] = FakeChatModel(responses=[SearchDecision(should_search=False)])

        result = asyncio.run(web_search_graph.ainvoke(
            {"messages": [HumanMessage(content="make the header blue")]}, run_config
        ))

        assert not result.get("web_search_results")
        assert len(fake_models["small"].calls) == 1

    def test_search_path(self, fake_models, run_config, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "test-key")
        fake_models["small"] = FakeChatModel(responses=[
            SearchDecision(should_search=True),
            "saas pricing benchmarks",
        ])
        requests = []

        with patch("oc.web_search.nodes.httpx.AsyncClient", side_effect=_client_with(_results_handler(requests))):
            result = asyncio.run(web_search_graph.ainvoke(
                {"messages": [HumanMessage(content="pricing page using current market prices")]}, run_config
            ))

        assert result["query"] == "saas pricing benchmarks"
        assert result["web_search_results"][0].url == "https://stripe.com/pricing"
