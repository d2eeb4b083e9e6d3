"""End-to-end tests for the search pipeline against a mocked knowledge base."""

from __future__ import annotations

from typing import List
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from kbbot.cache import ArticleIndexCache
from kbbot.crawler import KnowledgeBaseCrawler
from kbbot.errors import SearchFailure
from kbbot.models import ArticleRef
from kbbot.search import SearchOrchestrator

from tests.conftest import LANDING_URL, SITE_ORIGIN


def _url(i: int) -> str:
    return f"{SITE_ORIGIN}/en/knowledge-base/article-{i}"


def _links(count: int) -> list:
    return [(f"/en/knowledge-base/article-{i}", f"Article number {i}") for i in range(count)]


def _orchestrator(settings, sleeps: List[float] | None = None, **kwargs) -> SearchOrchestrator:
    record = sleeps if sleeps is not None else []
    return SearchOrchestrator(
        KnowledgeBaseCrawler(settings),
        max_articles=settings.kb_max_articles,
        max_results=settings.kb_max_results,
        fetch_delay=0.5,
        sleep=record.append,
        **kwargs,
    )


class TestSearch:
    def test_processes_first_ten_and_returns_matches_in_order(
        self, settings, landing_html, article_html
    ) -> None:
        bodies = {i: "Nothing relevant on this page" for i in range(12)}
        bodies[3] = "Go to Workspace Settings to change the event name"
        bodies[7] = "Each workspace has its own speakers"
        bodies[11] = "Workspace settings explained again"

        sleeps: List[float] = []
        with respx.mock(assert_all_called=False) as router:
            router.get(LANDING_URL).mock(
                return_value=httpx.Response(200, text=landing_html(_links(12)))
            )
            routes = {
                i: router.get(_url(i)).mock(
                    return_value=httpx.Response(200, text=article_html(body))
                )
                for i, body in bodies.items()
            }
            results = _orchestrator(settings, sleeps).search("Workspace Settings")

        assert [r.url for r in results] == [_url(3), _url(7)]
        assert results[0].title == "Article number 3"
        assert results[0].snippet == "go to workspace settings to change the event name..."
        # Matched on the single word "workspace", so no phrase to anchor a snippet on
        assert results[1].snippet == ""

        assert all(routes[i].call_count == 1 for i in range(10))
        assert routes[10].call_count == 0
        assert routes[11].call_count == 0
        assert sleeps == [0.5] * 10

    def test_landing_page_failure_returns_empty(self, settings) -> None:
        with respx.mock:
            respx.get(LANDING_URL).mock(side_effect=httpx.ConnectError("no route to host"))
            assert _orchestrator(settings).search("anything") == []

    def test_landing_page_error_status_returns_empty(self, settings) -> None:
        with respx.mock:
            respx.get(LANDING_URL).mock(return_value=httpx.Response(500))
            assert _orchestrator(settings).search("anything") == []

    def test_bad_article_is_skipped(self, settings, landing_html, article_html) -> None:
        with respx.mock:
            respx.get(LANDING_URL).mock(
                return_value=httpx.Response(200, text=landing_html(_links(3)))
            )
            respx.get(_url(0)).mock(return_value=httpx.Response(200, text=article_html("speaker guide")))
            respx.get(_url(1)).mock(side_effect=httpx.ReadTimeout("slow"))
            respx.get(_url(2)).mock(return_value=httpx.Response(200, text=article_html("speaker faq")))

            results = _orchestrator(settings).search("speaker")

        assert [r.url for r in results] == [_url(0), _url(2)]

    def test_results_are_capped(self, settings, landing_html, article_html) -> None:
        with respx.mock:
            respx.get(LANDING_URL).mock(
                return_value=httpx.Response(200, text=landing_html(_links(8)))
            )
            for i in range(8):
                respx.get(_url(i)).mock(
                    return_value=httpx.Response(200, text=article_html("sessions and tracks"))
                )
            results = _orchestrator(settings).search("sessions")

        assert [r.url for r in results] == [_url(i) for i in range(5)]

    def test_repeated_url_is_fetched_once(self, settings, landing_html, article_html) -> None:
        links = [("/en/knowledge-base/article-0", "Article number 0")] * 2
        with respx.mock:
            respx.get(LANDING_URL).mock(return_value=httpx.Response(200, text=landing_html(links)))
            route = respx.get(_url(0)).mock(
                return_value=httpx.Response(200, text=article_html("agenda builder"))
            )
            results = _orchestrator(settings).search("agenda")

        assert route.call_count == 1
        assert len(results) == 2

    def test_cache_is_shared_across_searches(self, settings, landing_html, article_html) -> None:
        cache = ArticleIndexCache()
        with respx.mock:
            respx.get(LANDING_URL).mock(
                return_value=httpx.Response(200, text=landing_html(_links(2)))
            )
            routes = [
                respx.get(_url(i)).mock(
                    return_value=httpx.Response(200, text=article_html("registration forms"))
                )
                for i in range(2)
            ]
            orchestrator = _orchestrator(settings, cache=cache)
            orchestrator.search("registration")
            orchestrator.search("forms")

        assert [route.call_count for route in routes] == [1, 1]
        assert len(cache) == 2

    def test_unexpected_article_error_is_skipped(self, settings) -> None:
        crawler = MagicMock(spec=KnowledgeBaseCrawler)
        crawler.discover_articles.return_value = [
            ArticleRef("Broken page", _url(0)),
            ArticleRef("Working page", _url(1)),
        ]
        crawler.fetch_content.side_effect = [RuntimeError("parser exploded"), "badge printing"]

        orchestrator = SearchOrchestrator(crawler, fetch_delay=0, sleep=lambda _: None)
        results = orchestrator.search("badge")

        assert [r.url for r in results] == [_url(1)]

    def test_unexpected_discovery_error_is_wrapped(self, settings) -> None:
        crawler = MagicMock(spec=KnowledgeBaseCrawler)
        crawler.discover_articles.side_effect = RuntimeError("parser exploded")

        orchestrator = SearchOrchestrator(crawler, fetch_delay=0, sleep=lambda _: None)
        with pytest.raises(SearchFailure):
            orchestrator.search("anything")

    def test_malformed_link_on_landing_page_is_ignored(self, settings, landing_html, article_html) -> None:
        links = [
            ("http://[/knowledge-base/x", "Broken link here"),
            ("/en/knowledge-base/article-0", "Article number 0"),
        ]
        with respx.mock:
            respx.get(LANDING_URL).mock(return_value=httpx.Response(200, text=landing_html(links)))
            respx.get(_url(0)).mock(
                return_value=httpx.Response(200, text=article_html("setup checklist"))
            )
            results = _orchestrator(settings).search("setup")

        assert [r.url for r in results] == [_url(0)]

    def test_from_settings_uses_configured_policy(self, settings) -> None:
        settings.kb_max_articles = 3
        settings.kb_cache_max_entries = 50
        orchestrator = SearchOrchestrator.from_settings(settings)

        assert orchestrator.max_articles == 3
        assert orchestrator.max_results == 5
        assert orchestrator.fetch_delay == 0.0
        assert orchestrator.cache.max_entries == 50
        assert orchestrator.cache.ttl_seconds is None
