"""
Knowledge base search: crawl, cache, match.
"""
import time
from typing import Callable, List, Optional

from kbbot.cache import ArticleIndexCache
from kbbot.crawler import KnowledgeBaseCrawler
from kbbot.errors import FetchError, SearchFailure
from kbbot.logger import logger
from kbbot.matcher import matches, snippet
from kbbot.models import ArticleContent, ArticleRef, SearchResult


class SearchOrchestrator:
    """
    Runs one knowledge base search per call.

    Processes at most ``max_articles`` discovered articles, pausing
    ``fetch_delay`` seconds after each one, and returns at most
    ``max_results`` matches in discovery order.
    """

    def __init__(
        self,
        crawler: KnowledgeBaseCrawler,
        cache: Optional[ArticleIndexCache] = None,
        max_articles: int = 10,
        max_results: int = 5,
        fetch_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.crawler = crawler
        self.cache = cache if cache is not None else ArticleIndexCache()
        self.max_articles = max_articles
        self.max_results = max_results
        self.fetch_delay = fetch_delay
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings, crawler: Optional[KnowledgeBaseCrawler] = None) -> "SearchOrchestrator":
        cache = ArticleIndexCache(
            max_entries=settings.kb_cache_max_entries,
            ttl_seconds=settings.kb_cache_ttl_seconds,
        )
        return cls(
            crawler or KnowledgeBaseCrawler(settings),
            cache=cache,
            max_articles=settings.kb_max_articles,
            max_results=settings.kb_max_results,
            fetch_delay=settings.kb_fetch_delay,
        )

    def _load(self, article: ArticleRef) -> ArticleContent:
        content = self.cache.get(article.url)
        if content is None:
            text = self.crawler.fetch_content(article.url)
            content = self.cache.put(article.url, ArticleContent(url=article.url, normalized_text=text))
        return content

    def search(self, query: str) -> List[SearchResult]:
        """
        Search the knowledge base for *query*.

        Returns an empty list when the landing page cannot be fetched.
        Articles that fail to download or parse are skipped.

        Raises:
            SearchFailure: If article discovery fails for a reason other than a fetch error
        """
        query = query.strip().lower()
        try:
            try:
                articles = self.crawler.discover_articles()
            except FetchError as e:
                logger.error("Search error: could not load knowledge base index: %s", e)
                return []

            results: List[SearchResult] = []
            for article in articles[: self.max_articles]:
                try:
                    content = self._load(article)
                except FetchError as e:
                    logger.warning("Error fetching %s: %s", article.url, e)
                    continue
                except Exception:
                    logger.exception("Error processing %s", article.url)
                    continue

                if matches(content.normalized_text, query):
                    results.append(
                        SearchResult(
                            title=article.title,
                            url=article.url,
                            snippet=snippet(content.normalized_text, query),
                        )
                    )

                # Be polite to the knowledge base
                self._sleep(self.fetch_delay)

            logger.info(
                "Search for %r matched %s of %s articles",
                query,
                len(results),
                min(len(articles), self.max_articles),
            )
            return results[: self.max_results]
        except Exception as e:
            logger.exception("Unexpected error searching for %r", query)
            raise SearchFailure(f"Search for {query!r} failed: {e}") from e
