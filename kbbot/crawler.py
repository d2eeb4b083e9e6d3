"""Fetches the knowledge base landing page and individual articles."""

from __future__ import annotations

from typing import List, Optional

import httpx

from kbbot.config import Settings
from kbbot.errors import FetchError, FetchFailure
from kbbot.logger import logger
from kbbot.models import ArticleRef
from kbbot.parser import PageParser, SoupPageParser

_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SessionBoard-KB-Slackbot/1.0)"
}


class KnowledgeBaseCrawler:
    """
    Knows where the knowledge base lives and how to pull pages from it.

    Volume limits (article cap and politeness delay) are read from
    ``settings`` by the orchestrator; the crawler itself issues one request
    per call and never retries.
    """

    def __init__(self, settings: Settings, parser: Optional[PageParser] = None):
        self.settings = settings
        self.parser = parser or SoupPageParser(settings.kb_link_segment)

    def _get(self, url: str) -> str:
        """
        GET *url* and return the response body.

        Raises:
            FetchError: On timeout, transport failure, or a non-2xx status
        """
        try:
            with httpx.Client(
                headers=_DEFAULT_HEADERS,
                timeout=self.settings.kb_request_timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as e:
            raise FetchError(url, FetchFailure.TIMEOUT, f"Timed out fetching {url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(
                url,
                FetchFailure.NON_SUCCESS_STATUS,
                f"HTTP {status} fetching {url}",
                status_code=status,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, FetchFailure.NETWORK_FAILURE, f"Error fetching {url}: {e}") from e

    def discover_articles(self) -> List[ArticleRef]:
        html = self._get(self.settings.kb_landing_url)
        articles = self.parser.extract_links(html, self.settings.kb_site_origin)
        logger.debug("Discovered %s article links on %s", len(articles), self.settings.kb_landing_url)
        return articles

    def fetch_content(self, url: str) -> str:
        """Return the lowercased visible text of the article at *url*."""
        return self.parser.extract_text(self._get(url))
