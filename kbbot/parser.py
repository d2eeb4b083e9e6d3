"""HTML extraction for the knowledge base pages.

The markup belongs to a third-party site and can change without notice, so
everything that knows about its structure lives behind :class:`PageParser`.
"""

from __future__ import annotations

from typing import List, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from kbbot.logger import logger
from kbbot.models import ArticleRef

MIN_TITLE_LENGTH = 4

_INVISIBLE_TAGS = ["script", "style", "noscript", "template"]


class PageParser(Protocol):
    def extract_links(self, html: str, base_url: str) -> List[ArticleRef]:
        ...

    def extract_text(self, html: str) -> str:
        ...


def _collapse(text: str) -> str:
    return " ".join(text.split())


class SoupPageParser:
    """BeautifulSoup implementation of :class:`PageParser`."""

    def __init__(self, link_segment: str = "/knowledge-base/"):
        self.link_segment = link_segment

    def extract_links(self, html: str, base_url: str) -> List[ArticleRef]:
        """Return article links in document order.

        A link qualifies when its href contains ``link_segment`` and its
        visible text is longer than three characters. Relative hrefs are
        resolved against *base_url*.
        """
        soup = BeautifulSoup(html or "", "html.parser")
        articles: List[ArticleRef] = []
        for anchor in soup.find_all("a", href=True):
            href = (anchor.get("href") or "").strip()
            if not href or self.link_segment not in href:
                continue
            text = anchor.get_text().strip()
            if len(text) < MIN_TITLE_LENGTH:
                continue
            try:
                url = urljoin(base_url, href)
            except ValueError:
                logger.debug("Skipping malformed article link: %r", href)
                continue
            articles.append(ArticleRef(title=_collapse(text), url=url))
        return articles

    def extract_text(self, html: str) -> str:
        """Return the visible body text, whitespace-collapsed and lowercased."""
        soup = BeautifulSoup(html or "", "html.parser")
        for tag in soup(_INVISIBLE_TAGS):
            tag.decompose()
        container = soup.body or soup
        return _collapse(container.get_text(" ")).lower()
