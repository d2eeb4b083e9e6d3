"""Data models for the knowledge base search pipeline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ArticleRef:
    """A link discovered on the knowledge base landing page."""

    title: str
    url: str


@dataclass(frozen=True)
class ArticleContent:
    """Lowercased plain text of a fetched article."""

    url: str
    normalized_text: str


@dataclass
class SearchResult:
    title: str
    url: str
    snippet: str = ""
