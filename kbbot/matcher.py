"""
Query matching and snippet extraction over normalized article text.

Both functions expect the text and query to be lowercased already.
"""

SNIPPET_BEFORE = 100
SNIPPET_AFTER = 200
ELLIPSIS = "..."


def matches(normalized_text: str, query: str) -> bool:
    """True if the whole query, or any single word of it, occurs in the text."""
    if query in normalized_text:
        return True
    return any(token in normalized_text for token in query.split())


def snippet(normalized_text: str, query: str) -> str:
    """
    Return the text around the first occurrence of the whole query.

    Only the full query is located, never individual words, so an article
    accepted by :func:`matches` on a single word gets an empty snippet.
    """
    index = normalized_text.find(query)
    if index == -1:
        return ""
    start = max(0, index - SNIPPET_BEFORE)
    end = min(len(normalized_text), index + SNIPPET_AFTER)
    return normalized_text[start:end].strip() + ELLIPSIS
