"""
Slash command handling: acknowledgments, the background search job,
and Block Kit formatting of results.
"""
from typing import List

from kbbot.logger import logger
from kbbot.models import SearchResult
from kbbot.search import SearchOrchestrator
from kbbot.slack_client import SlackMessenger
from kbbot.utils import escape_mrkdwn, sanitize_slack_id

SEARCHING_TEXT = "Searching SessionBoard knowledge base..."
UNKNOWN_COMMAND_TEXT = "Unknown command"
SEARCH_ERROR_TEXT = "Sorry, I encountered an error while searching. Please try again."
EMPTY_SNIPPET_TEXT = "Click to read more..."


def ephemeral(text: str) -> dict:
    return {"response_type": "ephemeral", "text": text}


def no_results_text(query: str) -> str:
    return (
        f'No results found for "{query}". '
        'Try searching for general topics like "getting started", "setup", or "features".'
    )


def format_search_results(query: str, results: List[SearchResult], command: str = "/sbhelp") -> tuple[str, list]:
    """
    Build the fallback text and Block Kit blocks for a non-empty result list.

    Returns:
        Tuple of (text, blocks)
    """
    safe_query = escape_mrkdwn(query)
    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f'*SessionBoard Knowledge Base Results for "{safe_query}"*',
            },
        },
        {"type": "divider"},
    ]

    for index, result in enumerate(results):
        body = escape_mrkdwn(result.snippet) if result.snippet else EMPTY_SNIPPET_TEXT
        blocks.append(
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*<{result.url}|{escape_mrkdwn(result.title)}>*\n{body}",
                },
            }
        )
        if index < len(results) - 1:
            blocks.append({"type": "divider"})

    blocks.append(
        {
            "type": "context",
            "elements": [
                {"type": "mrkdwn", "text": f"Use `{command} [your question]` to search again"}
            ],
        }
    )

    return f'Found {len(results)} results for "{query}"', blocks


def send_search_results(
    messenger: SlackMessenger,
    channel_id: str,
    query: str,
    results: List[SearchResult],
    command: str = "/sbhelp",
) -> None:
    if not results:
        messenger.post_message(channel_id, no_results_text(query))
        return

    text, blocks = format_search_results(query, results, command=command)
    messenger.post_message(channel_id, text, blocks)


def run_search_and_reply(
    searcher: SearchOrchestrator,
    messenger: SlackMessenger,
    channel_id: str,
    user_id: str,
    query: str,
    command: str = "/sbhelp",
) -> None:
    """
    Background job for a slash command: search, then post the results.

    Never raises. Any failure is turned into an ephemeral error message to
    the invoking user; if even that cannot be delivered it is logged.
    """
    try:
        channel_id = sanitize_slack_id(channel_id, "channel_id")
        user_id = sanitize_slack_id(user_id, "user_id")
        results = searcher.search(query)
        send_search_results(messenger, channel_id, query, results, command=command)
    except Exception:
        logger.exception("Search error for query=%r channel_id=%s", query, channel_id)
        try:
            messenger.post_ephemeral(channel_id, user_id, SEARCH_ERROR_TEXT)
        except Exception:
            logger.exception("Failed to report search error to user_id=%s", user_id)
