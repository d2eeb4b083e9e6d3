"""Shared fixtures: fast settings and tiny HTML page builders."""

from __future__ import annotations

from typing import Callable, Iterable, Tuple

import pytest

from kbbot.config import Settings

LANDING_URL = "https://learn.sessionboard.com/en/knowledge-base"
SITE_ORIGIN = "https://learn.sessionboard.com"
SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"


def build_landing_html(links: Iterable[Tuple[str, str]]) -> str:
    anchors = "\n".join(f'<li><a href="{href}">{title}</a></li>' for href, title in links)
    return f"""\
<!DOCTYPE html>
<html>
<head><title>Knowledge Base</title></head>
<body>
  <nav><a href="/en/pricing">Pricing</a></nav>
  <ul>
{anchors}
  </ul>
</body>
</html>
"""


def build_article_html(body: str) -> str:
    return f"""\
<!DOCTYPE html>
<html>
<head><title>Article</title><style>.x {{ color: red }}</style></head>
<body>
  <article><p>{body}</p></article>
  <script>var tracking = "Workspace Settings";</script>
</body>
</html>
"""


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        slack_bot_token="xoxb-test",
        slack_signing_secret=SIGNING_SECRET,
        slack_command="/sbhelp",
        signature_max_age=300,
        kb_landing_url=LANDING_URL,
        kb_site_origin=SITE_ORIGIN,
        kb_link_segment="/knowledge-base/",
        kb_max_articles=10,
        kb_fetch_delay=0.0,
        kb_max_results=5,
        kb_request_timeout=5.0,
        kb_cache_max_entries=None,
        kb_cache_ttl_seconds=None,
        default_query="getting started",
    )


@pytest.fixture()
def landing_html() -> Callable[[Iterable[Tuple[str, str]]], str]:
    return build_landing_html


@pytest.fixture()
def article_html() -> Callable[[str], str]:
    return build_article_html
