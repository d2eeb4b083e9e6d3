"""
Thin wrapper over the Slack Web API for the two calls the bot makes.
"""
from typing import Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from kbbot.logger import logger


class SlackMessenger:
    def __init__(self, token: Optional[str] = None, client: Optional[WebClient] = None):
        self.client = client or WebClient(token=token)

    def post_message(self, channel: str, text: str, blocks: Optional[list] = None) -> dict:
        payload = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        try:
            return self.client.chat_postMessage(**payload).data
        except SlackApiError as e:
            logger.error("Slack API error (chat.postMessage): %s", e.response.get("error", e))
            raise

    def post_ephemeral(self, channel: str, user: str, text: str) -> dict:
        try:
            return self.client.chat_postEphemeral(channel=channel, user=user, text=text).data
        except SlackApiError as e:
            logger.error("Slack API error (chat.postEphemeral): %s", e.response.get("error", e))
            raise
