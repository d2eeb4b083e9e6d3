import time
from typing import Callable, Optional

from fastapi import BackgroundTasks, FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from kbbot.auth import InboundRequest, authenticate
from kbbot.commands import SEARCHING_TEXT, UNKNOWN_COMMAND_TEXT, ephemeral, run_search_and_reply
from kbbot.config import Settings, validate_environment_variables
from kbbot.errors import AuthError, AuthFailure
from kbbot.logger import logger
from kbbot.search import SearchOrchestrator
from kbbot.slack_client import SlackMessenger


def create_app(
    settings: Optional[Settings] = None,
    searcher: Optional[SearchOrchestrator] = None,
    messenger: Optional[SlackMessenger] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    if settings is None:
        validate_environment_variables()
        settings = Settings()

    if searcher is None:
        searcher = SearchOrchestrator.from_settings(settings)
    if messenger is None:
        messenger = SlackMessenger(token=settings.slack_bot_token)

    fastapi_app = FastAPI()

    @fastapi_app.post("/slack/commands")
    async def slack_commands(request: Request, background_tasks: BackgroundTasks):
        # Signature is computed over the exact bytes received
        raw_body = await request.body()
        try:
            fields = authenticate(
                InboundRequest(headers=request.headers, raw_body=raw_body),
                settings.slack_signing_secret,
                int(clock()),
                max_age_seconds=settings.signature_max_age,
            )
        except AuthError as e:
            logger.warning("Rejected Slack command: %s", e)
            if e.reason is AuthFailure.STALE_REQUEST:
                return PlainTextResponse("Request timeout", status_code=401)
            return PlainTextResponse("Unauthorized", status_code=401)

        try:
            command = fields.get("command", "")
            logger.info(
                "Slash command received: %s from user_id=%s channel_id=%s",
                command,
                fields.get("user_id"),
                fields.get("channel_id"),
            )

            if command != settings.slack_command:
                logger.error(f"Failed to recognise the command: {command}")
                return JSONResponse(ephemeral(UNKNOWN_COMMAND_TEXT))

            query = fields.get("text", "").strip() or settings.default_query
            # Slack expects an answer within 3 seconds; the crawl runs after the response
            background_tasks.add_task(
                run_search_and_reply,
                searcher,
                messenger,
                fields.get("channel_id", ""),
                fields.get("user_id", ""),
                query,
                settings.slack_command,
            )
            return JSONResponse(ephemeral(SEARCHING_TEXT))
        except Exception:
            logger.exception("Command handler error")
            return JSONResponse(ephemeral("Internal server error"), status_code=500)

    @fastapi_app.post("/slack/events")
    async def slack_events(request: Request):
        try:
            data = await request.json()
        except Exception:
            raise HTTPException(status_code=400, detail="No JSON received")

        if isinstance(data, dict) and data.get("type") == "url_verification":
            return JSONResponse({"challenge": data.get("challenge")})

        return Response(status_code=200)

    @fastapi_app.get("/health")
    async def health():
        return JSONResponse({"status": "ok"})

    @fastapi_app.get("/")
    async def ping():
        return JSONResponse({"status": "ok"})

    return fastapi_app


if __name__ == "__main__":
    import uvicorn

    server_settings = Settings()
    uvicorn.run(
        "app:create_app",
        factory=True,
        host="0.0.0.0",
        port=server_settings.port,
        reload=server_settings.env != "prod",
    )
