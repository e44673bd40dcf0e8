# src/interfaces/api/main.py
"""FastAPI application serving the `/okr` slash command over HTTP.

Slack posts slash commands as form-encoded requests. The command route
always answers 200: an empty body on success (the confirmation is
posted to the channel), plain text for errors, or JSON blocks for help.
It is not rate limited: every request arrives from Slack's own addresses.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Form, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from slack_sdk.web.async_client import AsyncWebClient
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from src.config import settings  # noqa: E402
from src.core.subscriptions.dispatcher import CommandDispatcher  # noqa: E402
from src.core.subscriptions.factory import create_dispatcher  # noqa: E402
from src.core.subscriptions.notification import SlackNotifier  # noqa: E402
from src.interfaces.api.rate_limit import get_rate_limit_string, limiter  # noqa: E402
from src.interfaces.api.schemas import (  # noqa: E402
    HealthResponse,
    SubscriptionRecordResponse,
)
from src.utils.logging import configure_logging  # noqa: E402
from src.utils.observability import setup_logfire  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_logging(settings.log_level, structured=settings.structured_logging)
    setup_logfire(app)
    if not settings.slack_bot_token:
        logger.warning("SLACK_BOT_TOKEN not set - confirmations will not be delivered")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="OKR Notifier API",
    description="Slack slash-command endpoint for OKR notification subscriptions",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def get_dispatcher(request: Request) -> CommandDispatcher:
    """Return the app's CommandDispatcher, creating it on first use."""
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        notifier = SlackNotifier(AsyncWebClient(token=settings.slack_bot_token))
        dispatcher = create_dispatcher(notifier)
        request.app.state.dispatcher = dispatcher
    return dispatcher


Dispatcher = Annotated[CommandDispatcher, Depends(get_dispatcher)]


@app.post("/slack/commands")
async def slack_command(
    request: Request,
    dispatcher: Dispatcher,
    channel_id: Annotated[str, Form()],
    text: Annotated[str, Form()] = "",
    channel_name: Annotated[str, Form()] = "",
    trigger_id: Annotated[str | None, Form()] = None,
) -> Response:
    """Handle a Slack slash command.

    Returns:
        200 with an empty body, an error text, or help blocks.
    """
    result = await dispatcher.dispatch(
        text,
        channel_id=channel_id,
        channel_name=channel_name,
        command_id=trigger_id,
    )

    if result.blocks is not None:
        return JSONResponse({"blocks": result.blocks})
    if result.text is not None:
        return PlainTextResponse(result.text)
    return Response(status_code=200)


@app.get("/subscriptions/{slug}", response_model=SubscriptionRecordResponse)
@limiter.limit(get_rate_limit_string)
async def get_subscription(
    request: Request, slug: str, dispatcher: Dispatcher
) -> SubscriptionRecordResponse:
    """Get the stored subscription record for a slug.

    Raises:
        HTTPException: 404 if no record exists.
    """
    record = await dispatcher.engine.store.get(slug)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No subscriptions for '{slug}'")
    return SubscriptionRecordResponse.from_record(record)


@app.get("/health", response_model=HealthResponse)
@limiter.limit(get_rate_limit_string)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", storage_backend=settings.storage_backend)
