from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from rich.markup import escape
from starlette.requests import ClientDisconnect
import uvicorn

from graphdash.config import Settings
from graphdash.utils import clock_stamp

WEBHOOK_PATH = "/webhook"
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

logger = logging.getLogger("graphdash.webhook")


def stamped(text: str) -> str:
    return f"[yellow]\\[{clock_stamp()}][/yellow] {text}"


def create_webhook_app(queue: asyncio.Queue[str]) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.api_route(WEBHOOK_PATH, methods=_ALL_METHODS)
    async def webhook(request: Request) -> PlainTextResponse:
        if request.method != "POST":
            logger.info("Rejected %s on %s", request.method, WEBHOOK_PATH)
            await queue.put(stamped(f"Method not allowed: {escape(request.method)}"))
            return PlainTextResponse("Method not allowed", status_code=405)

        validation_token = request.query_params.get("validationToken", "")
        if validation_token:
            logger.info("Answering subscription validation handshake")
            await queue.put(stamped(f"Validation token sent: {escape(validation_token)}"))
            return PlainTextResponse(validation_token, status_code=200)

        try:
            body = await request.body()
        except ClientDisconnect as exc:
            logger.warning("Failed to read notification body", exc_info=exc)
            await queue.put(stamped(f"Failed to read request body: {escape(str(exc))}"))
            return PlainTextResponse("Failed to read request body", status_code=500)

        text = body.decode("utf-8", errors="replace")
        logger.info("Received notification (%s bytes)", len(body))
        await queue.put(stamped(f"Received notification: {escape(text)}"))
        return PlainTextResponse("Notification received", status_code=200)

    return app


class _EmbeddedServer(uvicorn.Server):
    # signals belong to the dashboard process, not the webhook listener
    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class WebhookServer:
    def __init__(self, settings: Settings, queue: asyncio.Queue[str]) -> None:
        self.settings = settings
        self.queue = queue
        config = uvicorn.Config(
            create_webhook_app(queue),
            host=settings.webhook_host,
            port=settings.port,
            log_config=None,
            access_log=False,
        )
        self._server = _EmbeddedServer(config)

    async def serve(self) -> None:
        await self.queue.put(
            stamped(f"Webhook server starting on port {self.settings.port}...")
        )
        try:
            await self._server.serve()
        except (OSError, SystemExit) as exc:
            logger.exception("Webhook server error")
            await self.queue.put(
                stamped(f"[red]Webhook server error: {escape(str(exc))}[/red]")
            )

    def stop(self) -> None:
        self._server.should_exit = True
