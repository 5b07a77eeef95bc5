from __future__ import annotations

import asyncio
import logging
import signal
import sys

from graphdash.config import Settings, load_settings
from graphdash.graph_client import GraphClient
from graphdash.notifications import make_queue
from graphdash.tui import Dashboard
from graphdash.webhook import WebhookServer

SERVER_SHUTDOWN_TIMEOUT = 5


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        filename=settings.log_file,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def run_async(settings: Settings) -> None:
    logger = logging.getLogger("graphdash.app")
    queue = make_queue()
    client = GraphClient(settings)
    webhook_server = WebhookServer(settings, queue)
    dashboard = Dashboard(settings, client, queue)

    loop = asyncio.get_running_loop()
    handled = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, dashboard.exit)
        except NotImplementedError:
            continue
        handled.append(sig)

    server_task = asyncio.create_task(webhook_server.serve())
    logger.info("Starting dashboard, webhook on port %s", settings.port)
    try:
        await dashboard.run_async()
    finally:
        webhook_server.stop()
        try:
            await asyncio.wait_for(server_task, timeout=SERVER_SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Webhook server did not stop in time")
        await client.close()
        for sig in handled:
            loop.remove_signal_handler(sig)
        logger.info("Dashboard stopped")


def run() -> None:
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    configure_logging(settings)
    try:
        asyncio.run(run_async(settings))
    except KeyboardInterrupt:
        pass
