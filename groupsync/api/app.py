"""
FastAPI app
"""

import asyncio
from importlib.metadata import version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from groupsync.config.logging import configure_logging
from groupsync.service.updater import Updater, start_updater_thread

from .dependencies import SETTINGS, logger
from .healthz import healthz_app
from .setup import create_store
from .update import update_app


async def lifespan(app: FastAPI):
    settings = SETTINGS()
    configure_logging(settings.log_level)
    log = logger()

    await log.ainfo("app.starting")

    updater = Updater(
        store=create_store(settings=settings, log=log),
        queue_size=settings.queue_size,
        log=log,
    )
    app.updater_client = updater.client()
    thread = start_updater_thread(updater)

    yield

    # If the queue is full the stop message is dropped; closing the queue
    # still ends the worker once it has drained.
    app.updater_client.request_stop()
    updater.close()
    await asyncio.to_thread(thread.join)

    await log.ainfo("app.stopped")


app = FastAPI(
    lifespan=lifespan,
    title="groupsync",
    summary="Applies group membership updates to signed identity profiles.",
    version=version("groupsync"),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST"],
    allow_headers=["Authorization", "Accept", "Content-Type"],
    max_age=3600,
)

app.include_router(update_app, prefix="/v2/update")
app.include_router(healthz_app)
