# Copyright (c) Syntropy Systems
"""FastAPI application serving the stats query protocol."""
from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import Depends, FastAPI, HTTPException, Request

from gradewatch import __version__
from gradewatch.controller import StatsController
from gradewatch.models.api import HealthResponse, StatsRequest, StatsResponse
from gradewatch.sources import follow_file

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from gradewatch.dom import Page
    from gradewatch.sources import FileWatcher


def get_controller(request: Request) -> StatsController:
    """Get the controller owned by this app."""
    return request.app.state.controller


def create_app(
    controller: StatsController,
    page: Page | None = None,
    watcher: FileWatcher | None = None,
    poll_interval: float = 1.0,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        controller: Controller whose snapshot is served
        page: Page to update when the watched file changes
        watcher: Watcher for the file backing `page`
        poll_interval: Seconds between file polls

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifecycle manager for the FastAPI app."""
        controller.start()

        follower = None
        if page is not None and watcher is not None:
            follower = asyncio.create_task(follow_file(page, watcher, poll_interval))

        yield

        if follower is not None:
            follower.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await follower

    app = FastAPI(
        title="gradewatch",
        description="Transcript grade-point statistics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.controller = controller

    @app.get("/api/v1/health", response_model=HealthResponse)
    async def health(controller: StatsController = Depends(get_controller)):
        """Health check endpoint."""
        return HealthResponse(status="ok", state=controller.state.value, version=__version__)

    @app.get("/api/v1/stats", response_model=StatsResponse)
    async def get_stats(controller: StatsController = Depends(get_controller)):
        """Get the latest snapshot."""
        return controller.query()

    @app.post("/api/v1/messages", response_model=StatsResponse)
    async def post_message(request: StatsRequest, controller: StatsController = Depends(get_controller)):
        """Answer a query-protocol message."""
        response = controller.handle_message({"type": request.type})
        if response is None:
            raise HTTPException(status_code=400, detail=f"Unsupported message type: {request.type}")
        return response

    return app
