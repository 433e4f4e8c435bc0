"""Health check endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter

from .. import __version__
from ..api_models import HealthResponse

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_health_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        temp_files = await asyncio.to_thread(state.temp_store.file_count)
        return HealthResponse(
            status="ok",
            version=__version__,
            variant=state.report_generator.default_variant.name,
            temp_files=temp_files,
            worker_pool=state.worker_pool.stats(),
        )

    return router
