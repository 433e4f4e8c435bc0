"""Application wiring: config -> resources -> services -> FastAPI routes.

Boundary note for maintainers:
- Keep this module focused on orchestration, not layout or extraction details.
- Page layout belongs in ``report/layout.py``; model prompts in ``extraction.py``.
- API schemas belong in ``api_models.py``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import secrets
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .accounts import AccountStore
from .config import AppConfig, load_config
from .extraction import ExtractionClient
from .report.charts import ChartRenderer
from .report.pdf_builder import ReportGenerator
from .report.resources import load_resources
from .routes import create_router
from .temp_store import TempFileStore
from .worker_pool import WorkerPool

LOGGER = logging.getLogger(__name__)


@dataclass
class RuntimeState:
    config: AppConfig
    worker_pool: WorkerPool
    temp_store: TempFileStore
    report_generator: ReportGenerator
    extraction_client: ExtractionClient
    account_store: AccountStore
    tasks: list[asyncio.Task] = field(default_factory=list)


def _jwt_secret(config: AppConfig) -> str:
    secret = os.environ.get(config.auth.jwt_secret_env, "").strip()
    if secret:
        return secret
    LOGGER.warning(
        "%s is not set; using an ephemeral signing key (sessions end on restart)",
        config.auth.jwt_secret_env,
    )
    return secrets.token_urlsafe(32)


def build_runtime(config: AppConfig) -> RuntimeState:
    resources = load_resources(config.report)
    worker_pool = WorkerPool(max_workers=config.charts.max_workers)
    temp_store = TempFileStore(config.temp.dir, max_age_s=config.temp.max_age_s)
    chart_renderer = ChartRenderer(
        worker_pool,
        width_px=config.charts.width_px,
        height_px=config.charts.height_px,
        dpi=config.charts.dpi,
        timeout_s=config.charts.timeout_s,
    )
    return RuntimeState(
        config=config,
        worker_pool=worker_pool,
        temp_store=temp_store,
        report_generator=ReportGenerator(
            resources,
            chart_renderer,
            default_variant=config.report.variant,
            temp_store=temp_store,
        ),
        extraction_client=ExtractionClient(config.extraction),
        account_store=AccountStore(
            config.auth.db_path,
            jwt_secret=_jwt_secret(config),
            token_ttl_s=config.auth.token_ttl_s,
            bcrypt_rounds=config.auth.bcrypt_rounds,
        ),
    )


def create_app(config_path: Path | None = None) -> FastAPI:
    config = load_config(config_path)
    runtime = build_runtime(config)

    async def start_runtime() -> None:
        await asyncio.to_thread(runtime.temp_store.sweep)
        runtime.tasks.append(
            asyncio.create_task(
                runtime.temp_store.run_periodic_sweep(config.temp.sweep_interval_s),
                name="temp-sweep",
            )
        )

    async def stop_runtime() -> None:
        for task in runtime.tasks:
            task.cancel()
        for task in runtime.tasks:
            with suppress(asyncio.CancelledError):
                await task
        runtime.tasks.clear()
        runtime.worker_pool.shutdown(wait=False)
        runtime.account_store.close()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await start_runtime()
        try:
            yield
        finally:
            await stop_runtime()

    app = FastAPI(title="Material Test Reports", lifespan=lifespan)
    app.state.runtime = runtime
    app.include_router(create_router(runtime))
    return app


app: FastAPI | None = (
    create_app()
    if __name__ != "__main__" and os.getenv("LABREPORT_DISABLE_AUTO_APP", "0") != "1"
    else None
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the material test report server")
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    args = parser.parse_args()

    runtime_app = create_app(config_path=args.config)
    runtime: RuntimeState = runtime_app.state.runtime
    uvicorn.run(
        runtime_app,
        host=runtime.config.server.host,
        port=runtime.config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
