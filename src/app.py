# Copyright (c) 2025 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .common.jobs import recover_stale_running_jobs
from .config import config
from .router import root_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: jobs left running by a previous process can never finish
    try:
        recovered = recover_stale_running_jobs()
        if recovered:
            logger.warning("Marked %d stale running job(s) as failed", recovered)
    except OSError as e:
        logger.error("Could not recover stale jobs: %s", e)

    yield


def create_api() -> FastAPI:
    """
    Initialize and configure the FastAPI application.

    :return: Configured FastAPI instance.
    """
    logging.getLogger("src").setLevel(config.logging.level.value.upper())

    app = FastAPI(
        title=config.app.title,
        version=config.app.version,
        description=config.app.description,
        lifespan=lifespan,
    )

    app.include_router(root_router, prefix=f"{config.app.api_base_url}/v1")

    @app.get("/health")
    async def health() -> dict:
        """
        Health check endpoint to verify the service is running.
        """
        return {"message": "OK"}

    return app


api = create_api()


def run() -> None:
    """Serve the API with uvicorn using the app and logging settings."""
    uvicorn.run(
        "src.app:api",
        host=config.app.host,
        port=config.app.port,
        workers=config.app.workers,
        log_level=config.logging.level.value,
        access_log=config.logging.access_log,
        use_colors=config.logging.colors,
    )


if __name__ == "__main__":
    run()
