"""
FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from churchcomm.api.v1.endpoints import health
from churchcomm.api.v1.routes import api_router
from churchcomm.core.config import get_settings
from churchcomm.core.validation import validate_providers_on_startup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan.

    Startup validates provider configuration; missing credentials are fatal
    only in production.
    """
    logger.info("Starting ChurchComm outreach scheduler...")

    settings = get_settings()
    strict_validation = settings.environment == "production"

    try:
        validate_providers_on_startup(strict=strict_validation)
    except RuntimeError as e:
        if strict_validation:
            logger.error(f"Startup failed: {e}")
            raise
        logger.warning(f"Configuration warnings (non-fatal in {settings.environment}): {e}")

    logger.info("ChurchComm outreach scheduler started successfully")

    yield

    logger.info("ChurchComm outreach scheduler shutdown complete")


app = FastAPI(
    title="ChurchComm Outreach",
    description="Automated pastoral outreach calls for church congregations",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(api_router, prefix=get_settings().api_prefix)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
