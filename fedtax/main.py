"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fedtax.api.estimate import router as estimate_router
from fedtax.api.health import router as health_router
from fedtax.api.middleware import RequestContextMiddleware
from fedtax.core.config import settings
from fedtax.core.logging import configure_logging, get_logger
from fedtax.tax.year_config import TAX_YEAR_CONFIGS

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup.

    The tax tables need no setup: they are validated when imported.
    """
    configure_logging()
    logger.info(
        "Starting application",
        environment=settings.environment,
        tax_years=sorted(TAX_YEAR_CONFIGS),
        default_tax_year=settings.default_tax_year,
    )

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="fedtax",
    description="Federal income tax estimator for simple individual returns",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(estimate_router)
