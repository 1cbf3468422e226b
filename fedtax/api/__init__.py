"""API module exports."""

from fedtax.api.estimate import router as estimate_router
from fedtax.api.health import router as health_router

__all__ = [
    "estimate_router",
    "health_router",
]
