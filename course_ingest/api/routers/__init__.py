"""API routers."""

from .health import router as health_router
from .materials import router as materials_router

__all__ = ["health_router", "materials_router"]
