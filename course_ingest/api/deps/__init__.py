"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_material_service,
    get_service_cache,
    get_settings_dependency,
    get_task_runner,
)

__all__ = [
    "get_material_service",
    "get_service_cache",
    "get_settings_dependency",
    "get_task_runner",
]
