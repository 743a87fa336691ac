"""
Application services.

Exports: MaterialService
"""

from .material_service import MaterialService

__all__ = ["MaterialService"]
