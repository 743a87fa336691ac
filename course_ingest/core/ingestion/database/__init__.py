"""
Database operations for the material ingestion pipeline.

Exports: MaterialStatusUpdater
"""

from .material_status_updater import MaterialStatusUpdater

__all__ = ["MaterialStatusUpdater"]
