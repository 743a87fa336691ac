"""Helpers shared by API routers."""
