"""Boundary layer: database and AWS adapters."""
