"""HTTP API for course material upload and status polling."""
