"""Application services coordinating persistence and the ingestion pipeline."""
