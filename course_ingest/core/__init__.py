"""Core domain logic: exceptions and the ingestion pipeline."""
