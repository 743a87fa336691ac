"""Course material ingestion service: PDF text extraction, chunking, embedding and storage."""

__version__ = "0.1.0"
