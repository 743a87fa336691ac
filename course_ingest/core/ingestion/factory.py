"""
Construction of the ingestion pipeline from settings.

The only place real clients (OpenAI, boto3, database sessions) are built;
everything downstream receives them by injection.

Dependencies: openai, boto3, course_ingest.configs
System role: Composition root for the ingestion pipeline
"""

from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import async_sessionmaker

from course_ingest.boundary.aws.s3_client import S3MaterialClient
from course_ingest.boundary.db.connection import get_async_session_factory
from course_ingest.configs.settings import Settings
from course_ingest.core.ingestion.database.material_status_updater import MaterialStatusUpdater
from course_ingest.core.ingestion.orchestrator import IngestionOrchestrator
from course_ingest.core.ingestion.tasks import (
    ArchivalTask,
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
)


def build_embedding_client(settings: Settings) -> AsyncOpenAI:
    """Create the async OpenAI client used for embeddings."""
    return AsyncOpenAI(
        api_key=settings.embedding.api_key or None,
        base_url=settings.embedding.base_url,
        timeout=settings.embedding.request_timeout_seconds,
        max_retries=0,
    )


def build_orchestrator(
    settings: Settings,
    session_factory: async_sessionmaker | None = None,
    embedding_client: AsyncOpenAI | None = None,
    s3_client: S3MaterialClient | None = None,
) -> IngestionOrchestrator:
    """
    Build an orchestrator wired to real (or supplied) clients.

    Args:
        settings: Application settings
        session_factory: Database session factory (process-wide factory if None)
        embedding_client: OpenAI client (built from settings if None)
        s3_client: Materials bucket client (built from settings if None)

    Returns:
        IngestionOrchestrator: Ready-to-run orchestrator
    """
    ingestion = settings.ingestion
    embedding = settings.embedding

    extractor = ExtractionTask(
        executable=ingestion.pdftotext_path,
        read_block_size=ingestion.read_block_size,
    )
    chunker = ChunkingTask(
        chunk_size=ingestion.chunk_size,
        chunk_overlap=ingestion.chunk_overlap,
    )
    embedder = EmbeddingTask(
        client=embedding_client or build_embedding_client(settings),
        model=embedding.embedding_model,
        batch_size=embedding.batch_size,
        dimensions=embedding.embedding_dimensions,
    )
    archiver = ArchivalTask(
        s3_client
        or S3MaterialClient(
            bucket=settings.s3_materials.bucket,
            region=settings.s3_materials.region,
        )
    )
    status_updater = MaterialStatusUpdater(session_factory or get_async_session_factory())

    return IngestionOrchestrator(
        extractor=extractor,
        chunker=chunker,
        embedder=embedder,
        archiver=archiver,
        status_updater=status_updater,
        pipeline_timeout_seconds=ingestion.pipeline_timeout_seconds,
    )
