"""
Batched embedding generation using the OpenAI embeddings API.

Partitions chunks into contiguous batches of at most batch_size and issues
one request per batch, sequentially, appending results in request order.

Dependencies: openai
System role: Fourth stage of material ingestion pipeline
"""

import logging

import openai

from course_ingest.core.exceptions import EmbeddingFailed

logger = logging.getLogger(__name__)


class EmbeddingTask:
    """Generate embeddings for chunk texts in rate-limit-safe batches."""

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        model: str = "text-embedding-3-large",
        batch_size: int = 100,
        dimensions: int | None = None,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            client: Async OpenAI client (or compatible)
            model: Embedding model identifier
            batch_size: Maximum number of inputs per request
            dimensions: Expected vector length; every returned vector is
                checked against it when set

        Raises:
            ValueError: When model is empty or batch_size is not positive
        """
        if not model:
            raise ValueError("model cannot be empty")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self._client = client
        self._model = model
        self._batch_size = batch_size
        self._dimensions = dimensions

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts, preserving order.

        Args:
            texts: Chunk texts in document order

        Returns:
            list[list[float]]: One vector per input, same order

        Raises:
            EmbeddingFailed: Any batch failed or returned malformed data;
                no partial result is returned
        """
        if not texts:
            return []

        embeddings: list[list[float]] = []
        batch_count = (len(texts) + self._batch_size - 1) // self._batch_size

        for batch_number, start in enumerate(range(0, len(texts), self._batch_size), start=1):
            batch = texts[start:start + self._batch_size]
            logger.info(
                f"{__name__}:embed - Embedding batch {batch_number}/{batch_count} "
                f"({len(batch)} chunks)",
                extra={"model": self._model, "batch_index": batch_number},
            )

            try:
                response = await self._client.embeddings.create(
                    model=self._model,
                    input=batch,
                )
            except openai.OpenAIError as e:
                raise EmbeddingFailed(
                    f"Embedding request failed: {e}",
                    batch_index=batch_number,
                ) from e

            embeddings.extend(self._vectors_from_response(response, len(batch), batch_number))

        return embeddings

    def _vectors_from_response(
        self,
        response,
        expected_count: int,
        batch_number: int,
    ) -> list[list[float]]:
        """Validate one batch response and return its vectors."""
        data = getattr(response, "data", None)
        if data is None or len(data) != expected_count:
            raise EmbeddingFailed(
                f"Expected {expected_count} embeddings, got "
                f"{'none' if data is None else len(data)}",
                batch_index=batch_number,
            )

        vectors = [list(item.embedding) for item in data]
        if self._dimensions is not None:
            for vector in vectors:
                if len(vector) != self._dimensions:
                    raise EmbeddingFailed(
                        f"Embedding has {len(vector)} dimensions, expected {self._dimensions}",
                        batch_index=batch_number,
                    )
        return vectors
