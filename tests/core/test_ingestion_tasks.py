"""Tests for the chunking, embedding and archival pipeline tasks.

Tests:
- chunk_text / ChunkingTask normalization, offsets and argument validation
- EmbeddingTask batching, ordering and failure handling
- ArchivalTask upload and error mapping
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from course_ingest.core.exceptions import ArchivalFailed, EmbeddingFailed
from course_ingest.core.ingestion.tasks import (
    ArchivalTask,
    ChunkingTask,
    EmbeddingTask,
    chunk_text,
    normalize_text,
)


def make_embedding_response(inputs: list[str], dimensions: int):
    """One vector per input, derived from the input text so order is checkable."""
    return SimpleNamespace(
        data=[SimpleNamespace(embedding=[float(hash(text) % 1_000_003)] * dimensions) for text in inputs]
    )


def _alphabet_text(length: int) -> str:
    return "".join(chr(ord("a") + i % 26) for i in range(length))


def _embedding_client(dimensions: int = 4) -> MagicMock:
    async def _create(model, input):
        return make_embedding_response(input, dimensions)

    client = MagicMock()
    client.embeddings.create = AsyncMock(side_effect=_create)
    return client


# ============================================================================
# Chunking
# ============================================================================


class TestNormalizeText:
    """Test whitespace normalization before chunking."""

    def test_collapses_every_whitespace_run(self) -> None:
        """Should turn CRLF, LF, CR, tabs and space runs into single spaces."""
        text = "Intro\r\nto   algebra\n\nChapter\r1\t\tsets  "
        assert normalize_text(text) == "Intro to algebra Chapter 1 sets"

    def test_whitespace_only_becomes_empty(self) -> None:
        """Should trim whitespace-only input to the empty string."""
        assert normalize_text(" \n\r\t ") == ""


class TestChunkText:
    """Test fixed-size overlapping chunking."""

    def test_2500_char_text_produces_three_chunks(self) -> None:
        """Should start chunks at offsets 0, 900, 1800 with last chunk of 700."""
        text = _alphabet_text(2500)

        chunks = chunk_text(text, chunk_size=1000, overlap=100)

        assert len(chunks) == 3
        assert chunks[0] == text[0:1000]
        assert chunks[1] == text[900:1900]
        assert chunks[2] == text[1800:2500]
        assert [len(c) for c in chunks] == [1000, 1000, 700]

    def test_consecutive_chunks_share_overlap(self) -> None:
        """Should repeat the last `overlap` chars of a full chunk at the next chunk's start."""
        chunks = chunk_text(_alphabet_text(2500), chunk_size=1000, overlap=100)

        for previous, current in zip(chunks, chunks[1:]):
            assert previous[-100:] == current[:100]

    @pytest.mark.parametrize("length", [1, 99, 100, 999, 1000, 1001, 1850, 2500, 7321])
    def test_chunks_reconstruct_normalized_text(self, length: int) -> None:
        """Should cover the normalized text exactly once overlaps are removed."""
        text = _alphabet_text(length)

        chunks = chunk_text(text, chunk_size=1000, overlap=100)
        rebuilt = chunks[0] + "".join(chunk[100:] for chunk in chunks[1:])

        assert rebuilt == text

    def test_is_deterministic(self) -> None:
        """Should return identical chunks for identical input."""
        text = "Lorem ipsum dolor sit amet.\n" * 300
        assert chunk_text(text) == chunk_text(text)

    def test_short_text_is_single_chunk(self) -> None:
        """Should return one chunk when text fits in chunk_size."""
        assert chunk_text("Photosynthesis converts light.") == ["Photosynthesis converts light."]

    @pytest.mark.parametrize("text", ["", "   ", "\n\r\n\t"])
    def test_empty_input_returns_no_chunks(self, text: str) -> None:
        """Should return an empty list for empty or whitespace-only text."""
        assert chunk_text(text) == []

    def test_line_breaks_never_reach_chunks(self) -> None:
        """Should not contain any newline characters after normalization."""
        chunks = chunk_text("line one\nline two\r\nline three\r" * 200, chunk_size=50, overlap=10)
        assert all("\n" not in c and "\r" not in c for c in chunks)

    @pytest.mark.parametrize(
        ("chunk_size", "overlap"),
        [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_arguments_raise(self, chunk_size: int, overlap: int) -> None:
        """Should reject non-positive size, negative overlap and overlap >= size."""
        with pytest.raises(ValueError):
            chunk_text("some text", chunk_size=chunk_size, overlap=overlap)


class TestChunkingTask:
    """Test ChunkingTask wrapper."""

    def test_uses_configured_size_and_overlap(self) -> None:
        """Should apply the configured parameters."""
        task = ChunkingTask(chunk_size=10, chunk_overlap=2)
        assert task.chunk("abcdefghijklmnopqrst") == ["abcdefghij", "ijklmnopqr", "qrst"]

    def test_invalid_config_rejected_at_construction(self) -> None:
        """Should fail fast on an invalid size/overlap combination."""
        with pytest.raises(ValueError, match="Invalid chunking config"):
            ChunkingTask(chunk_size=100, chunk_overlap=100)


# ============================================================================
# Embedding
# ============================================================================


class TestEmbeddingTask:
    """Test batched embedding generation."""

    @pytest.mark.asyncio
    async def test_five_chunks_use_one_batch(self) -> None:
        """Should send a single request and return five vectors in order."""
        client = _embedding_client()
        task = EmbeddingTask(client, batch_size=100, dimensions=4)
        texts = [f"chunk {i}" * (i + 1) for i in range(5)]

        vectors = await task.embed(texts)

        assert client.embeddings.create.await_count == 1
        assert len(vectors) == 5
        assert vectors == [item.embedding for item in make_embedding_response(texts, 4).data]

    @pytest.mark.asyncio
    async def test_250_chunks_use_three_ordered_batches(self) -> None:
        """Should send batches of 100, 100, 50 and keep output aligned with input."""
        client = _embedding_client()
        task = EmbeddingTask(client, model="text-embedding-3-large", batch_size=100, dimensions=4)
        texts = [f"text-{i}" for i in range(250)]

        vectors = await task.embed(texts)

        calls = client.embeddings.create.await_args_list
        assert [len(call.kwargs["input"]) for call in calls] == [100, 100, 50]
        assert calls[0].kwargs["input"] == texts[:100]
        assert calls[1].kwargs["input"] == texts[100:200]
        assert calls[2].kwargs["input"] == texts[200:]
        assert all(call.kwargs["model"] == "text-embedding-3-large" for call in calls)

        assert vectors == [item.embedding for item in make_embedding_response(texts, 4).data]

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self) -> None:
        """Should return [] without calling the API."""
        client = _embedding_client()

        assert await EmbeddingTask(client).embed([]) == []
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_error_raises_embedding_failed(self) -> None:
        """Should raise EmbeddingFailed with the failing batch and stop."""
        client = MagicMock()
        good = make_embedding_response(["x"] * 100, 4)
        client.embeddings.create = AsyncMock(side_effect=[good, openai.OpenAIError("rate limited")])
        task = EmbeddingTask(client, batch_size=100, dimensions=4)

        with pytest.raises(EmbeddingFailed) as exc_info:
            await task.embed(["x"] * 250)

        assert exc_info.value.batch_index == 2
        assert exc_info.value.stage == "embed"
        assert client.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_count_mismatch_raises_embedding_failed(self) -> None:
        """Should reject a response with fewer vectors than inputs."""
        client = MagicMock()
        client.embeddings.create = AsyncMock(return_value=make_embedding_response(["a", "b"], 4))

        with pytest.raises(EmbeddingFailed, match="Expected 3 embeddings, got 2"):
            await EmbeddingTask(client, dimensions=4).embed(["a", "b", "c"])

    @pytest.mark.asyncio
    async def test_dimension_mismatch_raises_embedding_failed(self) -> None:
        """Should reject vectors whose length differs from the configured dimension."""
        client = _embedding_client(dimensions=3)

        with pytest.raises(EmbeddingFailed, match="3 dimensions, expected 4"):
            await EmbeddingTask(client, dimensions=4).embed(["a"])

    def test_invalid_batch_size_rejected(self) -> None:
        """Should reject a non-positive batch size."""
        with pytest.raises(ValueError):
            EmbeddingTask(MagicMock(), batch_size=0)


# ============================================================================
# Archival
# ============================================================================


class TestArchivalTask:
    """Test S3 archival of the original upload."""

    @pytest.mark.asyncio
    async def test_uploads_file_under_given_key(self, mock_s3_client, temp_pdf_file) -> None:
        """Should put the file's bytes at the key with a PDF content type."""
        uploaded = {}

        def _put_object(key, body, content_type):
            uploaded.update(key=key, body=body.read(), content_type=content_type)

        mock_s3_client.put_object.side_effect = _put_object

        await ArchivalTask(mock_s3_client).archive(str(temp_pdf_file), "course_material/org-1/abc.pdf")

        assert uploaded == {
            "key": "course_material/org-1/abc.pdf",
            "body": temp_pdf_file.read_bytes(),
            "content_type": "application/pdf",
        }

    @pytest.mark.asyncio
    async def test_client_error_raises_archival_failed(self, mock_s3_client, temp_pdf_file) -> None:
        """Should map a boto ClientError to ArchivalFailed carrying the key."""
        mock_s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
            "PutObject",
        )

        with pytest.raises(ArchivalFailed) as exc_info:
            await ArchivalTask(mock_s3_client).archive(str(temp_pdf_file), "k.pdf")

        assert exc_info.value.key == "k.pdf"
        assert exc_info.value.stage == "archive"

    @pytest.mark.asyncio
    async def test_connection_error_raises_archival_failed(self, mock_s3_client, temp_pdf_file) -> None:
        """Should map botocore connection errors to ArchivalFailed."""
        mock_s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

        with pytest.raises(ArchivalFailed):
            await ArchivalTask(mock_s3_client).archive(str(temp_pdf_file), "k.pdf")

    @pytest.mark.asyncio
    async def test_missing_file_raises_archival_failed(self, mock_s3_client, tmp_path) -> None:
        """Should map an unreadable local file to ArchivalFailed without calling S3."""
        with pytest.raises(ArchivalFailed):
            await ArchivalTask(mock_s3_client).archive(str(tmp_path / "gone.pdf"), "k.pdf")

        mock_s3_client.put_object.assert_not_called()
