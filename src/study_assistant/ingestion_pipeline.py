"""
Ingestion pipeline: extract -> create resource -> chunk -> embed -> store.

Work is strictly sequential. The resource record is created before any
embedding happens and is never rolled back: an embedding failure aborts the
remaining chunks and propagates with the resource ID attached, and a failed
chunk insert is logged only.
"""
import threading
from typing import List, Optional, Tuple

from loguru import logger

from .errors import EmbeddingServiceError, OperationCancelled
from .object_storage import ObjectStorage
from .rag.document_chunker import DocumentChunker
from .rag.embedding_service import EmbeddingService
from .rag.types import IngestionResult, Resource, ResourceKind, VideoOutcome
from .rag.vector_store import VectorStore
from .resource_repository import ResourceRepository
from .source_extractor import ExtractedSource, PdfSource, SourceDescriptor, SourceExtractor

SUMMARY_LENGTH = 200


def check_cancelled(cancel_event: Optional[threading.Event], stage: str) -> None:
    """Raise OperationCancelled if the caller has set the cancel event."""
    if cancel_event is not None and cancel_event.is_set():
        logger.warning(f"Cancelled before {stage}")
        raise OperationCancelled(f"Operation cancelled before {stage}")


def summarize(raw_text: str) -> str:
    """First 200 characters of the text followed by an ellipsis."""
    return raw_text[:SUMMARY_LENGTH] + '...'


def video_label(title: str) -> str:
    """Prefix attributing a playlist chunk to its video."""
    return f"[Video: {title}] "


class IngestionPipeline:
    """Turns source descriptors into resources with stored chunks."""

    def __init__(
        self,
        extractor: SourceExtractor,
        chunker: DocumentChunker,
        embedder: EmbeddingService,
        vector_store: VectorStore,
        resources: ResourceRepository,
        storage: Optional[ObjectStorage] = None,
        playlist_video_limit: int = 20,
    ):
        self.extractor = extractor
        self.chunker = chunker
        self.embedder = embedder
        self.vector_store = vector_store
        self.resources = resources
        self.storage = storage
        self.playlist_video_limit = playlist_video_limit

    # ========================================================================
    # Entry point
    # ========================================================================

    def ingest(
        self,
        subject_id: str,
        descriptor: SourceDescriptor,
        title: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> IngestionResult:
        """
        Ingest one source into a subject.

        Args:
            subject_id: Subject the resource belongs to
            descriptor: Source to ingest
            title: Caller-supplied title; falls back to the extracted title.
                Playlists always keep their own title.
            cancel_event: Checked before every external call

        Returns:
            IngestionResult with the created resource and stored chunk count

        Raises:
            InvalidSource, ExtractionFailed, EmptySource: Nothing was created
            EmbeddingServiceError: Resource exists; ``resource_id`` is set
            OperationCancelled: Work done so far is kept
        """
        check_cancelled(cancel_event, "extraction")
        extracted = self.extractor.extract(descriptor)

        if extracted.kind == ResourceKind.YOUTUBE_PLAYLIST:
            return self._ingest_playlist(
                subject_id, extracted.title, extracted.url, extracted, cancel_event
            )

        url = extracted.url
        uploaded = False
        if isinstance(descriptor, PdfSource) and self.storage is not None:
            check_cancelled(cancel_event, "upload")
            url = self.storage.upload(descriptor.data, descriptor.filename, subject_id)
            uploaded = True

        try:
            resource = self.resources.create(
                subject_id=subject_id,
                title=title or extracted.title,
                kind=extracted.kind,
                url=url,
                content_summary=summarize(extracted.raw_text),
            )
        except Exception:
            if uploaded:
                logger.error(f"Resource record not created; removing upload {url}")
                self.storage.delete(url)
            raise

        return self._ingest_single(resource, extracted, cancel_event)

    # ========================================================================
    # Single-document sources (PDF, video, link)
    # ========================================================================

    def _ingest_single(
        self,
        resource: Resource,
        extracted: ExtractedSource,
        cancel_event: Optional[threading.Event],
    ) -> IngestionResult:
        chunks = self.chunker.chunk(extracted.raw_text)
        logger.info(f"[{resource.id}] {len(chunks)} chunks to embed")

        rows = self._embed_chunks(resource, chunks, cancel_event)
        stored = self._store(resource, rows)

        return IngestionResult(resource=resource, chunks_stored=len(rows) if stored else 0)

    # ========================================================================
    # Playlists
    # ========================================================================

    def _ingest_playlist(
        self,
        subject_id: str,
        title: str,
        url: Optional[str],
        extracted: ExtractedSource,
        cancel_event: Optional[threading.Event],
    ) -> IngestionResult:
        resource = self.resources.create(
            subject_id=subject_id,
            title=title,
            kind=extracted.kind,
            url=url,
            content_summary=extracted.raw_text,
        )

        video_ids = extracted.video_ids[:self.playlist_video_limit]
        if len(extracted.video_ids) > len(video_ids):
            logger.info(
                f"[{resource.id}] Processing first {len(video_ids)} of "
                f"{len(extracted.video_ids)} playlist videos"
            )

        outcomes = []
        for position, video_id in enumerate(video_ids, 1):
            check_cancelled(cancel_event, f"video {video_id}")
            logger.info(f"[{resource.id}] Video {position}/{len(video_ids)}: {video_id}")
            outcomes.append(self._ingest_playlist_video(resource, video_id, cancel_event))

        ingested = [o for o in outcomes if o.ingested]
        chunks_stored = sum(o.chunks for o in ingested)
        logger.info(
            f"[{resource.id}] Playlist done: {len(ingested)}/{len(outcomes)} videos, "
            f"{chunks_stored} chunks"
        )

        return IngestionResult(
            resource=resource,
            chunks_stored=chunks_stored,
            video_outcomes=outcomes,
        )

    def _ingest_playlist_video(
        self,
        resource: Resource,
        video_id: str,
        cancel_event: Optional[threading.Event],
    ) -> VideoOutcome:
        """Ingest one playlist video. Any failure skips only this video."""
        try:
            video = self.extractor.fetch_video(video_id)
            chunks = self.chunker.chunk(video.transcript, prefix=video_label(video.title))
            rows = self._embed_chunks(resource, chunks, cancel_event)
            start_index = self.vector_store.count_for_resource(resource.id) if rows else 0
            if not self._store(resource, rows, start_index):
                return VideoOutcome(video_id=video_id, status='skipped', error="Chunk insert failed")
            return VideoOutcome(video_id=video_id, status='ingested', chunks=len(rows))

        except OperationCancelled:
            raise
        except Exception as e:
            logger.error(f"[{resource.id}] Skipping video {video_id}: {e}")
            return VideoOutcome(video_id=video_id, status='skipped', error=str(e))

    # ========================================================================
    # Helpers
    # ========================================================================

    def _embed_chunks(
        self,
        resource: Resource,
        chunks: List[str],
        cancel_event: Optional[threading.Event],
    ) -> List[Tuple[str, List[float]]]:
        rows = []
        for index, chunk in enumerate(chunks):
            check_cancelled(cancel_event, f"embedding chunk {index}")
            try:
                rows.append((chunk, self.embedder.embed(chunk)))
            except EmbeddingServiceError as e:
                logger.error(f"[{resource.id}] Embedding failed at chunk {index}/{len(chunks)}: {e}")
                raise EmbeddingServiceError(e.message, resource_id=resource.id) from e
        return rows

    def _store(
        self,
        resource: Resource,
        rows: List[Tuple[str, List[float]]],
        start_index: int = 0,
    ) -> bool:
        if not rows:
            return True
        stored = self.vector_store.insert_chunks(
            resource.id, resource.subject_id, rows, start_index=start_index
        )
        if not stored:
            logger.error(f"[{resource.id}] Failed to store {len(rows)} chunks; resource kept")
        return stored
