"""
Application interface layer for the CLI and other boundaries.

Builds every client once from configuration and exposes request/response
shaped operations, so boundary code never touches pipeline internals.
"""
import threading
from typing import Any, Dict, List, Optional

from loguru import logger

from .answer_synthesizer import AnswerSynthesizer
from .errors import InvalidRequest
from .ingestion_pipeline import IngestionPipeline
from .object_storage import LocalObjectStorage, ObjectStorage
from .rag.config import RAGConfig, load_config_from_env
from .rag.document_chunker import DocumentChunker
from .rag.embedding_service import EmbeddingService
from .rag.vector_store import VectorStore
from .resource_repository import JsonResourceRepository, ResourceRepository
from .source_extractor import (
    LinkSource,
    PdfSource,
    SourceDescriptor,
    SourceExtractor,
    youtube_source,
)
from .transcript_provider import TranscriptFetcher
from .video_processor import YouTubeClient

RESOURCE_TYPES = ('pdf', 'youtube', 'link')


class StudyAssistant:
    """
    Stable interface for study assistant operations.

    Collaborators may be injected; anything not given is built from config.
    """

    def __init__(
        self,
        config: Optional[RAGConfig] = None,
        embedder: Optional[EmbeddingService] = None,
        vector_store: Optional[VectorStore] = None,
        resources: Optional[ResourceRepository] = None,
        youtube: Optional[YouTubeClient] = None,
        storage: Optional[ObjectStorage] = None,
        synthesizer: Optional[AnswerSynthesizer] = None,
    ):
        self.config = config or load_config_from_env()
        cfg = self.config

        self.embedder = embedder or EmbeddingService(
            model_name=cfg.model_name,
            cache_dir=str(cfg.model_cache_dir) if cfg.model_cache_dir else None,
        )
        self.vector_store = vector_store or VectorStore(
            persist_dir=str(cfg.vector_store_dir),
            collection_name=cfg.collection_name,
        )
        self.resources = resources or JsonResourceRepository(
            cfg.resource_store_file, chunk_store=self.vector_store
        )
        self.youtube = youtube or YouTubeClient(TranscriptFetcher(cfg.transcript_languages))
        self.storage = storage or LocalObjectStorage(cfg.upload_dir)

        self.pipeline = IngestionPipeline(
            extractor=SourceExtractor(self.youtube),
            chunker=DocumentChunker(cfg.chunk_size),
            embedder=self.embedder,
            vector_store=self.vector_store,
            resources=self.resources,
            storage=self.storage,
            playlist_video_limit=cfg.playlist_video_limit,
        )
        self.synthesizer = synthesizer or AnswerSynthesizer(
            embedder=self.embedder,
            vector_store=self.vector_store,
            model=cfg.generation_model,
            max_tokens=cfg.generation_max_tokens,
            similarity_threshold=cfg.similarity_threshold,
            top_k=cfg.max_results,
            max_attempts=cfg.generation_max_attempts,
            base_delay=cfg.generation_base_delay,
            timeout=cfg.generation_timeout,
        )

    @staticmethod
    def build_descriptor(request: Dict[str, Any]) -> SourceDescriptor:
        """
        Map an ingestion request to a source descriptor.

        Raises:
            InvalidRequest: Missing or unknown fields
        """
        resource_type = request.get('type')
        if resource_type not in RESOURCE_TYPES:
            raise InvalidRequest(f"Invalid resource type: {resource_type}")

        if resource_type == 'pdf':
            data = request.get('file_buffer')
            if not data:
                raise InvalidRequest("No file uploaded")
            return PdfSource(data=data, filename=request.get('filename') or 'document.pdf')

        url = (request.get('url') or '').strip()
        if not url:
            raise InvalidRequest("URL is required")

        if resource_type == 'youtube':
            return youtube_source(url)
        return LinkSource(url=url, text=request.get('content') or '')

    def create_resource(
        self,
        request: Dict[str, Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """
        Ingest a resource.

        Args:
            request: ``{subject_id, title, type, url | file_buffer | content}``
            cancel_event: Optional cancellation signal

        Returns:
            Ingestion result dictionary
        """
        subject_id = request.get('subject_id')
        if not subject_id:
            raise InvalidRequest("subject_id is required")

        descriptor = self.build_descriptor(request)
        logger.info(f"Ingesting {type(descriptor).__name__} into subject {subject_id}")

        result = self.pipeline.ingest(
            subject_id,
            descriptor,
            title=request.get('title') or None,
            cancel_event=cancel_event,
        )
        return result.to_dict()

    def chat(
        self,
        request: Dict[str, Any],
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """
        Answer a question about a subject.

        Args:
            request: ``{subject_id, message}``

        Returns:
            ``{answer, sources: [{content, similarity}]}``
        """
        subject_id = request.get('subject_id')
        if not subject_id:
            raise InvalidRequest("subject_id is required")

        answer = self.synthesizer.answer(
            request.get('message') or '',
            subject_id,
            cancel_event=cancel_event,
        )
        return answer.to_response()

    def list_resources(self, subject_id: str) -> List[Dict[str, Any]]:
        """Resources of a subject, newest first."""
        return [resource.to_dict() for resource in self.resources.list_by_subject(subject_id)]

    def delete_resource(self, resource_id: str) -> bool:
        """Delete a resource and its chunks."""
        return self.resources.delete(resource_id)

    def info(self) -> Dict[str, Any]:
        """Embedding model details and vector store health."""
        return {
            'embedding_model': self.embedder.model_info(),
            'vector_store_healthy': self.vector_store.health_check(),
            'collection_name': self.config.collection_name,
        }
