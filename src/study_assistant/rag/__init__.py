"""RAG (Retrieval-Augmented Generation) infrastructure for the study assistant.

Core Components:
- config: Configuration management loaded from the environment
- document_chunker: Sentence-based text chunking
- embedding_service: Text embedding generation using sentence-transformers
- vector_store: ChromaDB wrapper for subject-scoped similarity search
- types: Data types shared by ingestion and chat
"""

from .config import RAGConfig, load_config_from_env
from .document_chunker import DocumentChunker, chunk_text
from .embedding_service import EmbeddingService
from .vector_store import VectorStore
from .types import (
    ChatAnswer,
    ChatStage,
    IngestionResult,
    PlaylistDescriptor,
    Resource,
    ResourceKind,
    RetrievedChunk,
    VideoDescriptor,
    VideoOutcome,
)

__all__ = [
    "RAGConfig",
    "load_config_from_env",
    "DocumentChunker",
    "chunk_text",
    "EmbeddingService",
    "VectorStore",
    "ChatAnswer",
    "ChatStage",
    "IngestionResult",
    "PlaylistDescriptor",
    "Resource",
    "ResourceKind",
    "RetrievedChunk",
    "VideoDescriptor",
    "VideoOutcome",
]
