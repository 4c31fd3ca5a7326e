"""Configuration management for the study assistant.

This module provides the configuration dataclass and environment variable
loading for ingestion, retrieval and answer generation, including model
settings, storage locations and retry tuning.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class RAGConfig:
    """Configuration for the RAG (Retrieval-Augmented Generation) pipeline.

    Attributes:
        model_name: Name of the sentence-transformer model to use
        model_cache_dir: Directory to cache downloaded models
        vector_store_dir: Directory to persist ChromaDB data
        collection_name: Name of the ChromaDB collection
        similarity_threshold: Minimum similarity score for retrieved chunks (0-1)
        max_results: Maximum number of chunks returned per query
        chunk_size: Maximum characters per chunk
        playlist_video_limit: Maximum videos ingested from one playlist
        generation_model: Anthropic model used for answers
        generation_max_tokens: Token cap for generated answers
        generation_max_attempts: Attempts made when the model is rate limited
        generation_base_delay: Wait in seconds before the second attempt (doubles after)
        generation_timeout: Anthropic client timeout in seconds
        resource_store_file: JSON file holding resource records
        upload_dir: Directory for stored PDF uploads
        transcript_languages: Preferred transcript languages, in order
    """

    model_name: str = "all-mpnet-base-v2"
    model_cache_dir: Optional[Path] = None
    vector_store_dir: Path = Path(".chroma_db")
    collection_name: str = "study_chunks"
    similarity_threshold: float = 0.5
    max_results: int = 5
    chunk_size: int = 1000
    playlist_video_limit: int = 20
    generation_model: str = "claude-sonnet-4-5-20250929"
    generation_max_tokens: int = 2000
    generation_max_attempts: int = 3
    generation_base_delay: float = 2.0
    generation_timeout: float = 60.0
    resource_store_file: Path = Path(".study_resources.json")
    upload_dir: Path = Path("uploads")
    transcript_languages: tuple = ("en",)

    def __post_init__(self):
        """Ensure Path objects are properly initialized."""
        if self.model_cache_dir is not None and not isinstance(self.model_cache_dir, Path):
            self.model_cache_dir = Path(self.model_cache_dir)
        if not isinstance(self.vector_store_dir, Path):
            self.vector_store_dir = Path(self.vector_store_dir)
        if not isinstance(self.resource_store_file, Path):
            self.resource_store_file = Path(self.resource_store_file)
        if not isinstance(self.upload_dir, Path):
            self.upload_dir = Path(self.upload_dir)
        if isinstance(self.transcript_languages, str):
            self.transcript_languages = tuple(
                lang.strip() for lang in self.transcript_languages.split(',') if lang.strip()
            )
        if self.generation_max_attempts < 1:
            raise ValueError("generation_max_attempts must be at least 1")


def load_config_from_env(dotenv: bool = True) -> RAGConfig:
    """Load configuration from environment variables.

    Environment variables:
        RAG_MODEL: Sentence-transformer model name (default: all-mpnet-base-v2)
        RAG_MODEL_CACHE_DIR: Model cache directory path
        RAG_VECTOR_STORE_DIR: ChromaDB persistence directory
        RAG_COLLECTION_NAME: ChromaDB collection name (default: study_chunks)
        RAG_SIMILARITY_THRESHOLD: Minimum similarity score (default: 0.5)
        RAG_MAX_RESULTS: Maximum search results (default: 5)
        RAG_CHUNK_SIZE: Maximum characters per chunk (default: 1000)
        STUDY_PLAYLIST_VIDEO_LIMIT: Videos ingested per playlist (default: 20)
        STUDY_RESOURCE_STORE: Resource records JSON file
        STUDY_UPLOAD_DIR: PDF upload directory
        STUDY_TRANSCRIPT_LANGUAGES: Comma separated language codes (default: en)
        ANTHROPIC_MODEL: Model used for answers
        ANTHROPIC_MAX_TOKENS: Answer token cap (default: 2000)
        ANTHROPIC_MAX_ATTEMPTS: Attempts under rate limiting (default: 3)
        ANTHROPIC_BASE_DELAY: First backoff wait in seconds (default: 2.0)
        ANTHROPIC_TIMEOUT: Client timeout in seconds (default: 60)

    Args:
        dotenv: Load a ``.env`` file from the working directory first

    Returns:
        RAGConfig: Configuration object with values from environment
    """
    if dotenv:
        load_dotenv()

    def str_to_float(value: Optional[str], default: float) -> float:
        """Convert string to float with error handling."""
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def str_to_int(value: Optional[str], default: int) -> int:
        """Convert string to int with error handling."""
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    defaults = RAGConfig()

    model_cache_dir_str = os.getenv('RAG_MODEL_CACHE_DIR')
    vector_store_dir_str = os.getenv('RAG_VECTOR_STORE_DIR')

    return RAGConfig(
        model_name=os.getenv('RAG_MODEL', defaults.model_name),
        model_cache_dir=Path(model_cache_dir_str) if model_cache_dir_str else None,
        vector_store_dir=Path(vector_store_dir_str) if vector_store_dir_str else defaults.vector_store_dir,
        collection_name=os.getenv('RAG_COLLECTION_NAME', defaults.collection_name),
        similarity_threshold=str_to_float(
            os.getenv('RAG_SIMILARITY_THRESHOLD'), defaults.similarity_threshold
        ),
        max_results=str_to_int(os.getenv('RAG_MAX_RESULTS'), defaults.max_results),
        chunk_size=str_to_int(os.getenv('RAG_CHUNK_SIZE'), defaults.chunk_size),
        playlist_video_limit=str_to_int(
            os.getenv('STUDY_PLAYLIST_VIDEO_LIMIT'), defaults.playlist_video_limit
        ),
        generation_model=os.getenv('ANTHROPIC_MODEL', defaults.generation_model),
        generation_max_tokens=str_to_int(
            os.getenv('ANTHROPIC_MAX_TOKENS'), defaults.generation_max_tokens
        ),
        generation_max_attempts=max(
            1, str_to_int(os.getenv('ANTHROPIC_MAX_ATTEMPTS'), defaults.generation_max_attempts)
        ),
        generation_base_delay=str_to_float(
            os.getenv('ANTHROPIC_BASE_DELAY'), defaults.generation_base_delay
        ),
        generation_timeout=str_to_float(
            os.getenv('ANTHROPIC_TIMEOUT'), defaults.generation_timeout
        ),
        resource_store_file=Path(
            os.getenv('STUDY_RESOURCE_STORE', str(defaults.resource_store_file))
        ),
        upload_dir=Path(os.getenv('STUDY_UPLOAD_DIR', str(defaults.upload_dir))),
        transcript_languages=os.getenv('STUDY_TRANSCRIPT_LANGUAGES', 'en'),
    )
