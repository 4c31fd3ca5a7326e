"""Text embedding service using sentence-transformers.

This module provides text embedding generation with lazy model loading,
device detection, and error handling for ingestion and query embedding.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import numpy as np
from sentence_transformers import SentenceTransformer
import torch

from ..errors import EmbeddingServiceError


logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for generating text embeddings using sentence-transformers.

    One instance is constructed per application and shared by the ingestion
    and chat paths. The model is loaded on first use.

    Attributes:
        model_name: Name of the sentence-transformer model
        cache_dir: Directory to cache downloaded models
        device: Compute device (cuda, mps, or cpu)
    """

    def __init__(
        self,
        model_name: str = "all-mpnet-base-v2",
        cache_dir: Optional[str] = None,
        device: Optional[str] = None,
    ):
        """Initialize the embedding service.

        Args:
            model_name: Sentence-transformer model name (default: all-mpnet-base-v2)
            cache_dir: Directory to cache models (default: None, uses default cache)
            device: Device to run model on (default: None, auto-detect)
        """
        self.model_name = model_name
        self.cache_dir = cache_dir
        self._model: Optional[SentenceTransformer] = None
        self._model_lock = threading.Lock()

        if device is None:
            if torch.cuda.is_available():
                self.device = "cuda"
            elif torch.backends.mps.is_available():
                self.device = "mps"
            else:
                self.device = "cpu"
        else:
            self.device = device

        logger.info(f"EmbeddingService initialized with model={model_name}, device={self.device}")

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the sentence-transformer model.

        Raises:
            EmbeddingServiceError: If model fails to load
        """
        if self._model is None:
            with self._model_lock:
                if self._model is None:
                    try:
                        logger.info(f"Loading sentence-transformer model: {self.model_name}")
                        self._model = SentenceTransformer(
                            self.model_name,
                            cache_folder=self.cache_dir,
                            device=self.device,
                        )
                        logger.info(f"Model loaded successfully on device: {self.device}")
                    except Exception as e:
                        logger.error(f"Failed to load model {self.model_name}: {e}")
                        raise EmbeddingServiceError(f"Could not load embedding model: {e}") from e

        return self._model

    def embed(self, text: str) -> List[float]:
        """Generate the embedding vector for one text.

        Args:
            text: Chunk or query text

        Returns:
            Embedding as a list of floats

        Raises:
            ValueError: If text is empty
            EmbeddingServiceError: If the model fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        model = self.model
        try:
            embedding = model.encode(
                text,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as e:
            logger.error(f"Failed to generate embedding: {e}")
            raise EmbeddingServiceError(f"Embedding generation failed: {e}") from e

        return np.asarray(embedding, dtype=float).tolist()

    def get_embedding_dim(self) -> int:
        """Dimensionality of embeddings produced by this model (768 for all-mpnet-base-v2)."""
        return self.model.get_sentence_embedding_dimension()

    def model_info(self) -> Dict[str, Any]:
        """Information about the loaded model."""
        info = {
            "model_name": self.model_name,
            "device": self.device,
            "embedding_dim": self.get_embedding_dim(),
            "cache_dir": self.cache_dir,
        }

        try:
            info["max_seq_length"] = self.model.max_seq_length
        except AttributeError:
            info["max_seq_length"] = None

        return info
