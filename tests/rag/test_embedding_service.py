"""Unit tests for embedding service module."""

import threading

import pytest
import numpy as np
from unittest.mock import Mock, patch

from study_assistant.errors import EmbeddingServiceError
from study_assistant.rag.embedding_service import EmbeddingService


class TestEmbeddingService:
    """Tests for EmbeddingService class."""

    def test_init_default_values(self):
        """Test initializing service with default values."""
        service = EmbeddingService()

        assert service.model_name == "all-mpnet-base-v2"
        assert service.cache_dir is None
        assert service.device in ("cuda", "mps", "cpu")
        assert service._model is None  # Lazy loading

    def test_init_explicit_device(self):
        """Test that an explicit device skips detection."""
        service = EmbeddingService(model_name="custom-model", device="cpu")

        assert service.model_name == "custom-model"
        assert service.device == "cpu"

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_lazy_model_loading(self, mock_st):
        """Test that model is loaded once, on first use."""
        mock_model = Mock()
        mock_st.return_value = mock_model

        service = EmbeddingService(device="cpu")
        assert service._model is None

        assert service.model == mock_model
        assert service.model == mock_model
        mock_st.assert_called_once()

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_concurrent_first_use_loads_once(self, mock_st):
        """Test that threads racing on first use share one model load."""
        started = threading.Event()

        def slow_load(*args, **kwargs):
            started.wait(timeout=1)
            return Mock()

        mock_st.side_effect = slow_load
        service = EmbeddingService(device="cpu")

        threads = [threading.Thread(target=lambda: service.model) for _ in range(4)]
        for thread in threads:
            thread.start()
        started.set()
        for thread in threads:
            thread.join()

        mock_st.assert_called_once()

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_model_loading_failure(self, mock_st):
        """Test handling of model loading failure."""
        mock_st.side_effect = Exception("Model not found")

        service = EmbeddingService(device="cpu")

        with pytest.raises(EmbeddingServiceError, match="Could not load embedding model"):
            service.embed("text")

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_embed_returns_float_list(self, mock_st):
        """Test successful embedding returns a list of floats."""
        mock_model = Mock()
        mock_model.encode.return_value = np.array([0.1, 0.2, 0.3, 0.4], dtype=np.float32)
        mock_st.return_value = mock_model

        service = EmbeddingService(device="cpu")
        result = service.embed("test text")

        assert isinstance(result, list)
        assert result == pytest.approx([0.1, 0.2, 0.3, 0.4])
        mock_model.encode.assert_called_once_with(
            "test text",
            convert_to_numpy=True,
            show_progress_bar=False,
        )

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_embed_empty_input(self, mock_st):
        """Test embedding with empty text."""
        service = EmbeddingService(device="cpu")

        with pytest.raises(ValueError, match="Text cannot be empty"):
            service.embed("")

        with pytest.raises(ValueError, match="Text cannot be empty"):
            service.embed("   ")

        mock_st.assert_not_called()

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_embed_failure(self, mock_st):
        """Test that provider failures become EmbeddingServiceError."""
        mock_model = Mock()
        mock_model.encode.side_effect = Exception("CUDA out of memory")
        mock_st.return_value = mock_model

        service = EmbeddingService(device="cpu")

        with pytest.raises(EmbeddingServiceError, match="Embedding generation failed"):
            service.embed("test")

    @patch('study_assistant.rag.embedding_service.SentenceTransformer')
    def test_model_info(self, mock_st):
        """Test model info reporting."""
        mock_model = Mock()
        mock_model.get_sentence_embedding_dimension.return_value = 768
        mock_model.max_seq_length = 384
        mock_st.return_value = mock_model

        info = EmbeddingService(device="cpu").model_info()

        assert info["embedding_dim"] == 768
        assert info["max_seq_length"] == 384
        assert info["device"] == "cpu"
