"""Unit tests for configuration module."""

from pathlib import Path

import pytest

from study_assistant.rag.config import RAGConfig, load_config_from_env


class TestRAGConfig:
    """Tests for RAGConfig dataclass."""

    def test_default_values(self):
        """Test that default configuration values are set correctly."""
        config = RAGConfig()

        assert config.model_name == "all-mpnet-base-v2"
        assert config.similarity_threshold == 0.5
        assert config.max_results == 5
        assert config.chunk_size == 1000
        assert config.playlist_video_limit == 20
        assert config.generation_max_attempts == 3
        assert config.generation_base_delay == 2.0
        assert config.transcript_languages == ("en",)

    def test_string_paths_converted(self):
        """Test that string paths become Path objects."""
        config = RAGConfig(vector_store_dir="/tmp/chroma", upload_dir="up")

        assert config.vector_store_dir == Path("/tmp/chroma")
        assert config.upload_dir == Path("up")

    def test_language_string_split(self):
        """Test comma separated transcript languages."""
        assert RAGConfig(transcript_languages="en, de").transcript_languages == ("en", "de")

    def test_zero_attempts_rejected(self):
        """Test that at least one generation attempt is required."""
        with pytest.raises(ValueError):
            RAGConfig(generation_max_attempts=0)


class TestLoadConfigFromEnv:
    """Tests for environment loading."""

    def test_defaults_without_env(self, monkeypatch):
        """Test defaults when no variables are set."""
        for name in ("RAG_SIMILARITY_THRESHOLD", "RAG_CHUNK_SIZE", "ANTHROPIC_MODEL",
                     "ANTHROPIC_MAX_ATTEMPTS"):
            monkeypatch.delenv(name, raising=False)

        config = load_config_from_env(dotenv=False)

        assert config.similarity_threshold == 0.5
        assert config.chunk_size == 1000
        assert config.generation_max_attempts == 3

    def test_env_overrides(self, monkeypatch, tmp_path):
        """Test loading values from environment variables."""
        monkeypatch.setenv("RAG_SIMILARITY_THRESHOLD", "0.7")
        monkeypatch.setenv("RAG_MAX_RESULTS", "8")
        monkeypatch.setenv("RAG_CHUNK_SIZE", "500")
        monkeypatch.setenv("STUDY_PLAYLIST_VIDEO_LIMIT", "5")
        monkeypatch.setenv("ANTHROPIC_MAX_ATTEMPTS", "4")
        monkeypatch.setenv("ANTHROPIC_MODEL", "claude-test")
        monkeypatch.setenv("RAG_VECTOR_STORE_DIR", str(tmp_path / "chroma"))

        config = load_config_from_env(dotenv=False)

        assert config.similarity_threshold == 0.7
        assert config.max_results == 8
        assert config.chunk_size == 500
        assert config.playlist_video_limit == 5
        assert config.generation_max_attempts == 4
        assert config.generation_model == "claude-test"
        assert config.vector_store_dir == tmp_path / "chroma"

    def test_invalid_numbers_fall_back(self, monkeypatch):
        """Test that unparsable numbers keep defaults."""
        monkeypatch.setenv("RAG_SIMILARITY_THRESHOLD", "high")
        monkeypatch.setenv("RAG_MAX_RESULTS", "many")

        config = load_config_from_env(dotenv=False)

        assert config.similarity_threshold == 0.5
        assert config.max_results == 5

    def test_only_documented_variables_read(self, monkeypatch, tmp_path):
        """Test that unrelated model and store variables are ignored."""
        monkeypatch.delenv("ANTHROPIC_MODEL", raising=False)
        monkeypatch.delenv("RAG_VECTOR_STORE_DIR", raising=False)
        monkeypatch.setenv("GENERATE_NOTES_MODEL", "notes-model")
        monkeypatch.setenv("CHROMA_PERSIST_DIR", str(tmp_path / "other"))

        config = load_config_from_env(dotenv=False)

        assert config.generation_model == RAGConfig().generation_model
        assert config.vector_store_dir == RAGConfig().vector_store_dir
