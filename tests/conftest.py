"""
Pytest configuration and fixtures for study assistant tests.
"""
import hashlib
import sys
from pathlib import Path
from unittest.mock import Mock

import numpy as np
import pytest

# Add src to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from study_assistant.errors import EmbeddingServiceError, ExtractionFailed  # noqa: E402
from study_assistant.rag.types import (  # noqa: E402
    PlaylistDescriptor,
    RetrievedChunk,
    VideoDescriptor,
)


class FakeEmbedder:
    """Deterministic embedder: each text maps to a fixed unit vector."""

    def __init__(self, dim: int = 16, fail_on=None):
        self.dim = dim
        self.fail_on = fail_on or set()
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingServiceError("Embedding generation failed: provider down")
        seed = int(hashlib.md5(text.encode('utf-8')).hexdigest()[:8], 16)
        vector = np.random.default_rng(seed).normal(size=self.dim)
        return (vector / np.linalg.norm(vector)).tolist()


class FakeVectorStore:
    """In-memory chunk store with cosine similarity search."""

    def __init__(self, insert_result: bool = True):
        self.rows = []
        self.insert_calls = []
        self.insert_result = insert_result

    def insert_chunks(self, resource_id, subject_id, rows, start_index=0):
        self.insert_calls.append((resource_id, subject_id, list(rows)))
        if not self.insert_result:
            return False
        for offset, (content, vector) in enumerate(rows):
            self.rows.append({
                'resource_id': resource_id,
                'subject_id': subject_id,
                'chunk_index': start_index + offset,
                'content': content,
                'vector': np.asarray(vector, dtype=float),
            })
        return True

    def search(self, subject_id, query_vector, threshold=0.5, top_k=5):
        query = np.asarray(query_vector, dtype=float)
        results = []
        for row in self.rows:
            if row['subject_id'] != subject_id:
                continue
            vector = row['vector']
            similarity = float(np.dot(query, vector) / (np.linalg.norm(query) * np.linalg.norm(vector)))
            if similarity >= threshold:
                results.append(RetrievedChunk(
                    content=row['content'],
                    similarity=similarity,
                    resource_id=row['resource_id'],
                ))
        results.sort(key=lambda chunk: chunk.similarity, reverse=True)
        return results[:top_k]

    def count_for_resource(self, resource_id):
        return sum(1 for row in self.rows if row['resource_id'] == resource_id)

    def delete_by_resource_id(self, resource_id):
        before = len(self.rows)
        self.rows = [row for row in self.rows if row['resource_id'] != resource_id]
        return before - len(self.rows)

    def contents_for(self, resource_id):
        return [row['content'] for row in self.rows if row['resource_id'] == resource_id]


class FakeYouTubeClient:
    """Video platform client backed by dictionaries."""

    def __init__(self, videos=None, playlists=None, failing=None):
        self.videos = videos or {}
        self.playlists = playlists or {}
        self.failing = failing or {}
        self.video_calls = []

    def get_video_info(self, video_id):
        self.video_calls.append(video_id)
        if video_id in self.failing:
            raise self.failing[video_id]
        if video_id not in self.videos:
            raise ExtractionFailed("Failed to fetch video info")
        return self.videos[video_id]

    def get_playlist(self, playlist_id):
        title, video_ids = self.playlists.get(playlist_id, ('Unknown Playlist', []))
        return PlaylistDescriptor(playlist_id=playlist_id, title=title, video_ids=list(video_ids))


def make_video(video_id, title=None, transcript="", description=""):
    return VideoDescriptor(
        video_id=video_id,
        title=title or f"Video {video_id}",
        description=description,
        transcript=transcript,
    )


@pytest.fixture
def sample_video_urls():
    """Sample YouTube URLs for testing."""
    return {
        "standard": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "short": "https://youtu.be/dQw4w9WgXcQ",
        "playlist": "https://youtu.be/dQw4w9WgXcQ?list=PLSomePlaylist",
        "embed": "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "invalid": "https://example.com/not-a-video"
    }


@pytest.fixture
def sample_video_id():
    """Sample video ID for testing."""
    return "dQw4w9WgXcQ"


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_store():
    return FakeVectorStore()


@pytest.fixture
def fake_youtube():
    return FakeYouTubeClient()


@pytest.fixture
def video_factory():
    return make_video


@pytest.fixture
def mock_claude_client():
    """Mock Anthropic client returning a fixed answer."""
    mock_client = Mock()
    mock_response = Mock()
    mock_response.content = [Mock(text="Entropy measures disorder.")]
    mock_client.messages.create.return_value = mock_response
    return mock_client


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("CLAUDE_API_KEY", "test-api-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-api-key")
