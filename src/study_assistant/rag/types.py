"""
Common data types shared by the ingestion and chat pipelines.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class ResourceKind(str, Enum):
    """Kinds of study material a subject can hold."""

    PDF = "pdf"
    LINK = "link"
    YOUTUBE_VIDEO = "youtube_video"
    YOUTUBE_PLAYLIST = "youtube_playlist"


class ChatStage(str, Enum):
    """Stages a chat request moves through."""

    EMBEDDING = "embedding"
    RETRIEVING = "retrieving"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Resource:
    """A unit of study material attached to exactly one subject."""

    id: str
    subject_id: str
    title: str
    kind: ResourceKind
    url: Optional[str] = None
    content_summary: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON persistence."""
        return {
            'id': self.id,
            'subject_id': self.subject_id,
            'title': self.title,
            'kind': self.kind.value,
            'url': self.url,
            'content_summary': self.content_summary,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resource":
        return cls(
            id=data['id'],
            subject_id=data['subject_id'],
            title=data['title'],
            kind=ResourceKind(data['kind']),
            url=data.get('url'),
            content_summary=data.get('content_summary', ''),
            created_at=data.get('created_at') or utc_now_iso(),
        )


@dataclass
class RetrievedChunk:
    """A stored chunk returned by similarity search."""

    content: str
    similarity: float
    resource_id: Optional[str] = None
    chunk_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'content': self.content, 'similarity': self.similarity}


@dataclass
class ChatAnswer:
    """Result of one chat exchange. Never persisted."""

    query: str
    answer: str
    sources: List[RetrievedChunk] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        """Convert to the chat response shape."""
        return {
            'answer': self.answer,
            'sources': [chunk.to_dict() for chunk in self.sources],
        }


@dataclass
class VideoDescriptor:
    """Metadata and transcript of a single video."""

    video_id: str
    title: str
    description: str = ""
    transcript: str = ""


@dataclass
class PlaylistDescriptor:
    """A playlist's title and ordered video ids."""

    playlist_id: str
    title: str
    video_ids: List[str] = field(default_factory=list)


@dataclass
class VideoOutcome:
    """Per-video result of playlist ingestion."""

    video_id: str
    status: str  # 'ingested' or 'skipped'
    chunks: int = 0
    error: Optional[str] = None

    @property
    def ingested(self) -> bool:
        return self.status == 'ingested'


@dataclass
class IngestionResult:
    """Result of ingesting one resource."""

    resource: Resource
    chunks_stored: int = 0
    video_outcomes: List[VideoOutcome] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and the boundary."""
        return {
            'resource': self.resource.to_dict(),
            'chunks_stored': self.chunks_stored,
            'video_outcomes': [
                {
                    'video_id': outcome.video_id,
                    'status': outcome.status,
                    'chunks': outcome.chunks,
                    'error': outcome.error,
                }
                for outcome in self.video_outcomes
            ],
        }
