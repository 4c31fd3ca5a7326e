"""
Source extraction: turns a source descriptor into a title and raw text.

Descriptors form a closed set (PDF bytes, a single video, a playlist, a
link with optional pasted text) dispatched by one ``extract`` call.
Playlists resolve to a title and video IDs; their videos are fetched one at
a time by the ingestion pipeline.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from .errors import EmptySource, InvalidSource
from .pdf_parser import parse_pdf_bytes
from .rag.types import ResourceKind, VideoDescriptor
from .video_processor import (
    YouTubeClient,
    extract_playlist_id,
    extract_video_id,
    playlist_url,
    video_url,
)


@dataclass
class PdfSource:
    data: bytes
    filename: str = "document.pdf"


@dataclass
class VideoSource:
    url: str


@dataclass
class PlaylistSource:
    url: str


@dataclass
class LinkSource:
    url: str
    text: str = ""


SourceDescriptor = Union[PdfSource, VideoSource, PlaylistSource, LinkSource]


@dataclass
class ExtractedSource:
    """
    Output of extraction.

    For playlists ``raw_text`` is the placeholder summary and ``video_ids``
    lists every video in playlist order.
    """
    kind: ResourceKind
    title: str
    raw_text: str
    url: Optional[str] = None
    video_ids: List[str] = field(default_factory=list)


def youtube_source(url: str) -> SourceDescriptor:
    """Classify a YouTube URL: a ``list=`` parameter makes it a playlist."""
    if extract_playlist_id(url):
        return PlaylistSource(url)
    return VideoSource(url)


def compose_video_text(video: VideoDescriptor) -> str:
    """Raw text stored for a single video."""
    return f"{video.title}\n\n{video.description}\n\nTranscript:\n{video.transcript}"


def playlist_summary(title: str, video_count: int) -> str:
    return f"Playlist: {title}\nContains {video_count} videos."


class SourceExtractor:
    """Extracts raw text from every supported source kind."""

    def __init__(self, youtube: YouTubeClient):
        self.youtube = youtube

    def extract(self, descriptor: SourceDescriptor) -> ExtractedSource:
        """
        Extract a title and raw text from a source.

        Raises:
            InvalidSource: Malformed descriptor (e.g. no video ID in URL)
            ExtractionFailed: Content could not be read
            EmptySource: Playlist has no videos
        """
        if isinstance(descriptor, PdfSource):
            return self._extract_pdf(descriptor)
        if isinstance(descriptor, VideoSource):
            return self._extract_video(descriptor)
        if isinstance(descriptor, PlaylistSource):
            return self._extract_playlist(descriptor)
        if isinstance(descriptor, LinkSource):
            return self._extract_link(descriptor)
        raise InvalidSource(f"Unsupported source: {type(descriptor).__name__}")

    def _extract_pdf(self, source: PdfSource) -> ExtractedSource:
        parsed = parse_pdf_bytes(source.data)
        title = parsed.title or Path(source.filename).stem or "Untitled PDF"
        logger.info(f"Extracted {len(parsed.text)} chars from PDF '{title}' ({parsed.total_pages} pages)")
        return ExtractedSource(kind=ResourceKind.PDF, title=title, raw_text=parsed.text)

    def _extract_video(self, source: VideoSource) -> ExtractedSource:
        video_id = extract_video_id(source.url)
        if not video_id:
            raise InvalidSource("Invalid YouTube URL")

        video = self.fetch_video(video_id)
        return ExtractedSource(
            kind=ResourceKind.YOUTUBE_VIDEO,
            title=video.title,
            raw_text=compose_video_text(video),
            url=video_url(video_id),
        )

    def _extract_playlist(self, source: PlaylistSource) -> ExtractedSource:
        playlist_id = extract_playlist_id(source.url)
        if not playlist_id:
            raise InvalidSource("Invalid YouTube URL")

        playlist = self.youtube.get_playlist(playlist_id)
        if not playlist.video_ids:
            raise EmptySource("No videos found in playlist")

        return ExtractedSource(
            kind=ResourceKind.YOUTUBE_PLAYLIST,
            title=playlist.title,
            raw_text=playlist_summary(playlist.title, len(playlist.video_ids)),
            url=playlist_url(playlist_id),
            video_ids=list(playlist.video_ids),
        )

    def _extract_link(self, source: LinkSource) -> ExtractedSource:
        return ExtractedSource(
            kind=ResourceKind.LINK,
            title=source.url,
            raw_text=source.text or "",
            url=source.url,
        )

    def fetch_video(self, video_id: str) -> VideoDescriptor:
        """Metadata and transcript for one video (used per playlist entry)."""
        video = self.youtube.get_video_info(video_id)
        if not video.transcript:
            logger.info(f"Video {video_id} has no transcript, using title and description only")
        return video
