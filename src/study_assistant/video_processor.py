"""
YouTube URL parsing and metadata access.

Metadata comes from yt-dlp; transcripts come from the injected
TranscriptProvider.
"""
import re
from typing import Optional

import yt_dlp
from loguru import logger

from .error_classifier import simplify_error
from .errors import ExtractionFailed
from .rag.types import PlaylistDescriptor, VideoDescriptor
from .transcript_provider import TranscriptProvider

VIDEO_ID_PATTERN = re.compile(r'^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*')
PLAYLIST_ID_PATTERN = re.compile(r'[?&]list=([^#&?]+)')
VIDEO_ID_LENGTH = 11

UNKNOWN_VIDEO_TITLE = 'Unknown Title'
UNKNOWN_PLAYLIST_TITLE = 'Unknown Playlist'


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the 11-character video ID from any YouTube URL format.

    Handles watch, youtu.be, embed/, v/ and &v= forms. Returns None when
    no well-formed ID is present.
    """
    if not url:
        return None
    match = VIDEO_ID_PATTERN.match(url.strip())
    if match and len(match.group(2)) == VIDEO_ID_LENGTH:
        return match.group(2)
    return None


def extract_playlist_id(url: str) -> Optional[str]:
    """Extract the ``list=`` parameter from a YouTube URL."""
    if not url:
        return None
    match = PLAYLIST_ID_PATTERN.search(url)
    return match.group(1) if match else None


def video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"


class YouTubeClient:
    """Video platform client: metadata via yt-dlp, transcripts via a provider."""

    def __init__(self, transcript_provider: TranscriptProvider, socket_timeout: int = 30):
        """
        Args:
            transcript_provider: Source of transcript text
            socket_timeout: yt-dlp network timeout in seconds
        """
        self.transcript_provider = transcript_provider
        self.ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'socket_timeout': socket_timeout,
        }

    def get_video_info(self, video_id: str) -> VideoDescriptor:
        """
        Fetch title, description and transcript for a video.

        A missing transcript yields an empty string.

        Raises:
            ExtractionFailed: If video metadata cannot be fetched
        """
        try:
            with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
                info = ydl.extract_info(video_url(video_id), download=False)
        except Exception as e:
            logger.error(f"Metadata fetch failed for {video_id}: {simplify_error(str(e))}")
            raise ExtractionFailed("Failed to fetch video info") from e

        if not info:
            raise ExtractionFailed("Failed to fetch video info")

        transcript = self.transcript_provider.fetch_transcript(video_id)

        return VideoDescriptor(
            video_id=video_id,
            title=info.get('title') or UNKNOWN_VIDEO_TITLE,
            description=info.get('description') or '',
            transcript=transcript,
        )

    def get_playlist(self, playlist_id: str) -> PlaylistDescriptor:
        """
        List a playlist's title and video IDs without resolving each video.

        Failures are logged and yield an empty video list.
        """
        opts = dict(self.ydl_opts, extract_flat='in_playlist')
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(playlist_url(playlist_id), download=False) or {}
        except Exception as e:
            logger.error(f"Playlist fetch failed for {playlist_id}: {simplify_error(str(e))}")
            return PlaylistDescriptor(playlist_id=playlist_id, title=UNKNOWN_PLAYLIST_TITLE)

        video_ids = [
            entry['id']
            for entry in (info.get('entries') or [])
            if entry and entry.get('id')
        ]
        logger.info(f"Playlist {playlist_id} lists {len(video_ids)} videos")

        return PlaylistDescriptor(
            playlist_id=playlist_id,
            title=info.get('title') or UNKNOWN_PLAYLIST_TITLE,
            video_ids=video_ids,
        )
