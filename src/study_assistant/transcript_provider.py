"""
Transcript fetching with a primary method and a yt-dlp fallback.

Transcripts are optional content: a video without one is still ingested
with its title and description, so fetching never raises.
"""
import re
import threading
from typing import Optional, Protocol, Sequence

from loguru import logger
from youtube_transcript_api import YouTubeTranscriptApi

from .error_classifier import simplify_error
from .ytdlp_fallback import YtDlpFallback


class TranscriptProvider(Protocol):
    """
    Protocol (structural typing) for anything that can return a transcript.
    """

    def fetch_transcript(self, video_id: str) -> str:
        """Transcript text for a video, or "" when unavailable."""
        ...


def clean_transcript(text: str) -> str:
    """Collapse whitespace and drop [Music]/[Applause] markers."""
    text = text.replace('[Music]', ' ').replace('[Applause]', ' ')
    return re.sub(r'\s+', ' ', text).strip()


class TranscriptFetcher:
    """
    Fetches transcripts via youtube-transcript-api, then yt-dlp subtitles.
    """

    def __init__(
        self,
        languages: Sequence[str] = ('en',),
        api: Optional[YouTubeTranscriptApi] = None,
        fallback: Optional[YtDlpFallback] = None,
    ):
        """
        Args:
            languages: Transcript languages in order of preference
            api: Transcript API client (default: a new YouTubeTranscriptApi)
            fallback: Secondary fetcher (default: YtDlpFallback)
        """
        self.languages = list(languages)
        self.api = api if api is not None else YouTubeTranscriptApi()
        self.fallback = fallback if fallback is not None else YtDlpFallback()
        self.stats = {
            'api_success': 0,
            'ytdlp_success': 0,
            'failures': 0,
        }
        self._stats_lock = threading.Lock()

    def _record(self, outcome: str) -> None:
        with self._stats_lock:
            self.stats[outcome] += 1

    def _fetch_primary(self, video_id: str) -> str:
        fetched = self.api.fetch(video_id, languages=self.languages)
        # FetchedTranscriptSnippet objects have a .text attribute
        return ' '.join(snippet.text for snippet in fetched)

    def fetch_transcript(self, video_id: str) -> str:
        """
        Get transcript text for a video.

        Args:
            video_id: YouTube video ID

        Returns:
            Cleaned transcript, or "" when both methods fail
        """
        try:
            transcript = clean_transcript(self._fetch_primary(video_id))
            if transcript:
                self._record('api_success')
                logger.debug(f"Transcript for {video_id} via API ({len(transcript)} chars)")
                return transcript
            logger.info(f"Transcript API returned no text for {video_id}")
        except Exception as e:
            logger.warning(f"Transcript API failed for {video_id}: {simplify_error(str(e))}")

        try:
            transcript = clean_transcript(
                self.fallback.fetch_transcript(video_id, self.languages) or ''
            )
        except Exception as e:
            logger.warning(f"yt-dlp fallback failed for {video_id}: {simplify_error(str(e))}")
            transcript = ''

        if transcript:
            self._record('ytdlp_success')
            logger.debug(f"Transcript for {video_id} via yt-dlp ({len(transcript)} chars)")
            return transcript

        self._record('failures')
        logger.warning(f"No transcript available for {video_id}")
        return ''
