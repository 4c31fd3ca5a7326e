"""
YT-DLP fallback for transcript fetching.

Used when the transcript API cannot return captions for a video.
"""
import re
from typing import Dict, List, Optional, Sequence

import requests
import yt_dlp
from loguru import logger

from .error_classifier import simplify_error


class YtDlpFallback:
    """Fetch YouTube transcripts from yt-dlp subtitle tracks."""

    def __init__(self, socket_timeout: int = 30):
        self.socket_timeout = socket_timeout
        self.ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'writesubtitles': False,  # Don't write to disk
            'writeautomaticsub': False,  # Don't write to disk
            'socket_timeout': socket_timeout,
        }

    def fetch_transcript(
        self,
        video_id: str,
        languages: Sequence[str] = ('en',)
    ) -> Optional[str]:
        """
        Fetch transcript text using yt-dlp.

        Manual subtitles are preferred over automatic captions for each
        requested language.

        Args:
            video_id: YouTube video ID
            languages: Language codes in order of preference

        Returns:
            Transcript text, or None if no subtitles could be read
        """
        try:
            video_url = f"https://www.youtube.com/watch?v={video_id}"

            with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
                info = ydl.extract_info(video_url, download=False)

            transcript_text = None
            subtitles = info.get('subtitles') or {}
            auto_captions = info.get('automatic_captions') or {}
            for lang in languages:
                for tracks in (subtitles.get(lang), auto_captions.get(lang)):
                    if tracks:
                        transcript_text = self._download_and_parse_subtitle(tracks)
                        if transcript_text:
                            break
                if transcript_text:
                    break

            if not transcript_text:
                logger.info(f"No subtitles found for requested languages ({video_id})")
                return None

            return transcript_text

        except Exception as e:
            logger.error(f"YT-DLP fallback failed for {video_id}: {simplify_error(str(e))}")
            return None

    def _download_and_parse_subtitle(self, subtitle_formats: List[Dict]) -> Optional[str]:
        """
        Download and parse the first readable VTT track.

        Direct VTT URLs are tried before HLS (M3U) playlists.
        """
        direct_vtt = []
        m3u_vtt = []

        for fmt in subtitle_formats:
            if fmt.get('ext') == 'vtt':
                url = fmt.get('url', '')
                if 'manifest.googlevideo.com' in url or 'hls_timedtext_playlist' in url:
                    m3u_vtt.append(fmt)
                else:
                    direct_vtt.append(fmt)

        for fmt in direct_vtt + m3u_vtt:
            subtitle_url = fmt.get('url')
            if not subtitle_url:
                continue
            try:
                response = requests.get(subtitle_url, timeout=self.socket_timeout)
                if response.status_code != 200:
                    continue

                content = response.text
                if content.startswith('#EXTM3U'):
                    text_parts = self._parse_m3u_playlist(content)
                else:
                    text_parts = self.parse_vtt_content(content)

                if text_parts:
                    return ' '.join(text_parts)
            except requests.RequestException as e:
                logger.error(f"  Failed to download subtitle track: {e}")
                continue

        return None

    @staticmethod
    def parse_vtt_content(vtt_content: str) -> List[str]:
        """
        Extract caption text lines from VTT content.

        Skips the header, cue timings, cue identifiers and NOTE/STYLE blocks;
        inline tags such as ``<c>`` and timestamps are stripped.
        """
        text_parts = []
        previous = None
        for line in vtt_content.split('\n'):
            line = line.strip()
            if not line or line.startswith(('WEBVTT', 'NOTE', 'STYLE', 'Kind:', 'Language:')):
                continue
            if '-->' in line or re.match(r'^\d+$', line):
                continue
            line = re.sub(r'<[^>]+>', '', line).strip()
            # Auto captions repeat the previous cue line
            if line and line != previous:
                text_parts.append(line)
                previous = line
        return text_parts

    def _parse_m3u_playlist(self, m3u_content: str) -> List[str]:
        """Download every VTT segment of an M3U playlist and extract text."""
        text_parts = []

        for line in m3u_content.split('\n'):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            try:
                response = requests.get(line, timeout=self.socket_timeout)
                if response.status_code == 200:
                    text_parts.extend(self.parse_vtt_content(response.text))
            except requests.RequestException as e:
                logger.error(f"  Failed to download M3U segment {line[:50]}...: {e}")
                continue

        return text_parts
