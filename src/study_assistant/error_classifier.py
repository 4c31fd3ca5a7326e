"""
Error message classifier and simplifier for provider failures.

Converts verbose YouTube, yt-dlp and Anthropic error messages into concise
summaries for logs, and recognises rate-limit conditions for retry logic.
"""
import re
from typing import Optional

import anthropic


class ErrorClassifier:
    """
    Classify and simplify provider errors.

    Takes verbose error messages and returns concise, actionable summaries.
    """

    # Error patterns and their simplified messages
    PATTERNS = [
        # IP blocks and rate limits
        (
            r"blocking requests from your IP|IP has been blocked",
            "YouTube blocked this IP"
        ),
        (
            r"\b429\b|Too many requests|rate.?limit",
            "Rate limit exceeded"
        ),
        (
            r"overloaded",
            "Model provider overloaded"
        ),

        # Transcript availability
        (
            r"Subtitles are disabled",
            "Video has no subtitles/transcripts"
        ),
        (
            r"No transcripts? were found|transcript.*not available",
            "No transcripts available for this video"
        ),
        (
            r"No subtitles found for requested languages",
            "No English transcript"
        ),

        # Access
        (
            r"private video",
            "Video is private"
        ),
        (
            r"Video unavailable|This video is unavailable",
            "Video unavailable (deleted, private, or region-locked)"
        ),
        (
            r"members-only",
            "Members-only content"
        ),

        # Network/Connection
        (
            r"Connection.*timed out|Timeout",
            "Connection timeout"
        ),
        (
            r"Connection.*refused|Connection.*reset",
            "Connection refused"
        ),
        (
            r"Failed to establish.*connection",
            "Network connection failed"
        ),

        # Format issues
        (
            r"Unable to extract|Could not extract",
            "Failed to extract data"
        ),
        (
            r"cannot open broken document|Failed to open stream|not a PDF",
            "Unreadable PDF document"
        ),
    ]

    @classmethod
    def classify(cls, error_message: str) -> str:
        """
        Classify an error message and return a concise summary.

        Args:
            error_message: Raw error message (can be multi-line)

        Returns:
            Concise error summary
        """
        if not error_message:
            return "Unknown error"

        normalized = " ".join(error_message.lower().split())

        for pattern, summary in cls.PATTERNS:
            if re.search(pattern, normalized, re.IGNORECASE):
                return summary

        # If no pattern matches, extract first meaningful line
        lines = [line.strip() for line in error_message.split('\n') if line.strip()]

        skip_phrases = [
            "this is most likely caused by",
            "ways to work around",
            "if you are sure",
            "please create an issue",
        ]

        for line in lines:
            if len(line) < 200 and not any(phrase in line.lower() for phrase in skip_phrases):
                line = re.sub(r'https?://[^\s]+', '', line).strip()
                if line and len(line) > 10:
                    return line[:150]

        first_sentence = error_message.split('.')[0].strip()
        if first_sentence and len(first_sentence) < 200:
            return first_sentence

        return "Request failed"


def simplify_error(error_message: str) -> str:
    """Quick helper to simplify an error message."""
    return ErrorClassifier.classify(error_message)


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, 'status_code', None)
    if status is None:
        status = getattr(exc, 'status', None)
    return status if isinstance(status, int) else None


def is_rate_limit_error(exc: BaseException) -> bool:
    """
    Check whether an exception signals rate limiting.

    Recognises the Anthropic SDK's RateLimitError, any exception exposing an
    HTTP 429 status, and messages that mention 429 or "too many requests".
    """
    if isinstance(exc, anthropic.RateLimitError):
        return True

    if _status_code(exc) == 429:
        return True

    message = str(exc).lower()
    return bool(re.search(r'\b429\b', message)) or 'too many requests' in message
