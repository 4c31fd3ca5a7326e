"""
Tests for source extraction across PDF, video, playlist and link sources.
"""
from unittest.mock import MagicMock, patch

import pytest

from study_assistant.errors import EmptySource, ExtractionFailed, InvalidSource
from study_assistant.pdf_parser import clean_page_text, parse_pdf_bytes
from study_assistant.rag.types import ResourceKind
from study_assistant.source_extractor import (
    LinkSource,
    PdfSource,
    PlaylistSource,
    SourceExtractor,
    VideoSource,
    youtube_source,
)


def mock_pdf(pages, title=""):
    """MagicMock standing in for a fitz Document."""
    doc = MagicMock()
    doc.__len__.return_value = len(pages)
    page_mocks = [MagicMock(**{'get_text.return_value': text}) for text in pages]
    doc.__getitem__.side_effect = lambda i: page_mocks[i]
    doc.metadata = {'title': title}
    return doc


class TestPdfParser:
    """Tests for PDF byte parsing."""

    @pytest.mark.unit
    def test_pages_joined_with_blank_line(self):
        """Test that page text is cleaned and joined."""
        doc = mock_pdf(["Page one.  Text\n\n\n\n12\n", "Page two."], title="Lecture 1")
        with patch('study_assistant.pdf_parser.fitz.open', return_value=doc) as mock_open:
            parsed = parse_pdf_bytes(b"%PDF-1.7 data")

        assert parsed.text == "Page one. Text\n\nPage two."
        assert parsed.title == "Lecture 1"
        assert parsed.total_pages == 2
        mock_open.assert_called_once_with(stream=b"%PDF-1.7 data", filetype="pdf")
        doc.close.assert_called_once()

    @pytest.mark.unit
    def test_empty_buffer_fails(self):
        """Test that an empty upload is rejected."""
        with pytest.raises(ExtractionFailed, match="Failed to parse PDF"):
            parse_pdf_bytes(b"")

    @pytest.mark.unit
    def test_corrupt_pdf_fails(self):
        """Test that parser errors become ExtractionFailed."""
        with patch('study_assistant.pdf_parser.fitz.open', side_effect=RuntimeError("cannot open broken document")):
            with pytest.raises(ExtractionFailed, match="Failed to parse PDF"):
                parse_pdf_bytes(b"not a pdf")

    @pytest.mark.unit
    def test_clean_page_text_drops_page_numbers(self):
        """Test page number lines are removed."""
        assert clean_page_text("Body text.\n7\nMore  text.") == "Body text.\nMore text."


class TestSourceExtractor:
    """Tests for descriptor dispatch."""

    @pytest.mark.unit
    def test_youtube_source_classification(self, sample_video_urls):
        """Test that list= makes a playlist."""
        assert isinstance(youtube_source(sample_video_urls["playlist"]), PlaylistSource)
        assert isinstance(youtube_source(sample_video_urls["standard"]), VideoSource)

    @pytest.mark.unit
    def test_video_text_composition(self, fake_youtube, video_factory, sample_video_id, sample_video_urls):
        """Test title, description and transcript layout."""
        fake_youtube.videos[sample_video_id] = video_factory(
            sample_video_id, title="Rick", description="Classic", transcript="never gonna"
        )

        extracted = SourceExtractor(fake_youtube).extract(VideoSource(sample_video_urls["short"]))

        assert extracted.kind == ResourceKind.YOUTUBE_VIDEO
        assert extracted.title == "Rick"
        assert extracted.raw_text == "Rick\n\nClassic\n\nTranscript:\nnever gonna"
        assert extracted.url == f"https://www.youtube.com/watch?v={sample_video_id}"

    @pytest.mark.unit
    def test_video_without_transcript(self, fake_youtube, video_factory, sample_video_id, sample_video_urls):
        """Test that a missing transcript is not an error."""
        fake_youtube.videos[sample_video_id] = video_factory(sample_video_id, title="T", description="D")

        extracted = SourceExtractor(fake_youtube).extract(VideoSource(sample_video_urls["standard"]))

        assert extracted.raw_text == "T\n\nD\n\nTranscript:\n"

    @pytest.mark.unit
    def test_invalid_video_url(self, fake_youtube, sample_video_urls):
        """Test that URLs without an ID are rejected."""
        with pytest.raises(InvalidSource, match="Invalid YouTube URL"):
            SourceExtractor(fake_youtube).extract(VideoSource(sample_video_urls["invalid"]))

    @pytest.mark.unit
    def test_playlist_resolution(self, fake_youtube):
        """Test playlist title, IDs and placeholder text."""
        fake_youtube.playlists["PL1"] = ("Physics", ["aaaaaaaaaaa", "bbbbbbbbbbb"])

        extracted = SourceExtractor(fake_youtube).extract(
            PlaylistSource("https://www.youtube.com/playlist?list=PL1")
        )

        assert extracted.kind == ResourceKind.YOUTUBE_PLAYLIST
        assert extracted.title == "Physics"
        assert extracted.video_ids == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert extracted.raw_text == "Playlist: Physics\nContains 2 videos."
        assert extracted.url == "https://www.youtube.com/playlist?list=PL1"
        assert fake_youtube.video_calls == []

    @pytest.mark.unit
    def test_empty_playlist(self, fake_youtube):
        """Test that an empty playlist is EmptySource."""
        with pytest.raises(EmptySource, match="No videos found in playlist"):
            SourceExtractor(fake_youtube).extract(
                PlaylistSource("https://www.youtube.com/playlist?list=PLempty")
            )

    @pytest.mark.unit
    def test_link_uses_pasted_text(self, fake_youtube):
        """Test that link text comes from the pasted content."""
        extracted = SourceExtractor(fake_youtube).extract(
            LinkSource("https://example.com/article", "Pasted article text.")
        )

        assert extracted.kind == ResourceKind.LINK
        assert extracted.raw_text == "Pasted article text."
        assert extracted.url == "https://example.com/article"

    @pytest.mark.unit
    def test_pdf_title_falls_back_to_filename(self, fake_youtube):
        """Test PDF title from filename when metadata has none."""
        with patch('study_assistant.pdf_parser.fitz.open', return_value=mock_pdf(["Body."])):
            extracted = SourceExtractor(fake_youtube).extract(PdfSource(b"%PDF", "week3_notes.pdf"))

        assert extracted.kind == ResourceKind.PDF
        assert extracted.title == "week3_notes"
        assert extracted.raw_text == "Body."

    @pytest.mark.unit
    def test_unknown_descriptor(self, fake_youtube):
        """Test that unsupported descriptors are rejected."""
        with pytest.raises(InvalidSource):
            SourceExtractor(fake_youtube).extract(object())
