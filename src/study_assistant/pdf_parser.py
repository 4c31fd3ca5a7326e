"""
PDF Parser - extracts text from uploaded PDF bytes.

Uses pymupdf (fitz). Images and diagrams are not extracted, only text.
Pages are joined with a blank line so page boundaries survive as sentence
breaks for the chunker.
"""
import re
from dataclasses import dataclass
from typing import Optional

import fitz  # pymupdf - the library is called 'fitz' historically
from loguru import logger

from .error_classifier import simplify_error
from .errors import ExtractionFailed


@dataclass
class ParsedPdf:
    """
    Text content of a parsed PDF.

    Attributes:
        title: Title from the document metadata, if any
        total_pages: Number of pages in the document
        text: All page text joined by blank lines
    """
    title: Optional[str]
    total_pages: int
    text: str


def clean_page_text(text: str) -> str:
    """
    Clean extracted page text.

    Collapses runs of blank lines and spaces and drops lines that are just a
    short number (likely page numbers).
    """
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = re.sub(r' {2,}', ' ', text)
    lines = [
        line for line in text.split('\n')
        if not (line.strip().isdigit() and len(line.strip()) < 4)
    ]
    return '\n'.join(lines).strip()


def parse_pdf_bytes(data: bytes) -> ParsedPdf:
    """
    Parse a PDF byte buffer.

    Args:
        data: Raw PDF bytes

    Returns:
        ParsedPdf with the document text

    Raises:
        ExtractionFailed: If the buffer is empty or cannot be parsed
    """
    if not data:
        raise ExtractionFailed("Failed to parse PDF")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        logger.error(f"Failed to open PDF: {simplify_error(str(e))}")
        raise ExtractionFailed("Failed to parse PDF") from e

    try:
        total_pages = len(doc)
        pages = []
        for page_num in range(total_pages):
            cleaned = clean_page_text(doc[page_num].get_text())
            if cleaned:
                pages.append(cleaned)
        metadata = doc.metadata or {}
    except Exception as e:
        logger.error(f"Failed to read PDF pages: {simplify_error(str(e))}")
        raise ExtractionFailed("Failed to parse PDF") from e
    finally:
        doc.close()

    title = (metadata.get('title') or '').strip() or None
    logger.debug(f"Parsed PDF: {total_pages} pages, {len(pages)} with text")

    return ParsedPdf(title=title, total_pages=total_pages, text='\n\n'.join(pages))
