"""Study assistant package exports."""

from .answer_synthesizer import AnswerSynthesizer
from .app_interface import StudyAssistant
from .ingestion_pipeline import IngestionPipeline
from .source_extractor import LinkSource, PdfSource, PlaylistSource, SourceExtractor, VideoSource

__all__ = [
    "__version__",
    "AnswerSynthesizer",
    "IngestionPipeline",
    "LinkSource",
    "PdfSource",
    "PlaylistSource",
    "SourceExtractor",
    "StudyAssistant",
    "VideoSource",
]

__version__ = "0.1.0"
