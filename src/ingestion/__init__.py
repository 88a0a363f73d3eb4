"""Resume ingestion: import, structural parsing and heuristic segmentation."""

from src.ingestion.importer import (
    DocumentImporter,
    ExtractionError,
    UnsupportedFormatError,
)
from src.ingestion.latex_parser import LatexParser, parse_latex
from src.ingestion.metadata import extract_metadata
from src.ingestion.segmenter import TextSegmenter, escape_latex, segment_text

__all__ = [
    "DocumentImporter",
    "ExtractionError",
    "LatexParser",
    "TextSegmenter",
    "UnsupportedFormatError",
    "escape_latex",
    "extract_metadata",
    "parse_latex",
    "segment_text",
]
