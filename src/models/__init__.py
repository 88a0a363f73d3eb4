"""Data models for the Resume Chunker application."""

from src.models.chunk import Chunk, ChunkMetadata, ChunkType, SourceSpan
from src.models.document import Document, sort_by_order

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "ChunkType",
    "Document",
    "SourceSpan",
    "sort_by_order",
]
