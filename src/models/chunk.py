"""Chunk data model."""

from typing import Literal

from pydantic import BaseModel, Field

ChunkType = Literal["section", "subsection", "item"]


class ChunkMetadata(BaseModel):
    """Shallow hints pulled from a chunk's source text.

    Every field is optional; ``None`` means the value was not detected.
    """

    company: str | None = None
    position: str | None = None
    dates: str | None = None
    location: str | None = None


class SourceSpan(BaseModel):
    """Where a parser captured a child inside its section's source text.

    ``start`` and ``end`` are offsets into the section's ``source_text``.
    ``index`` is the capture number within the section and ``kind`` the
    construct that matched (``"subsection"``, ``"item"`` or ``"cventry"``).
    """

    start: int
    end: int
    index: int
    kind: str


class Chunk(BaseModel):
    """A single, independently orderable unit of a resume."""

    id: str
    type: ChunkType
    title: str
    content: str = ""
    raw_source_text: str
    # Span as first captured by a parser; None for hand-made chunks.
    source_text: str | None = None
    source_span: SourceSpan | None = None
    # Sections only: every child captured in source_text, kept after deletes.
    child_spans: list[SourceSpan] = Field(default_factory=list)
    order: int = 0
    is_active: bool = True
    parent_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    metadata: ChunkMetadata | None = None
