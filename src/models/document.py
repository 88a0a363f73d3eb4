"""Document model: the unit of parsing and regeneration."""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.chunk import Chunk


def sort_by_order(chunks: list[Chunk]) -> list[Chunk]:
    """Sort chunks by ``order``; ties keep their insertion order."""
    return sorted(chunks, key=lambda c: c.order)


class Document(BaseModel):
    """A resume split into chunks.

    ``chunks`` holds both partitions; ``active_chunks`` and
    ``standby_chunks`` are the ordered views used by the editor and
    the generator.
    """

    preamble: str = ""
    document_class: str = "article"
    packages: list[str] = Field(default_factory=list)
    body_header: str = ""  # Body text preceding the first section
    chunks: list[Chunk] = Field(default_factory=list)

    @property
    def active_chunks(self) -> list[Chunk]:
        return sort_by_order([c for c in self.chunks if c.is_active])

    @property
    def standby_chunks(self) -> list[Chunk]:
        return sort_by_order([c for c in self.chunks if not c.is_active])

    def get(self, chunk_id: str) -> Chunk | None:
        """Look up a chunk by id, or None if absent."""
        for chunk in self.chunks:
            if chunk.id == chunk_id:
                return chunk
        return None
