"""In-memory registry holding the live chunked document."""

import logging
from collections import Counter

from src.export.generator import generate_latex
from src.models.chunk import Chunk
from src.models.document import Document, sort_by_order

logger = logging.getLogger(__name__)


class ChunkRegistry:
    """Owns one Document and the operations that edit it.

    Chunks are split into an active partition (emitted on export) and a
    standby partition (kept but not emitted). ``order`` is only compared
    within a partition. Mutations are not synchronized; callers sharing a
    registry must serialize them.

    Unknown chunk ids raise KeyError and leave every chunk untouched.
    """

    def __init__(self, document: Document | None = None) -> None:
        self._document = Document()
        if document is not None:
            self.load(document)

    @property
    def document(self) -> Document:
        return self._document

    @property
    def active_chunks(self) -> list[Chunk]:
        return self._document.active_chunks

    @property
    def standby_chunks(self) -> list[Chunk]:
        return self._document.standby_chunks

    def load(self, document: Document) -> None:
        """Replace the current document with ``document`` in one step.

        Raises:
            ValueError: If chunk ids are not unique. The current document
                is kept in that case.
        """
        self._check_unique_ids(document.chunks)
        self._document = document
        logger.debug("Loaded document with %d chunks", len(document.chunks))

    def replace_all(
        self,
        chunks: list[Chunk],
        preamble: str,
        document_class: str | None = None,
        packages: list[str] | None = None,
        body_header: str = "",
    ) -> None:
        """Discard all chunks and install a new collection.

        Args:
            chunks: The new chunk collection.
            preamble: Verbatim text preceding the document body.
            document_class: Declared class; the model default when None.
            packages: Declared packages in source order.
            body_header: Body text preceding the first section.

        Raises:
            ValueError: If chunk ids are not unique.
        """
        document = Document(
            preamble=preamble,
            packages=list(packages or []),
            body_header=body_header,
            chunks=list(chunks),
        )
        if document_class is not None:
            document.document_class = document_class
        self.load(document)

    def get(self, chunk_id: str) -> Chunk:
        """Return the chunk with ``chunk_id``.

        Raises:
            KeyError: If no such chunk exists.
        """
        chunk = self._document.get(chunk_id)
        if chunk is None:
            raise KeyError(f"Unknown chunk id: {chunk_id!r}")
        return chunk

    def children_of(self, chunk_id: str) -> list[Chunk]:
        """Chunks whose ``parent_id`` is ``chunk_id``, in order."""
        return sort_by_order([c for c in self._document.chunks if c.parent_id == chunk_id])

    def add_chunk(self, chunk: Chunk, position: int | None = None) -> None:
        """Add a hand-made chunk at the end of its partition.

        Args:
            chunk: The chunk to add. Its ``order`` is overwritten.
            position: Optional index within the partition to move it to.

        Raises:
            ValueError: If a chunk with the same id already exists.
        """
        if self._document.get(chunk.id) is not None:
            raise ValueError(f"Duplicate chunk id: {chunk.id!r}")

        partition = self._partition(chunk.is_active)
        chunk.order = partition[-1].order + 1 if partition else 0
        self._document.chunks.append(chunk)
        logger.debug("Added chunk %s", chunk.id)

        if position is not None:
            self.reorder(chunk.id, position)

    def reorder(self, chunk_id: str, target_index: int) -> None:
        """Move a chunk to ``target_index`` within its own partition.

        Only the chunks between the old and new position get new ``order``
        values; they reuse the order values already held by that range.
        If those values are not strictly increasing (ties), the whole
        partition is renumbered from 0 instead. The other partition is
        never touched.

        Args:
            chunk_id: Id of the chunk to move.
            target_index: Destination index, clamped to the partition.
        """
        chunk = self.get(chunk_id)
        partition = self._partition(chunk.is_active)
        old_index = next(i for i, c in enumerate(partition) if c.id == chunk_id)
        target = max(0, min(target_index, len(partition) - 1))
        if target == old_index:
            return

        slots = [c.order for c in partition]
        moved = partition[:old_index] + partition[old_index + 1 :]
        moved.insert(target, chunk)

        low, high = min(old_index, target), max(old_index, target)
        # Include neighbours so a tie at the range boundary is caught too.
        window = slots[max(low - 1, 0) : high + 2]
        if all(a < b for a, b in zip(window, window[1:])):
            for i in range(low, high + 1):
                moved[i].order = slots[i]
        else:
            for i, c in enumerate(moved):
                c.order = i

        logger.debug("Moved chunk %s from %d to %d", chunk_id, old_index, target)

    def set_active(self, chunk_id: str, active: bool) -> None:
        """Move a chunk between the active and standby sets.

        ``order`` is kept as is, so it may equal an order value already
        used in the destination partition.
        """
        chunk = self.get(chunk_id)
        chunk.is_active = active
        logger.debug("Chunk %s is now %s", chunk_id, "active" if active else "standby")

    def delete(self, chunk_id: str) -> None:
        """Remove a chunk. Its children stay, with a now-dangling ``parent_id``.

        A parsed item also drops out of its section's text on export.
        """
        chunk = self.get(chunk_id)
        self._document.chunks = [c for c in self._document.chunks if c.id != chunk.id]
        logger.debug("Deleted chunk %s", chunk_id)

    def update_content(self, chunk_id: str, new_text: str) -> None:
        """Replace a chunk's content and raw source text with ``new_text``."""
        chunk = self.get(chunk_id)
        chunk.content = new_text
        chunk.raw_source_text = new_text
        logger.debug("Updated content of chunk %s", chunk_id)

    def generate(self) -> str:
        """Render the current document as LaTeX."""
        return generate_latex(self._document)

    def _partition(self, active: bool) -> list[Chunk]:
        return sort_by_order([c for c in self._document.chunks if c.is_active == active])

    @staticmethod
    def _check_unique_ids(chunks: list[Chunk]) -> None:
        duplicates = [cid for cid, n in Counter(c.id for c in chunks).items() if n > 1]
        if duplicates:
            raise ValueError(f"Duplicate chunk ids: {', '.join(sorted(duplicates))}")
