"""Structural parser for LaTeX resume sources."""

import logging
import re
from typing import Iterator

from src.config import ParsingConfig
from src.ingestion.metadata import CVENTRY_PATTERN, extract_metadata
from src.models.chunk import Chunk, SourceSpan
from src.models.document import Document

logger = logging.getLogger(__name__)

BEGIN_DOCUMENT = r"\begin{document}"
END_DOCUMENT = r"\end{document}"

DOCUMENT_CLASS_PATTERN = re.compile(r"\\documentclass(?:\[[^\]]*\])?\{([^}]*)\}")
PACKAGE_PATTERN = re.compile(r"\\usepackage(?:\[[^\]]*\])?\{([^}]*)\}")
SECTION_HEADER_PATTERN = re.compile(r"\\section\*?\{([^}]+)\}")

# Child patterns, scanned in this order over a section's content.
# A section's items are grouped by family, not by position in the text.
ITEM_PATTERNS: dict[str, re.Pattern[str]] = {
    "subsection": re.compile(
        r"\\subsection\*?\{([^}]+)\}([\s\S]*?)(?=\\subsection|\\section|\Z)"
    ),
    "item": re.compile(
        r"\\item\s+([\s\S]*?)(?=\\item|\\end\{itemize\}|\\end\{enumerate\}|\Z)"
    ),
    "cventry": CVENTRY_PATTERN,
}


class LatexParser:
    """Splits a LaTeX resume into section and item chunks.

    Sections run from one ``\\section`` header to the next. Inside each
    section, subsections, list items and ``\\cventry`` lines each become
    an item chunk whose raw text is the exact matched span, so the
    document can be regenerated verbatim.

    Malformed input never raises: missing pieces fall back to defaults
    or empty results.

    Args:
        config: ParsingConfig with the default document class.
    """

    def __init__(self, config: ParsingConfig | None = None) -> None:
        self._config = config or ParsingConfig()

    def parse(self, source: str) -> Document:
        """Parse LaTeX source into a Document.

        Args:
            source: Full LaTeX source text.

        Returns:
            A Document whose chunks are all active and ordered by position.
        """
        preamble, body = self._split_document(source)
        sections_start = SECTION_HEADER_PATTERN.search(body)
        body_header = body[: sections_start.start()] if sections_start else body

        chunks = self._parse_sections(body)
        for order, chunk in enumerate(chunks):
            chunk.order = order
            chunk.is_active = True

        logger.debug(
            "Parsed LaTeX source: %d sections, %d items",
            sum(1 for c in chunks if c.type == "section"),
            sum(1 for c in chunks if c.type == "item"),
        )

        return Document(
            preamble=preamble,
            document_class=self._extract_document_class(preamble),
            packages=self._extract_packages(preamble),
            body_header=body_header,
            chunks=chunks,
        )

    def _split_document(self, source: str) -> tuple[str, str]:
        """Split source into (preamble, body) at the document environment.

        Both parts are trimmed. Without ``\\begin{document}`` the whole
        text is the preamble; without ``\\end{document}`` the body is empty.
        """
        begin = source.find(BEGIN_DOCUMENT)
        if begin == -1:
            return source.strip(), ""

        body_start = begin + len(BEGIN_DOCUMENT)
        end = source.find(END_DOCUMENT, body_start)
        if end == -1:
            return source[:begin].strip(), ""

        return source[:begin].strip(), source[body_start:end].strip()

    def _extract_document_class(self, preamble: str) -> str:
        match = DOCUMENT_CLASS_PATTERN.search(preamble)
        if match:
            return match.group(1)
        return self._config.default_document_class

    def _extract_packages(self, preamble: str) -> list[str]:
        return [m.group(1) for m in PACKAGE_PATTERN.finditer(preamble)]

    def _parse_sections(self, body: str) -> list[Chunk]:
        """Split the document body into section chunks and their items.

        Section boundaries are the positions of the section headers; a
        section spans from its header to the next header or end of body.
        Ids come from a counter local to this call, advanced once per
        emitted chunk.

        Args:
            body: Text between the document delimiters.

        Returns:
            Flat list: each section followed by its items.
        """
        headers = list(SECTION_HEADER_PATTERN.finditer(body))
        next_index = 0
        chunks: list[Chunk] = []

        for i, header in enumerate(headers):
            end = headers[i + 1].start() if i + 1 < len(headers) else len(body)
            raw = body[header.start() : end]
            title = header.group(1)
            after_header = body[header.end() : end]
            content = after_header.strip()
            # Offset of content within raw, for item spans
            content_start = (header.end() - header.start()) + (
                len(after_header) - len(after_header.lstrip())
            )
            section_id = f"section-{next_index}"

            items = list(self._parse_items(content, section_id, content_start))
            chunks.append(
                Chunk(
                    id=section_id,
                    type="section",
                    title=title,
                    content=content,
                    raw_source_text=raw,
                    source_text=raw,
                    child_spans=[item.source_span for item in items if item.source_span],
                    tags=[title.lower()],
                )
            )
            chunks.extend(items)
            next_index += 1 + len(items)

        return chunks

    def _parse_items(
        self, content: str, parent_id: str, offset: int = 0
    ) -> Iterator[Chunk]:
        """Yield item chunks for every child pattern match in ``content``.

        Families are scanned one after another; ``k`` in the item id keeps
        counting across families. Each item records its span in the
        section's source text, ``offset`` being where ``content`` starts.
        """
        item_index = 0
        for kind, pattern in ITEM_PATTERNS.items():
            for match in pattern.finditer(content):
                raw = match.group(0)
                metadata = extract_metadata(raw)
                first_group = (match.group(1) or "").strip()
                title = metadata.position or first_group or "Item"

                yield Chunk(
                    id=f"{parent_id}-item-{item_index}",
                    type="item",
                    title=title,
                    content=raw.strip(),
                    raw_source_text=raw,
                    source_text=raw,
                    source_span=SourceSpan(
                        start=offset + match.start(),
                        end=offset + match.end(),
                        index=item_index,
                        kind=kind,
                    ),
                    parent_id=parent_id,
                    metadata=metadata,
                )
                item_index += 1


def parse_latex(source: str, config: ParsingConfig | None = None) -> Document:
    """Parse LaTeX source with a fresh LatexParser."""
    return LatexParser(config).parse(source)
