"""LaTeX regeneration from the active chunks of a Document."""

import logging

from src.models.chunk import Chunk, SourceSpan
from src.models.document import Document, sort_by_order

logger = logging.getLogger(__name__)

BEGIN_DOCUMENT = r"\begin{document}"
END_DOCUMENT = r"\end{document}"

# Capture spans grouped by the span that encloses them (None: the section)
SpanTree = dict[int | None, list[SourceSpan]]


def generate_latex(document: Document) -> str:
    """Assemble LaTeX source from a document's active chunks.

    Sections are emitted in active order. Children a parser captured inside
    a section are written back into the section's text by position: each
    kind of construct (subsection, list item, cventry) keeps its own slots,
    and the active children of that kind fill them in ``order``. Slots of
    standby or deleted children are left empty. Active children with no
    captured slot are appended after the section. Chunks whose
    ``parent_id`` does not name an existing section are emitted as
    top-level entries.

    The function is pure: the document is not modified.

    Args:
        document: The document to render.

    Returns:
        Complete LaTeX source text.
    """
    active = document.active_chunks
    section_ids = {c.id for c in document.chunks if c.type == "section"}

    children: dict[str, list[Chunk]] = {}
    for chunk in sort_by_order(document.chunks):
        if chunk.type != "section" and chunk.parent_id in section_ids:
            children.setdefault(chunk.parent_id, []).append(chunk)

    pieces: list[str] = [document.body_header]
    for chunk in active:
        if chunk.type == "section":
            pieces.extend(_render_section(chunk, children.get(chunk.id, [])))
        elif chunk.parent_id not in section_ids:
            pieces.append(chunk.raw_source_text)

    body = _join(pieces).strip()
    logger.debug("Generated LaTeX body from %d active chunks", len(active))

    return f"{document.preamble}\n\n{BEGIN_DOCUMENT}\n\n{body}\n\n{END_DOCUMENT}\n"


def _render_section(section: Chunk, children: list[Chunk]) -> list[str]:
    """Render a section and its children.

    An edited section's text replaces everything captured in it, so only
    its hand-made children are appended. A standby or edited subsection
    likewise takes the items nested in it along.
    """
    occupants: dict[int, Chunk] = {}
    loose: list[Chunk] = []
    for child in children:
        span = child.source_span
        if span is not None and span.index not in occupants and _captured_in(section, child):
            occupants[span.index] = child
        else:
            loose.append(child)

    appended = [child for child in loose if child.is_active]
    if section.source_text is None or section.raw_source_text != section.source_text:
        return [section.raw_source_text] + [c.raw_source_text for c in appended]

    tree, parents = _nest(section.child_spans)
    text = _fill(section.source_text, 0, None, tree, occupants)

    for index, child in occupants.items():
        if child.is_active and index in parents and _displaced(index, parents, occupants):
            appended.append(child)

    return [text] + [child.raw_source_text for child in sort_by_order(appended)]


def _captured_in(section: Chunk, child: Chunk) -> bool:
    """Whether ``child`` still matches the span it was captured from in ``section``."""
    span = child.source_span
    if span is None or child.source_text is None or section.source_text is None:
        return False
    return span in section.child_spans and (
        section.source_text[span.start : span.end] == child.source_text
    )


def _nest(spans: list[SourceSpan]) -> tuple[SpanTree, dict[int, int | None]]:
    """Group capture spans under the nearest span that contains them.

    A span that straddles the end of an enclosing span is left out; its
    text stays where it is.

    Returns:
        The spans per enclosing span index, each list in capture order, and
        the enclosing index of every span kept.
    """
    tree: SpanTree = {}
    parents: dict[int, int | None] = {}
    stack: list[SourceSpan] = []

    for span in sorted(spans, key=lambda s: (s.start, -s.end)):
        while stack and stack[-1].end <= span.start:
            stack.pop()
        if stack and span.end > stack[-1].end:
            continue
        parent = stack[-1].index if stack else None
        tree.setdefault(parent, []).append(span)
        parents[span.index] = parent
        stack.append(span)

    for level in tree.values():
        level.sort(key=lambda s: s.index)
    return tree, parents


def _fill(
    text: str,
    offset: int,
    level: int | None,
    tree: SpanTree,
    occupants: dict[int, Chunk],
) -> str:
    """Rewrite the slots of one nesting level inside ``text``.

    ``text`` starts at ``offset`` in the section's source text. Slots are
    spliced right to left so earlier offsets stay valid.
    """
    by_kind: dict[str, list[SourceSpan]] = {}
    for span in tree.get(level, []):
        by_kind.setdefault(span.kind, []).append(span)

    rendered: list[tuple[SourceSpan, str]] = []
    for slots in by_kind.values():
        live = [
            slot
            for slot in slots
            if slot.index in occupants and occupants[slot.index].is_active
        ]
        fillers = sort_by_order([occupants[slot.index] for slot in live])
        filled = dict(zip((slot.index for slot in live), fillers))
        for slot in slots:
            child = filled.get(slot.index)
            if child is None:
                rendered.append((slot, ""))
                continue
            original = text[slot.start - offset : slot.end - offset]
            trailing = original[len(original.rstrip()) :]
            body = _render_child(child, tree, occupants)
            rendered.append((slot, body.rstrip() + trailing))

    for slot, replacement in sorted(rendered, key=lambda r: r[0].start, reverse=True):
        text = text[: slot.start - offset] + replacement + text[slot.end - offset :]
    return text


def _render_child(child: Chunk, tree: SpanTree, occupants: dict[int, Chunk]) -> str:
    span = child.source_span
    if span is None or child.source_text is None or child.raw_source_text != child.source_text:
        return child.raw_source_text
    return _fill(child.source_text, span.start, span.index, tree, occupants)


def _displaced(index: int, parents: dict[int, int | None], occupants: dict[int, Chunk]) -> bool:
    """Whether a deleted enclosing chunk left the child at ``index`` with no slot.

    A standby or edited enclosing chunk removes the child along with it.
    """
    displaced = False
    enclosing = parents[index]
    while enclosing is not None:
        container = occupants.get(enclosing)
        if container is None:
            displaced = True
        elif not container.is_active or container.raw_source_text != container.source_text:
            return False
        enclosing = parents[enclosing]
    return displaced


def _join(pieces: list[str]) -> str:
    """Concatenate pieces, adding a newline where one would run into the next."""
    output = ""
    for piece in pieces:
        if not piece:
            continue
        if output and not output[-1].isspace():
            output += "\n"
        output += piece
    return output
