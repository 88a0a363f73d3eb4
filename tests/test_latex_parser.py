"""Tests for the structural LaTeX parser."""

from pathlib import Path

import pytest

from src.config import ParsingConfig
from src.ingestion.latex_parser import LatexParser, parse_latex
from src.models.document import Document

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_resumes"


@pytest.fixture
def parser() -> LatexParser:
    return LatexParser()


@pytest.fixture
def sample() -> Document:
    return parse_latex((FIXTURES_DIR / "resume.tex").read_text(encoding="utf-8"))


def _wrap(body: str, preamble: str = r"\documentclass{article}") -> str:
    return f"{preamble}\n\\begin{{document}}\n{body}\n\\end{{document}}\n"


# ── Preamble and defaults ────────────────────────────────────────────────────


class TestPreamble:
    def test_empty_source_defaults(self, parser: LatexParser) -> None:
        doc = parser.parse("")
        assert doc.document_class == "article"
        assert doc.packages == []
        assert doc.chunks == []
        assert doc.preamble == ""

    def test_no_document_environment(self, parser: LatexParser) -> None:
        source = "  \\documentclass{moderncv}\n\\section{Experience}\n"
        doc = parser.parse(source)
        assert doc.preamble == source.strip()
        assert doc.document_class == "moderncv"
        assert doc.chunks == []

    def test_missing_end_document(self, parser: LatexParser) -> None:
        doc = parser.parse("\\documentclass{article}\n\\begin{document}\n\\section{A}")
        assert doc.preamble == r"\documentclass{article}"
        assert doc.chunks == []

    def test_document_class_with_options(self, parser: LatexParser) -> None:
        doc = parser.parse(_wrap("", r"\documentclass[11pt,a4paper]{moderncv}"))
        assert doc.document_class == "moderncv"

    def test_packages_in_source_order_with_duplicates(self, parser: LatexParser) -> None:
        preamble = (
            "\\documentclass{article}\n"
            "\\usepackage{geometry}\n"
            "\\usepackage[utf8]{inputenc}\n"
            "\\usepackage{geometry}\n"
        )
        doc = parser.parse(_wrap("", preamble))
        assert doc.packages == ["geometry", "inputenc", "geometry"]

    def test_configured_default_class(self) -> None:
        parser = LatexParser(ParsingConfig(default_document_class="report"))
        assert parser.parse("").document_class == "report"

    def test_sample_preamble(self, sample: Document) -> None:
        assert sample.preamble.startswith(r"\documentclass[11pt]{article}")
        assert sample.preamble.endswith(r"\usepackage{enumitem}")
        assert sample.packages == ["inputenc", "geometry", "enumitem"]


# ── Sections ─────────────────────────────────────────────────────────────────


class TestSections:
    def test_example_section_and_item(self, parser: LatexParser) -> None:
        chunks = parser._parse_sections("\\section{Experience}\n\\item Led a team")
        assert len(chunks) == 2

        section, item = chunks
        assert section.type == "section"
        assert section.title == "Experience"
        assert section.id == "section-0"
        assert section.tags == ["experience"]
        assert section.parent_id is None

        assert item.type == "item"
        assert item.id == "section-0-item-0"
        assert item.parent_id == "section-0"
        assert "Led a team" in item.content

    def test_section_span_runs_to_next_header(self, parser: LatexParser) -> None:
        body = "\\section{A}\nalpha\n\n\\section*{B}\nbeta"
        chunks = parser._parse_sections(body)
        assert [c.raw_source_text for c in chunks] == [
            "\\section{A}\nalpha\n\n",
            "\\section*{B}\nbeta",
        ]
        assert [c.content for c in chunks] == ["alpha", "beta"]
        assert [c.title for c in chunks] == ["A", "B"]

    def test_section_counter_spans_items(self, sample: Document) -> None:
        sections = [c for c in sample.chunks if c.type == "section"]
        assert [s.id for s in sections] == ["section-0", "section-5", "section-7"]
        for section in sections:
            assert section.id == f"section-{section.order}"

    def test_counter_is_per_call(self, parser: LatexParser) -> None:
        first = parser.parse(_wrap("\\section{A}\nx"))
        second = parser.parse(_wrap("\\section{A}\nx"))
        assert first.chunks[0].id == second.chunks[0].id == "section-0"

    def test_body_header_kept(self, sample: Document) -> None:
        assert sample.body_header.startswith(r"\begin{center}")
        assert "Jane Doe" in sample.body_header
        assert r"\section" not in sample.body_header

    def test_body_without_sections(self, parser: LatexParser) -> None:
        doc = parser.parse(_wrap("Just a paragraph."))
        assert doc.chunks == []
        assert doc.body_header == "Just a paragraph."

    def test_all_active_and_ordered(self, sample: Document) -> None:
        assert [c.order for c in sample.chunks] == list(range(len(sample.chunks)))
        assert all(c.is_active for c in sample.chunks)

    def test_ids_unique(self, sample: Document) -> None:
        ids = [c.id for c in sample.chunks]
        assert len(ids) == len(set(ids))


# ── Items ────────────────────────────────────────────────────────────────────


class TestItems:
    def test_sample_layout(self, sample: Document) -> None:
        assert [(c.id, c.type) for c in sample.chunks] == [
            ("section-0", "section"),
            ("section-0-item-0", "item"),
            ("section-0-item-1", "item"),
            ("section-0-item-2", "item"),
            ("section-0-item-3", "item"),
            ("section-5", "section"),
            ("section-5-item-0", "item"),
            ("section-7", "section"),
        ]

    def test_families_scanned_in_sequence(self, sample: Document) -> None:
        items = [c for c in sample.chunks if c.parent_id == "section-0"]
        # subsection, then list items, then cventry, regardless of position
        assert items[0].raw_source_text.startswith(r"\subsection{Acme Corp}")
        assert items[1].raw_source_text.startswith(r"\item Led a team")
        assert items[2].raw_source_text.startswith(r"\item Cut deploy time")
        assert items[3].raw_source_text.startswith(r"\cventry{Senior Engineer}")

    def test_item_titles(self, sample: Document) -> None:
        titles = {c.id: c.title for c in sample.chunks}
        assert titles["section-0-item-0"] == "Acme Corp"
        assert titles["section-0-item-1"] == "Led a team of five engineers"
        assert titles["section-0-item-3"] == "Senior Engineer"

    def test_item_raw_text_is_verbatim_span(self, sample: Document) -> None:
        section = sample.get("section-0")
        assert section is not None
        for item in sample.chunks:
            if item.parent_id == "section-0":
                assert item.raw_source_text in section.raw_source_text
                assert item.source_text == item.raw_source_text
                assert item.content == item.raw_source_text.strip()

    def test_item_spans_locate_source(self, sample: Document) -> None:
        section = sample.get("section-0")
        assert section is not None and section.source_text is not None
        items = [c for c in sample.chunks if c.parent_id == "section-0"]
        assert section.child_spans == [item.source_span for item in items]
        for k, item in enumerate(items):
            span = item.source_span
            assert span is not None
            assert span.index == k
            assert section.source_text[span.start : span.end] == item.source_text
        assert [item.source_span.kind for item in items if item.source_span] == [
            "subsection",
            "item",
            "item",
            "cventry",
        ]

    def test_repeated_text_gets_distinct_spans(self, parser: LatexParser) -> None:
        chunks = parser._parse_sections("\\section{S}\n\\item Python and Go\n\\item Python")
        first, second = (c.source_span for c in chunks[1:])
        assert first is not None and second is not None
        assert (first.start, first.end) == (12, 32)
        assert second.start == 32
        assert second.end == len(chunks[0].raw_source_text)

    def test_item_metadata(self, sample: Document) -> None:
        entry = sample.get("section-0-item-3")
        assert entry is not None and entry.metadata is not None
        assert entry.metadata.position == "Senior Engineer"
        assert entry.metadata.company == "Acme Corp"
        assert entry.metadata.location == "Berlin"
        assert entry.metadata.dates == "2019"

    def test_item_stops_at_end_of_list(self, parser: LatexParser) -> None:
        body = "\\section{S}\n\\begin{itemize}\n\\item one\n\\end{itemize}\ntrailing"
        items = [c for c in parser._parse_sections(body) if c.type == "item"]
        assert items[0].raw_source_text == "\\item one\n"

    def test_family_order_not_position_order(self, parser: LatexParser) -> None:
        body = "\\section{S}\n\\item first\n\\subsection{Later}\nbody"
        items = [c for c in parser._parse_sections(body) if c.type == "item"]
        assert items[0].title == "Later"
        assert items[0].id == "section-0-item-0"
        assert items[1].raw_source_text.startswith(r"\item first")
        assert items[1].id == "section-0-item-1"

    def test_empty_cventry_falls_back_to_item(self, parser: LatexParser) -> None:
        body = "\\section{S}\n\\cventry{}{}{}{}{}{}"
        items = [c for c in parser._parse_sections(body) if c.type == "item"]
        assert items[0].title == "Item"

    def test_unknown_commands_are_skipped(self, parser: LatexParser) -> None:
        body = "\\section{S}\n\\foo{bar}\n\\weird[x]{y}{z}"
        chunks = parser._parse_sections(body)
        assert len(chunks) == 1
        assert chunks[0].content == "\\foo{bar}\n\\weird[x]{y}{z}"
