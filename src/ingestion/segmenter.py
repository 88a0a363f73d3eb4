"""Heuristic segmentation of plain resume text into LaTeX section chunks."""

import logging
import re

from src.config import ExportConfig, SegmenterConfig
from src.models.chunk import Chunk
from src.models.document import Document

logger = logging.getLogger(__name__)

# Characters LaTeX treats as control characters, mapped to their
# literal-rendering forms.
LATEX_ESCAPES: dict[str, str] = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}

_ESCAPE_PATTERN = re.compile("|".join(re.escape(char) for char in LATEX_ESCAPES))


def escape_latex(text: str) -> str:
    """Escape LaTeX control characters in a single pass.

    Args:
        text: Plain text.

    Returns:
        Text that renders literally inside a LaTeX document.
    """
    return _ESCAPE_PATTERN.sub(lambda m: LATEX_ESCAPES[m.group()], text)


def clean_title(header: str) -> str:
    """Turn a raw header line such as ``"  * WORK EXPERIENCE:"`` into ``"Work Experience"``."""
    title = re.sub(r"^[^a-zA-Z]+", "", header)
    title = re.sub(r"[^a-zA-Z0-9\s]", "", title).strip()
    return " ".join(word[:1].upper() + word[1:].lower() for word in title.split())


class TextSegmenter:
    """Splits unstructured resume text into section chunks.

    Sections start at lines that begin with a known resume heading
    (Experience, Education, Skills, ...). The lines under each heading are
    converted to equivalent LaTeX: bullets become list items, short
    capitalized lines become subsections, everything else becomes an
    escaped line with a forced break.

    Args:
        config: SegmenterConfig with heading keywords and line heuristics.
        export_config: ExportConfig supplying the preamble for the result.
    """

    def __init__(
        self,
        config: SegmenterConfig | None = None,
        export_config: ExportConfig | None = None,
    ) -> None:
        self._config = config or SegmenterConfig()
        self._export_config = export_config or ExportConfig()
        self._header_patterns = [
            re.compile(rf"^({keywords})", re.IGNORECASE)
            for keywords in self._config.section_keywords
        ]
        self._bullet_pattern = re.compile(
            rf"^[{re.escape(self._config.bullet_glyphs)}]\s*"
        )

    def segment(self, text: str) -> Document:
        """Segment extracted text into a Document of section chunks.

        Args:
            text: Plain text, e.g. extracted from a PDF.

        Returns:
            A Document with the default preamble and all chunks active.
        """
        lines = [line.strip() for line in text.split("\n")]
        lines = [line for line in lines if line]

        chunks: list[Chunk] = []
        leading: list[str] = []
        current_header: str | None = None
        current_lines: list[str] = []

        for line in lines:
            if self._is_section_header(line):
                if current_header is not None and current_lines:
                    chunks.append(
                        self._build_section(current_header, current_lines, len(chunks))
                    )
                current_header = line
                current_lines = []
            elif current_header is None:
                leading.append(line)
            else:
                current_lines.append(line)

        if current_header is not None and current_lines:
            chunks.append(self._build_section(current_header, current_lines, len(chunks)))

        body_header = ""
        if chunks:
            body_header = "".join(f"{escape_latex(line)}\\\\\n" for line in leading)
        else:
            logger.info("No section headings detected; importing as a single section")
            chunks = [self._build_fallback(text)]

        for order, chunk in enumerate(chunks):
            chunk.order = order
            chunk.is_active = True

        logger.debug("Segmented %d lines into %d sections", len(lines), len(chunks))

        return Document(
            preamble=self._export_config.default_preamble,
            document_class=self._export_config.default_document_class,
            packages=list(self._export_config.default_packages),
            body_header=body_header,
            chunks=chunks,
        )

    def _is_section_header(self, line: str) -> bool:
        return any(pattern.match(line) for pattern in self._header_patterns)

    def _build_section(self, header: str, lines: list[str], index: int) -> Chunk:
        """Create a section chunk from a heading and the lines under it."""
        title = clean_title(header)
        raw = f"\\section{{{title}}}\n\n{self._to_latex(lines)}"
        return Chunk(
            id=f"section-{index}",
            type="section",
            title=title,
            content="\n".join(lines),
            raw_source_text=raw,
            source_text=raw,
            tags=[title.lower()],
        )

    def _build_fallback(self, text: str) -> Chunk:
        """Wrap the whole input in one section when no heading was found."""
        title = self._config.fallback_title
        raw = f"\\section{{{escape_latex(title)}}}\n\n{escape_latex(text)}"
        return Chunk(
            id="section-0",
            type="section",
            title=title,
            content=text,
            raw_source_text=raw,
            source_text=raw,
            tags=[self._config.fallback_tag],
        )

    def _to_latex(self, lines: list[str]) -> str:
        """Convert body lines to LaTeX, one construct per line.

        Runs of bullet lines are wrapped in an itemize environment.
        """
        output: list[str] = []
        in_list = False

        for line in lines:
            if self._bullet_pattern.match(line):
                if not in_list:
                    output.append(r"\begin{itemize}")
                    in_list = True
                bullet = self._bullet_pattern.sub("", line, count=1)
                output.append(f"  \\item {escape_latex(bullet)}")
                continue

            if in_list:
                output.append(r"\end{itemize}")
                in_list = False

            is_short = len(line) < self._config.subsection_max_length
            if is_short and re.match(r"[A-Z]", line):
                output.append(f"\\subsection{{{escape_latex(line)}}}")
            else:
                output.append(f"{escape_latex(line)}\\\\")

        if in_list:
            output.append(r"\end{itemize}")

        return "\n".join(output) + "\n"


def segment_text(
    text: str,
    config: SegmenterConfig | None = None,
    export_config: ExportConfig | None = None,
) -> Document:
    """Segment text with a fresh TextSegmenter."""
    return TextSegmenter(config, export_config).segment(text)
