"""Resume file import: format dispatch and text extraction."""

import logging
from pathlib import Path

import chardet

from src.config import AppConfig
from src.ingestion.latex_parser import LatexParser
from src.ingestion.segmenter import TextSegmenter
from src.models.document import Document

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".tex": "tex",
    ".pdf": "pdf",
    ".docx": "docx",
    ".html": "html",
    ".htm": "html",
    ".txt": "txt",
}


class UnsupportedFormatError(ValueError):
    """The file extension has no importer."""


class ExtractionError(RuntimeError):
    """Text could not be extracted from a binary document."""


class DocumentImporter:
    """Loads resume files into a chunked Document.

    LaTeX sources go through the structural parser. PDF, DOCX, HTML and
    plain text files are reduced to text first and then segmented
    heuristically.

    Args:
        config: AppConfig; defaults are used when None.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()
        self._latex_parser = LatexParser(self._config.parsing)
        self._segmenter = TextSegmenter(self._config.segmenter, self._config.export)

    def load(self, file_path: str | Path) -> Document:
        """Import a resume file.

        Args:
            file_path: Path to a .tex, .pdf, .docx, .html/.htm or .txt file.

        Returns:
            The parsed Document.

        Raises:
            FileNotFoundError: If file_path does not exist.
            UnsupportedFormatError: If the extension is not supported.
            ExtractionError: If no text could be extracted.
        """
        path = Path(file_path)
        file_format = self._detect_format(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if file_format == "tex":
            return self._latex_parser.parse(self._read_text(path))

        dispatch = {
            "pdf": self._extract_pdf,
            "docx": self._extract_docx,
            "html": self._extract_html,
            "txt": self._read_text,
        }
        text = dispatch[file_format](path)
        if not text.strip():
            raise ExtractionError(f"No text could be extracted from {path}")

        return self._segmenter.segment(text)

    def _detect_format(self, file_path: Path) -> str:
        """Determine file format from extension.

        Raises:
            UnsupportedFormatError: If extension is not supported.
        """
        ext = file_path.suffix.lower()
        if ext not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
            )
        return SUPPORTED_FORMATS[ext]

    def _extract_pdf(self, file_path: Path) -> str:
        """Extract text from a PDF file using pymupdf (fitz).

        Args:
            file_path: Path to the PDF file.

        Returns:
            Extracted raw text with pages separated by newlines.

        Raises:
            ExtractionError: If pymupdf cannot read the file.
        """
        import fitz  # type: ignore[import-untyped]

        try:
            with fitz.open(str(file_path)) as doc:
                pages = []
                for page in doc:
                    text = page.get_text("text")
                    if text.strip():
                        pages.append(text)
                return "\n".join(pages)
        except Exception as exc:
            logger.exception("Failed to extract PDF: %s", file_path)
            raise ExtractionError(f"Failed to extract PDF: {file_path}") from exc

    def _extract_docx(self, file_path: Path) -> str:
        """Extract paragraph text from a DOCX file using python-docx."""
        import docx

        try:
            doc = docx.Document(str(file_path))
            return "\n".join(para.text for para in doc.paragraphs if para.text.strip())
        except Exception as exc:
            logger.exception("Failed to extract DOCX: %s", file_path)
            raise ExtractionError(f"Failed to extract DOCX: {file_path}") from exc

    def _extract_html(self, file_path: Path) -> str:
        """Extract visible text from an HTML file using BeautifulSoup.

        Scripts and styles are dropped; block boundaries become newlines.
        """
        from bs4 import BeautifulSoup

        raw = self._read_text(file_path)
        try:
            soup = BeautifulSoup(raw, "lxml")
            for tag in soup(["script", "style"]):
                tag.decompose()
            return soup.get_text(separator="\n")
        except Exception as exc:
            logger.exception("Failed to extract HTML: %s", file_path)
            raise ExtractionError(f"Failed to extract HTML: {file_path}") from exc

    def _read_text(self, file_path: Path) -> str:
        """Read a text file with encoding detection.

        Tries UTF-8 first, then uses chardet for fallback detection.
        """
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode file, replacing invalid bytes: %s", file_path)
            return raw_bytes.decode("utf-8", errors="replace")
