"""Shallow metadata extraction from a chunk's LaTeX source."""

import re

from src.models.chunk import ChunkMetadata

DATE_PATTERN = re.compile(r"\{([^{}]*\d{4}[^{}]*)\}")
BOLD_PATTERN = re.compile(r"\\textbf\{([^{}]+)\}")

# \cventry{role}{organization}{start}{end}{location}{description}
CVENTRY_PATTERN = re.compile(r"\\cventry" + r"\{([^}]*)\}" * 6)


def extract_metadata(text: str) -> ChunkMetadata:
    """Pull date, company, role and location hints out of ``text``.

    Only looks at the text it is given. Fields that cannot be found are
    left as None.

    Args:
        text: Raw LaTeX of a single chunk.

    Returns:
        A ChunkMetadata, possibly with every field empty.
    """
    date_match = DATE_PATTERN.search(text)
    bold_match = BOLD_PATTERN.search(text)

    metadata = ChunkMetadata(
        dates=date_match.group(1) if date_match else None,
        company=bold_match.group(1) if bold_match else None,
    )

    entry = CVENTRY_PATTERN.search(text)
    if entry:
        role, organization, _start, _end, location, _description = (
            group.strip() for group in entry.groups()
        )
        metadata.position = role or None
        metadata.location = location or None
        if metadata.company is None:
            metadata.company = organization or None

    return metadata
