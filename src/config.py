"""Configuration loader for the Resume Chunker application."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_PREAMBLE = "\n".join(
    [
        r"\documentclass[11pt,a4paper]{article}",
        r"\usepackage[utf8]{inputenc}",
        r"\usepackage{geometry}",
        r"\geometry{margin=1in}",
        r"\usepackage{enumitem}",
        r"\usepackage{hyperref}",
    ]
)


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Resume Chunker"
    version: str = "1.0.0"


class ParsingConfig(BaseModel):
    """Structural (LaTeX) parser configuration."""

    default_document_class: str = "article"


class SegmenterConfig(BaseModel):
    """Heuristic segmentation of extracted plain text."""

    # Each entry is a regex alternation matched case-insensitively
    # at the start of a line.
    section_keywords: list[str] = Field(
        default_factory=lambda: [
            "EXPERIENCE|WORK EXPERIENCE|PROFESSIONAL EXPERIENCE|EMPLOYMENT",
            "EDUCATION|ACADEMIC BACKGROUND",
            "SKILLS|TECHNICAL SKILLS|CORE COMPETENCIES",
            "PROJECTS|PERSONAL PROJECTS|KEY PROJECTS",
            "CERTIFICATIONS|CERTIFICATES|LICENSES",
            "AWARDS|ACHIEVEMENTS|HONORS",
            "SUMMARY|PROFESSIONAL SUMMARY|PROFILE",
            "PUBLICATIONS|RESEARCH",
            "VOLUNTEER|VOLUNTEER EXPERIENCE",
            "LANGUAGES|LANGUAGE SKILLS",
        ]
    )
    bullet_glyphs: str = "•-*"
    subsection_max_length: int = 100
    fallback_title: str = "Resume Content"
    fallback_tag: str = "imported"


class ExportConfig(BaseModel):
    """Defaults for documents that carry no preamble of their own."""

    default_preamble: str = DEFAULT_PREAMBLE
    default_document_class: str = "article"
    default_packages: list[str] = Field(
        default_factory=lambda: ["inputenc", "geometry", "enumitem", "hyperref"]
    )


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    segmenter: SegmenterConfig = Field(default_factory=SegmenterConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    # Loaded from environment
    log_level: str = "INFO"


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override log level from environment
    log_level = os.getenv("RESUME_CHUNKER_LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()

    return config
