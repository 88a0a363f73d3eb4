"""Regeneration of LaTeX source from chunked documents."""

from src.export.generator import generate_latex

__all__ = ["generate_latex"]
