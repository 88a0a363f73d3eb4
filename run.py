"""Entry point for the Resume Chunker command line."""

import logging
from pathlib import Path

import click

from src.config import load_config
from src.ingestion.importer import DocumentImporter, ExtractionError, UnsupportedFormatError
from src.storage.registry import ChunkRegistry


def _load_registry(path: str, config_path: str) -> ChunkRegistry:
    config = load_config(config_path)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        document = DocumentImporter(config).load(path)
    except (UnsupportedFormatError, ExtractionError) as exc:
        raise click.ClickException(str(exc)) from exc
    return ChunkRegistry(document)


@click.group()
def cli() -> None:
    """Split a resume into reorderable chunks and rebuild it as LaTeX."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", default="config.yaml", help="YAML config file")
def outline(path: str, config_path: str) -> None:
    """List the chunks found in PATH."""
    registry = _load_registry(path, config_path)
    for chunk in registry.active_chunks + registry.standby_chunks:
        indent = "  " if chunk.parent_id else ""
        state = "active" if chunk.is_active else "standby"
        click.echo(f"{indent}{chunk.id:<24} {chunk.type:<10} {state:<8} {chunk.title}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None)
@click.option("--standby", multiple=True, help="Chunk id to leave out (repeatable)")
@click.option("--drop", multiple=True, help="Chunk id to delete (repeatable)")
@click.option("--config", "config_path", default="config.yaml", help="YAML config file")
def export(
    path: str,
    output: str | None,
    standby: tuple[str, ...],
    drop: tuple[str, ...],
    config_path: str,
) -> None:
    """Rebuild PATH as LaTeX, optionally without some chunks.

    Example:

        python run.py export resume.tex --standby section-4 -o short.tex
    """
    registry = _load_registry(path, config_path)
    try:
        for chunk_id in standby:
            registry.set_active(chunk_id, False)
        for chunk_id in drop:
            registry.delete(chunk_id)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0])) from exc

    latex = registry.generate()
    if output is None:
        click.echo(latex, nl=False)
        return

    Path(output).parent.mkdir(parents=True, exist_ok=True)
    Path(output).write_text(latex, encoding="utf-8")
    click.echo(f"Wrote {output}")


if __name__ == "__main__":
    cli()
