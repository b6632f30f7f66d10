"""
Command-line interface for notion-feed.

Uses Typer to provide a CLI with options for the most common
configuration settings. Supports loading .env files for the Notion token.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import load_config
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Generate RSS, Atom and JSON feeds from Notion documents."""


@app.command()
def run(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True),
    output: Path = typer.Option(Path("public/rss"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    force: bool = typer.Option(False, "--force", help="Regenerate even if the feed is fresh."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    limit: int | None = typer.Option(None, "--limit", help="Number of documents in the feed."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        help="Notion token_v2 cookie for private pages (else read from fetch.token_env / .env).",
    ),
):
    """Build the feeds.

    Reads the exported document list, fetches each document's blocks and
    writes feed.xml, atom.xml and feed.json to the output directory.

    Args:
        input: Path to the document list (JSON)
        output: Directory for the feed files
        config: Optional path to YAML config file
        force: Skip the freshness check
        progress: Whether to show progress bar
        limit: Override the number of feed items
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
        token: Override the Notion token
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if token:
        cfg.fetch.token = token
    if limit is not None:
        cfg.feed.limit = limit
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    paths = run_pipeline(input, output, cfg, force=force, show_progress=progress, console=console)
    if paths is None:
        console.print("Feeds not written (fresh or output not writable).")
        return
    console.print(f"Feeds generated: {paths.rss}, {paths.atom}, {paths.json}")


if __name__ == "__main__":
    app()
