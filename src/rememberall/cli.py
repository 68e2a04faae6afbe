"""Command line interface for rememberall."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from rememberall.config import AppConfig, ConfigurationError, DEFAULT_PATTERN, Mode
from rememberall.index.indexer import Indexer
from rememberall.index.search import Searcher
from rememberall.index.storage import CorpusStore, StoreError

EXIT_NO_RESULTS = 1
EXIT_FATAL = 2

console = Console()
app = typer.Typer(help="rememberall - More magical than the original.")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[red]{escape(str(exc))}[/red]")
    return typer.Exit(code=EXIT_FATAL)


@app.command()
def index(
    directories: List[Path] = typer.Argument(
        ..., help="Directories containing note files.", resolve_path=True
    ),
    store: Optional[Path] = typer.Option(None, "--store", help="Store directory"),
    mode: Mode = typer.Option(Mode.PROBABILISTIC, help="Index generation"),
    pattern: str = typer.Option(DEFAULT_PATTERN, help="Note file pattern"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild the index from every note file in the given directories."""
    _setup_logging(verbose)
    try:
        config = AppConfig(store_dir=store, mode=mode, note_pattern=pattern)
        corpus_store = CorpusStore(config.resolve_store_dir(Path.cwd()))
        corpus_store.ensure_dir()
        indexer = Indexer(corpus_store, mode=config.mode, pattern=config.note_pattern)
        console.print(f"Indexing into [bold]{escape(str(corpus_store.store_dir))}[/bold]...")
        stats = indexer.index(directories)
    except (ConfigurationError, StoreError) as exc:
        raise _fail(exc) from exc

    if stats.failed:
        console.print(f"[yellow]{stats.failed} file(s) could not be read.[/yellow]")
    console.print(f"Indexed {stats.documents} documents, {stats.terms} terms.")


@app.command()
def search(
    terms: List[str] = typer.Argument(..., help="Search terms"),
    top_n: int = typer.Option(1, "-n", min=1, help="Number of documents to return"),
    store: Optional[Path] = typer.Option(None, "--store", help="Store directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rank the indexed notes against the search terms."""
    _setup_logging(verbose)
    try:
        config = AppConfig(store_dir=store, top_n=top_n)
        searcher = Searcher(CorpusStore(config.resolve_store_dir(Path.cwd())))
        results = searcher.search(terms, top_n=config.top_n)
    except (ConfigurationError, StoreError) as exc:
        raise _fail(exc) from exc

    if not results:
        console.print("[yellow]No results.[/yellow]")
        raise typer.Exit(code=EXIT_NO_RESULTS)

    console.print()
    for result in results:
        body = "\n".join("    " + line for line in result.text.splitlines())
        console.print(f"[green]{escape(result.title)}[/green]")
        console.print(escape(result.source))
        console.print(f"[yellow]{result.score:.5f}[/yellow]")
        console.print()
        console.print(escape(body))
        console.print()


@app.command()
def stats(
    store: Optional[Path] = typer.Option(None, "--store", help="Store directory"),
) -> None:
    """Summarize the current store."""
    try:
        config = AppConfig(store_dir=store)
        corpus_store = CorpusStore(config.resolve_store_dir(Path.cwd()))
        corpus = corpus_store.load()
    except (ConfigurationError, StoreError) as exc:
        raise _fail(exc) from exc

    console.print(f"Store: [bold]{escape(str(corpus_store.store_dir))}[/bold]")
    console.print(f"Mode: {corpus.mode.value}")
    console.print(f"Documents: {len(corpus)}")
    console.print(f"Terms: {len(corpus.terms)}")
