"""Note indexing pipeline."""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Sequence

from rememberall.config import DEFAULT_PATTERN, Mode
from rememberall.index.storage import CorpusStore
from rememberall.ingestion.notes import load_documents
from rememberall.models import Corpus, Document
from rememberall.utils.files import iter_note_paths
from rememberall.utils.text import count_terms, weigh_terms

LOGGER = logging.getLogger(__name__)


def find_notes(directories: Sequence[Path], pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Find all note files directly inside the given directories."""
    return list(iter_note_paths(directories, pattern))


def inverse_document_frequency(documents: Iterable[Document]) -> Dict[str, float]:
    """``ln(N / (df + 1))`` for every stem seen in documents."""
    snapshot = tuple(documents)
    frequencies: Counter[str] = Counter()
    for document in snapshot:
        frequencies.update(document.terms.keys())
    total = len(snapshot)
    return {term: math.log(total / (count + 1)) for term, count in frequencies.items()}


def aggregate_term_counts(documents: Iterable[Document]) -> Dict[str, float]:
    """Sum per-document occurrence counts into corpus-wide counts."""
    totals: Counter[str] = Counter()
    for document in tuple(documents):
        for term, count in document.terms.items():
            totals[term] += count
    return dict(totals)


@dataclass(slots=True)
class IndexStats:
    files: int = 0
    failed: int = 0
    skipped_sections: int = 0
    documents: int = 0
    terms: int = 0
    processed_files: list[Path] = field(default_factory=list)


class Indexer:
    """Rebuilds the whole corpus from note files and persists it."""

    def __init__(
        self,
        store: CorpusStore,
        *,
        mode: Mode = Mode.PROBABILISTIC,
        pattern: str = DEFAULT_PATTERN,
    ) -> None:
        self.store = store
        self.mode = Mode(mode)
        self.pattern = pattern

    def index(self, directories: Sequence[Path]) -> IndexStats:
        """Index every note under the given directories and overwrite the store."""
        stats = IndexStats()
        paths = find_notes(directories, self.pattern)
        if not paths:
            LOGGER.warning("No note files matching %s found", self.pattern)

        corpus = self.build_corpus(paths, stats)
        self.store.save(corpus)

        stats.documents = len(corpus)
        stats.terms = len(corpus.terms)
        return stats

    def build_corpus(self, paths: Iterable[Path], stats: IndexStats | None = None) -> Corpus:
        """Segment and measure every file, then derive the corpus statistics."""
        stats = stats if stats is not None else IndexStats()
        corpus = Corpus(mode=self.mode)

        def count_skipped(_section: str) -> None:
            stats.skipped_sections += 1

        for path in paths:
            LOGGER.info("Processing: %s", path)
            try:
                documents = load_documents(Path(path), on_skip=count_skipped)
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.error("Failed to read %s: %s", path, exc)
                stats.failed += 1
                continue

            for document in documents:
                self.measure(document)
                corpus.add(document)

            stats.files += 1
            stats.processed_files.append(Path(path))

        if self.mode is Mode.FREQUENCY:
            corpus.terms = inverse_document_frequency(corpus.documents.values())
        else:
            corpus.terms = aggregate_term_counts(corpus.documents.values())
        return corpus

    def measure(self, document: Document) -> None:
        """Fill in the document's term statistic for the configured mode."""
        if self.mode is Mode.FREQUENCY:
            document.terms = weigh_terms(document.text)
            return
        document.terms, document.length = count_terms(f"{document.title} {document.text}")
