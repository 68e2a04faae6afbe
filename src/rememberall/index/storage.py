"""Flat-file corpus store.

Two header-less, fully quoted CSV tables plus a JSON manifest:

- ``corpus.csv``: ``source, title, body, id, length``
- ``index.csv``: ``id, stem, document value, corpus value``
- ``store.json``: ``format_version`` and the index ``mode``

A store without a manifest is read as the version 1 layout, where the body is
``<ul>``/``<br>`` markup, documents have no length column and the last index
column holds ``tf * idf``.

In version 2 the body column is the JSON list of tagged blocks. Block text is
quote-normalized like every other field, but the JSON syntax itself contains
double quotes, which ``csv`` escapes by doubling them.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List

from rememberall.config import Mode
from rememberall.models import Block, Corpus, Document, blocks_from_markup
from rememberall.utils.files import atomic_write_text
from rememberall.utils.text import normalize_quotes

LOGGER = logging.getLogger(__name__)

CORPUS_FILE = "corpus.csv"
INDEX_FILE = "index.csv"
MANIFEST_FILE = "store.json"

FORMAT_VERSION = 2
LEGACY_VERSION = 1


class StoreError(Exception):
    """Raised when the store cannot be created, written or read."""


class StoreVersionError(StoreError):
    """Raised when the store was written in a format this version cannot read."""


def _write_rows(rows: Iterator[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def _raise_field_limit() -> None:
    """Lift the csv module's per-field cap so any note body can be read back."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            limit //= 10


class CorpusStore:
    """Persistence layer for a corpus snapshot."""

    def __init__(self, store_dir: Path) -> None:
        self.store_dir = Path(store_dir)

    @property
    def corpus_path(self) -> Path:
        return self.store_dir / CORPUS_FILE

    @property
    def index_path(self) -> Path:
        return self.store_dir / INDEX_FILE

    @property
    def manifest_path(self) -> Path:
        return self.store_dir / MANIFEST_FILE

    def exists(self) -> bool:
        return self.corpus_path.is_file() and self.index_path.is_file()

    def ensure_dir(self) -> None:
        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create store directory {self.store_dir}: {exc}") from exc

    def save(self, corpus: Corpus) -> None:
        """Replace the stored corpus with this snapshot."""
        self.ensure_dir()
        try:
            atomic_write_text(self.index_path, _write_rows(self._index_rows(corpus)))
            atomic_write_text(self.corpus_path, _write_rows(self._document_rows(corpus)))
            atomic_write_text(
                self.manifest_path,
                json.dumps({"format_version": FORMAT_VERSION, "mode": corpus.mode.value}),
            )
        except OSError as exc:
            raise StoreError(f"Cannot write store {self.store_dir}: {exc}") from exc
        LOGGER.debug("Wrote %d documents to %s", len(corpus), self.store_dir)

    @staticmethod
    def _document_rows(corpus: Corpus) -> Iterator[List[Any]]:
        for doc_id in sorted(corpus.documents):
            document = corpus.documents[doc_id]
            # Block text is quote-normalized at parse time; the JSON quoting is left to csv.
            body = json.dumps(
                [block.to_dict() for block in document.blocks],
                ensure_ascii=False,
                separators=(",", ":"),
            )
            yield [
                normalize_quotes(document.source),
                normalize_quotes(document.title),
                body,
                doc_id,
                document.length,
            ]

    @staticmethod
    def _index_rows(corpus: Corpus) -> Iterator[List[Any]]:
        for doc_id in sorted(corpus.documents):
            document = corpus.documents[doc_id]
            for term in sorted(document.terms):
                yield [
                    doc_id,
                    normalize_quotes(term),
                    repr(document.terms[term]),
                    repr(corpus.terms.get(term, 0.0)),
                ]

    def read_manifest(self) -> Dict[str, Any]:
        if not self.manifest_path.is_file():
            return {"format_version": LEGACY_VERSION, "mode": Mode.FREQUENCY.value}
        try:
            manifest = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read {self.manifest_path}: {exc}") from exc
        version = manifest.get("format_version")
        if version not in (LEGACY_VERSION, FORMAT_VERSION):
            raise StoreVersionError(
                f"Unsupported store format {version!r} in {self.store_dir}; re-run index"
            )
        try:
            Mode(manifest.get("mode"))
        except ValueError as exc:
            raise StoreVersionError(f"Unknown index mode {manifest.get('mode')!r}") from exc
        return manifest

    def load(self) -> Corpus:
        """Load documents first, then attach index rows to their documents."""
        if not self.store_dir.is_dir():
            raise StoreError(f"Store not found: {self.store_dir}")
        if not self.exists():
            raise StoreError(f"Store is incomplete, missing tables in {self.store_dir}")

        manifest = self.read_manifest()
        version = manifest["format_version"]
        corpus = Corpus(mode=Mode(manifest["mode"]))

        for line, row in self._read_rows(self.corpus_path):
            try:
                doc_id, document = self._parse_document_row(row, version)
            except (IndexError, ValueError, KeyError, TypeError) as exc:
                raise StoreError(f"{self.corpus_path}:{line}: malformed row: {exc}") from exc
            corpus.documents[doc_id] = document

        for line, row in self._read_rows(self.index_path):
            try:
                doc_id, term, value, corpus_value = row[0], row[1], float(row[2]), float(row[3])
            except (IndexError, ValueError) as exc:
                raise StoreError(f"{self.index_path}:{line}: malformed row: {exc}") from exc
            document = corpus.documents.get(doc_id)
            if document is None:
                continue
            document.terms[term] = value
            if version == LEGACY_VERSION:
                corpus_value = corpus_value / value if value else 0.0
            corpus.terms[term] = corpus_value

        LOGGER.debug(
            "Loaded %d documents and %d terms from %s", len(corpus), len(corpus.terms), self.store_dir
        )
        return corpus

    @staticmethod
    def _read_rows(path: Path) -> Iterator[tuple[int, List[str]]]:
        _raise_field_limit()
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                reader = csv.reader(handle)
                for row in reader:
                    if row:
                        yield reader.line_num, row
        except (OSError, csv.Error, UnicodeDecodeError) as exc:
            raise StoreError(f"Cannot read {path}: {exc}") from exc

    @staticmethod
    def _parse_document_row(row: List[str], version: int) -> tuple[str, Document]:
        source, title, body, doc_id = row[0], row[1], row[2], row[3]
        length = int(row[4]) if len(row) > 4 else 0
        if version == LEGACY_VERSION:
            blocks = blocks_from_markup(body)
        else:
            blocks = tuple(Block.from_dict(item) for item in json.loads(body))
        return doc_id, Document(title=title, source=source, blocks=blocks, length=length)
