"""Core rememberall data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from rememberall.config import Mode
from rememberall.utils.files import compute_sha256

LIST_MARKUP = "<ul>"
BREAK_MARKUP = "<br>"


class BlockKind(str, Enum):
    PARAGRAPH = "paragraph"
    LIST_ITEM = "list_item"


@dataclass(frozen=True, slots=True)
class Block:
    """One structural piece of a note body."""

    kind: BlockKind
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        return cls(kind=BlockKind(data["kind"]), text=str(data["text"]))

    def markup(self) -> str:
        body = self.text.replace("\n", BREAK_MARKUP)
        if self.kind is BlockKind.LIST_ITEM:
            return LIST_MARKUP + body
        return BREAK_MARKUP + BREAK_MARKUP + body


def blocks_from_markup(markup: str) -> Tuple[Block, ...]:
    """Rebuild blocks from the flat ``<ul>``/``<br>`` markup of legacy stores."""
    pieces = markup.split(LIST_MARKUP)
    blocks = []
    lead = pieces[0].replace(BREAK_MARKUP, "\n").strip()
    if lead:
        blocks.append(Block(BlockKind.PARAGRAPH, lead))
    for piece in pieces[1:]:
        text = piece.replace(BREAK_MARKUP, "\n").strip()
        if text:
            blocks.append(Block(BlockKind.LIST_ITEM, text))
    return tuple(blocks)


@dataclass(slots=True)
class Document:
    """A single note segmented out of a source file."""

    title: str
    source: str
    blocks: Tuple[Block, ...]
    terms: Dict[str, float] = field(default_factory=dict)
    length: int = 0

    @property
    def text(self) -> str:
        """Body rendered to the internal single-line markup."""
        return "".join(block.markup() for block in self.blocks)

    @property
    def id(self) -> str:
        return compute_sha256(self.text.strip())

    def display_text(self) -> str:
        """Render the body as readable plain text."""
        parts = []
        for block in self.blocks:
            lines = block.text.split("\n")
            if block.kind is BlockKind.LIST_ITEM:
                rendered = "\n".join(
                    ["*   " + lines[0]] + ["    " + line.strip() for line in lines[1:]]
                )
                parts.append(rendered)
            else:
                parts.append("\n" + "\n".join(line.strip() for line in lines) + "\n")
        return "\n".join(parts).strip("\n")


@dataclass(slots=True)
class Corpus:
    """All documents of one index run plus the corpus-wide term statistic.

    ``terms`` holds inverse document frequencies for ``Mode.FREQUENCY`` and
    aggregate occurrence counts for ``Mode.PROBABILISTIC``.
    """

    mode: Mode = Mode.PROBABILISTIC
    documents: Dict[str, Document] = field(default_factory=dict)
    terms: Dict[str, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.documents)

    def add(self, document: Document) -> str:
        """Insert a document under its content hash; an equal hash replaces the old entry."""
        doc_id = document.id
        self.documents[doc_id] = document
        return doc_id

    @property
    def total_length(self) -> int:
        return sum(document.length for document in self.documents.values())
