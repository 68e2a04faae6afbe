"""Note file segmentation.

A note file is a sequence of sections introduced by ``#``. Whatever precedes
the first ``#`` is front matter and is dropped. Inside a section the text up to
the first ``*  `` list marker is the title and every following marker opens a
list item; a blank line inside a list item starts a paragraph.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from rememberall.models import Block, BlockKind, Document
from rememberall.utils.text import normalize_quotes

LOGGER = logging.getLogger(__name__)

HEADING_DELIMITER = "#"
LIST_DELIMITER = "*  "

_BLANK_LINE = re.compile(r"\r?\n[ \t\r]*\n")


def split_sections(content: str) -> List[str]:
    """Split file content into sections, dropping front matter and empty sections."""
    sections = content.split(HEADING_DELIMITER)[1:]
    return [section for section in sections if section.strip()]


def _clean_block_text(text: str) -> str:
    lines = [line.strip() for line in text.replace("\t", " ").split("\n")]
    return normalize_quotes("\n".join(line for line in lines if line))


def parse_section(section: str, source: str = "") -> Optional[Document]:
    """Parse one section into a Document, or None when it has no body."""
    pieces = section.split(LIST_DELIMITER)
    title = normalize_quotes(pieces[0].strip())

    blocks: List[Block] = []
    for piece in pieces[1:]:
        paragraphs = _BLANK_LINE.split(piece.strip())
        item = _clean_block_text(paragraphs[0])
        if item:
            blocks.append(Block(BlockKind.LIST_ITEM, item))
        for paragraph in paragraphs[1:]:
            text = _clean_block_text(paragraph)
            if text:
                blocks.append(Block(BlockKind.PARAGRAPH, text))

    if not blocks:
        return None
    return Document(title=title, source=source, blocks=tuple(blocks))


def iter_documents(
    content: str,
    source: str = "",
    on_skip: Optional[Callable[[str], None]] = None,
) -> Iterator[Document]:
    """Yield every document with a non-empty body found in content.

    ``on_skip`` is called with each section that is dropped for having no body.
    """
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    for section in split_sections(content):
        document = parse_section(section, source)
        if document is None:
            LOGGER.debug("Skipping section without body in %s", source or "<text>")
            if on_skip is not None:
                on_skip(section)
            continue
        yield document


def load_documents(
    path: Path, on_skip: Optional[Callable[[str], None]] = None
) -> List[Document]:
    """Read a note file and segment it into documents."""
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    return list(iter_documents(content, str(path), on_skip))
