"""Text helpers: token cleaning, stemming and term counting."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, Iterator, List, Tuple

from nltk.stem import PorterStemmer

LOGGER = logging.getLogger(__name__)

MARKUP_TOKENS = ("<ul>", "<br>", "<li>", "[", "]", "**")
PUNCTUATION = (".", ",", '"', ":")

_stemmer = PorterStemmer()


def stem(token: str) -> str:
    """Reduce a cleaned token to its stem, falling back to the token itself."""
    try:
        stemmed = _stemmer.stem(token)
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("Stemmer failed on %r: %s", token, exc)
        return token
    return stemmed or token


def clean_token(token: str) -> str:
    """Lowercase a token and strip punctuation that carries no meaning."""
    cleaned = token.lower()
    for mark in PUNCTUATION:
        cleaned = cleaned.replace(mark, "")
    # Stored text has its double quotes turned into single quotes.
    return cleaned.strip("'")


def iter_tokens(text: str) -> Iterator[str]:
    """Yield cleaned, unstemmed tokens from text that may contain markup."""
    for marker in MARKUP_TOKENS:
        text = text.replace(marker, " ")
    for raw in text.split():
        token = clean_token(raw)
        if token:
            yield token


def count_terms(text: str) -> Tuple[Dict[str, float], int]:
    """Multiset mode: occurrence count per stem plus the total token count."""
    counts: Counter[str] = Counter()
    length = 0
    for token in iter_tokens(text):
        counts[stem(token)] += 1
        length += 1
    return {term: float(count) for term, count in counts.items()}, length


def weigh_terms(text: str) -> Dict[str, float]:
    """Set mode: every distinct stem weighted by one over the number of distinct stems."""
    stems = {stem(token) for token in iter_tokens(text)}
    if not stems:
        return {}
    weight = 1.0 / len(stems)
    return {term: weight for term in stems}


def query_stems(terms: Iterable[str]) -> List[str]:
    """Normalize query terms into distinct stems, keeping first-seen order."""
    seen: Dict[str, None] = {}
    for term in terms:
        for token in iter_tokens(term):
            seen.setdefault(stem(token), None)
    return list(seen)


def normalize_quotes(text: str) -> str:
    """Replace double quotes so a field never needs escaping in the flat store."""
    return text.replace('"', "'")
