"""Ranked search over a stored corpus."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from rememberall.config import Mode
from rememberall.index.storage import CorpusStore
from rememberall.models import Corpus
from rememberall.utils.text import query_stems

LOGGER = logging.getLogger(__name__)

SCORE_SCALE = 100_000


@dataclass(slots=True)
class SearchResult:
    document_id: str
    title: str
    source: str
    score: float
    text: str


def bayesian_scores(corpus: Corpus, stems: Sequence[str]) -> Dict[str, float]:
    """Posterior probability that each document is the one the query describes.

    The prior is uniform over documents. The likelihood is the product of the
    document's relative frequency of every query stem; the evidence is the
    product of each stem's rate across all other documents. Both products stop
    as soon as they reach zero.
    """
    if not corpus.documents or not stems:
        return {}

    prior = 1.0 / len(corpus.documents)
    total_tokens = corpus.total_length
    totals = {
        stem: sum(document.terms.get(stem, 0.0) for document in corpus.documents.values())
        for stem in stems
    }

    scores: Dict[str, float] = {}
    for doc_id, document in corpus.documents.items():
        likelihood = 1.0
        for stem in stems:
            if likelihood == 0.0:
                break
            if document.length:
                likelihood *= document.terms.get(stem, 0.0) / document.length
            else:
                likelihood = 0.0

        evidence = 1.0
        for stem in stems:
            if evidence == 0.0:
                break
            if total_tokens:
                evidence *= (totals[stem] - document.terms.get(stem, 0.0)) / total_tokens
            else:
                evidence = 0.0

        numerator = prior * likelihood
        denominator = numerator + (1.0 - prior) * evidence
        scores[doc_id] = numerator / denominator if denominator else 0.0
    return scores


def frequency_scores(corpus: Corpus, stems: Sequence[str]) -> Dict[str, float]:
    """TF-IDF sums normalized by the sum over every document."""
    raw: Dict[str, float] = {}
    for doc_id, document in corpus.documents.items():
        raw[doc_id] = sum(
            corpus.terms.get(stem, 0.0) * document.terms[stem]
            for stem in stems
            if stem in document.terms
        )

    total = sum(raw.values())
    if total <= 0.0:
        return {}
    return {doc_id: score / total for doc_id, score in raw.items() if score > 0.0}


def top_documents(scores: Dict[str, float], top_n: int) -> List[Tuple[str, float]]:
    """Highest scores first, ties by document id; zero scores never appear."""
    candidates = [(doc_id, score) for doc_id, score in scores.items() if score > 0.0]
    candidates.sort(key=lambda item: (-int(item[1] * SCORE_SCALE), item[0]))
    return candidates[: max(top_n, 0)]


class Searcher:
    """High-level API to rank the stored corpus against a query."""

    def __init__(self, store: CorpusStore) -> None:
        self.store = store

    def search(self, terms: Sequence[str], *, top_n: int = 1) -> List[SearchResult]:
        corpus = self.store.load()
        return self.rank(corpus, terms, top_n=top_n)

    @staticmethod
    def rank(corpus: Corpus, terms: Sequence[str], *, top_n: int = 1) -> List[SearchResult]:
        stems = query_stems(terms)
        LOGGER.debug("Query stems: %s", stems)

        if corpus.mode is Mode.FREQUENCY:
            scores = frequency_scores(corpus, stems)
        else:
            scores = bayesian_scores(corpus, stems)

        results: List[SearchResult] = []
        for doc_id, score in top_documents(scores, top_n):
            document = corpus.documents[doc_id]
            results.append(
                SearchResult(
                    document_id=doc_id,
                    title=document.title,
                    source=document.source,
                    score=score,
                    text=document.display_text(),
                )
            )
        return results
