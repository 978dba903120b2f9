"""
TF-IDF vectors over a per-call corpus.

The corpus is the query plus the current batch of candidate documents
(query at index 0). It only lives for one ranking call, so IDF is
recomputed every time and never cached.

Formulas:
    tf(t, i)  = count(t, i) / |tokens(i)|          (0 for an empty member)
    idf(t)    = ln(N / (df(t) + 1))
    w(t, i)   = tf(t, i) * idf(t)

Where:
    N     = corpus size (query + documents)
    df(t) = number of corpus members containing t

The +1 keeps the ratio finite. It also means a term present in every member
gets a negative idf; that value is used as is, not clamped.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

logger = logging.getLogger(__name__)

Vector = Dict[str, float]


def term_counts(tokens: Sequence[str]) -> Dict[str, int]:
    """Raw occurrence counts, keyed in first-occurrence order."""
    return dict(Counter(tokens))


def term_frequencies(tokens: Sequence[str]) -> Vector:
    """Occurrence counts normalized by token count."""
    total = len(tokens)
    if total == 0:
        return {}
    return {term: count / total for term, count in term_counts(tokens).items()}


def document_frequencies(corpus: Sequence[Sequence[str]]) -> Dict[str, int]:
    """Number of corpus members containing each term."""
    df: Counter = Counter()
    for tokens in corpus:
        df.update(set(tokens))
    return dict(df)


def idf_from_counts(df: Dict[str, int], corpus_size: int) -> Vector:
    return {term: math.log(corpus_size / (count + 1)) for term, count in df.items()}


def inverse_document_frequencies(corpus: Sequence[Sequence[str]]) -> Vector:
    """IDF for every term that occurs anywhere in the corpus."""
    return idf_from_counts(document_frequencies(corpus), len(corpus))


def tfidf_vector(tokens: Sequence[str], idf: Vector) -> Vector:
    """Sparse tf*idf vector restricted to the terms of one member."""
    return {term: tf * idf.get(term, 0.0) for term, tf in term_frequencies(tokens).items()}


@dataclass(frozen=True)
class TfidfCorpus:
    """Tokenized corpus with its shared IDF table and one vector per member."""
    members: List[List[str]]
    df: Dict[str, int]
    idf: Vector
    vectors: List[Vector]

    @classmethod
    def build(cls, members: Sequence[Sequence[str]]) -> "TfidfCorpus":
        """
        Compute DF, IDF and per-member vectors in one pass over the corpus.

        Args:
            members: Token lists; index 0 is the query, 1..n the documents
        """
        members = [list(tokens) for tokens in members]
        df = document_frequencies(members)
        idf = idf_from_counts(df, len(members))
        vectors = [tfidf_vector(tokens, idf) for tokens in members]

        logger.debug(f"Built TF-IDF corpus: {len(members)} members, {len(idf)} distinct terms")

        return cls(members=members, df=df, idf=idf, vectors=vectors)

    @property
    def size(self) -> int:
        return len(self.members)

    def document_frequency(self, term: str) -> int:
        return self.df.get(term, 0)
