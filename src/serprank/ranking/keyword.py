"""
Keyword matching score: fraction of query terms literally present in a text.

Formula:
    score = |{t in Q : t in D}| / |Q|

Repeated query terms are not deduplicated. Each occurrence is tested on its
own, so "python python guide" against a text containing only "python" scores
2/3, not 1/2.
"""

from dataclasses import dataclass
from typing import List, Optional

from .tokenizer import Tokenizer, default_tokenizer


@dataclass(frozen=True)
class KeywordMatch:
    """Keyword score with the term lists it was computed from"""
    score: float
    query_words: List[str]
    text_words: List[str]
    matched_words: List[str]

    @property
    def total_query_words(self) -> int:
        return len(self.query_words)

    @property
    def matched_count(self) -> int:
        return len(self.matched_words)


def match_terms(query_words: List[str], text_words: List[str]) -> KeywordMatch:
    """Compute the keyword score from already tokenized query and text."""
    if not query_words:
        return KeywordMatch(score=0.0, query_words=[], text_words=list(text_words), matched_words=[])

    vocabulary = set(text_words)
    matched = [w for w in query_words if w in vocabulary]

    return KeywordMatch(
        score=len(matched) / len(query_words),
        query_words=list(query_words),
        text_words=list(text_words),
        matched_words=matched,
    )


def match_keywords(
    query: Optional[str],
    text: Optional[str],
    tokenizer: Tokenizer = default_tokenizer
) -> KeywordMatch:
    """
    Tokenize query and text, then compute the keyword match with details.

    Example:
        >>> m = match_keywords("machine learning tutorial", "Best machine learning tutorial")
        >>> m.score, m.matched_words
        (1.0, ['machine', 'learning', 'tutorial'])
    """
    return match_terms(tokenizer.tokenize(query), tokenizer.tokenize(text))


def keyword_score(
    query: Optional[str],
    text: Optional[str],
    tokenizer: Tokenizer = default_tokenizer
) -> float:
    """Fraction of query terms found in text (0.0 for an empty query)."""
    return match_keywords(query, text, tokenizer).score
