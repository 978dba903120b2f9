"""
Data model for the relevance ranking engine.

Documents come in from the search provider (title / snippet / link) and leave
as RankedDocument instances carrying three scores and a CalculationTrace.

The trace is a rendering contract for the score breakdown view: every number
in it can be recomputed from the trace's own fields, e.g.

    tf  = count / total_words
    idf = ln(total_docs / (docs_with_word + 1))
    tfidf_score = dot_product / (query_norm * post_norm)
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping


class RankingValidationError(ValueError):
    """Raised when the caller passes wrongly shaped documents or weights."""


# Fields the engine reads from each input document
DOCUMENT_FIELDS = ("title", "snippet", "link")


@dataclass(frozen=True)
class Document:
    """One ranking candidate. Link and extra fields are passed through untouched."""
    title: str = ""
    snippet: str = ""
    link: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Text used for scoring: title and snippet joined by a space."""
        return f"{self.title} {self.snippet}"

    @classmethod
    def from_input(cls, raw: Any, position: int = 0) -> "Document":
        """
        Build a Document from a Document or a mapping.

        Missing or None title/snippet/link become empty strings.
        Anything else that is not a string raises RankingValidationError.

        Args:
            raw: Document instance or mapping with title/snippet/link keys
            position: Index in the input list (used in error messages)
        """
        if isinstance(raw, Document):
            return raw

        if not isinstance(raw, Mapping):
            raise RankingValidationError(
                f"documents[{position}] must be a mapping or Document, got {type(raw).__name__}"
            )

        values = {}
        for name in DOCUMENT_FIELDS:
            value = raw.get(name)
            if value is None:
                value = ""
            elif not isinstance(value, str):
                raise RankingValidationError(
                    f"documents[{position}].{name} must be a string, got {type(value).__name__}"
                )
            values[name] = value

        extra = {k: v for k, v in raw.items() if k not in DOCUMENT_FIELDS}
        return cls(extra=extra, **values)


@dataclass(frozen=True)
class TermFrequencyDetail:
    """Term frequency of one document term: tf = count / total_words"""
    word: str
    tf: float
    count: int
    total_words: int

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "tf": self.tf,
            "count": self.count,
            "total_words": self.total_words,
        }


@dataclass(frozen=True)
class InverseDocumentFrequencyDetail:
    """IDF of one query term: idf = ln(total_docs / (docs_with_word + 1))"""
    word: str
    idf: float
    docs_with_word: int
    total_docs: int

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "idf": self.idf,
            "docs_with_word": self.docs_with_word,
            "total_docs": self.total_docs,
        }


@dataclass(frozen=True)
class CalculationTrace:
    """Per-document breakdown of how the scores were computed."""
    query_words: List[str]
    matched_words: List[str]
    top_tf_words: List[TermFrequencyDetail]
    top_idf_words: List[InverseDocumentFrequencyDetail]
    dot_product: float
    query_norm: float
    post_norm: float

    def to_dict(self) -> dict:
        return {
            "query_words": list(self.query_words),
            "matched_words": list(self.matched_words),
            "top_tf_words": [w.to_dict() for w in self.top_tf_words],
            "top_idf_words": [w.to_dict() for w in self.top_idf_words],
            "dot_product": self.dot_product,
            "query_norm": self.query_norm,
            "post_norm": self.post_norm,
        }


@dataclass(frozen=True)
class RankedDocument:
    """Input document annotated with its scores and calculation trace."""
    document: Document
    keyword_score: float
    tfidf_score: float
    final_score: float
    calculation_trace: CalculationTrace

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def snippet(self) -> str:
        return self.document.snippet

    @property
    def link(self) -> str:
        return self.document.link

    def to_dict(self) -> dict:
        """Flatten into the presentation payload (input fields + scores + trace)."""
        payload = dict(self.document.extra)
        payload.update(
            title=self.document.title,
            snippet=self.document.snippet,
            link=self.document.link,
            keyword_score=self.keyword_score,
            tfidf_score=self.tfidf_score,
            final_score=self.final_score,
            calculation_trace=self.calculation_trace.to_dict(),
        )
        return payload


def validate_weight(name: str, value: Any) -> float:
    """Return weight as float; reject bools, non-numbers, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise RankingValidationError(f"{name} must be a number, got {type(value).__name__}")

    value = float(value)
    if not math.isfinite(value):
        raise RankingValidationError(f"{name} must be finite, got {value}")
    return value
