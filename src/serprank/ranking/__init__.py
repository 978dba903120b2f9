"""
Explainable relevance ranking for search results.

Turns a query and a batch of candidate documents into an ordered list where
every entry carries its keyword score, TF-IDF similarity, fused final score
and a calculation trace of the intermediate numbers.

Components:
- tokenizer: Lowercasing, punctuation stripping, short-term and stopword removal
- keyword: Fraction of query terms literally present in a document
- tfidf: Term frequency / inverse document frequency over a per-call corpus
- similarity: Cosine similarity between sparse TF-IDF vectors
- fusion: Weighted score fusion, calculation trace and stable ordering

The engine is stateless: each call builds its own corpus (query + documents),
does no I/O and keeps nothing between calls.
"""

from .tokenizer import STOPWORDS, Tokenizer, tokenize
from .keyword import KeywordMatch, keyword_score, match_keywords
from .tfidf import TfidfCorpus, inverse_document_frequencies, term_frequencies
from .similarity import SimilarityResult, cosine_similarity, cosine_similarity_details
from .fusion import rank_documents
from .models import (
    CalculationTrace,
    Document,
    InverseDocumentFrequencyDetail,
    RankedDocument,
    RankingValidationError,
    TermFrequencyDetail,
)

__all__ = [
    "STOPWORDS",
    "Tokenizer",
    "tokenize",
    "KeywordMatch",
    "keyword_score",
    "match_keywords",
    "TfidfCorpus",
    "inverse_document_frequencies",
    "term_frequencies",
    "SimilarityResult",
    "cosine_similarity",
    "cosine_similarity_details",
    "rank_documents",
    "CalculationTrace",
    "Document",
    "InverseDocumentFrequencyDetail",
    "RankedDocument",
    "RankingValidationError",
    "TermFrequencyDetail",
]
