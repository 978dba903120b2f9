"""
Weighted score fusion for search results.

Combines two relevance signals per document:
- keyword score: fraction of query terms literally present
- tfidf score: cosine similarity of TF-IDF vectors (query vs document)

Formula:
    final_score = keyword_weight * keyword_score + tfidf_weight * tfidf_score

Weights default to 0.4 / 0.6. They are not required to sum to 1; with other
weights final_score can leave [0, 1].

Ordering: final_score descending. Documents with equal final_score keep their
input order (stable sort, no secondary key).
"""

import logging
from typing import Any, List, Optional, Sequence

from .keyword import match_terms
from .models import (
    CalculationTrace,
    Document,
    InverseDocumentFrequencyDetail,
    RankedDocument,
    RankingValidationError,
    TermFrequencyDetail,
    validate_weight,
)
from .similarity import cosine_similarity_details
from .tfidf import TfidfCorpus, term_counts, term_frequencies
from .tokenizer import Tokenizer, default_tokenizer

logger = logging.getLogger(__name__)

DEFAULT_KEYWORD_WEIGHT = 0.4
DEFAULT_TFIDF_WEIGHT = 0.6

# Number of terms shown in each trace table
TOP_TERMS = 4


def top_term_frequencies(tokens: List[str], limit: int = TOP_TERMS) -> List[TermFrequencyDetail]:
    """Highest-tf terms of a document; ties keep first-occurrence order."""
    counts = term_counts(tokens)
    ranked = sorted(term_frequencies(tokens).items(), key=lambda item: item[1], reverse=True)
    return [
        TermFrequencyDetail(word=word, tf=tf, count=counts[word], total_words=len(tokens))
        for word, tf in ranked[:limit]
    ]


def top_query_idf(
    query_words: List[str],
    corpus: TfidfCorpus,
    limit: int = TOP_TERMS
) -> List[InverseDocumentFrequencyDetail]:
    """Rarest query terms across the corpus; each distinct term listed once."""
    details = [
        InverseDocumentFrequencyDetail(
            word=word,
            idf=corpus.idf.get(word, 0.0),
            docs_with_word=corpus.document_frequency(word),
            total_docs=corpus.size,
        )
        # Repeats collapse to one entry here, unlike keyword scoring, which counts each occurrence
        for word in dict.fromkeys(query_words)
    ]
    details.sort(key=lambda d: d.idf, reverse=True)
    return details[:limit]


def _coerce_documents(documents: Any) -> List[Document]:
    if not isinstance(documents, (list, tuple)):
        raise RankingValidationError(
            f"documents must be a list of documents, got {type(documents).__name__}"
        )
    return [Document.from_input(raw, position) for position, raw in enumerate(documents)]


def rank_documents(
    query: Optional[str],
    documents: Sequence[Any],
    keyword_weight: float = DEFAULT_KEYWORD_WEIGHT,
    tfidf_weight: float = DEFAULT_TFIDF_WEIGHT,
    tokenizer: Optional[Tokenizer] = None,
) -> List[RankedDocument]:
    """
    Rank search results by fused keyword + TF-IDF relevance.

    Args:
        query: Search query (None or "" is allowed and scores everything 0)
        documents: Documents or mappings with title / snippet / link
            Extra mapping keys are carried through to the result
        keyword_weight: Weight of the keyword match score
        tfidf_weight: Weight of the TF-IDF cosine similarity
        tokenizer: Tokenizer to use (default stopword set if None)

    Returns:
        RankedDocument list sorted by final_score (descending, stable)

    Raises:
        RankingValidationError: Wrong shapes/types for query, documents or weights

    Example:
        >>> ranked = rank_documents("python tutorial", [
        ...     {"title": "Cooking pasta", "snippet": "Easy dinner", "link": "a"},
        ...     {"title": "Python tutorial", "snippet": "Learn python", "link": "b"},
        ... ])
        >>> [r.link for r in ranked]
        ['b', 'a']
    """
    if query is not None and not isinstance(query, str):
        raise RankingValidationError(f"query must be a string, got {type(query).__name__}")

    keyword_weight = validate_weight("keyword_weight", keyword_weight)
    tfidf_weight = validate_weight("tfidf_weight", tfidf_weight)
    docs = _coerce_documents(documents)

    if not docs:
        return []

    tokenizer = tokenizer or default_tokenizer

    # Corpus order is fixed: query first, then documents in input order
    query_words = tokenizer.tokenize(query)
    doc_words = [tokenizer.tokenize(doc.text) for doc in docs]
    corpus = TfidfCorpus.build([query_words] + doc_words)
    query_vector = corpus.vectors[0]
    top_idf = top_query_idf(query_words, corpus)

    ranked = []
    for index, doc in enumerate(docs):
        words = doc_words[index]
        keyword = match_terms(query_words, words)
        similarity = cosine_similarity_details(query_vector, corpus.vectors[index + 1])

        final_score = keyword_weight * keyword.score + tfidf_weight * similarity.similarity

        ranked.append(RankedDocument(
            document=doc,
            keyword_score=keyword.score,
            tfidf_score=similarity.similarity,
            final_score=final_score,
            calculation_trace=CalculationTrace(
                query_words=list(query_words),
                matched_words=keyword.matched_words,
                top_tf_words=top_term_frequencies(words),
                top_idf_words=list(top_idf),
                dot_product=similarity.dot_product,
                query_norm=similarity.norm_a,
                post_norm=similarity.norm_b,
            ),
        ))

    # sorted() is stable with reverse=True: equal scores keep input order
    ranked = sorted(ranked, key=lambda r: r.final_score, reverse=True)

    logger.debug(
        f"Ranked {len(docs)} documents (corpus={corpus.size}, vocabulary={len(corpus.idf)}, "
        f"weights={keyword_weight}/{tfidf_weight}), top score: {ranked[0].final_score:.4f}"
    )

    return ranked
