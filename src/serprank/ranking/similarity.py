"""
Cosine similarity between sparse term vectors.

    similarity = dot(a, b) / (|a| * |b|)

Missing terms count as 0. A zero-norm vector gives similarity 0.
"""

import math
from dataclasses import dataclass
from typing import Dict

Vector = Dict[str, float]


@dataclass(frozen=True)
class SimilarityResult:
    similarity: float
    dot_product: float
    norm_a: float
    norm_b: float


def cosine_similarity_details(a: Vector, b: Vector) -> SimilarityResult:
    """
    Cosine similarity with its intermediates (dot product and both norms).

    When either norm is 0 all intermediates are reported as 0.
    """
    dot = 0.0
    sum_sq_a = 0.0
    sum_sq_b = 0.0

    # Sorted so the float sums are identical for (a, b) and (b, a)
    for term in sorted(a.keys() | b.keys()):
        val_a = a.get(term, 0.0)
        val_b = b.get(term, 0.0)
        dot += val_a * val_b
        sum_sq_a += val_a * val_a
        sum_sq_b += val_b * val_b

    if sum_sq_a == 0 or sum_sq_b == 0:
        return SimilarityResult(similarity=0.0, dot_product=0.0, norm_a=0.0, norm_b=0.0)

    norm_a = math.sqrt(sum_sq_a)
    norm_b = math.sqrt(sum_sq_b)

    return SimilarityResult(
        similarity=dot / (norm_a * norm_b),
        dot_product=dot,
        norm_a=norm_a,
        norm_b=norm_b,
    )


def cosine_similarity(a: Vector, b: Vector) -> float:
    return cosine_similarity_details(a, b).similarity
