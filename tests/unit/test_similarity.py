"""
Unit tests for cosine similarity.
"""

import math

import pytest
from serprank.ranking.similarity import cosine_similarity, cosine_similarity_details

pytestmark = pytest.mark.unit


class TestCosineSimilarity:
    """Test cosine similarity values"""

    def test_identical_vectors(self):
        """Test identical vectors have similarity 1"""
        vec = {"python": 0.3, "tutorial": 0.7}
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)

    def test_disjoint_vectors(self):
        """Test vectors without shared terms have similarity 0"""
        assert cosine_similarity({"python": 1.0}, {"java": 1.0}) == 0.0

    def test_known_value(self):
        """Test a hand-computed similarity"""
        a = {"x": 1.0, "y": 2.0}
        b = {"x": 2.0, "z": 3.0}
        expected = 2.0 / (math.sqrt(5) * math.sqrt(13))
        assert cosine_similarity(a, b) == pytest.approx(expected)

    def test_magnitude_independent(self):
        """Test scaling a vector does not change similarity"""
        a = {"x": 1.0, "y": 2.0}
        scaled = {"x": 10.0, "y": 20.0}
        assert cosine_similarity(a, scaled) == pytest.approx(1.0)

    def test_symmetry(self):
        """Exact equality, not just approximate"""
        a = {"alpha": 0.13, "beta": 0.71, "gamma": 0.05, "delta": 0.33}
        b = {"beta": 0.29, "delta": 0.91, "epsilon": 0.44, "alpha": 0.02}
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_empty_vector(self):
        """Zero norm: similarity 0, no division by zero"""
        assert cosine_similarity({}, {"python": 1.0}) == 0.0
        assert cosine_similarity({"python": 1.0}, {}) == 0.0
        assert cosine_similarity({}, {}) == 0.0

    def test_all_zero_weights(self):
        """Test all-zero vectors give 0 instead of dividing by zero"""
        assert cosine_similarity({"python": 0.0}, {"python": 0.5}) == 0.0


class TestSimilarityDetails:
    """Test intermediate values of the cosine calculation"""

    def test_intermediates(self):
        """Test dot product and norms"""
        result = cosine_similarity_details({"x": 3.0, "y": 4.0}, {"x": 1.0})
        assert result.dot_product == pytest.approx(3.0)
        assert result.norm_a == pytest.approx(5.0)
        assert result.norm_b == pytest.approx(1.0)
        assert result.similarity == pytest.approx(0.6)

    def test_intermediates_reproduce_similarity(self):
        """Test dot over norm product equals the similarity"""
        result = cosine_similarity_details({"a": 0.2, "b": 0.9}, {"b": 0.4, "c": 0.1})
        recomputed = result.dot_product / (result.norm_a * result.norm_b)
        assert recomputed == pytest.approx(result.similarity, abs=1e-9)

    def test_zero_norm_details(self):
        """Test zero-norm details are all zero"""
        result = cosine_similarity_details({}, {"x": 2.0})
        assert result.similarity == 0.0
        assert result.dot_product == 0.0
        assert result.norm_a == 0.0
        assert result.norm_b == 0.0
