"""SERP Rank - search, explainable relevance ranking and thread generation."""

__version__ = "0.1.0"
