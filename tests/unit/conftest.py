"""Unit test fixtures - sample search results and isolated collaborators"""

import pytest

from serprank.providers import InMemoryHistoryStore


@pytest.fixture
def sample_documents():
    """Search results as the provider returns them (title/snippet/link + extras)"""
    return [
        {
            "title": "Cooking pasta at home",
            "snippet": "Easy dinner recipes with fresh tomatoes",
            "link": "https://example.com/pasta",
            "position": 1,
        },
        {
            "title": "Machine learning tutorial",
            "snippet": "Learn machine learning with python notebooks",
            "link": "https://example.com/ml",
            "position": 2,
        },
        {
            "title": "Python tutorial for beginners",
            "snippet": "Variables, loops and functions explained",
            "link": "https://example.com/python",
            "position": 3,
        },
    ]


@pytest.fixture
def history_store():
    return InMemoryHistoryStore(prefix="search")
