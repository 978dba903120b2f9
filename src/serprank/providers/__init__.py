"""
External collaborators around the ranking engine.

- search: candidate documents for a query (SerpAPI)
- scraper: page content extraction (requests + BeautifulSoup)
- rewriter: thread generation from page content (Gemini)
- history: append-only store of past searches and generated threads

Usage:
    from serprank.providers import SerpApiSearchProvider, JsonFileHistoryStore

    provider = SerpApiSearchProvider(api_key=key)
    results = provider.search("vector databases")
"""

from .base import ProviderError
from .search import SearchProvider, SearchProviderError, SearchResults, SerpApiSearchProvider
from .scraper import PageScraper, ScrapedPage, ScrapeError
from .rewriter import (
    RawThread,
    RewriterError,
    StructuredThread,
    ThreadResult,
    ThreadRewriter,
    ThreadSection,
    parse_thread_sections,
    parse_tweets,
)
from .history import HistoryStore, InMemoryHistoryStore, JsonFileHistoryStore

__all__ = [
    'ProviderError',
    'SearchProvider',
    'SearchProviderError',
    'SearchResults',
    'SerpApiSearchProvider',
    'PageScraper',
    'ScrapedPage',
    'ScrapeError',
    'RawThread',
    'RewriterError',
    'StructuredThread',
    'ThreadResult',
    'ThreadRewriter',
    'ThreadSection',
    'parse_thread_sections',
    'parse_tweets',
    'HistoryStore',
    'InMemoryHistoryStore',
    'JsonFileHistoryStore',
]
