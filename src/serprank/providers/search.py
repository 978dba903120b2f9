"""
Search provider: fetches candidate documents for a query.

Default implementation calls SerpAPI (Google engine) and maps organic
results to ranking Documents. The ranking engine never calls this module;
the HTTP layer fetches documents first and passes them in.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

import requests

from ..ranking.models import Document
from .base import ProviderError

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search.json"


class SearchProviderError(ProviderError):
    """Search API call failed or returned an unusable payload."""


@dataclass
class SearchResults:
    """Documents returned for one query plus the provider's reported total."""
    query: str
    documents: List[Document]
    total_results: int = 0
    raw: dict = field(default_factory=dict, repr=False)


class SearchProvider(ABC):
    """Interface for document supply so the HTTP layer can swap providers."""

    @abstractmethod
    def search(self, query: str) -> SearchResults:
        """
        Fetch candidate documents for query.

        Raises:
            ValueError: Empty query
            SearchProviderError: Upstream failure
        """
        pass

    def close(self):
        """Optional cleanup (close HTTP sessions etc.)"""
        pass


class SerpApiSearchProvider(SearchProvider):
    """Google organic results via SerpAPI."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = SERPAPI_URL,
        num_results: int = 20,
        gl: str = "us",
        hl: str = "en",
        timeout: float = 30,
        session: requests.Session = None
    ):
        """
        Args:
            api_key: SerpAPI key
            endpoint: Search endpoint URL
            num_results: Results requested per query
            gl: Country code for geolocation
            hl: Interface language
            timeout: Request timeout in seconds
            session: Optional requests session (tests inject a mock)
        """
        if not api_key:
            raise ValueError("SerpAPI key required. Set SERPAPI_KEY env var or pass api_key parameter.")

        self.api_key = api_key
        self.endpoint = endpoint
        self.num_results = num_results
        self.gl = gl
        self.hl = hl
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(self, query: str) -> SearchResults:
        if not query or not query.strip():
            raise ValueError("Query must not be empty")

        params = {
            "api_key": self.api_key,
            "engine": "google",
            "q": query,
            "num": self.num_results,
            "gl": self.gl,
            "hl": self.hl,
        }

        logger.info(f"Searching for: {query}")

        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"SerpAPI request failed: {e}")
            raise SearchProviderError(f"Search request failed: {e}") from e

        if not response.ok:
            logger.error(f"SerpAPI error: {response.status_code} - {response.text[:200]}")
            raise SearchProviderError(
                f"Search API returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SearchProviderError(f"Search API returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SearchProviderError("Search API returned an unexpected payload")

        if data.get("error") and not data.get("organic_results"):
            # SerpAPI reports "no results" and quota problems in the body
            logger.warning(f"SerpAPI reported: {data['error']}")

        documents = [self._to_document(item) for item in data.get("organic_results") or []]
        total = (data.get("search_information") or {}).get("total_results") or 0

        logger.info(f"SerpAPI returned {len(documents)} results (total reported: {total})")

        return SearchResults(query=query, documents=documents, total_results=int(total), raw=data)

    @staticmethod
    def _to_document(item: dict) -> Document:
        extra = {}
        if item.get("position") is not None:
            extra["position"] = item["position"]
        if item.get("displayed_link"):
            extra["displayed_link"] = item["displayed_link"]

        return Document(
            title=str(item.get("title") or ""),
            snippet=str(item.get("snippet") or ""),
            link=str(item.get("link") or ""),
            extra=extra,
        )

    def close(self):
        self.session.close()
