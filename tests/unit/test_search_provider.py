"""
Unit tests for the SerpAPI search provider (HTTP mocked).
"""

import pytest
import requests
from unittest.mock import Mock

from serprank.providers.search import SearchProviderError, SerpApiSearchProvider

pytestmark = pytest.mark.unit


def _http_response(payload=None, status_code=200, json_error=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = str(payload)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


SERPAPI_PAYLOAD = {
    "search_information": {"total_results": 1250000},
    "organic_results": [
        {
            "position": 1,
            "title": "Machine learning tutorial",
            "snippet": "Learn machine learning",
            "link": "https://example.com/ml",
            "displayed_link": "example.com › ml",
        },
        {
            "position": 2,
            "title": "Python guide",
            "link": "https://example.com/python",
        },
    ],
}


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


class TestSerpApiSearchProvider:
    """Test SerpAPI search with a mocked session"""

    def test_requires_api_key(self):
        """Test a missing API key is refused"""
        with pytest.raises(ValueError, match="SERPAPI_KEY"):
            SerpApiSearchProvider(api_key="")

    def test_search_maps_documents(self, session):
        """Test organic results map to documents"""
        session.get.return_value = _http_response(SERPAPI_PAYLOAD)
        provider = SerpApiSearchProvider(api_key="key", session=session)

        results = provider.search("machine learning")

        assert results.query == "machine learning"
        assert results.total_results == 1250000
        assert [d.link for d in results.documents] == [
            "https://example.com/ml",
            "https://example.com/python",
        ]
        assert results.documents[0].extra == {"position": 1, "displayed_link": "example.com › ml"}
        assert results.documents[1].snippet == ""  # missing snippet

    def test_request_parameters(self, session):
        """Test query parameters sent to SerpAPI"""
        session.get.return_value = _http_response(SERPAPI_PAYLOAD)
        provider = SerpApiSearchProvider(api_key="key", num_results=10, gl="de", hl="de", session=session)

        provider.search("kubernetes")

        args, kwargs = session.get.call_args
        assert kwargs["params"] == {
            "api_key": "key", "engine": "google", "q": "kubernetes", "num": 10, "gl": "de", "hl": "de",
        }
        assert kwargs["timeout"] == 30

    def test_no_results(self, session):
        """Test a response without organic results"""
        session.get.return_value = _http_response({"error": "Google hasn't returned any results"})
        results = SerpApiSearchProvider(api_key="key", session=session).search("zzzz")
        assert results.documents == []
        assert results.total_results == 0

    def test_empty_query(self, session):
        """Test a blank query is rejected before any request"""
        with pytest.raises(ValueError):
            SerpApiSearchProvider(api_key="key", session=session).search("  ")
        session.get.assert_not_called()

    def test_http_error(self, session):
        """Test HTTP errors carry the upstream status code"""
        session.get.return_value = _http_response({"error": "Invalid API key"}, status_code=401)
        with pytest.raises(SearchProviderError) as exc_info:
            SerpApiSearchProvider(api_key="key", session=session).search("python")
        assert exc_info.value.status_code == 401

    def test_network_error(self, session):
        """Test network errors become SearchProviderError"""
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(SearchProviderError, match="connection refused"):
            SerpApiSearchProvider(api_key="key", session=session).search("python")

    def test_invalid_json(self, session):
        """Test an invalid JSON body becomes SearchProviderError"""
        session.get.return_value = _http_response(json_error=ValueError("Expecting value"))
        with pytest.raises(SearchProviderError, match="invalid JSON"):
            SerpApiSearchProvider(api_key="key", session=session).search("python")
