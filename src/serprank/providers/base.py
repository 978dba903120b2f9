"""
Shared error type for external collaborators (search API, scraping, Gemini).

Collaborators surface failures to the caller; none of them retries on its own
except the scraper's HTTP-level retry policy.
"""

from typing import Optional


class ProviderError(RuntimeError):
    """External call failed. status_code is the upstream HTTP status, if known."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
