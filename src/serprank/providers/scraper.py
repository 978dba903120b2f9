"""
Page scraper: fetches a result URL and extracts structured text.

Extracted fields (with limits):
- title, meta description
- body text (first 20000 chars)
- headings h1-h6 (20), paragraphs (10), links (20), images (10)
- JSON-LD structured data blocks (invalid JSON skipped)

HTTP-level retries (429 / 5xx) are handled by urllib3's Retry on the session.
Anything still failing surfaces as ScrapeError.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .base import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

MAX_BODY_CHARS = 20000
MAX_HEADINGS = 20
MAX_PARAGRAPHS = 10
MAX_LINKS = 20
MAX_IMAGES = 10


class ScrapeError(ProviderError):
    """Page could not be fetched or parsed."""


@dataclass
class ScrapedPage:
    url: str
    title: str = ""
    meta_description: str = ""
    body_text: str = ""
    headings: List[dict] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    links: List[dict] = field(default_factory=list)
    images: List[dict] = field(default_factory=list)
    structured_data: List[object] = field(default_factory=list)
    scraped_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class PageScraper:
    """Fetch a page over HTTP and extract its readable content."""

    def __init__(
        self,
        timeout: float = 45,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session = None
    ):
        self.timeout = timeout
        self.session = session or self._create_session(max_retries, backoff_factor)
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        })

    @staticmethod
    def _create_session(max_retries: int, backoff_factor: float) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def scrape(self, url: str) -> ScrapedPage:
        """
        Fetch url and extract page content.

        Raises:
            ValueError: URL is not http(s)
            ScrapeError: Network error, HTTP error status or non-HTML response
        """
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"URL must be an absolute http(s) URL: {url!r}")

        logger.info(f"Scraping URL: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Scrape failed for {url}: HTTP {status_code}")
            raise ScrapeError(f"Failed to fetch page: HTTP {status_code}", status_code=status_code) from e
        except requests.RequestException as e:
            logger.error(f"Scrape failed for {url}: {e}")
            raise ScrapeError(f"Failed to fetch page: {e}") from e

        content_type = response.headers.get("Content-Type", "")
        if content_type and "html" not in content_type and "xml" not in content_type:
            raise ScrapeError(f"Unsupported content type: {content_type}")

        page = parse_html(response.text, response.url or url)
        logger.info(
            f"Scraped {page.url}: {len(page.body_text)} chars, "
            f"{len(page.headings)} headings, {len(page.links)} links"
        )
        return page

    def close(self):
        self.session.close()


def parse_html(html: str, url: str) -> ScrapedPage:
    """Extract ScrapedPage fields from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    # JSON-LD must be read before script tags are stripped
    structured_data = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            structured_data.append(json.loads(script.string or ""))
        except ValueError:
            logger.debug(f"Skipping invalid JSON-LD block on {url}")

    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""

    meta = soup.find("meta", attrs={"name": "description"})
    meta_description = (meta.get("content") or "").strip() if meta else ""

    body = soup.body or soup
    body_text = body.get_text(separator="\n", strip=True)[:MAX_BODY_CHARS]

    headings = []
    for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = h.get_text(" ", strip=True)
        if text:
            headings.append({"tag": h.name, "text": text})

    paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
    paragraphs = [p for p in paragraphs if p]

    links = []
    for a in soup.find_all("a", href=True):
        text = a.get_text(" ", strip=True)
        if not text:
            continue
        try:
            href = urljoin(url, a["href"])
        except ValueError:
            logger.debug(f"Skipping malformed link {a['href']!r} on {url}")
            continue
        links.append({"text": text, "href": href})

    images = []
    for img in soup.find_all("img", src=True):
        try:
            src = urljoin(url, img["src"])
        except ValueError:
            logger.debug(f"Skipping malformed image src {img['src']!r} on {url}")
            continue
        images.append({
            "src": src,
            "alt": img.get("alt") or "",
            "title": img.get("title") or "",
        })

    return ScrapedPage(
        url=url,
        title=title,
        meta_description=meta_description,
        body_text=body_text,
        headings=headings[:MAX_HEADINGS],
        paragraphs=paragraphs[:MAX_PARAGRAPHS],
        links=links[:MAX_LINKS],
        images=images[:MAX_IMAGES],
        structured_data=structured_data,
        scraped_at=datetime.now(timezone.utc).isoformat(),
    )
