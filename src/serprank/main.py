"""
SERP Rank - FastAPI application for explainable search result ranking

Pipeline exposed over HTTP:
- Search provider (SerpAPI) fetches candidate documents for a query
- Ranking engine scores them (keyword match + TF-IDF cosine) with a full trace
- Scraper extracts page content for a chosen result
- Gemini rewrites page content into a tweet thread
- History store keeps past searches and generated threads

The ranking engine itself does no I/O; everything slow or fallible lives in
serprank.providers and is called from here in worker threads.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import Settings, load_environment
from .logging_config import setup_logging

env_file = load_environment()
settings = Settings.from_env()

setup_logging(
    log_file="logs/serprank.log",
    console_level=getattr(logging, settings.log_level, logging.INFO),
    file_level=logging.DEBUG  # Always DEBUG in file for troubleshooting
)

logger = logging.getLogger(__name__)
if env_file is None:
    logger.warning("No .env.local or .env file found - using system environment variables only")
else:
    logger.info(f"Loaded environment from: {env_file}")


from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .providers import (
    HistoryStore,
    JsonFileHistoryStore,
    PageScraper,
    ProviderError,
    RawThread,
    ScrapeError,
    SearchProvider,
    SerpApiSearchProvider,
    ThreadResult,
    ThreadRewriter,
)
from .ranking import RankingValidationError, rank_documents

APP_VERSION = __version__
APP_START_TIME = datetime.now(timezone.utc)

# Global instances (created in lifespan, replaced by tests)
search_provider: Optional[SearchProvider] = None
page_scraper: Optional[PageScraper] = None
thread_rewriter: Optional[ThreadRewriter] = None
search_history: Optional[HistoryStore] = None
formatted_history: Optional[HistoryStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup collaborators"""
    global search_provider, page_scraper, thread_rewriter, search_history, formatted_history

    if settings.serpapi_key:
        search_provider = SerpApiSearchProvider(
            api_key=settings.serpapi_key,
            endpoint=settings.serpapi_url,
            num_results=settings.search_num_results,
            gl=settings.search_gl,
            hl=settings.search_hl,
        )
        logger.info("Search provider initialized (SerpAPI)")
    else:
        logger.warning("SERPAPI_KEY not configured - /v1/search disabled")

    if settings.gemini_api_key:
        thread_rewriter = ThreadRewriter.from_api_key(settings.gemini_api_key, model=settings.gemini_model)
        logger.info(f"Thread rewriter initialized ({settings.gemini_model})")
    else:
        logger.warning("GEMINI_API_KEY not configured - thread generation disabled")

    page_scraper = PageScraper(timeout=settings.scrape_timeout, max_retries=settings.scrape_max_retries)
    search_history = JsonFileHistoryStore(settings.searches_dir, prefix="search")
    formatted_history = JsonFileHistoryStore(settings.formatted_dir, prefix="formatted")
    logger.info(f"History stores initialized under {settings.data_dir}")

    yield

    logger.info("Shutting down...")
    for closable in (search_provider, page_scraper):
        if closable is not None:
            closable.close()
    search_provider = None
    page_scraper = None
    thread_rewriter = None


app = FastAPI(
    title="SERP Rank API",
    description="Search, explainable relevance ranking and thread generation",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float


class TermFrequencyItem(BaseModel):
    word: str
    tf: float
    count: int
    total_words: int


class InverseDocumentFrequencyItem(BaseModel):
    word: str
    idf: float
    docs_with_word: int
    total_docs: int


class CalculationTraceItem(BaseModel):
    query_words: List[str]
    matched_words: List[str]
    top_tf_words: List[TermFrequencyItem]
    top_idf_words: List[InverseDocumentFrequencyItem]
    dot_product: float
    query_norm: float
    post_norm: float


class RankedResultItem(BaseModel):
    # Provider fields such as "position" are passed through
    model_config = ConfigDict(extra="allow")

    title: str
    snippet: str
    link: str
    keyword_score: float
    tfidf_score: float
    final_score: float
    calculation_trace: CalculationTraceItem


class SearchResponse(BaseModel):
    query: str
    total_results: int
    results: List[RankedResultItem]


class RankRequest(BaseModel):
    query: str = Field("", description="Search query")
    documents: List[Dict[str, Any]] = Field(..., description="Documents with title, snippet and link")
    keyword_weight: Optional[float] = Field(None, description="Keyword score weight (default 0.4)")
    tfidf_weight: Optional[float] = Field(None, description="TF-IDF similarity weight (default 0.6)")


class RankResponse(BaseModel):
    query: str
    results: List[RankedResultItem]
    total: int


class ContentRequest(BaseModel):
    content: str = Field(..., description="Page content to rewrite", min_length=1)
    title: Optional[str] = Field(None, description="Content title")


class OriginalContentInfo(BaseModel):
    title: str
    content_length: int


class ThreadSectionItem(BaseModel):
    headline: str
    content: str


class TweetsResponse(BaseModel):
    tweets: List[str]
    original_content: OriginalContentInfo


class FormattedContentResponse(BaseModel):
    formatted_content: List[ThreadSectionItem]
    original_content: OriginalContentInfo
    record_id: Optional[str] = None


class HistoryResponse(BaseModel):
    history: List[Dict[str, Any]]
    total: int


def _provider_http_error(e: ProviderError, action: str) -> HTTPException:
    """Map a collaborator failure to an HTTP error"""
    if e.status_code == 429:
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="API rate limit exceeded. Please try again later.",
        )
    if e.status_code in (401, 403):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{action} failed: invalid API key for upstream service",
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"{action} failed: {str(e)}",
    )


def _require(component: Any, name: str) -> Any:
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not configured",
        )
    return component


def _sections(result: ThreadResult) -> List[ThreadSectionItem]:
    if isinstance(result, RawThread):
        return [ThreadSectionItem(headline="Formatted Content", content=result.text)]
    return [ThreadSectionItem(**s.to_dict()) for s in result.sections]


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "SERP Rank API",
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    uptime = (datetime.now(timezone.utc) - APP_START_TIME).total_seconds()

    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=round(uptime, 2),
    )


@app.get("/v1/search", response_model=SearchResponse)
async def search(q: str = Query(..., min_length=1, description="Search query")):
    """
    Search, then rank results by relevance to the query.

    Example:
        GET /v1/search?q=machine+learning+tutorial
    """
    provider = _require(search_provider, "Search provider")

    try:
        results = await asyncio.to_thread(provider.search, q)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProviderError as e:
        raise _provider_http_error(e, "Search")

    if search_history is not None:
        record = {
            "query": q,
            "total_results": results.total_results,
            "results": [
                dict(doc.extra, title=doc.title, snippet=doc.snippet, link=doc.link)
                for doc in results.documents
            ],
        }
        try:
            await asyncio.to_thread(search_history.save, record)
        except OSError as e:
            logger.error(f"Error saving search history: {e}")

    ranked = rank_documents(
        q,
        results.documents,
        keyword_weight=settings.keyword_weight,
        tfidf_weight=settings.tfidf_weight,
    )
    logger.info(f"Ranked {len(ranked)} results for '{q}'")

    return SearchResponse(
        query=q,
        total_results=results.total_results,
        results=[RankedResultItem(**r.to_dict()) for r in ranked],
    )


@app.post("/v1/rank", response_model=RankResponse)
async def rank(request: RankRequest):
    """
    Rank caller-supplied documents.

    Example:
        POST /v1/rank
        {
            "query": "python tutorial",
            "documents": [{"title": "...", "snippet": "...", "link": "..."}],
            "keyword_weight": 0.4,
            "tfidf_weight": 0.6
        }
    """
    keyword_weight = settings.keyword_weight if request.keyword_weight is None else request.keyword_weight
    tfidf_weight = settings.tfidf_weight if request.tfidf_weight is None else request.tfidf_weight

    try:
        ranked = rank_documents(
            request.query,
            request.documents,
            keyword_weight=keyword_weight,
            tfidf_weight=tfidf_weight,
        )
    except RankingValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RankResponse(
        query=request.query,
        results=[RankedResultItem(**r.to_dict()) for r in ranked],
        total=len(ranked),
    )


@app.get("/v1/scrape")
async def scrape(url: str = Query(..., min_length=1, description="Page URL")):
    """Fetch a page and return its extracted content"""
    scraper = _require(page_scraper, "Scraper")

    try:
        page = await asyncio.to_thread(scraper.scrape, url)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ScrapeError as e:
        raise _provider_http_error(e, "Scraping")

    return {"success": True, "data": page.to_dict()}


@app.post("/v1/threads", response_model=TweetsResponse)
async def generate_thread(request: ContentRequest):
    """Generate a tweet thread from page content"""
    rewriter = _require(thread_rewriter, "Thread rewriter")

    try:
        result = await asyncio.to_thread(rewriter.generate_tweets, request.content, request.title)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProviderError as e:
        raise _provider_http_error(e, "Thread generation")

    if isinstance(result, RawThread):
        tweets = [result.text]
    else:
        tweets = [section.content for section in result.sections]

    return TweetsResponse(
        tweets=tweets,
        original_content=OriginalContentInfo(
            title=request.title or "Generated Content",
            content_length=len(request.content),
        ),
    )


@app.post("/v1/format-content", response_model=FormattedContentResponse)
async def format_content(request: ContentRequest):
    """Rewrite page content as a sectioned thread and keep it in history"""
    rewriter = _require(thread_rewriter, "Thread rewriter")

    try:
        result = await asyncio.to_thread(rewriter.format_content, request.content, request.title)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProviderError as e:
        raise _provider_http_error(e, "Content formatting")

    sections = _sections(result)
    title = request.title or "Generated Content"

    record_id = None
    if formatted_history is not None:
        try:
            record_id = await asyncio.to_thread(formatted_history.save, {
                "title": title,
                "original_content_length": len(request.content),
                "formatted_content": [s.model_dump() for s in sections],
            })
        except OSError as e:
            logger.error(f"Error saving formatted content: {e}")

    return FormattedContentResponse(
        formatted_content=sections,
        original_content=OriginalContentInfo(title=title, content_length=len(request.content)),
        record_id=record_id,
    )


@app.get("/v1/history", response_model=HistoryResponse)
async def history(limit: Optional[int] = Query(None, ge=1, le=100, description="Max records")):
    """Most recent searches, newest first"""
    store = _require(search_history, "History store")

    try:
        records = await asyncio.to_thread(store.list, limit or settings.history_limit)
    except (OSError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to read search history: {str(e)}",
        )

    return HistoryResponse(history=records, total=len(records))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


def run():
    """Console entry point: serve the API with uvicorn"""
    import uvicorn

    uvicorn.run("serprank.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
