"""
Service configuration from environment variables.

Load order: .env.local (local dev), else .env, then the process environment.
API keys are optional: a missing key disables the matching collaborator
(the endpoint answers 503) instead of failing startup.
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def load_environment(root: Path = PROJECT_ROOT) -> Optional[Path]:
    """Load .env.local (highest priority) or .env; return the file used."""
    for name in (".env.local", ".env"):
        env_file = root / name
        if env_file.exists():
            load_dotenv(env_file, override=True)
            return env_file
    return None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class Settings:
    serpapi_key: Optional[str] = None
    serpapi_url: str = "https://serpapi.com/search.json"
    search_num_results: int = 20
    search_gl: str = "us"
    search_hl: str = "en"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    scrape_timeout: float = 45
    scrape_max_retries: int = 2
    data_dir: Path = Path("data")
    history_limit: int = 20
    keyword_weight: float = 0.4
    tfidf_weight: float = 0.6
    log_level: str = "INFO"
    port: int = 8080

    @property
    def searches_dir(self) -> Path:
        return self.data_dir / "searches"

    @property
    def formatted_dir(self) -> Path:
        return self.data_dir / "formatted_content"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from os.environ.

        Raises:
            ValueError: A numeric variable holds a non-numeric value
        """
        return cls(
            serpapi_key=os.getenv("SERPAPI_KEY") or None,
            serpapi_url=os.getenv("SERPAPI_URL", cls.serpapi_url),
            search_num_results=_env_int("SEARCH_NUM_RESULTS", cls.search_num_results),
            search_gl=os.getenv("SEARCH_GL", cls.search_gl),
            search_hl=os.getenv("SEARCH_HL", cls.search_hl),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            scrape_timeout=_env_float("SCRAPE_TIMEOUT", cls.scrape_timeout),
            scrape_max_retries=_env_int("SCRAPE_MAX_RETRIES", cls.scrape_max_retries),
            data_dir=Path(os.getenv("DATA_DIR", "data")),
            history_limit=_env_int("HISTORY_LIMIT", cls.history_limit),
            keyword_weight=_env_float("KEYWORD_WEIGHT", cls.keyword_weight),
            tfidf_weight=_env_float("TFIDF_WEIGHT", cls.tfidf_weight),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            port=_env_int("PORT", cls.port),
        )
