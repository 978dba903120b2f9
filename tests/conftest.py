"""Pytest configuration shared by all test suites"""

import os

# Keep test runs independent of a developer's .env.local / real API keys.
# serprank.main reads these at import time.
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["SERPAPI_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
