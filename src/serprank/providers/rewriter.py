"""
Content rewriter: turns scraped page text into a social-media thread via Gemini.

Model output is free text, so parsing is best effort and always ends in one of
two result types:
- StructuredThread: list of ThreadSection(headline, content)
- RawThread: the unparsed model text

Fallback order for tweets (parse_tweets):
1. JSON array of strings (a ```json fence around it is allowed)
2. One tweet per non-empty line, list markers stripped, max 280 chars
3. RawThread

Fallback order for formatted threads (parse_thread_sections):
1. Sections separated by "---": intro, "/N" numbered sections, other text
2. RawThread
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Union

from google import genai
from google.genai import errors, types

from .base import ProviderError

logger = logging.getLogger(__name__)

MAX_TWEET_CHARS = 280
TWEETS_CONTENT_CHARS = 4000
FORMAT_CONTENT_CHARS = 8000

INTRO_HEADLINE = "Thread Intro"
EXTRA_HEADLINE = "Additional Info"

_FENCE = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL)
_LIST_NUMBER = re.compile(r'^\d+\.\s*')
_LIST_BULLET = re.compile(r'^[-*]\s*')
_SECTION_NUMBER = re.compile(r'^/\d+')


class RewriterError(ProviderError):
    """Gemini call failed or returned no text."""


@dataclass(frozen=True)
class ThreadSection:
    headline: str
    content: str

    def to_dict(self) -> dict:
        return {"headline": self.headline, "content": self.content}


@dataclass(frozen=True)
class StructuredThread:
    sections: List[ThreadSection]


@dataclass(frozen=True)
class RawThread:
    text: str


ThreadResult = Union[StructuredThread, RawThread]


TWEETS_PROMPT_TEMPLATE = """You are a seasoned entrepreneur known for direct, practical business advice.

Create a Twitter thread (8-12 tweets) from the following content. Each tweet should:
1. Be under 280 characters
2. Provide actionable insights
3. Be direct and specific
4. Include relevant emojis and hooks
5. End with a strong call-to-action

Content Title: {title}

Content: {content}

Format the response as a JSON array where each tweet is a separate string. Start with a hook tweet and end with a CTA tweet."""


FORMAT_PROMPT_TEMPLATE = """You are a seasoned entrepreneur known for direct, practical business advice.

Transform the provided content into a Twitter thread that delivers maximum value.

CONTENT TO TRANSFORM:
Title: {title}
Content: {content}

THREAD REQUIREMENTS:
Create exactly 8-12 tweet-sized sections in this format:
---
<hook and overview>
---
/1

<Name>: <practical explanation>
---
/2

<Name>: <practical explanation>
---

FORMATTING RULES:
1. Start with a compelling hook and overview
2. Use "/1", "/2", "/3" etc. for numbering
3. Each section: name + colon + practical explanation
4. Keep each section under 280 characters
5. NO JSON formatting, NO brackets, NO quotes around content

Return ONLY the thread text."""


def _strip_fence(text: str) -> str:
    match = _FENCE.match(text.strip())
    return match.group(1) if match else text.strip()


def parse_tweets(text: str) -> ThreadResult:
    """Parse model output into tweets (see module docstring for fallback order)."""
    try:
        data = json.loads(_strip_fence(text))
    except ValueError:
        data = None

    if isinstance(data, list):
        tweets = [item.strip() for item in data if isinstance(item, str) and item.strip()]
        if tweets:
            return StructuredThread([
                ThreadSection(headline=f"Tweet {i}", content=tweet)
                for i, tweet in enumerate(tweets, start=1)
            ])

    tweets = []
    for line in text.splitlines():
        line = _LIST_BULLET.sub('', _LIST_NUMBER.sub('', line.strip())).strip()
        if line and len(line) <= MAX_TWEET_CHARS:
            tweets.append(line)

    if tweets:
        logger.debug(f"Tweets parsed line by line: {len(tweets)}")
        return StructuredThread([
            ThreadSection(headline=f"Tweet {i}", content=tweet)
            for i, tweet in enumerate(tweets, start=1)
        ])

    return RawThread(text)


def parse_thread_sections(text: str) -> ThreadResult:
    """Parse "---" separated thread text into sections."""
    chunks = [chunk.strip() for chunk in text.split('---') if chunk.strip()]
    sections = []

    if chunks:
        sections.append(ThreadSection(headline=INTRO_HEADLINE, content=chunks[0]))

    for chunk in chunks[1:]:
        if _SECTION_NUMBER.match(chunk):
            lines = [line.strip() for line in chunk.splitlines() if line.strip()]
            if len(lines) < 2:
                continue

            number = lines[0]
            body = ' '.join(lines[1:]).strip()
            colon = body.find(':')

            if 0 < colon < 50:
                sections.append(ThreadSection(headline=body[:colon].strip(), content=body[colon + 1:].strip()))
            else:
                sections.append(ThreadSection(headline=f"{number} Section", content=body))

        elif len(chunk) > 10:
            sections.append(ThreadSection(headline=EXTRA_HEADLINE, content=chunk))

    if not sections:
        return RawThread(text)
    return StructuredThread(sections)


class ThreadRewriter:
    """Generate tweet threads from page content with Gemini."""

    def __init__(
        self,
        client: genai.Client,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.top_k = top_k
        self.top_p = top_p

    @classmethod
    def from_api_key(cls, api_key: str, **kwargs) -> "ThreadRewriter":
        if not api_key:
            raise ValueError("Gemini API key required. Set GEMINI_API_KEY env var or pass api_key parameter.")
        return cls(genai.Client(api_key=api_key), **kwargs)

    def _generate(self, prompt: str, max_output_tokens: int) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    top_k=self.top_k,
                    top_p=self.top_p,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error ({e.code}): {e}")
            raise RewriterError(f"Gemini API error: {e}", status_code=e.code) from e

        text = response.text
        if not text:
            raise RewriterError("Gemini returned an empty response")

        logger.debug(f"Gemini raw response (first 500 chars): {text[:500]}")
        return text

    def generate_tweets(self, content: str, title: Optional[str] = None) -> ThreadResult:
        """Generate 8-12 tweets from content (first 4000 chars used)."""
        if not content or not content.strip():
            raise ValueError("Content is required")

        logger.info(f"Generating tweets with {self.model} ({len(content)} chars of content)")
        prompt = TWEETS_PROMPT_TEMPLATE.format(
            title=title or "Business Content",
            content=content[:TWEETS_CONTENT_CHARS],
        )
        return parse_tweets(self._generate(prompt, max_output_tokens=2048))

    def format_content(self, content: str, title: Optional[str] = None) -> ThreadResult:
        """Rewrite content as a sectioned thread (first 8000 chars used)."""
        if not content or not content.strip():
            raise ValueError("Content is required")

        logger.info(f"Formatting content with {self.model} ({len(content)} chars of content)")
        prompt = FORMAT_PROMPT_TEMPLATE.format(
            title=title or "Business Content",
            content=content[:FORMAT_CONTENT_CHARS],
        )
        return parse_thread_sections(self._generate(prompt, max_output_tokens=3000))
