"""
Unit tests for thread rewriting (Gemini mocked).
"""

import pytest
from unittest.mock import Mock

from google.genai import errors

from serprank.providers.rewriter import (
    EXTRA_HEADLINE,
    INTRO_HEADLINE,
    RawThread,
    RewriterError,
    StructuredThread,
    ThreadRewriter,
    parse_thread_sections,
    parse_tweets,
)

pytestmark = pytest.mark.unit


FORMATTED_THREAD = """From Cursor to Bolt:

These tools helped me ship in weeks.
---
/1

Cursor: Fast AI-assisted coding that keeps you in flow.
---
/2

This section has no short headline because the colon is missing entirely
---
Some closing thoughts that are long enough.
---
/3
"""


class TestParseTweets:
    """Test tweet parsing fallback order"""

    def test_json_array(self):
        """Test a JSON array becomes numbered tweets"""
        result = parse_tweets('["Hook tweet", "Second tweet", "CTA"]')
        assert isinstance(result, StructuredThread)
        assert [s.content for s in result.sections] == ["Hook tweet", "Second tweet", "CTA"]
        assert result.sections[0].headline == "Tweet 1"

    def test_fenced_json_array(self):
        """Test a fenced JSON array is unwrapped"""
        result = parse_tweets('```json\n["One", "Two"]\n```')
        assert isinstance(result, StructuredThread)
        assert [s.content for s in result.sections] == ["One", "Two"]

    def test_line_fallback(self):
        """Test line parsing strips list markers"""
        text = "1. First tweet\n\n2. Second tweet\n- Third tweet\n* Fourth tweet"
        result = parse_tweets(text)
        assert isinstance(result, StructuredThread)
        assert [s.content for s in result.sections] == [
            "First tweet", "Second tweet", "Third tweet", "Fourth tweet",
        ]

    def test_line_fallback_drops_long_lines(self):
        """Test lines over 280 characters are dropped"""
        text = "Short tweet\n" + "x" * 281
        result = parse_tweets(text)
        assert [s.content for s in result.sections] == ["Short tweet"]

    def test_raw_fallback(self):
        """Test unparseable output comes back as RawThread"""
        text = "y" * 400
        result = parse_tweets(text)
        assert isinstance(result, RawThread)
        assert result.text == text

    def test_json_non_string_items_fall_through(self):
        """A JSON array without strings is parsed line by line"""
        result = parse_tweets("[1, 2, 3]")
        assert isinstance(result, StructuredThread)
        assert [s.content for s in result.sections] == ["[1, 2, 3]"]


class TestParseThreadSections:
    """Test sectioned thread parsing"""

    def test_sections(self):
        """Test intro, colon headline and numbered headlines"""
        result = parse_thread_sections(FORMATTED_THREAD)
        assert isinstance(result, StructuredThread)

        headlines = [s.headline for s in result.sections]
        assert headlines == [INTRO_HEADLINE, "Cursor", "/2 Section", EXTRA_HEADLINE]

        assert result.sections[0].content.startswith("From Cursor to Bolt:")
        assert result.sections[1].content == "Fast AI-assisted coding that keeps you in flow."
        assert result.sections[2].content.startswith("This section has no short headline")
        assert result.sections[3].content == "Some closing thoughts that are long enough."

    def test_numbered_section_without_body_skipped(self):
        """Test a numbered section without body is skipped"""
        result = parse_thread_sections("Intro\n---\n/1\n")
        assert [s.headline for s in result.sections] == [INTRO_HEADLINE]

    def test_short_unnumbered_section_skipped(self):
        """Test a short unnumbered section is skipped"""
        result = parse_thread_sections("Intro text\n---\ntiny")
        assert len(result.sections) == 1

    def test_raw_fallback(self):
        """Test unparseable output comes back as RawThread"""
        result = parse_thread_sections("---\n---")
        assert isinstance(result, RawThread)


def _response(text):
    response = Mock()
    response.text = text
    return response


class TestThreadRewriter:
    """Test Gemini calls with a mocked client"""

    def test_generate_tweets(self):
        """Test tweet generation sends the tweet prompt and config"""
        client = Mock()
        client.models.generate_content.return_value = _response('["Hook", "CTA"]')

        rewriter = ThreadRewriter(client, model="gemini-test")
        result = rewriter.generate_tweets("Some long article content", title="Article")

        assert [s.content for s in result.sections] == ["Hook", "CTA"]
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "Article" in kwargs["contents"]
        assert kwargs["config"].max_output_tokens == 2048
        assert kwargs["config"].temperature == 0.7

    def test_content_truncated(self):
        """Test long content is truncated before prompting"""
        client = Mock()
        client.models.generate_content.return_value = _response('["ok"]')

        ThreadRewriter(client).generate_tweets("a" * 5000 + "TAIL")
        prompt = client.models.generate_content.call_args.kwargs["contents"]
        assert "a" * 4000 in prompt
        assert "TAIL" not in prompt

    def test_format_content(self):
        """Test content formatting returns sections"""
        client = Mock()
        client.models.generate_content.return_value = _response(FORMATTED_THREAD)

        result = ThreadRewriter(client).format_content("Article body")

        assert isinstance(result, StructuredThread)
        assert client.models.generate_content.call_args.kwargs["config"].max_output_tokens == 3000

    def test_empty_content_rejected(self):
        """Test blank content is rejected before any call"""
        rewriter = ThreadRewriter(Mock())
        with pytest.raises(ValueError, match="Content is required"):
            rewriter.generate_tweets("   ")
        with pytest.raises(ValueError, match="Content is required"):
            rewriter.format_content("")

    def test_empty_response(self):
        """Test an empty model response raises RewriterError"""
        client = Mock()
        client.models.generate_content.return_value = _response(None)
        with pytest.raises(RewriterError, match="empty response"):
            ThreadRewriter(client).generate_tweets("content")

    def test_api_error_wrapped(self):
        """Test Gemini API errors keep their status code"""
        client = Mock()
        client.models.generate_content.side_effect = errors.APIError(
            429, {"error": {"message": "quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
        )
        with pytest.raises(RewriterError) as exc_info:
            ThreadRewriter(client).generate_tweets("content")
        assert exc_info.value.status_code == 429

    def test_from_api_key_requires_key(self):
        """Test a missing API key is refused"""
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            ThreadRewriter.from_api_key("")
