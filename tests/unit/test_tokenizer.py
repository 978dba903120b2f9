"""
Unit tests for the ranking tokenizer.
"""

import pytest
from serprank.ranking.tokenizer import STOPWORDS, Tokenizer, tokenize

pytestmark = pytest.mark.unit


class TestTokenize:
    """Test default tokenization pipeline"""

    def test_basic_tokenization(self):
        """Lowercases and keeps source order"""
        assert tokenize("Machine Learning Tutorial") == ["machine", "learning", "tutorial"]

    def test_punctuation_becomes_separator(self):
        """Punctuation splits words instead of gluing them together"""
        tokens = tokenize("machine-learning, deep.learning! (python)")
        assert tokens == ["machine", "learning", "deep", "learning", "python"]

    def test_underscore_is_separator(self):
        """Underscore is not a letter or digit"""
        assert tokenize("file_name_parser") == ["file", "name", "parser"]

    def test_short_terms_dropped(self):
        """Terms of 2 characters or fewer are removed"""
        assert tokenize("AI ML in go lang") == ["lang"]

    def test_stopwords_dropped(self):
        """Common English function words are removed"""
        tokens = tokenize("Best machine learning tutorials for 2024")
        assert "for" not in tokens
        assert tokens == ["best", "machine", "learning", "tutorials", "2024"]

    def test_numbers_kept(self):
        """Digits count as word characters (no numeric filtering)"""
        assert tokenize("python 3.12 released 2024") == ["python", "released", "2024"]

    def test_unicode_letters_kept(self):
        """Non-ASCII letters are letters too"""
        assert tokenize("Crème brûlée recette") == ["crème", "brûlée", "recette"]

    def test_empty_input(self):
        """Missing or empty input gives an empty list, never an error"""
        assert tokenize("") == []
        assert tokenize(None) == []
        assert tokenize("   \n\t") == []

    def test_all_stopwords(self):
        """Degenerate text reduces to nothing"""
        assert tokenize("What is this and how should they do it?") == []

    def test_duplicates_preserved(self):
        """Repeated terms stay repeated (needed for term frequency)"""
        assert tokenize("python python guide") == ["python", "python", "guide"]


class TestTokenizerConfiguration:
    """Test injected stopword sets"""

    def test_default_stopwords_immutable(self):
        """Test the default stopword set cannot be changed"""
        assert isinstance(STOPWORDS, frozenset)
        assert "the" in STOPWORDS

    def test_custom_stopwords(self):
        """Test a custom stopword set replaces the default"""
        tokenizer = Tokenizer(stopwords={"python"})
        assert tokenizer.tokenize("the python guide") == ["the", "guide"]

    def test_custom_stopwords_lowercased(self):
        """Test custom stopwords match case-insensitively"""
        tokenizer = Tokenizer(stopwords=["Guide"])
        assert tokenizer.tokenize("Python Guide") == ["python"]

    def test_empty_stopword_set(self):
        """Test an empty stopword set keeps every long term"""
        tokenizer = Tokenizer(stopwords=())
        assert tokenizer.tokenize("how the web works") == ["how", "the", "web", "works"]

    def test_caller_set_not_shared(self):
        """Mutating the set passed in does not change the tokenizer"""
        words = {"python"}
        tokenizer = Tokenizer(stopwords=words)
        words.add("guide")
        assert tokenizer.tokenize("python guide") == ["guide"]
