"""
Tokenizer for relevance ranking.

Tokenization pipeline:
1. Lowercase conversion
2. Replace everything that is not a letter, digit or whitespace with a space
3. Split on whitespace runs
4. Drop short terms (2 characters or fewer)
5. Drop stopwords (common English function words)

Token order follows the source text. Scoring only looks at counts, but the
order decides how ties are displayed in the calculation trace.
"""

import re
from typing import FrozenSet, Iterable, List, Optional

# English stopwords used for search queries and result snippets
STOPWORDS = frozenset([
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'by', 'for', 'from', 'has', 'he',
    'in', 'is', 'it', 'its', 'of', 'on', 'that', 'the', 'to', 'was', 'will', 'with',
    'but', 'or', 'not', 'this', 'they', 'have', 'had', 'what', 'said', 'each',
    'which', 'do', 'how', 'their', 'if', 'up', 'out', 'many', 'then', 'them',
    'can', 'would', 'could', 'should', 'may', 'might', 'must', 'shall'
])

MIN_TOKEN_LENGTH = 3

# \w covers unicode letters, digits and the underscore; the underscore is not kept
_NON_WORD = re.compile(r'[^\w\s]|_')


class Tokenizer:
    """
    Text tokenizer with an immutable stopword set.

    Create one with a custom stopword set for tests or other languages;
    the module-level tokenize() uses STOPWORDS.
    """

    def __init__(self, stopwords: Iterable[str] = STOPWORDS):
        self.stopwords: FrozenSet[str] = frozenset(w.lower() for w in stopwords)

    def tokenize(self, text: Optional[str]) -> List[str]:
        """
        Tokenize text into ranking terms.

        Args:
            text: Input text (None or empty gives an empty list)

        Returns:
            List of lowercase terms in source order

        Examples:
            >>> tokenize("Best machine-learning tutorials for 2024!")
            ['best', 'machine', 'learning', 'tutorials', '2024']

            >>> tokenize("How to do it")
            []
        """
        if not text:
            return []

        text = _NON_WORD.sub(' ', text.lower())

        return [
            t for t in text.split()
            if len(t) >= MIN_TOKEN_LENGTH and t not in self.stopwords
        ]

    def __repr__(self) -> str:
        return f"Tokenizer(stopwords={len(self.stopwords)} words)"


default_tokenizer = Tokenizer()


def tokenize(text: Optional[str]) -> List[str]:
    """Tokenize text with the default stopword set."""
    return default_tokenizer.tokenize(text)
