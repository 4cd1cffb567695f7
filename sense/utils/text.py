"""
Text Normalization and Similarity

Canonicalizes guess, answer, synonym and category strings and scores how
close two normalized strings are by edit distance.
"""

import re
import unicodedata
from typing import List, Optional

_WHITESPACE = re.compile(r'\s+')
_DISALLOWED = re.compile(r'[^a-z0-9 \-]')


def normalize(text: Optional[str]) -> str:
    """
    Canonicalize a string for comparison.

    Decomposes and strips diacritics, lowercases, drops anything outside
    ``[a-z0-9 -]``, collapses whitespace and trims. Never fails; empty or
    missing input yields ``""``.
    """
    if not text:
        return ""

    decomposed = unicodedata.normalize('NFKD', text)
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    lowered = _WHITESPACE.sub(' ', stripped.lower())
    cleaned = _DISALLOWED.sub('', lowered)
    return _WHITESPACE.sub(' ', cleaned).strip()


def tokenize(normalized_text: str) -> List[str]:
    """Split normalized text into non-empty whitespace-delimited tokens."""
    return [token for token in normalized_text.split() if token]


def levenshtein_distance(a: str, b: str) -> int:
    """
    Unit-cost edit distance.

    Fills the full ``(len(b)+1) x (len(a)+1)`` table; inputs here are short
    words, so no banding is needed.
    """
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]

    for i in range(len(b) + 1):
        matrix[i][0] = i
    for j in range(len(a) + 1):
        matrix[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i][j - 1],      # insertion
                    matrix[i - 1][j]       # deletion
                )

    return matrix[len(b)][len(a)]


def similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1]; symmetric, 1.0 for identical strings."""
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)

    if not longer:
        return 1.0

    distance = levenshtein_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)
