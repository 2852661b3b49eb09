from rapidfuzz.distance import Levenshtein


def levenshtein(a: str, b: str) -> int:
    """Single-character edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Closeness of two pre-normalized tokens in [0, 1].

    ``1 - distance / max(len(a), len(b))``. Two empty strings are identical
    (1.0); one empty string against a non-empty one scores 0.0.
    """
    return Levenshtein.normalized_similarity(a, b)
