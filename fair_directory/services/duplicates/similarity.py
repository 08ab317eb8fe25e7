"""
Token-set similarity between comparison strings.

Scores are the Jaccard index of the whitespace-delimited token sets of
two normalized strings. Token overlap tolerates reordered words and
extra tokens (suite numbers, trailing qualifiers) that an edit distance
would over-penalize, and it is linear in the number of tokens.
"""

from __future__ import annotations


def tokenize(text: str) -> frozenset[str]:
    """
    Split a normalized comparison string into its token set.

    Args:
        text: Output of normalize_for_comparison / build_comparison_string

    Returns:
        Set of distinct whitespace-delimited tokens
    """
    if not text:
        return frozenset()
    return frozenset(text.split())


def jaccard_index(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> float:
    """
    Jaccard index |A ∩ B| / |A ∪ B| of two token sets.

    Two empty sets score 0.0: blank records carry no comparable
    information and must never look like perfect matches.
    """
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1] between two normalized comparison strings.

    Example:
        >>> similarity("county fairgrounds", "county fair grounds")
        0.25
    """
    return jaccard_index(tokenize(a), tokenize(b))
