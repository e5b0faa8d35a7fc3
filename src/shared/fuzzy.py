"""
Lightweight fuzzy scoring for Latin-script search (meanings, titles, transliterations).

Deliberately not edit distance: a substring hit is cheap and scores high, while a
scattered in-order match is discounted by how spread out it is.
"""
CONTAINS_SCORE = 1.0
TOKEN_CONTAINS_SCORE = 0.9
GAP_PENALTY_DIVISOR = 8


def subsequence_score(needle: str, haystack: str) -> float:
    """
    Score an ordered-subsequence match of needle inside haystack.

    Walks both strings once. Every haystack character consumed without matching the
    current needle character is a gap. If the whole needle was matched the score is
    (matched / consumed) * 1 / (1 + gaps / 8), otherwise 0.
    """
    if not needle:
        return 0.0
    i = 0
    j = 0
    gaps = 0
    while i < len(needle) and j < len(haystack):
        if needle[i] == haystack[j]:
            i += 1
        else:
            gaps += 1
        j += 1

    if i != len(needle):
        return 0.0
    density = len(needle) / max(1, j)
    return density * (1 / (1 + gaps / GAP_PENALTY_DIVISOR))


def fuzzy_score(query: str, text: str | None) -> float:
    """
    Score a query against text in [0, 1].

    Case-insensitive containment of the whole query scores 1.0. Otherwise each
    whitespace token scores 0.9 when contained, or its subsequence score, and the result
    is the mean over tokens. An empty query scores 0.
    """
    q = (query or "").strip().lower()
    if not q or not text:
        return 0.0
    t = text.lower()

    if q in t:
        return CONTAINS_SCORE

    tokens = q.split()
    scores = [
        TOKEN_CONTAINS_SCORE if token in t else subsequence_score(token, t)
        for token in tokens
    ]
    average = sum(scores) / len(scores)
    return max(0.0, min(1.0, average))
