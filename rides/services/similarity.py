from __future__ import annotations

from rides.services.phonetics import normalize, phonetic_code


def levenshtein_distance(first: str, second: str) -> int:
    a = (first or "").lower()
    b = (second or "").lower()
    if not a:
        return len(b)
    if not b:
        return len(a)

    matrix = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) + 1):
        matrix[i][0] = i
    for j in range(len(b) + 1):
        matrix[0][j] = j

    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )
    return matrix[len(a)][len(b)]


def similarity(first: str, second: str) -> float:
    """Edit-distance similarity in ``[0, 1]``; two empty strings are identical."""
    max_len = max(len(first or ""), len(second or ""))
    if max_len == 0:
        return 1.0
    return 1 - (levenshtein_distance(first, second) / max_len)


def allowed_edits(first: str, second: str) -> int:
    return max(2, max(len(first), len(second)) // 3)


def are_phonetically_similar(first: str, second: str) -> bool:
    norm_first = normalize(first)
    norm_second = normalize(second)

    if norm_first == norm_second:
        return True
    if norm_first in norm_second or norm_second in norm_first:
        return True
    if phonetic_code(first) == phonetic_code(second):
        return True
    return levenshtein_distance(norm_first, norm_second) <= allowed_edits(norm_first, norm_second)
