from __future__ import annotations

import re

from rides.services.phonetics import normalize

MAX_VARIATIONS = 4
MIN_VARIATION_LENGTH = 3

_SOUTH_INDIAN_VOWEL = re.compile(r"a([^aeiou])")
_TRAILING_VOWEL = re.compile(r"[aeiou]$")


def _alternate_spellings(term: str) -> list[str]:
    return [
        term.replace("t", "th"),
        term.replace("th", "t"),
        term.replace("d", "dh"),
        term.replace("dh", "d"),
        term.replace("i", "y"),
        term.replace("y", "i"),
        _SOUTH_INDIAN_VOWEL.sub(r"e\1", term),
        re.sub(r"pur$", "puram", term),
        re.sub(r"puram$", "pur", term),
        _TRAILING_VOWEL.sub("", term, count=1),
    ]


def generate_variations(term: str) -> list[str]:
    lower_term = (term or "").lower().strip()
    if not lower_term:
        return []

    variations: list[str] = []

    def add(value: str) -> None:
        if value and value not in variations:
            variations.append(value)

    add(lower_term)
    add(normalize(lower_term))

    for alternate in _alternate_spellings(lower_term):
        if alternate != lower_term and len(alternate) >= MIN_VARIATION_LENGTH:
            add(alternate)

    words = lower_term.split()
    if len(words) > 1 and len(words[0]) >= MIN_VARIATION_LENGTH:
        add(words[0])

    return variations[:MAX_VARIATIONS]
