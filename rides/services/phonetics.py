"""Spelling-insensitive forms of Indian place names.

Romanized place names drift between spellings ("Tirupati"/"Tirupathi",
"Rayachoty"/"Rayachoti", "Kolkata"/"Kolkatta"). ``normalize`` folds those
variants onto one lossy form and ``phonetic_code`` reduces that form to a
short Soundex-style fingerprint.
"""

from __future__ import annotations

import re

PHONETIC_CODE_LENGTH = 6

_SUFFIX_PATTERN = re.compile(r"puram$|pur$|bad$|abad$|nagar$|pally$|palli$")

# Applied in sequence; later rules see the output of earlier ones.
_FOLD_RULES: tuple[tuple[str, str], ...] = (
    ("y", "i"),
    ("ee", "i"),
    ("oo", "u"),
    ("aa", "a"),
    ("th", "t"),
    ("dh", "d"),
    ("bh", "b"),
    ("gh", "g"),
    ("kh", "k"),
    ("ph", "f"),
    ("sh", "s"),
    ("ch", "c"),
    ("w", "v"),
    ("z", "s"),
)

_REPEAT_PATTERN = re.compile(r"(.)\1+")
_TRAILING_VOWEL_PATTERN = re.compile(r"[aeiou]$")

CONSONANT_CLASSES: dict[str, str] = {
    "b": "1", "f": "1", "p": "1", "v": "1",
    "c": "2", "g": "2", "j": "2", "k": "2", "q": "2", "s": "2", "x": "2",
    "d": "3", "t": "3",
    "l": "4",
    "m": "5", "n": "5",
    "r": "6",
}


def normalize(text: str) -> str:
    value = (text or "").lower().strip()
    value = _SUFFIX_PATTERN.sub("", value, count=1)
    for pattern, replacement in _FOLD_RULES:
        value = value.replace(pattern, replacement)
    value = _REPEAT_PATTERN.sub(r"\1", value)
    return _TRAILING_VOWEL_PATTERN.sub("", value, count=1)


def phonetic_code(text: str) -> str:
    """Return the 6-character consonant-class code of ``text``.

    An empty string comes back when normalization leaves nothing to encode,
    so callers comparing codes must guard against two empty inputs.
    """
    normalized = normalize(text)
    if not normalized:
        return ""

    code = normalized[0].upper()
    last_class = CONSONANT_CLASSES.get(normalized[0], "")
    for char in normalized[1:]:
        if len(code) >= PHONETIC_CODE_LENGTH:
            break
        char_class = CONSONANT_CLASSES.get(char)
        if char_class is None:
            last_class = ""
        elif char_class != last_class:
            code += char_class
            last_class = char_class
    return code.ljust(PHONETIC_CODE_LENGTH, "0")
