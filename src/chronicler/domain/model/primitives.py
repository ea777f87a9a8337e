"""Domain primitives: scalar aliases + identifier derivation."""

from __future__ import annotations

import re
import unicodedata
from typing import Final

type UserId = int
type PersonId = str
type CountryId = int
type Year = int

PERSON_ID_MAX_LENGTH: Final[int] = 100

_TRANSLIT: Final[dict[str, str]] = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch", "ъ": "",
    "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}  # fmt: skip

_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_]+")
_DASHES = re.compile(r"-+")


def _transliterate(char: str) -> str:
    lowered = char.lower()
    if lowered not in _TRANSLIT:
        return char
    replacement = _TRANSLIT[lowered]
    return replacement.capitalize() if char != lowered else replacement


def person_slug(name: str, *, max_length: int = PERSON_ID_MAX_LENGTH) -> PersonId:
    """Derive the stable person identifier from a display name.

    Cyrillic is transliterated, everything else is NFKD-folded and stripped down to
    ``[a-z0-9-]``. Returns an empty string when nothing usable is left.
    """

    transliterated = "".join(_transliterate(char) for char in name)
    folded = unicodedata.normalize("NFKD", transliterated)
    folded = "".join(char for char in folded if not unicodedata.combining(char))
    cleaned = _DISALLOWED.sub(" ", folded).strip()
    dashed = _DASHES.sub("-", _SEPARATORS.sub("-", cleaned)).lower()
    return dashed.strip("-")[:max_length].rstrip("-")
