# ABOUTME: Romanization-tolerant normalization of titles and author names.
# ABOUTME: Folds case, strips diacritics, and maps alternate Latinized spellings to one canonical form.

import re
import unicodedata
from collections.abc import Mapping

# Alternate Latinizations of Japanese long vowels seen in author credits.
# Keys and values are whole words, already case-folded and diacritic-free.
DEFAULT_ROMANIZATION: dict[str, str] = {
    "satou": "sato",
    "satoh": "sato",
    "itou": "ito",
    "itoh": "ito",
    "katou": "kato",
    "katoh": "kato",
    "kondou": "kondo",
    "kondoh": "kondo",
    "saitou": "saito",
    "saitoh": "saito",
    "gotou": "goto",
    "gotoh": "goto",
    "endou": "endo",
    "endoh": "endo",
    "ootomo": "otomo",
    "ohtomo": "otomo",
    "oono": "ono",
    "ohno": "ono",
    "oota": "ota",
    "ohta": "ota",
    "yuuki": "yuki",
    "yuhki": "yuki",
    "ryuuji": "ryuji",
    "shouji": "shoji",
    "youichi": "yoichi",
    "kouji": "koji",
    "shounen": "shonen",
    "tokyou": "tokyo",
}

# Anything that is not a letter or digit separates words, hyphens included.
_SEPARATOR_RE = re.compile(r"[\W_]+")

# Letters NFKD leaves alone.
_LIGATURES = str.maketrans({"œ": "oe", "æ": "ae", "ø": "o", "ł": "l", "đ": "d"})


def _strip_diacritics(text: str) -> str:
    """Decompose accented characters and drop the combining marks."""
    decomposed = unicodedata.normalize("NFKD", text.translate(_LIGATURES))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class RomanizationTable:
    """Static mapping from name variants to their canonical spelling.

    Entries are normalized on construction so a configuration file can list
    "Satō" or "SATOU" and still match.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = {}
        for variant, canonical in (entries if entries is not None else {}).items():
            self._entries[_fold(variant)] = _fold(canonical)

    @classmethod
    def default(cls, extra: Mapping[str, str] | None = None) -> "RomanizationTable":
        """The built-in table, extended (and overridden) by extra entries."""
        merged = dict(DEFAULT_ROMANIZATION)
        if extra:
            merged.update(extra)
        return cls(merged)

    def __len__(self) -> int:
        return len(self._entries)

    def canonical(self, word: str) -> str:
        """Return the canonical spelling of a folded word."""
        return self._entries.get(word, word)


def _fold(text: str) -> str:
    text = _strip_diacritics(text.casefold())
    return " ".join(_SEPARATOR_RE.sub(" ", text).split())


_EMPTY_TABLE = RomanizationTable()


def normalize_text(text: str, table: RomanizationTable | None = None) -> str:
    """Normalize text into space-separated canonical words.

    Case-folds, strips diacritics, treats hyphens and punctuation as word
    separators, collapses whitespace, then maps each word through the
    romanization table.
    """
    if table is None:
        table = _EMPTY_TABLE
    return " ".join(table.canonical(word) for word in _fold(text).split())


def normalize_key(text: str, table: RomanizationTable | None = None) -> str:
    """Comparison key: normalized text with the word separators removed.

    "Bédé-thèque", "Bede theque" and "Bedetheque" all share the key "bedetheque".
    """
    return normalize_text(text, table).replace(" ", "")
