"""
Arabic text helpers for Study Center search and indexing.

Three derived forms are used throughout the codebase:

- normalized text: tatweel removed and whitespace collapsed. Diacritics and letter
  variants are kept, so this is still the text the user typed.
- diacritic-stripped text: normalized text with every harakah, shadda, sukun and
  Quranic annotation mark removed. Alef/hamza variants (أ إ آ ء ئ ؤ) are base letters
  and are never folded.
- search tokens: unique diacritic-stripped words, in order of first occurrence.

All functions are pure.
"""
import re
from dataclasses import dataclass

TATWEEL = "\u0640"

# Harakat, tanween, shadda, sukun, superscript alef, Quranic annotation and stop marks.
ARABIC_DIACRITICS = re.compile(
    "[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED\u08D3-\u08E1\u08E3-\u08FF]",
)

ARABIC_CHARACTERS = re.compile("[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF]")

# Whitespace plus Latin and Arabic punctuation (، ؛ ؟) and brackets.
TOKEN_SEPARATORS = re.compile(r"[\s.,;:!?\"'()\[\]{}\u00AB\u00BB\u060C\u061B\u061F\uFD3E\uFD3F]+")

WHITESPACE = re.compile(r"\s+")

ARABIC_INDIC_DIGITS = "\u0660\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669"


@dataclass(frozen=True)
class SearchableText:
    """Search fields derived from a raw Arabic string at write time."""

    raw_text: str
    normalized_text: str
    diacritic_stripped_text: str
    search_tokens: list[str]


def normalize_arabic(text: str) -> str:
    """Remove tatweel, collapse whitespace runs to one space and trim."""
    if not text:
        return ""
    return WHITESPACE.sub(" ", text.replace(TATWEEL, "")).strip()


def strip_diacritics(text: str) -> str:
    """
    Remove all Arabic combining marks in addition to what normalize_arabic removes.

    Already-stripped text is a fixed point: strip_diacritics(strip_diacritics(s))
    equals strip_diacritics(s).
    """
    if not text:
        return ""
    return normalize_arabic(ARABIC_DIACRITICS.sub("", text))


def tokenize_arabic(text: str) -> list[str]:
    """
    Split on whitespace and punctuation, strip diacritics from each token, drop empty
    tokens and de-duplicate while keeping first-occurrence order.
    """
    if not text:
        return []
    tokens = (strip_diacritics(part) for part in TOKEN_SEPARATORS.split(text))
    return list(dict.fromkeys(token for token in tokens if token))


def contains_arabic(text: str) -> bool:
    """True if any character is in the Arabic block (Arabic-Indic digits included)."""
    if not text:
        return False
    return ARABIC_CHARACTERS.search(text) is not None


def build_searchable_text(raw_text: str | None) -> SearchableText:
    """Compute every derived search field for a raw string."""
    raw = raw_text or ""
    return SearchableText(
        raw_text=raw,
        normalized_text=normalize_arabic(raw),
        diacritic_stripped_text=strip_diacritics(raw),
        search_tokens=tokenize_arabic(raw),
    )


def extract_snippet(text: str, start: int, end: int, context: int = 50) -> str:
    """
    Return the text between start and end padded by `context` characters each side.

    Sides that were cut are marked with '...'.
    """
    if not text:
        return ""
    window_start = max(0, start - context)
    window_end = min(len(text), end + context)
    snippet = text[window_start:window_end]
    if window_start > 0:
        snippet = "..." + snippet
    if window_end < len(text):
        snippet = snippet + "..."
    return snippet


def to_arabic_numerals(number: int) -> str:
    """Render an integer with Arabic-Indic digits (123 -> ١٢٣)."""
    return "".join(
        ARABIC_INDIC_DIGITS[int(ch)] if ch.isdigit() else ch for ch in str(number)
    )
