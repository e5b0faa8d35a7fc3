"""Verse reference formatting and ayah range arithmetic."""
from dataclasses import dataclass

SURAH_COUNT = 114


def format_verse_ref(surah_number: int, ayah_start: int, ayah_end: int | None = None) -> str:
    """Format '2:255', or '2:255-257' for a multi-ayah range."""
    if ayah_end is None or ayah_end == ayah_start:
        return f"{surah_number}:{ayah_start}"
    return f"{surah_number}:{ayah_start}-{ayah_end}"


@dataclass(frozen=True)
class VerseRange:
    """Inclusive ayah range within one surah. No ayah_end means a single ayah."""

    surah_number: int
    ayah_start: int
    ayah_end: int | None = None

    @property
    def effective_end(self) -> int:
        return self.ayah_end if self.ayah_end is not None else self.ayah_start

    def overlaps(self, other: "VerseRange") -> bool:
        """True when both ranges are in the same surah and share at least one ayah."""
        return (
            self.surah_number == other.surah_number
            and self.ayah_start <= other.effective_end
            and other.ayah_start <= self.effective_end
        )
