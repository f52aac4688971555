import re
from typing import Protocol

from policy_summarizer.summary.profiles import SummaryProfile

_TERMINAL_PUNCTUATION = re.compile(r"[.!?][\"')\]]*\s*$")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class CompletenessChecker(Protocol):
    def is_complete(self, text: str, profile: SummaryProfile) -> bool: ...


class ParagraphCompletenessChecker:
    """Treats a summary as truncated unless it ends a sentence and has every paragraph.

    A profile with N paragraphs needs at least N - 1 blank-line breaks.
    """

    def is_complete(self, text: str, profile: SummaryProfile) -> bool:
        stripped = text.strip()
        if not stripped:
            return False
        if not _TERMINAL_PUNCTUATION.search(stripped):
            return False
        breaks = len(_PARAGRAPH_BREAK.findall(stripped))
        return breaks >= profile.paragraphs - 1
