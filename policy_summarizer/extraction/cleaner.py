import re
import unicodedata
from typing import ClassVar


class TextCleaner:
    """Normalizes raw extracted text before it is sent for analysis."""

    _CID_RE: ClassVar[re.Pattern[str]] = re.compile(r"\(cid:\d+\)")
    _HORIZONTAL_WS_RE: ClassVar[re.Pattern[str]] = re.compile(r"[^\S\n]+")
    _BLANK_LINES_RE: ClassVar[re.Pattern[str]] = re.compile(r"\n{3,}")

    def clean(self, text: str) -> str:
        """Strip control characters and glyph artifacts, collapse whitespace.

        Single and double line breaks survive so paragraph structure is kept;
        everything else collapses to a single space.
        """
        text = unicodedata.normalize("NFKC", text)
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = self._CID_RE.sub(" ", text)
        text = "".join(ch for ch in text if ch in "\n\t" or not self._is_control(ch))
        text = self._HORIZONTAL_WS_RE.sub(" ", text)
        text = "\n".join(line.strip() for line in text.split("\n"))
        text = self._BLANK_LINES_RE.sub("\n\n", text)
        return text.strip()

    @staticmethod
    def _is_control(ch: str) -> bool:
        return unicodedata.category(ch) in ("Cc", "Cf", "Co", "Cs")
