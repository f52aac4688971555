from dataclasses import dataclass

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass(frozen=True)
class SourceDocument:
    """Raw uploaded bytes plus their declared media type and filename."""

    content: bytes
    media_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StrategyOutput:
    """Raw text recovered by one strategy, before cleaning."""

    text: str
    pages_recovered: int
    total_pages: int


@dataclass(frozen=True)
class ExtractedText:
    """Cleaned document text with provenance of the strategy that produced it."""

    text: str
    strategy_used: str
    pages_recovered: int
    total_pages: int
