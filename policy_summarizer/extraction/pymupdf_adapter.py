import pymupdf

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput
from policy_summarizer.logging.logger import Log


class PyMuPdfStrategy(BaseExtractionStrategy):
    """Full structural extraction using PyMuPDF with font-aware text flags.

    Preserves inter-word whitespace and ligatures and sorts text blocks in
    reading order. Individual page failures are skipped.
    """

    name = "structural_full"

    _TEXT_FLAGS = (
        pymupdf.TEXT_PRESERVE_WHITESPACE
        | pymupdf.TEXT_PRESERVE_LIGATURES
        | pymupdf.TEXT_MEDIABOX_CLIP
    )

    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        try:
            with pymupdf.open(stream=document.content, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                total_pages = doc.page_count
                pages: list[str] = []
                for page_number, page in enumerate(doc, start=1):
                    token.raise_if_cancelled()
                    try:
                        text = page.get_text("text", flags=self._TEXT_FLAGS, sort=True)
                    except Exception as exc:
                        Log.warning(
                            f"Page {page_number} failed in {self.name}: {exc}",
                            strategy=self.name,
                        )
                        continue
                    if text.strip():
                        pages.append(text.strip())
        except ExtractionCancelledError:
            raise
        except Exception as exc:
            raise StrategyError(f"pymupdf extraction failed: {exc}") from exc
        return StrategyOutput(
            text="\n\n".join(pages),
            pages_recovered=len(pages),
            total_pages=total_pages,
        )
