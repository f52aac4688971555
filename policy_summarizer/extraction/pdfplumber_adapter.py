import io

import pdfplumber

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput
from policy_summarizer.logging.logger import Log


class PdfPlumberStrategy(BaseExtractionStrategy):
    """Structural extraction with degraded settings using pdfplumber.

    Ignores layout and font metadata and relies on pdfminer's character
    stream, which copes with some font tables PyMuPDF rejects.
    """

    name = "structural_basic"

    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        try:
            with pdfplumber.open(io.BytesIO(document.content)) as pdf:
                total_pages = len(pdf.pages)
                pages: list[str] = []
                for page_number, page in enumerate(pdf.pages, start=1):
                    token.raise_if_cancelled()
                    try:
                        text = page.extract_text() or ""
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
            raise StrategyError(f"pdfplumber extraction failed: {exc}") from exc
        return StrategyOutput(
            text="\n\n".join(pages),
            pages_recovered=len(pages),
            total_pages=total_pages,
        )
