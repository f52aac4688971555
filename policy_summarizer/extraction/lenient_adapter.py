import pymupdf

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput
from policy_summarizer.logging.logger import Log


class LenientPageStrategy(BaseExtractionStrategy):
    """Page-by-page salvage that tolerates structure and font errors.

    Rebuilds page text from individual words so broken text runs and font
    encodings do not abort the page, skips unreadable pages, and marks pages
    that only carry images.
    """

    name = "lenient"

    MAX_PAGES = 100
    MIN_PAGE_CHARS = 5

    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        try:
            doc = pymupdf.open(stream=document.content, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise StrategyError(f"lenient open failed: {exc}") from exc

        try:
            total_pages = doc.page_count
            max_pages = min(total_pages, self.MAX_PAGES)
            parts: list[str] = []
            recovered = 0
            for index in range(max_pages):
                token.raise_if_cancelled()
                page_number = index + 1
                try:
                    page = doc.load_page(index)
                except Exception as exc:
                    Log.warning(
                        f"Lenient extraction could not load page {page_number}: {exc}",
                        strategy=self.name,
                    )
                    continue
                try:
                    words = page.get_text("words")
                except Exception:
                    if self._has_images(page):
                        parts.append(f"[Page {page_number} contains graphics/images]")
                    else:
                        Log.warning(
                            f"All text extraction methods failed for page {page_number}",
                            strategy=self.name,
                        )
                    continue
                page_text = " ".join(w[4] for w in words if str(w[4]).strip()).strip()
                if len(page_text) > self.MIN_PAGE_CHARS:
                    parts.append(page_text)
                    recovered += 1
        except ExtractionCancelledError:
            raise
        except Exception as exc:
            raise StrategyError(f"lenient extraction failed: {exc}") from exc
        finally:
            doc.close()

        Log.info(
            f"Lenient extraction processed {recovered}/{max_pages} pages",
            strategy=self.name,
        )
        return StrategyOutput(
            text="\n\n".join(parts),
            pages_recovered=recovered,
            total_pages=total_pages,
        )

    @staticmethod
    def _has_images(page: pymupdf.Page) -> bool:
        try:
            return bool(page.get_images())
        except Exception:
            return False
