import io

import docx

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput


class DocxStrategy(BaseExtractionStrategy):
    """Extracts paragraph and table text from DOCX files using python-docx.

    DOCX has no fixed pagination, so the whole body is reported as one page.
    """

    name = "docx"

    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        try:
            parsed = docx.Document(io.BytesIO(document.content))
            blocks = [p.text.strip() for p in parsed.paragraphs if p.text.strip()]
            for table in parsed.tables:
                token.raise_if_cancelled()
                for row in table.rows:
                    cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                    if cells:
                        blocks.append(" | ".join(cells))
        except ExtractionCancelledError:
            raise
        except Exception as exc:
            raise StrategyError(f"python-docx extraction failed: {exc}") from exc
        text = "\n".join(blocks)
        return StrategyOutput(
            text=text,
            pages_recovered=1 if text else 0,
            total_pages=1,
        )
