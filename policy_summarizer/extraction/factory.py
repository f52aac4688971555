from policy_summarizer.config.settings import Settings
from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cascade import ExtractionCascade
from policy_summarizer.extraction.cleaner import TextCleaner
from policy_summarizer.extraction.docx_adapter import DocxStrategy
from policy_summarizer.extraction.lenient_adapter import LenientPageStrategy
from policy_summarizer.extraction.models import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE
from policy_summarizer.extraction.ocr_adapter import OcrStrategy
from policy_summarizer.extraction.pdfplumber_adapter import PdfPlumberStrategy
from policy_summarizer.extraction.pymupdf_adapter import PyMuPdfStrategy


class ExtractionCascadeFactory:
    """Creates the extraction cascade with strategy lists per media type."""

    @classmethod
    def create(cls, settings: Settings) -> ExtractionCascade:
        return ExtractionCascade(
            strategies={
                PDF_MEDIA_TYPE: cls.pdf_strategies(settings),
                DOCX_MEDIA_TYPE: [DocxStrategy(settings.structural_timeout_seconds)],
            },
            cleaner=TextCleaner(),
            min_length=settings.min_extracted_characters,
        )

    @classmethod
    def pdf_strategies(cls, settings: Settings) -> list[BaseExtractionStrategy]:
        """PDF strategies ordered from richest to most tolerant."""
        structural_timeout = settings.structural_timeout_seconds
        return [
            PyMuPdfStrategy(structural_timeout),
            PdfPlumberStrategy(structural_timeout),
            LenientPageStrategy(structural_timeout),
            OcrStrategy(
                settings.ocr_timeout_seconds,
                max_pages=settings.ocr_max_pages,
                dpi=settings.ocr_dpi,
                page_timeout_seconds=settings.ocr_page_timeout_seconds,
                accept_partial=settings.ocr_accept_partial,
                languages=settings.ocr_languages,
            ),
        ]
