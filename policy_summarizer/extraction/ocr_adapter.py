"""OCR fallback for image-based PDFs.

Processing flow:
1. Render the first ``max_pages`` pages to PNG files at ``dpi`` with PyMuPDF,
   inside a temporary directory owned by this attempt.
2. Run tesseract on each image in its own process. The process is killed when
   the page timeout expires or the attempt is cancelled.
3. Concatenate the text of pages that produced something readable.

The temporary directory is removed on every exit path, including cancellation.
"""

import subprocess
import tempfile
import time
from pathlib import Path

import pymupdf
import pytesseract

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput
from policy_summarizer.logging.logger import Log


class OcrStrategy(BaseExtractionStrategy):
    """Last-resort extraction: render pages to images and OCR them."""

    name = "ocr"

    MIN_PAGE_CHARS = 10
    MIN_TOTAL_CHARS = 50
    POLL_SECONDS = 0.1

    def __init__(
        self,
        timeout_seconds: float,
        *,
        max_pages: int,
        dpi: int,
        page_timeout_seconds: float,
        accept_partial: bool = False,
        languages: str = "eng",
    ) -> None:
        super().__init__(timeout_seconds)
        self._max_pages = max_pages
        self._dpi = dpi
        self._page_timeout_seconds = page_timeout_seconds
        self._accept_partial = accept_partial
        self._languages = languages

    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        Log.info(
            f"Attempting OCR (first {self._max_pages} pages, {self._dpi} DPI)",
            strategy=self.name,
            accept_partial=self._accept_partial,
        )
        with tempfile.TemporaryDirectory(prefix="policy-ocr-") as tmp:
            images, total_pages = self._render_pages(document, Path(tmp), token)
            if not images:
                raise StrategyError("No images generated from PDF")
            texts = self._recognize_pages(images, token)

        full_text = "\n\n".join(texts).strip()
        if len(full_text) < self.MIN_TOTAL_CHARS and not self._accept_partial:
            raise StrategyError(
                f"OCR extracted insufficient text: {len(full_text)} characters"
            )
        Log.info(
            f"OCR recovered {len(full_text)} characters from {len(texts)} pages",
            strategy=self.name,
        )
        return StrategyOutput(
            text=full_text,
            pages_recovered=len(texts),
            total_pages=total_pages,
        )

    def accepts_below_threshold(self, output: StrategyOutput) -> bool:
        return self._accept_partial and bool(output.text.strip())

    def _render_pages(
        self,
        document: SourceDocument,
        directory: Path,
        token: CancelToken,
    ) -> tuple[list[Path], int]:
        images: list[Path] = []
        try:
            with pymupdf.open(stream=document.content, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                total_pages = doc.page_count
                for index in range(min(total_pages, self._max_pages)):
                    token.raise_if_cancelled()
                    pixmap = doc.load_page(index).get_pixmap(dpi=self._dpi)
                    path = directory / f"page-{index + 1:03d}.png"
                    pixmap.save(str(path))
                    images.append(path)
        except ExtractionCancelledError:
            raise
        except Exception as exc:
            raise StrategyError(f"Page rendering failed: {exc}") from exc
        return images, total_pages

    def _recognize_pages(self, images: list[Path], token: CancelToken) -> list[str]:
        texts: list[str] = []
        for image in images:
            token.raise_if_cancelled()
            try:
                text = self._run_tesseract(image, token)
            except pytesseract.TesseractNotFoundError as exc:
                raise StrategyError(f"tesseract is not installed: {exc}") from exc
            except (RuntimeError, pytesseract.TesseractError) as exc:
                Log.warning(f"OCR failed for {image.name}: {exc}", strategy=self.name)
                if self._accept_partial and texts:
                    Log.info(
                        "Stopping OCR after error to preserve partial results",
                        strategy=self.name,
                    )
                    break
                continue
            if len(text.strip()) > self.MIN_PAGE_CHARS:
                texts.append(text.strip())
        return texts

    def _run_tesseract(self, image: Path, token: CancelToken) -> str:
        """OCR one image in a tesseract process that is killed on timeout or cancel.

        Raises:
            ExtractionCancelledError: if the token was cancelled mid-page.
            RuntimeError: if the page timeout expired.
            pytesseract.TesseractError: if tesseract exited with an error.
            pytesseract.TesseractNotFoundError: if the binary is missing.
        """
        command = [
            pytesseract.pytesseract.tesseract_cmd,
            str(image),
            "stdout",
            "-l",
            self._languages,
            "--oem",
            "1",
            "--psm",
            "6",
        ]
        try:
            process = subprocess.Popen(
                command, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
        except FileNotFoundError as exc:
            raise pytesseract.TesseractNotFoundError() from exc

        deadline = time.monotonic() + self._page_timeout_seconds
        try:
            while True:
                try:
                    stdout, stderr = process.communicate(timeout=self.POLL_SECONDS)
                    break
                except subprocess.TimeoutExpired:
                    token.raise_if_cancelled()
                    if time.monotonic() >= deadline:
                        raise RuntimeError("Tesseract process timeout") from None
        finally:
            if process.poll() is None:
                process.kill()
                process.communicate()

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise pytesseract.TesseractError(process.returncode, message)
        return stdout.decode("utf-8", errors="replace")
