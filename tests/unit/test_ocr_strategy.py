import threading
import time
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytesseract
import pytest

from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.exceptions import ExtractionCancelledError, StrategyError
from policy_summarizer.extraction.models import PDF_MEDIA_TYPE, SourceDocument, StrategyOutput
from policy_summarizer.extraction.ocr_adapter import OcrStrategy

_PAGE_TEXT = "Scanned policy page with emergency medical coverage wording."


def _doc(content: bytes) -> SourceDocument:
    return SourceDocument(content=content, media_type=PDF_MEDIA_TYPE, filename="scan.pdf")


def _strategy(**kwargs: object) -> OcrStrategy:
    values: dict[str, object] = {"max_pages": 3, "dpi": 50, "page_timeout_seconds": 5.0}
    values.update(kwargs)
    return OcrStrategy(10.0, **values)  # type: ignore[arg-type]


class TestOcrStrategy:
    def test_recognizes_rendered_pages(self, five_page_pdf_bytes: bytes) -> None:
        with patch.object(OcrStrategy, "_run_tesseract", return_value=_PAGE_TEXT) as ocr:
            output = _strategy().extract(_doc(five_page_pdf_bytes), CancelToken())
        assert ocr.call_count == 3
        assert output.pages_recovered == 3
        assert output.total_pages == 5
        assert output.text.count(_PAGE_TEXT) == 3

    def test_rendered_images_are_removed(self, sample_pdf_bytes: bytes) -> None:
        seen: list[Path] = []

        def fake_ocr(image: Path, token: CancelToken) -> str:
            seen.append(image)
            return _PAGE_TEXT

        with patch.object(OcrStrategy, "_run_tesseract", side_effect=fake_ocr):
            _strategy().extract(_doc(sample_pdf_bytes), CancelToken())
        assert seen
        assert not any(p.exists() for p in seen)
        assert not seen[0].parent.exists()

    def test_insufficient_text_raises(self, sample_pdf_bytes: bytes) -> None:
        with patch.object(OcrStrategy, "_run_tesseract", return_value="too short!!"):
            with pytest.raises(StrategyError, match="insufficient text"):
                _strategy().extract(_doc(sample_pdf_bytes), CancelToken())

    def test_partial_text_kept_when_allowed(self, sample_pdf_bytes: bytes) -> None:
        with patch.object(OcrStrategy, "_run_tesseract", return_value="short page text"):
            strategy = _strategy(accept_partial=True)
            output = strategy.extract(_doc(sample_pdf_bytes), CancelToken())
        assert output.text == "short page text"
        assert strategy.accepts_below_threshold(output)

    def test_partial_mode_stops_after_error(self, five_page_pdf_bytes: bytes) -> None:
        responses = [_PAGE_TEXT, RuntimeError("Tesseract process timeout"), _PAGE_TEXT]
        with patch.object(OcrStrategy, "_run_tesseract", side_effect=responses) as ocr:
            output = _strategy(accept_partial=True).extract(
                _doc(five_page_pdf_bytes), CancelToken()
            )
        assert ocr.call_count == 2
        assert output.pages_recovered == 1

    def test_strict_mode_skips_failed_page(self, five_page_pdf_bytes: bytes) -> None:
        responses = [RuntimeError("Tesseract process timeout"), _PAGE_TEXT, _PAGE_TEXT]
        with patch.object(OcrStrategy, "_run_tesseract", side_effect=responses):
            output = _strategy().extract(_doc(five_page_pdf_bytes), CancelToken())
        assert output.pages_recovered == 2

    def test_missing_tesseract_raises(self, sample_pdf_bytes: bytes) -> None:
        missing = pytesseract.TesseractNotFoundError()
        with patch.object(OcrStrategy, "_run_tesseract", side_effect=missing):
            with pytest.raises(StrategyError, match="not installed"):
                _strategy().extract(_doc(sample_pdf_bytes), CancelToken())

    def test_invalid_pdf_raises(self) -> None:
        with pytest.raises(StrategyError, match="rendering failed"):
            _strategy().extract(_doc(b"not a pdf"), CancelToken())

    def test_blank_output_never_accepted_below_threshold(self) -> None:
        output = StrategyOutput(text="  ", pages_recovered=0, total_pages=1)
        assert not _strategy(accept_partial=True).accepts_below_threshold(output)


class TestTesseractProcess:
    def test_reads_text_from_stdout(
        self, sample_pdf_bytes: bytes, fake_tesseract: Callable[[str], Path]
    ) -> None:
        fake_tesseract(f'echo "{_PAGE_TEXT}"')
        output = _strategy().extract(_doc(sample_pdf_bytes), CancelToken())
        assert output.text == _PAGE_TEXT

    def test_passes_languages_and_output_to_stdout(
        self, tmp_path: Path, fake_tesseract: Callable[[str], Path]
    ) -> None:
        args_file = tmp_path / "args.txt"
        fake_tesseract(f'echo "$@" > {args_file}')
        image = tmp_path / "page-001.png"

        _strategy(languages="eng+fra")._run_tesseract(image, CancelToken())

        assert args_file.read_text().split() == [
            str(image),
            "stdout",
            "-l",
            "eng+fra",
            "--oem",
            "1",
            "--psm",
            "6",
        ]

    def test_nonzero_exit_is_a_tesseract_error(
        self, tmp_path: Path, fake_tesseract: Callable[[str], Path]
    ) -> None:
        fake_tesseract('echo "Error opening data file" >&2\nexit 1')
        with pytest.raises(pytesseract.TesseractError, match="Error opening data file"):
            _strategy()._run_tesseract(tmp_path / "page.png", CancelToken())

    def test_page_timeout_kills_process(
        self, tmp_path: Path, fake_tesseract: Callable[[str], Path]
    ) -> None:
        fake_tesseract("exec sleep 5")
        started = time.monotonic()
        with pytest.raises(RuntimeError, match="timeout"):
            _strategy(page_timeout_seconds=0.2)._run_tesseract(
                tmp_path / "page.png", CancelToken()
            )
        assert time.monotonic() - started < 2

    def test_cancel_kills_process(
        self, tmp_path: Path, fake_tesseract: Callable[[str], Path]
    ) -> None:
        fake_tesseract("exec sleep 5")
        token = CancelToken()
        threading.Timer(0.2, token.cancel).start()
        started = time.monotonic()
        with pytest.raises(ExtractionCancelledError):
            _strategy(page_timeout_seconds=30.0)._run_tesseract(tmp_path / "page.png", token)
        assert time.monotonic() - started < 2

    def test_missing_binary(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            pytesseract.pytesseract, "tesseract_cmd", str(tmp_path / "no-such-tesseract")
        )
        with pytest.raises(pytesseract.TesseractNotFoundError):
            _strategy()._run_tesseract(tmp_path / "page.png", CancelToken())

    def test_cancelled_mid_page_removes_rendered_images(
        self,
        sample_pdf_bytes: bytes,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        fake_tesseract: Callable[[str], Path],
    ) -> None:
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr("tempfile.tempdir", str(scratch))
        fake_tesseract("exec sleep 5")
        token = CancelToken()
        threading.Timer(0.2, token.cancel).start()

        with pytest.raises(ExtractionCancelledError):
            _strategy(page_timeout_seconds=30.0).extract(_doc(sample_pdf_bytes), token)

        assert list(scratch.iterdir()) == []
