"""Command-line entry point: summarize one local policy document."""

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer

from policy_summarizer.config.settings import Settings
from policy_summarizer.extraction.models import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE
from policy_summarizer.logging.logger import Log
from policy_summarizer.processor.processor import build_processor
from policy_summarizer.storage.connection import close_pool
from policy_summarizer.storage.factory import DocumentStoreFactory
from policy_summarizer.worker.exceptions import UploadRejectedError
from policy_summarizer.worker.job_runner import JobRunner
from policy_summarizer.worker.models import JobStatus
from policy_summarizer.worker.upload import UploadService

SUFFIX_MEDIA_TYPES = {".pdf": PDF_MEDIA_TYPE, ".docx": DOCX_MEDIA_TYPE}

app = typer.Typer(
    name="policy-summarizer",
    help="Extract, analyze and summarize an insurance policy document.",
    add_completion=False,
)


@app.command()
def summarize(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="PDF or DOCX policy document",
    ),
    length: Optional[str] = typer.Option(
        None,
        "--length",
        "-l",
        help="Summary length: detailed or short (defaults to SUMMARY_LENGTH)",
    ),
    poll_interval: float = typer.Option(
        0.5,
        "--poll-interval",
        help="Seconds between status checks",
    ),
) -> None:
    """Upload a document, wait for the job to finish and print the result as JSON."""
    settings = Settings()
    Log.configure(settings.log_level)
    try:
        payload = asyncio.run(_run(path, length, poll_interval, settings))
    except UploadRejectedError as exc:
        typer.echo(f"Upload rejected: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    finally:
        close_pool()

    typer.echo(json.dumps(payload, indent=2, default=str))
    if payload["status"] == JobStatus.FAILED.value:
        raise typer.Exit(code=1)


async def _run(
    path: Path,
    length: str | None,
    poll_interval: float,
    settings: Settings,
) -> dict[str, Any]:
    store = DocumentStoreFactory.create(settings)
    runner = JobRunner(build_processor(settings), store, settings)
    service = UploadService(runner, store, settings)

    media_type = SUFFIX_MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")
    job = await service.accept(path.read_bytes(), path.name, media_type, length)

    status = await service.get_status(job.document_id)
    while status.status is JobStatus.PENDING:
        await asyncio.sleep(poll_interval)
        status = await service.get_status(job.document_id)
    await runner.wait_idle()

    payload: dict[str, Any] = {
        "document_id": job.document_id,
        "status": status.status.value,
    }
    if status.status is JobStatus.FAILED:
        payload["error_kind"] = status.error_kind
        payload["error_message"] = status.error_message
        return payload
    payload.update(asdict(await service.get_result(job.document_id)))
    return payload


def main() -> None:
    app()


if __name__ == "__main__":
    main()
