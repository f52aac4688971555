import asyncio

from policy_summarizer.analysis.models import from_payload, to_payload
from policy_summarizer.config.settings import Settings
from policy_summarizer.exceptions import ErrorKind
from policy_summarizer.extraction.models import SourceDocument
from policy_summarizer.logging.logger import Log
from policy_summarizer.processor.pipeline import PipelineContext, ProcessingOptions
from policy_summarizer.processor.processor import Processor
from policy_summarizer.storage.base import BaseDocumentStore
from policy_summarizer.storage.models import SummaryVersion
from policy_summarizer.worker.error_messages import describe_failure
from policy_summarizer.worker.exceptions import JobTimeoutError, ResultNotReadyError
from policy_summarizer.worker.locks import DocumentLocks
from policy_summarizer.worker.models import JobStatus, ProcessingJob

CANCELLED_MESSAGE = (
    "Processing was cancelled before it finished. Please upload the document again."
)


class JobRunner:
    """Runs processing jobs in the background and records their outcome.

    Every job ends with a terminal status write, whatever happens inside the
    pipeline. Work on the same document id is serialised.
    """

    def __init__(
        self,
        processor: Processor,
        store: BaseDocumentStore,
        settings: Settings,
        locks: DocumentLocks | None = None,
    ) -> None:
        self._processor = processor
        self._store = store
        self._settings = settings
        self._locks = locks or DocumentLocks()
        self._tasks: set[asyncio.Task[ProcessingJob]] = set()

    def submit(
        self,
        job: ProcessingJob,
        source: SourceDocument,
        options: ProcessingOptions,
    ) -> asyncio.Task[ProcessingJob]:
        """Start the job without waiting for it."""
        task = asyncio.create_task(
            self.run(job, source, options), name=f"process-{job.document_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def run(
        self,
        job: ProcessingJob,
        source: SourceDocument,
        options: ProcessingOptions,
    ) -> ProcessingJob:
        """Execute a single job with error handling."""
        Log.info("Running job", document=job.document_id, file=source.filename)
        finished: ProcessingJob | None = None
        try:
            async with self._locks.hold(job.document_id):
                finished = await self._execute(job, source, options)
                await self._write_terminal(finished)
                return finished
        except asyncio.CancelledError:
            # Cancelled while waiting for the lock, inside the pipeline, or
            # while the outcome was being written.
            await self._write_terminal(
                finished or job.fail(ErrorKind.INTERNAL, CANCELLED_MESSAGE)
            )
            raise

    async def regenerate_summary(self, document_id: str, length: str) -> SummaryVersion:
        """Write a new summary from the stored result and make it the active version.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            ResultNotReadyError: if the document has no successful result yet.
        """
        async with self._locks.hold(document_id):
            record = await asyncio.to_thread(self._store.get_document, document_id)
            if record.status != JobStatus.SUCCEEDED.value or record.structured_result is None:
                raise ResultNotReadyError(
                    f"Document {document_id} has no result to summarize ({record.status})"
                )
            result = from_payload(record.structured_result)
            generated = await self._processor.summarize(result, length)
            version = await asyncio.to_thread(
                self._store.create_summary_version,
                document_id,
                generated.text,
                length=length,
                profile=generated.profile,
                active=True,
            )
            await asyncio.to_thread(
                self._store.update_document, document_id, summary=generated.text
            )
        Log.info(
            f"Stored summary version {version.version}",
            document=document_id,
            profile=generated.profile,
        )
        return version

    async def activate_summary(self, document_id: str, version: int) -> SummaryVersion:
        async with self._locks.hold(document_id):
            active = await asyncio.to_thread(
                self._store.set_active_summary, document_id, version
            )
            await asyncio.to_thread(
                self._store.update_document, document_id, summary=active.content
            )
        return active

    async def _execute(
        self,
        job: ProcessingJob,
        source: SourceDocument,
        options: ProcessingOptions,
    ) -> ProcessingJob:
        try:
            context = await self._process_with_deadline(job, source, options)
            await self._persist_success(context)
        except Exception as exc:
            return self._handle_failure(job, exc)
        return job.succeed()

    async def _process_with_deadline(
        self,
        job: ProcessingJob,
        source: SourceDocument,
        options: ProcessingOptions,
    ) -> PipelineContext:
        deadline = self._settings.job_timeout_seconds
        try:
            async with asyncio.timeout(deadline) as scope:
                return await self._processor.process(job.document_id, source, options)
        except TimeoutError as exc:
            if scope.expired():
                raise JobTimeoutError(f"Job exceeded its {deadline:g}s deadline") from exc
            raise

    async def _persist_success(self, context: PipelineContext) -> None:
        extracted = context.extracted
        result = context.structured_result
        summary = context.summary
        if extracted is None or result is None or summary is None:
            raise ValueError("Pipeline finished with an incomplete context")

        await asyncio.to_thread(
            self._store.update_document,
            context.document_id,
            extracted_text=extracted.text[: self._settings.extracted_text_max_chars],
            strategy_used=extracted.strategy_used,
            pages_recovered=extracted.pages_recovered,
            total_pages=extracted.total_pages,
            structured_result=to_payload(result),
            summary=summary.text,
            processing_options={
                "summary_length": context.options.summary_length,
                "summary_profile": summary.profile,
                "summary_regenerated": summary.regenerated,
                "summary_fallback": summary.used_fallback,
                "chunks": len(context.chunks),
            },
        )
        await asyncio.to_thread(
            self._store.create_summary_version,
            context.document_id,
            summary.text,
            length=context.options.summary_length,
            profile=summary.profile,
            active=True,
        )

    def _handle_failure(self, job: ProcessingJob, exc: Exception) -> ProcessingJob:
        kind, message = describe_failure(exc, self._settings.job_timeout_seconds)
        Log.error(f"Job failed: {exc}", document=job.document_id, kind=kind.value)
        return job.fail(kind, message)

    async def _write_terminal(self, job: ProcessingJob) -> None:
        try:
            await asyncio.to_thread(
                self._store.update_document,
                job.document_id,
                status=job.status.value,
                error_kind=job.error_kind.value if job.error_kind else None,
                error_message=job.error_message,
                finished_at=job.finished_at,
            )
        except Exception as exc:
            Log.error(f"Could not record job outcome: {exc}", document=job.document_id)
            return
        Log.info(f"Job {job.status.value}", document=job.document_id)
