import threading

from policy_summarizer.extraction.exceptions import ExtractionCancelledError


class CancelToken:
    """Cooperative cancellation flag shared between the cascade and a strategy thread.

    Strategies run in worker threads that cannot be interrupted from the event
    loop, so they poll the token between pages and bail out once it is set.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExtractionCancelledError("Extraction attempt was cancelled")
