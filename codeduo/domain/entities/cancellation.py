"""Cooperative cancellation for a single pipeline run."""

import asyncio

from codeduo.domain.errors import PipelineCancelledError


class CancellationToken:
    """Set once by the caller; checked by the pipeline between chunks and stages."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "Pipeline cancelled by caller") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelledError(self._reason)
