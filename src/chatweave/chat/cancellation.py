"""Cooperative cancellation handle owned by a response."""

from typing import Optional


class CancellationToken:
    """
    Read-only view of a cancellation source, handed to producers.

    Producers poll ``is_cancellation_requested`` between fragments and stop
    producing once it is set. Raising the signal never interrupts a producer.
    """

    def __init__(self, source: "CancellationTokenSource"):
        self._source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source.is_cancellation_requested

    @property
    def reason(self) -> Optional[str]:
        return self._source.reason


class CancellationTokenSource:
    """Owner side of a cancellation signal: a flag plus an optional reason."""

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None
        self.token = CancellationToken(self)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Raise the signal. Idempotent; the first reason wins."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason
