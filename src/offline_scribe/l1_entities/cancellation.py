"""Cooperative cancellation signal shared by every pipeline stage."""

from __future__ import annotations

import threading

from offline_scribe.l1_entities.errors import OperationCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag.

    Stages poll it at chunk/segment boundaries; once cancelled it stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError('Operation was cancelled')


def check_cancelled(token: CancellationToken | None) -> None:
    """Raise OperationCancelledError if *token* is set. ``None`` never cancels."""
    if token is not None:
        token.raise_if_cancelled()
