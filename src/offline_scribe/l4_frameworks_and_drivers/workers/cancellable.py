"""Run blocking pipeline work off the main thread so Ctrl-C becomes a cooperative cancel."""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Callable
from typing import TypeVar

from offline_scribe.l1_entities.cancellation import CancellationToken

log = logging.getLogger('scribe.worker')

T = TypeVar('T')

_POLL_INTERVAL = 0.2  # seconds


def run_cancellable(work: Callable[[], T], cancel_token: CancellationToken) -> T:
    """Run *work* in a worker thread; on KeyboardInterrupt, cancel and wait for cleanup.

    The worker is expected to observe *cancel_token* and raise OperationCancelledError,
    which then propagates to the caller once the worker's own cleanup has run.
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix='scribe-worker') as pool:
        future = pool.submit(work)
        while True:
            try:
                done, _ = concurrent.futures.wait([future], timeout=_POLL_INTERVAL)
            except KeyboardInterrupt:
                log.info('Interrupt received, cancelling worker')
                cancel_token.cancel()
                return future.result()
            if done:
                return future.result()
