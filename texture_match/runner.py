"""
Background query execution for interactive hosts.

Decoding and scanning a photo is CPU work that should not run on a UI or
request thread. LatestQueryRunner runs queries on a thread pool and only
delivers the result of the most recent submission: if the user submits
a second photo before the first finishes, the first completion is
dropped. Queries themselves always run to completion and never retry.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional

from .engine import MatchEngine
from .models import MatchResult
from .preprocessing import ImageSource
from .scoring import DEFAULT_TOP_K

logger = logging.getLogger(__name__)

ResultCallback = Callable[[List[MatchResult]], None]
ErrorCallback = Callable[[BaseException], None]


class LatestQueryRunner:
    """Runs MatchEngine queries off-thread, delivering only the newest result."""

    def __init__(self, engine: MatchEngine, max_workers: int = 1):
        self.engine = engine
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="texture-match")
        self._lock = threading.Lock()
        self._latest_ticket = 0

    def submit(self,
               source: ImageSource,
               on_result: ResultCallback,
               on_error: Optional[ErrorCallback] = None,
               top_k: int = DEFAULT_TOP_K) -> Future:
        """
        Queue a query and supersede any query still in flight.

        on_result or on_error is called only if no newer query was
        submitted in the meantime. Delivery normally happens on the worker
        thread that ran the query; if the query already finished by the
        time its callback is attached, delivery happens synchronously on
        the thread calling submit(). Without on_error, failures of the
        latest query are logged. Exceptions raised by the callbacks are
        logged and not propagated.

        Returns:
            The Future of the underlying MatchEngine.match() call.
        """
        with self._lock:
            self._latest_ticket += 1
            ticket = self._latest_ticket

        future = self._executor.submit(self.engine.match, source, top_k)
        future.add_done_callback(partial(self._deliver, ticket, on_result, on_error))
        return future

    def is_latest(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest_ticket

    def _deliver(self, ticket: int,
                 on_result: ResultCallback,
                 on_error: Optional[ErrorCallback],
                 future: Future) -> None:
        if future.cancelled():
            return
        if not self.is_latest(ticket):
            logger.debug(f"Discarding stale result for query #{ticket}")
            return

        error = future.exception()
        try:
            if error is None:
                on_result(future.result())
            elif on_error is not None:
                on_error(error)
            else:
                logger.error(f"Query #{ticket} failed: {error}")
        except Exception:
            logger.exception(f"Result callback for query #{ticket} raised")

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "LatestQueryRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
