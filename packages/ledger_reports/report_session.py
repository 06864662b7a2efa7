"""Report sessions: last-requested-wins bookkeeping for report screens.

A screen may start generating a report and, before it finishes, start
another one (the user picked a different customer). Each generate action
takes an immutable :class:`ReportRequest` from :meth:`ReportSession.begin`;
only the most recent request may publish its result. A superseded request's
late result (or error) is dropped instead of overwriting newer state.

Usage::

    session: ReportSession[CustomerStatement] = ReportSession()
    request = session.begin(customer_id, date_range)
    ...  # possibly on another thread
    session.complete(request, build_customer_statement(store, customer_id))
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .logging_setup import get_logger
from .models import DateRange

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")


@dataclass(frozen=True, slots=True)
class ReportRequest:
    serial: int
    scope: Any
    date_range: DateRange | None = None


class ReportSession(Generic[ResultT]):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._serials = itertools.count(1)
        self._latest: ReportRequest | None = None
        self._current: ResultT | None = None
        self._current_request: ReportRequest | None = None
        self._last_error: BaseException | None = None

    def begin(self, scope: Any, date_range: DateRange | None = None) -> ReportRequest:
        """Issue a new request; every earlier request becomes stale."""

        with self._lock:
            request = ReportRequest(serial=next(self._serials), scope=scope, date_range=date_range)
            self._latest = request
            return request

    def is_current(self, request: ReportRequest) -> bool:
        with self._lock:
            return self._latest is request

    def complete(self, request: ReportRequest, result: ResultT) -> bool:
        """Publish ``result``; returns ``False`` (and drops it) when superseded."""

        with self._lock:
            if self._latest is not request:
                logger.debug("Dropping result of superseded report request #%d", request.serial)
                return False
            self._current = result
            self._current_request = request
            self._last_error = None
            return True

    def fail(self, request: ReportRequest, error: BaseException) -> bool:
        """Record ``error`` for the latest request; stale failures are ignored."""

        with self._lock:
            if self._latest is not request:
                logger.debug("Ignoring failure of superseded report request #%d", request.serial)
                return False
            self._last_error = error
            return True

    def run(
        self,
        scope: Any,
        compute: Callable[[ReportRequest], ResultT],
        *,
        date_range: DateRange | None = None,
    ) -> ResultT | None:
        """Begin a request, compute it and publish the outcome.

        Returns the result when it was published, ``None`` when a newer
        request superseded this one meanwhile. Errors of the current request
        are recorded and re-raised; errors of a stale request are swallowed
        along with its result.
        """

        request = self.begin(scope, date_range)
        try:
            result = compute(request)
        except Exception as e:
            if self.fail(request, e):
                raise
            return None
        return result if self.complete(request, result) else None

    @property
    def current(self) -> ResultT | None:
        with self._lock:
            return self._current

    @property
    def current_request(self) -> ReportRequest | None:
        with self._lock:
            return self._current_request

    @property
    def last_error(self) -> BaseException | None:
        with self._lock:
            return self._last_error


__all__ = ["ReportRequest", "ReportSession"]
