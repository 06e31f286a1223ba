from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from ..core.constants import AUTO_REFRESH_SECONDS
from ..core.exceptions import TransportError
from .query import WindowedQueryController, WindowResult
from .working_set import WorkingSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshRequest:
    page: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class RefreshState:
    generation: int = 0
    applied_generation: int = 0
    last_error: Optional[Exception] = None
    last_result: Optional[WindowResult] = field(default=None, repr=False)


class RefreshCoordinator:
    """Manual and periodic refresh of a working set on one asyncio loop.

    Each request is tagged with a generation number. A manual refresh
    supersedes whatever is in flight; an auto-refresh tick while a request
    is outstanding does nothing. Results whose generation is no longer the
    latest are dropped, as is everything after `close()`.
    """

    def __init__(
        self,
        query: WindowedQueryController,
        working_set: WorkingSet,
        *,
        interval_seconds: float = AUTO_REFRESH_SECONDS,
        request: Optional[RefreshRequest] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._query = query
        self._working_set = working_set
        self._interval = float(interval_seconds)
        self._request = request or RefreshRequest()
        self._on_error = on_error
        self._state = RefreshState()
        self._inflight: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.Task] = None
        self._paused = False
        self._closed = False

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def auto_refresh_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def refresh(self, request: Optional[RefreshRequest] = None) -> bool:
        """Run a refresh now; returns True when its result was applied."""
        if self._closed:
            return False
        if request is not None:
            self._request = request
        if self.in_flight:
            self._inflight.cancel()
        return await self._start()

    async def tick(self) -> bool:
        """One auto-refresh tick; skipped while another refresh is outstanding."""
        if self._closed or self._paused or self.in_flight:
            return False
        return await self._start()

    def start_auto_refresh(self) -> None:
        if self._closed or self.auto_refresh_running:
            return
        self._paused = False
        self._timer = asyncio.ensure_future(self._loop())

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def stop_auto_refresh(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        self._closed = True
        self._next_generation()
        self.stop_auto_refresh()
        if self.in_flight:
            self._inflight.cancel()
        self._inflight = None

    async def _loop(self) -> None:
        while not self._closed:
            await asyncio.sleep(self._interval)
            if self._paused:
                continue
            logger.debug("Auto-refreshing attendance records for %s", self._working_set.organization_id)
            try:
                await self.tick()
            except Exception as exc:
                # the timer outlives any single failed tick
                logger.exception("Auto-refresh tick failed for %s", self._working_set.organization_id)
                self._state.last_error = exc
                if self._on_error is not None:
                    self._on_error(exc)

    async def _start(self) -> bool:
        task = asyncio.ensure_future(self._run(self._next_generation()))
        self._inflight = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                # superseded by a newer refresh or torn down
                return False
            raise

    def _next_generation(self) -> int:
        self._state.generation += 1
        return self._state.generation

    async def _run(self, generation: int) -> bool:
        live_marker = self._working_set.live_sequence
        req = self._request
        try:
            result = await asyncio.to_thread(
                self._query.fetch_window,
                self._working_set.organization_id,
                page=req.page,
                start_date=req.start_date,
                end_date=req.end_date,
            )
        except TransportError as exc:
            if generation != self._state.generation:
                return False
            logger.warning("Refreshing attendance records failed: %s", exc)
            self._state.last_error = exc
            if self._on_error is not None:
                self._on_error(exc)
            return False

        if self._closed or generation != self._state.generation:
            logger.debug("Discarding stale refresh result (generation %d)", generation)
            return False

        self._working_set.replace(result.events, keep_live_after=live_marker)
        self._state.applied_generation = generation
        self._state.last_error = None
        self._state.last_result = result
        return True
