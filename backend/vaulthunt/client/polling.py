"""Per-channel request supersession and non-overlapping repeating polls.

A ``PollingService`` belongs to one client (one browser tab in the web
front-end); nothing here is module-global.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class PollingService:
    def __init__(self):
        self._requests: Dict[str, asyncio.Task] = {}
        self._intervals: Dict[str, asyncio.Task] = {}
        self._callbacks: Dict[str, asyncio.Task] = {}
        self._in_flight: Dict[str, bool] = {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    # ---- request channels ----

    async def run(self, channel: str, factory: Callable[[], Awaitable]):
        """Run ``factory()`` as the only outstanding request on ``channel``.

        A still-pending request on the same channel is cancelled first.
        Returns None when this request is itself superseded or cancelled;
        cancellation of the caller propagates as usual.
        """
        self.cancel(channel)
        task = asyncio.ensure_future(factory())
        self._requests[channel] = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(f"[polling] request on {channel} superseded")
            return None
        finally:
            if self._requests.get(channel) is task:
                del self._requests[channel]

    def cancel(self, channel: str) -> bool:
        task = self._requests.pop(channel, None)
        if task is not None and not task.done():
            task.cancel()
            return True
        return False

    def has_pending(self, channel: str) -> bool:
        task = self._requests.get(channel)
        return task is not None and not task.done()

    # ---- repeating polls ----

    def is_in_flight(self, key: str) -> bool:
        return self._in_flight.get(key, False)

    def is_running(self, key: str) -> bool:
        task = self._intervals.get(key)
        return task is not None and not task.done()

    def start_interval(self, key: str, callback: Callable[[], Awaitable], interval: float) -> None:
        """Call ``callback`` every ``interval`` seconds, skipping ticks that
        would overlap a still-running previous call."""
        self.stop_interval(key)
        loop = asyncio.get_running_loop()
        self._intervals[key] = loop.create_task(self._interval_loop(key, callback, interval))
        logger.debug(f"[polling] started interval {key} ({interval}s)")

    async def _interval_loop(self, key, callback, interval):
        while True:
            await asyncio.sleep(interval)
            if self.is_in_flight(key):
                logger.debug(f"[polling] skipping {key} - previous call still in flight")
                continue
            self._in_flight[key] = True
            self._callbacks[key] = asyncio.ensure_future(self._invoke(key, callback))

    async def _invoke(self, key, callback):
        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"[polling] error in {key}: {exc}")
        finally:
            self._in_flight[key] = False

    def stop_interval(self, key: str) -> None:
        for registry in (self._intervals, self._callbacks):
            task = registry.pop(key, None)
            if task is not None and not task.done():
                task.cancel()
        self.cancel(key)
        self._in_flight[key] = False

    def stop_all(self) -> None:
        """Stop every interval and abort every pending request."""
        for registry in (self._intervals, self._callbacks, self._requests):
            for task in registry.values():
                if not task.done():
                    task.cancel()
            registry.clear()
        self._in_flight.clear()
        logger.debug('[polling] stopped all polling')

    # Route changes and page unloads both tear everything down
    on_navigate = stop_all
    on_unload = stop_all

    async def aclose(self) -> None:
        """``stop_all`` and wait until every cancelled task has finished."""
        tasks = [
            t for registry in (self._intervals, self._callbacks, self._requests)
            for t in registry.values()
        ]
        self.stop_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


class Backoff:
    """Exponential backoff window after a rate-limited response."""

    def __init__(self, initial: float = 5.0, maximum: float = 120.0, clock=None):
        self.initial = initial
        self.maximum = maximum
        self._clock = clock or (lambda: asyncio.get_running_loop().time())
        self._delay: Optional[float] = None
        self._until = 0.0

    def trip(self) -> float:
        self._delay = self.initial if self._delay is None else min(self._delay * 2, self.maximum)
        self._until = self._clock() + self._delay
        return self._delay

    def reset(self) -> None:
        self._delay = None
        self._until = 0.0

    @property
    def active(self) -> bool:
        return self._clock() < self._until
