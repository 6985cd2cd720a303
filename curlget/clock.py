"""
Transfer Clock tracking elapsed time and the redraw cadence
"""
import time
from datetime import datetime
from typing import Callable, Optional

DEFAULT_REDRAW_INTERVAL_MS = 250
TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"


def should_redraw(last_tick: int, now: int, interval_ms: int) -> bool:
    """True once at least interval_ms monotonic milliseconds have passed"""
    return now - last_tick >= interval_ms


def local_timestamp(moment: Optional[datetime] = None) -> str:
    """Return a freshly formatted local time stamp, e.g. 'Sat Oct 17 12:00:00 2026'"""
    if moment is None:
        moment = datetime.now()
    return moment.strftime(TIMESTAMP_FORMAT)


class TransferClock:
    def __init__(
        self,
        interval_ms: int = DEFAULT_REDRAW_INTERVAL_MS,
        wall: Callable[[], float] = time.time,
        ticks: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the Transfer Clock

        Args:
            interval_ms (int): Minimum milliseconds between progress redraws
            wall: Wall-clock source in seconds, used for throughput and ETA
            ticks: Monotonic source in seconds, used for the redraw cadence
        """
        self.interval_ms = interval_ms
        self._wall = wall
        self._ticks = ticks
        self.started_at: Optional[float] = None

    def start(self) -> float:
        """
        Mark the start of a transfer

        Returns:
            float: The wall-clock instant the transfer started
        """
        self.started_at = self._wall()
        return self.started_at

    def elapsed_seconds(self, start: Optional[float] = None) -> float:
        """
        Seconds since the transfer started (never negative)

        Args:
            start (float, optional): Start instant; defaults to the one recorded by start()
        """
        if start is None:
            start = self.started_at
        if start is None:
            return 0.0
        return max(0.0, self._wall() - start)

    def tick(self) -> int:
        """Current monotonic time in whole milliseconds"""
        return int(self._ticks() * 1000)

    def should_redraw(self, last_tick: int, now: int) -> bool:
        return should_redraw(last_tick, now, self.interval_ms)
