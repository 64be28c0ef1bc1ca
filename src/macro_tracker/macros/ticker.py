"""Host loop that re-runs the scheduler at a fixed cadence.

The ticker owns its thread and stop event; nothing is shared between
instances. Session filters are read on every tick, so toggling one takes
effect on the next snapshot.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from macro_tracker.macros.catalog import ALL_MACROS, MacroWindow, SessionFilters
from macro_tracker.macros.scheduler import ScheduleSnapshot, schedule
from macro_tracker.shared.utils import setup_logger, utc_now


class MacroTicker:
    """Calls ``on_tick`` with a fresh ``ScheduleSnapshot`` every ``interval`` seconds."""

    def __init__(
        self,
        on_tick: Callable[[ScheduleSnapshot], None],
        interval: float = 1.0,
        catalog: Sequence[MacroWindow] = ALL_MACROS,
        filters: SessionFilters | Callable[[], SessionFilters] = SessionFilters(),
        clock: Callable[[], datetime] = utc_now,
        log_file: Path | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.on_tick = on_tick
        self.interval = interval
        self.catalog = list(catalog)
        self.filters = filters
        self.clock = clock
        self.logger = setup_logger(self.__class__.__name__, log_file)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def current_filters(self) -> SessionFilters:
        return self.filters() if callable(self.filters) else self.filters

    def tick(self) -> ScheduleSnapshot:
        """Compute one snapshot and hand it to ``on_tick``."""
        windows = self.current_filters().apply(self.catalog)
        snapshot = schedule(self.clock(), windows)
        self.on_tick(snapshot)
        return snapshot

    def start(self) -> "MacroTicker":
        if self.running:
            self.logger.warning("Ticker already running")
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="macro-ticker", daemon=True)
        self._thread.start()
        self.logger.info("Ticker started (interval=%.2fs)", self.interval)
        return self

    def stop(self, timeout: float | None = None) -> None:
        """Stop ticking. Safe to call more than once."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            self.logger.info("Ticker stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                self.logger.exception("Tick failed")
            self._stop_event.wait(self.interval)

    def __enter__(self) -> "MacroTicker":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()
