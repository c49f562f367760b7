"""
Named timing counters for the analysis phases
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimerData:
    """Accumulated time for one named counter"""
    elapsed: float = 0.0
    count: int = 0
    started_at: Optional[float] = None

    @property
    def average(self) -> float:
        return self.elapsed / self.count if self.count else 0.0


class Timer:
    """Thread-safe collection of named timers"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._timers: Dict[str, TimerData] = {}
        self._lock = threading.Lock()

    def start(self, name: str) -> None:
        """Start a named timer"""
        if not self.enabled:
            return
        with self._lock:
            timer = self._timers.setdefault(name, TimerData())
            if timer.started_at is not None:
                logger.warning("Timer '%s' already started", name)
                return
            timer.started_at = time.perf_counter()

    def stop(self, name: str) -> None:
        """Stop a named timer and accumulate the elapsed time"""
        if not self.enabled:
            return
        with self._lock:
            timer = self._timers.get(name)
            if timer is None:
                logger.warning("Tried to stop non-existent timer '%s'", name)
                return
            if timer.started_at is None:
                logger.warning("Tried to stop timer '%s' that wasn't started", name)
                return
            elapsed = time.perf_counter() - timer.started_at
            timer.elapsed += elapsed
            timer.count += 1
            timer.started_at = None

        logger.debug("Timer '%s' stopped after %.2f ms", name, elapsed * 1000.0)

    def record(self, name: str, seconds: float) -> None:
        """Add a measured duration without start/stop"""
        if not self.enabled:
            return
        with self._lock:
            timer = self._timers.setdefault(name, TimerData())
            timer.elapsed += seconds
            timer.count += 1

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Time the enclosed block, also when it raises"""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, time.perf_counter() - started)

    def reset(self, name: Optional[str] = None) -> None:
        """Reset one timer, or all of them"""
        with self._lock:
            if name is None:
                self._timers.clear()
            else:
                self._timers.pop(name, None)

    def snapshot(self) -> Dict[str, TimerData]:
        """Copy of the current counters"""
        with self._lock:
            return {name: TimerData(data.elapsed, data.count) for name, data in self._timers.items()}

    def format_report(self) -> str:
        """Render the counters as a fixed-width table"""
        lines: List[str] = [
            f"Timer Report - {datetime.now().isoformat(timespec='seconds')}",
            "-" * 60,
            f"{'Timer Name':<30} | {'Count':<10} | {'Total (ms)':<15} | {'Avg (ms)':<15}",
            "-" * 60,
        ]

        for name, data in sorted(self.snapshot().items()):
            lines.append(
                f"{name:<30} | {data.count:<10} | {data.elapsed * 1000.0:<15.2f} | {data.average * 1000.0:<15.2f}"
            )

        lines.append("-" * 60)
        return "\n".join(lines) + "\n\n"

    def write_report(self, output_file: str) -> None:
        """Write the timing table to a file"""
        if not self._timers:
            logger.info("No timers to write")
            return

        Path(output_file).parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(self.format_report())
        logger.info("Timing report written to %s", output_file)
