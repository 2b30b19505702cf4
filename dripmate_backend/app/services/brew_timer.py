# dripmate_backend/app/services/brew_timer.py
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from dripmate_backend.app.brew_engine.steps import BrewStep, TimelineStep, build_step_timeline

# Purpose:
# Server-side model of the pour-over timer: elapsed time, pause/resume and
# per-step progress. Rendering is the client's job; callers poll snapshot().

Clock = Callable[[], float]


def format_elapsed(seconds: float) -> str:
    s = int(seconds)
    return f"{s // 60:02d}:{s % 60:02d}"


class BrewTimer:
    def __init__(self, steps: List[BrewStep], clock: Clock = time.monotonic):
        self.timeline: List[TimelineStep] = build_step_timeline(steps)
        self._clock = clock
        self._start: Optional[float] = None
        self._paused_at: Optional[float] = None   # elapsed seconds captured on pause

    @property
    def is_running(self) -> bool:
        return self._start is not None and self._paused_at is None

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def total_seconds(self) -> int:
        return self.timeline[-1].end_seconds if self.timeline else 0

    def start(self) -> None:
        self._start = self._clock()
        self._paused_at = None

    def toggle_pause(self) -> bool:
        """Pause a running timer or resume a paused one. Returns True when now paused."""
        if self._start is None:
            return False
        if self._paused_at is None:
            self._paused_at = self._clock() - self._start
            return True
        # rebase so elapsed continues from where it stopped
        self._start = self._clock() - self._paused_at
        self._paused_at = None
        return False

    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        if self._paused_at is not None:
            return self._paused_at
        return self._clock() - self._start

    def step_progress(self, elapsed: float) -> List[float]:
        out: List[float] = []
        for step in self.timeline:
            if elapsed >= step.end_seconds:
                pct = 100.0
            elif elapsed > step.start_seconds and step.duration > 0:
                pct = min(100.0, (elapsed - step.start_seconds) / step.duration * 100.0)
            else:
                pct = 0.0
            out.append(round(pct, 2))
        return out

    def snapshot(self) -> Dict[str, Any]:
        e = self.elapsed()
        return {
            "elapsed_seconds": round(e, 3),
            "display": format_elapsed(e),
            "is_running": self.is_running,
            "is_paused": self.is_paused,
            "progress": self.step_progress(e),
            "steps": [s.as_dict() for s in self.timeline],
        }


class TimerRegistry:
    """Independent timers keyed by coffee id."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._timers: Dict[str, BrewTimer] = {}
        self._lock = threading.RLock()

    def start(self, key: str, steps: List[BrewStep]) -> Dict[str, Any]:
        timer = BrewTimer(steps, clock=self._clock)
        timer.start()
        with self._lock:
            self._timers[key] = timer
        return timer.snapshot()

    def get(self, key: str) -> Optional[BrewTimer]:
        with self._lock:
            return self._timers.get(key)

    def toggle_pause(self, key: str) -> Optional[Dict[str, Any]]:
        timer = self.get(key)
        if timer is None:
            return None
        timer.toggle_pause()
        return timer.snapshot()

    def reset(self, key: str) -> bool:
        with self._lock:
            return self._timers.pop(key, None) is not None

    def tick(self, key: str) -> Optional[Dict[str, Any]]:
        timer = self.get(key)
        return timer.snapshot() if timer is not None else None

    def tick_all(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            items = list(self._timers.items())
        return {k: t.snapshot() for k, t in items}

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._timers)


__all__ = ["BrewTimer", "TimerRegistry", "format_elapsed"]
