"""
Autosave Scheduler: debounce model mutations into single saves.

Each notify_mutated() restarts a single-shot timer. Only a timer that runs
out its full quiet period calls save_fn, so a burst of edits becomes one
write carrying the state as of the last edit. save_fn serializes the
model when it runs, not when the timer was armed.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from .errors import KanbanError

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD_MS = 800


class SaveState(Enum):
    IDLE = "idle"          # nothing saved yet, nothing pending
    PENDING = "pending"    # mutation seen, save not yet fired
    SAVED = "saved"
    FAILED = "failed"      # store offline or write rejected


@dataclass
class SaveStatus:
    """Advisory save status for the UI. Never blocks editing."""
    state: SaveState = SaveState.IDLE
    saved_at: Optional[str] = None
    error: Optional[str] = None

    def label(self) -> str:
        if self.state == SaveState.PENDING:
            return "Waiting for save..."
        if self.state == SaveState.SAVED:
            return f"Saved {_clock_time(self.saved_at)}".strip()
        if self.state == SaveState.FAILED:
            return "Save failed (offline)"
        return ""


def _clock_time(ts: Optional[str]) -> str:
    if not ts:
        return ""
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00")).astimezone().strftime("%H:%M:%S")
    except ValueError:
        return ts


class AutosaveScheduler:
    """
    Debounced saver with exact cancel-and-restart.

    save_fn returns the persisted timestamp, or raises a KanbanError
    (StoreUnavailable / PersistFailure) which is turned into FAILED status.
    timer_factory has the threading.Timer signature; tests pass a fake.
    """

    def __init__(self, save_fn: Callable[[], str],
                 quiet_period_ms: int = DEFAULT_QUIET_PERIOD_MS,
                 timer_factory: Optional[Callable[..., threading.Timer]] = None):
        self.save_fn = save_fn
        self.quiet_period_ms = quiet_period_ms
        self.timer_factory = timer_factory or threading.Timer
        self.status = SaveStatus()
        self._timer = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def notify_mutated(self) -> None:
        """Restart the quiet period. Call after every model mutation."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self.status = SaveStatus(SaveState.PENDING, self.status.saved_at)
            timer = self.timer_factory(
                self.quiet_period_ms / 1000, self._fire, args=(self._generation,)
            )
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A superseded timer that already woke up must not save
            if generation != self._generation:
                return
            self._timer = None
        self._run_save()

    def flush(self) -> SaveStatus:
        """Save right now, dropping any pending timer."""
        self.cancel()
        return self._run_save()

    def cancel(self) -> None:
        """Drop a pending save without running it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _run_save(self) -> SaveStatus:
        with self._lock:
            started_at = self._generation
        try:
            saved_at = self.save_fn()
        except KanbanError as e:
            logger.warning(f"Autosave failed: {e}")
            status = SaveStatus(SaveState.FAILED, self.status.saved_at, str(e))
        else:
            logger.debug(f"Autosaved at {saved_at}")
            status = SaveStatus(SaveState.SAVED, saved_at)

        with self._lock:
            # Edits made while the save was in flight keep the status pending
            if self._generation != started_at and self._timer is not None:
                self.status = SaveStatus(SaveState.PENDING, status.saved_at, status.error)
            else:
                self.status = status
            return self.status
