"""
Progress state, event sinks and the polling progress reporter.

Workers never talk to the sink directly. They push the size of every finished
chunk onto a queue; a single reporter thread drains it on a fixed interval and
emits a `progress` event only when the count changed. On stop, the reporter
drains whatever is left and always emits one final event.
"""
import math
import queue
import threading
from abc import ABC, abstractmethod
from typing import Dict, Any

from pydantic import BaseModel, Field
from tqdm import tqdm

from dataset_augmentor.config import SETTINGS


class ProgressState(BaseModel):
    """Observable progress of a run."""
    processed: int = Field(ge=0)
    total: int = Field(ge=0)
    percent: int = Field(ge=0, le=100)

    @classmethod
    def from_counts(cls, processed: int, total: int) -> "ProgressState":
        """percent = round(processed / total * 100), half up, clamped to [0, 100]."""
        if total <= 0:
            percent = 100
        else:
            percent = int(math.floor(processed / total * 100.0 + 0.5))
        return cls(processed=processed, total=total, percent=min(max(percent, 0), 100))


class EventSink(ABC):
    """Receives the named run events: started, progress, finished, error."""

    @abstractmethod
    def emit(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        pass


class NullSink(EventSink):
    """Drops every event."""

    def emit(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        return None


class TqdmSink(EventSink):
    """Renders run events as a tqdm progress bar on the console."""

    def __init__(self, desc: str = "Augmenting images"):
        self.desc = desc
        self._bar: tqdm | None = None

    def emit(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        payload = payload or {}
        if event == "started":
            self._bar = tqdm(total=payload.get("total", 0), desc=self.desc, unit="img")
        elif event == "progress" and self._bar is not None:
            # DEV: событие несет абсолютное значение, tqdm хочет приращение.
            self._bar.update(payload["processed"] - self._bar.n)
        elif event == "finished":
            self._close()
        elif event == "error":
            self._close()
            tqdm.write(f"[ERROR] {payload.get('message', 'unknown error')}")

    def _close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


class ProgressReporter:
    """
    Aggregates chunk completions from workers and emits throttled progress events.

    `add` may be called from any thread. `poll` is only ever called by one
    thread at a time: the reporter thread once `start` was called, otherwise
    the caller.
    """

    def __init__(self,
                 total: int,
                 sink: EventSink,
                 interval: float = SETTINGS.EXECUTION.PROGRESS_POLL_INTERVAL):
        self.total = total
        self.sink = sink
        self.interval = interval

        self._updates: queue.SimpleQueue = queue.SimpleQueue()
        self._processed = 0
        self._last_emitted = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def processed(self) -> int:
        return self._processed

    def add(self, count: int) -> None:
        """Records `count` more processed files. Thread-safe, never blocks."""
        self._updates.put(count)

    def poll(self, force: bool = False) -> ProgressState | None:
        """
        Drains pending updates and emits a progress event if the count changed
        (or unconditionally when `force` is set).

        Returns:
            The emitted state, or None if nothing was emitted.
        """
        while True:
            try:
                self._processed += self._updates.get_nowait()
            except queue.Empty:
                break

        if not force and self._processed == self._last_emitted:
            return None

        state = ProgressState.from_counts(self._processed, self.total)
        self.sink.emit("progress", state.model_dump())
        self._last_emitted = self._processed
        return state

    def start(self) -> None:
        """Starts the background polling thread."""
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="progress-reporter", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stops polling and performs the final catch-up emission."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        else:
            self.poll(force=True)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.poll()
        self.poll(force=True)
