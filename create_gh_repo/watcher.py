"""
watcher.py

Responsibility: Record whether a single file was written while an external
editor had it open.

A `watchdog` observer watches the file's parent directory and forwards raw
events into a queue. A dedicated watcher thread drains that queue, keeps only
write-class events on the watched path, and sets the `written` flag. The
`closed` flag tells the watcher thread to exit; it is checked on every poll so
the thread never blocks on an idle queue.

Both flags are `threading.Event`s and only ever go from unset to set.
"""

from __future__ import annotations

import hashlib
import os
import queue
import threading
import time
from pathlib import Path
from typing import Any

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from create_gh_repo.log import get_logger

log = get_logger("watcher")

# `closed` is close-after-write; close without writing is a separate event type.
_WRITE_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_CLOSED}


class WatchError(RuntimeError):
    pass


def _normalize(path: str | bytes | os.PathLike[str]) -> str:
    return os.path.normcase(os.path.realpath(os.fsdecode(path)))


def _digest(path: Path) -> str | None:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


class _ForwardingHandler(FileSystemEventHandler):
    """Runs on the observer thread; only hands events over."""

    def __init__(self, events: queue.Queue[FileSystemEvent]) -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._events.put(event)


class WriteWatcher:
    def __init__(self, path: str | Path, *, poll_interval: float = 0.1, settle: float = 0.25) -> None:
        self.path = Path(path)
        self.poll_interval = poll_interval
        self.settle = settle

        self.written = threading.Event()
        self.closed = threading.Event()

        self._target = _normalize(self.path)
        self._events: queue.Queue[FileSystemEvent] = queue.Queue()
        self._observer: Any = None
        self._thread: threading.Thread | None = None
        self._started = False
        self._baseline: str | None = None

    def _is_write(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        if event.event_type == EVENT_TYPE_MOVED:
            # Editors that save via a temp file + rename land here.
            dest = getattr(event, "dest_path", "")
            return bool(dest) and _normalize(dest) == self._target
        if event.event_type in _WRITE_EVENTS:
            return _normalize(event.src_path) == self._target
        if event.event_type == EVENT_TYPE_MODIFIED:
            # inotify reports chmod/utime as `modified` too; only a content
            # change counts when no close-after-write event is available.
            return _normalize(event.src_path) == self._target and _digest(self.path) != self._baseline
        return False

    def _drain(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return
            self._handle(event)

    def _handle(self, event: FileSystemEvent) -> None:
        if not self.written.is_set() and self._is_write(event):
            log.debug("Write observed on %s (%s)", self.path, event.event_type)
            self.written.set()

    def _run(self) -> None:
        while not self.closed.is_set():
            try:
                event = self._events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            self._handle(event)
        # Events queued before close still count.
        self._drain()

    def observe(self) -> threading.Event:
        """
        Start observing and return the `written` flag.

        Raises WatchError if the filesystem subscription cannot be established;
        in that case nothing is left running.
        """
        if self._started:
            raise WatchError("A watcher can only observe once.")
        self._started = True
        self._baseline = _digest(self.path)

        directory = self.path.parent
        observer = Observer()
        try:
            observer.schedule(_ForwardingHandler(self._events), str(directory), recursive=False)
            observer.start()
        except OSError as e:
            observer.unschedule_all()
            raise WatchError(f"Cannot watch {directory}: {e}") from e

        self._observer = observer
        self._thread = threading.Thread(target=self._run, name="create-gh-repo-watcher", daemon=True)
        self._thread.start()
        log.debug("Watching %s", self.path)
        return self.written

    def stop(self) -> bool:
        """
        Stop observing and return whether a write was observed.

        After this returns the watcher thread has exited, so `written` is final.
        """
        if self._thread is None or self.closed.is_set():
            self.closed.set()
            return self.written.is_set()

        # Give notifications for the editor's last write time to arrive.
        if self.settle > 0:
            time.sleep(self.settle)

        self.closed.set()
        self._thread.join()
        self._observer.stop()
        self._observer.join()
        log.debug("Stopped watching %s (written=%s)", self.path, self.written.is_set())
        return self.written.is_set()

    def __enter__(self) -> WriteWatcher:
        self.observe()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
