"""Build marker watcher.

Watches the directory that contains the build marker file (for example a
bundler's build-info.json) and announces a new build through the
NotificationService whenever the marker is written. Bundlers commonly write
the marker several times per build, so raw events are coalesced by a
reset-on-event debounce timer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

from hotreload.config.schema import DEFAULT_DEBOUNCE
from hotreload.logging import get_logger

if TYPE_CHECKING:
    from hotreload.core.notifier import NotificationService

log = get_logger("watching")

# Change kinds that mean "the marker was (re)written"
_WRITE_CHANGES = frozenset({Change.added, Change.modified})


@dataclass(frozen=True)
class WatchTarget:
    """The watched file, split into the directory to watch and its name."""

    path: Path
    parent: Path
    filename: str

    @classmethod
    def resolve(cls, path: str | Path) -> WatchTarget:
        resolved = Path(path).expanduser().resolve()
        return cls(path=resolved, parent=resolved.parent, filename=resolved.name)

    def matches(self, changed: str | Path) -> bool:
        """True if a changed path names the watched file."""
        return Path(changed).name == self.filename


class Debouncer:
    """Reset-on-event timer.

    Every ``trigger()`` pushes the deadline back by ``delay`` seconds; the
    callback runs once the triggers stop for that long. Must be used from
    the event loop thread.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.fired = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fired += 1
        try:
            self._callback()
        except Exception as e:
            log.error("Error in debounced callback: %s", e)


class BuildWatcher:
    """Background task that turns marker writes into reload broadcasts.

    The watcher never raises past its own task: a missing directory disables
    it at start-up and a watch-service failure ends the task with an error
    log. Either way the notifier keeps serving the last token.

    Example:
        watcher = BuildWatcher("dist/build-info.json", service)
        watcher.start()
        ...
        await watcher.stop()
    """

    def __init__(
        self,
        target: str | Path,
        service: NotificationService,
        debounce: float = DEFAULT_DEBOUNCE,
        force_polling: bool | None = None,
        poll_delay_ms: int = 300,
    ) -> None:
        """Initialize the watcher.

        Args:
            target: Path of the build marker file.
            service: Notifier told about each new build.
            debounce: Quiet period in seconds before a change is announced.
            force_polling: Use stat polling instead of native notifications
                (None lets watchfiles decide).
            poll_delay_ms: Poll interval when polling is used.
        """
        self.target = WatchTarget.resolve(target)
        self._service = service
        self._force_polling = force_polling
        self._poll_delay_ms = poll_delay_ms
        self._debouncer = Debouncer(debounce, self._on_build)
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def builds_seen(self) -> int:
        """Number of debounced changes announced so far."""
        return self._debouncer.fired

    def start(self) -> bool:
        """Start watching. Must be called from within a running event loop.

        Returns:
            False if the watch directory does not exist (watching stays off).
        """
        if self.running:
            log.warning("BuildWatcher already running")
            return True

        if not self.target.parent.is_dir():
            log.error("Watched dir (%s) does not exist, watching is disabled", self.target.parent)
            return False
        if not self.target.path.exists():
            log.warning("Watched file (%s) does not exist yet", self.target.path)

        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self.run())
        return True

    async def run(self) -> None:
        """Main loop: wait for filesystem events until stopped or broken."""
        assert self._stop_event is not None
        log.info("Watching %s for builds", self.target.path)
        try:
            async for changes in awatch(
                self.target.parent,
                watch_filter=None,
                debounce=100,
                step=50,
                stop_event=self._stop_event,
                recursive=False,
                force_polling=self._force_polling,
                poll_delay_ms=self._poll_delay_ms,
            ):
                self.handle_changes(changes)
        except asyncio.CancelledError:
            log.info("BuildWatcher cancelled")
        except Exception as e:
            log.error("Build watch failed, reloads are disabled: %s", e, exc_info=True)
        else:
            if not self._stop_event.is_set():
                log.warning("Build watch ended unexpectedly, reloads are disabled")
        finally:
            self._debouncer.cancel()

    def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> bool:
        """Feed one batch of raw events; returns True if the marker changed."""
        hit = any(
            change in _WRITE_CHANGES and self.target.matches(path) for change, path in changes
        )
        if hit:
            log.debug("Marker %s written", self.target.filename)
            self._debouncer.trigger()
        return hit

    def _on_build(self) -> None:
        self._service.regenerate()

    async def stop(self) -> None:
        """Stop watching and wait for the task to finish."""
        if self._stop_event is not None:
            self._stop_event.set()
        task = self._task
        self._task = None
        if task is not None and not task.done():
            try:
                await asyncio.wait_for(task, timeout=2.0)
            except asyncio.TimeoutError:
                task.cancel()
        self._debouncer.cancel()
        log.info("BuildWatcher stopped")
