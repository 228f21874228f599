"""Build marker watching for hotreload.

Detects writes to the build marker file with watchfiles and coalesces
bursts of events into a single "new build" announcement.
"""

from hotreload.watching.watcher import (
    BuildWatcher,
    Debouncer,
    WatchTarget,
)

__all__ = [
    "BuildWatcher",
    "Debouncer",
    "WatchTarget",
]
