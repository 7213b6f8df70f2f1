"""
Background retention sweep: deletes pastes that have not been modified
within the retention window.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from .errors import PasteNotFound, StorageError
from .store import PasteStore

DEFAULT_RETENTION = timedelta(days=30)
DEFAULT_INTERVAL = timedelta(days=1)

logger = logging.getLogger("pastel.sweeper")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SweepResult:
    scanned: int = 0
    deleted: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class RetentionSweeper:
    """Periodically deletes expired pastes on a daemon thread"""

    def __init__(self, store: PasteStore, retention: timedelta = DEFAULT_RETENTION,
                 interval: timedelta = DEFAULT_INTERVAL, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.retention = retention
        self.interval = interval
        self.clock = clock or _utcnow
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def retention_days(self) -> float:
        return self.retention.total_seconds() / 86400

    def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Run one sweep; failures are logged and recorded, never raised"""
        now = now or self.clock()
        cutoff = now - self.retention
        result = SweepResult()

        try:
            pastes = self.store.list_all()
        except StorageError as e:
            logger.error(f"Sweep aborted, could not list pastes: {e}")
            result.errors.append(str(e))
            return result

        for info in pastes:
            result.scanned += 1
            if info.last_modified_at >= cutoff:
                continue
            try:
                # re-check: the paste may have been replaced since listing
                if self.store.stat(info.id).last_modified_at >= cutoff:
                    continue
                self.store.remove(info.id)
                result.deleted.append(info.id)
            except PasteNotFound:
                logger.info(f"Paste {info.id} already gone during sweep")
            except StorageError as e:
                logger.error(f"Failed to delete expired paste {info.id}: {e}")
                result.errors.append(str(e))

        if result.deleted:
            logger.info(f"Sweep: deleted {len(result.deleted)} of {result.scanned} pastes "
                        f"(not modified for {self.retention_days:g} days)")
        return result

    def _run(self) -> None:
        interval = self.interval.total_seconds()
        while not self._stop.is_set():
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Error in sweep task: {e}")
            self._stop.wait(interval)

    def start(self) -> None:
        """Sweep now and then every interval until stop() is called"""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="pastel-sweeper", daemon=True)
        self._thread.start()
        logger.info(f"Pastes are deleted when they are {self.retention_days:g} days old.")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())
