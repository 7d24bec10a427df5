"""
Registry observation.

RegistryObserver turns repeated reads of the volume registry into a stream
of newly seen volumes. RefreshLoop polls an observer on a background thread
and hands each non-empty batch to a callback.
"""

import logging
import threading
from typing import Callable, List, Optional, Set

from ..storage import VolumeStore
from ..types import VolumeRecord

logger = logging.getLogger(__name__)


class RegistryObserver:
    """
    Reports each registered volume exactly once.

    The set of names already reported only grows, and lives as long as the
    observer instance. A new observer starts empty and reports everything.
    """

    def __init__(self, store: VolumeStore):
        self.store = store
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def seen_names(self) -> Set[str]:
        with self._lock:
            return set(self._seen)

    def refresh(self) -> List[VolumeRecord]:
        """
        Read the registry and return the volumes not reported before.

        Records come back in the order the store returned them.

        Raises:
            StoreUnavailableError: If the registry cannot be read
        """
        with self._lock:
            records = self.store.list_all()
            new_records = []
            for record in records:
                if record.name in self._seen:
                    continue
                self._seen.add(record.name)
                new_records.append(record)

        if new_records:
            logger.debug(f"Observed {len(new_records)} new volume(s)")
        return new_records


class RefreshLoop:
    """
    Calls RegistryObserver.refresh() on a fixed interval.

    Runs on its own daemon thread so a long external command on the caller's
    thread never delays observation.
    """

    def __init__(
        self,
        observer: RegistryObserver,
        on_records: Callable[[List[VolumeRecord]], None],
        interval_sec: float = 1.0,
        on_error: Optional[Callable[[Exception], None]] = None,
        daemon: bool = True,
    ):
        """
        Args:
            observer: Observer to poll
            on_records: Receives each non-empty batch of new volumes
            interval_sec: Seconds between polls
            on_error: Receives exceptions raised by a poll
            daemon: Whether to run as daemon thread
        """
        self.observer = observer
        self.on_records = on_records
        self.on_error = on_error
        self.interval_sec = interval_sec
        self.daemon = daemon
        self.thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def start(self) -> None:
        """Start the polling thread."""
        if self.is_running:
            logger.warning("Refresh loop already running")
            return

        self._stop_event.clear()
        self.thread = threading.Thread(
            target=self._run, name="obsdisk-refresh", daemon=self.daemon
        )
        self.thread.start()
        logger.info(f"Refresh loop started (interval={self.interval_sec}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the polling thread and wait for it to exit."""
        if not self.is_running:
            return

        self._stop_event.set()
        if self.thread is not threading.current_thread():
            self.thread.join(timeout=timeout)
        logger.info("Refresh loop stopped")

    def tick(self) -> List[VolumeRecord]:
        """Run one poll and deliver its batch."""
        records = self.observer.refresh()
        if records:
            self.on_records(records)
        return records

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Registry refresh failed: {e}", exc_info=True)
                if self.on_error:
                    self.on_error(e)
            self._stop_event.wait(self.interval_sec)
