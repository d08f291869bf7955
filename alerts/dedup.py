"""Time-windowed suppression of repeated workload alerts."""
import logging
import threading
import time

logger = logging.getLogger("kubedeck.alerts.dedup")

DEFAULT_WINDOW_SECONDS = 4 * 3600


def alert_identity(namespace, name):
    """Stable dedup key for one flagged workload."""
    return f"{namespace}/{name}"


class DedupTracker:
    """Remembers when each identity was last announced.

    An identity is announced again only once ``window_seconds`` have passed
    since its previous announcement. Thread-safe.
    """

    def __init__(self, window_seconds=DEFAULT_WINDOW_SECONDS, clock=time.time):
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        self.window_seconds = window_seconds
        self._clock = clock
        self._records = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._records)

    def should_announce(self, identity) -> bool:
        """True if identity is new or its window elapsed; records "now" when True."""
        with self._lock:
            now = self._clock()
            last = self._records.get(identity)
            if last is None or now - last >= self.window_seconds:
                self._records[identity] = now
                return True
            return False

    def is_due(self, identity) -> bool:
        """Read-only variant of should_announce: nothing is recorded."""
        with self._lock:
            last = self._records.get(identity)
            return last is None or self._clock() - last >= self.window_seconds

    def record(self, identities):
        """Mark identities as announced now."""
        with self._lock:
            now = self._clock()
            for identity in identities:
                self._records[identity] = now

    def evict_expired(self) -> int:
        """Drop records older than the window. Returns how many were removed."""
        with self._lock:
            cutoff = self._clock() - self.window_seconds
            expired = [key for key, ts in self._records.items() if ts < cutoff]
            for key in expired:
                del self._records[key]
            remaining = len(self._records)
        if expired:
            logger.debug(f"Evicted {len(expired)} expired alert records ({remaining} left)")
        return len(expired)

    def clear(self):
        with self._lock:
            self._records.clear()
