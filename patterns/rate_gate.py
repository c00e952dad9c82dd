import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from errors import RateLimited

logger = logging.getLogger(__name__)


@dataclass
class AttemptRecord:
    count: int
    last_attempt: float
    # Attempts let through by check() that have not reported back yet
    pending: int = 0


class RateGate:
    """
    Login rate gate keyed by client identity (usually the source address).

    Per identity:
    - no record: first attempt creates one with count 0
    - count + pending < max_attempts: attempt goes through to the verifier
    - otherwise, last attempt less than block_seconds ago: blocked
    - last attempt block_seconds ago or more: count resets to 0, attempt goes through

    Every attempt, allowed or blocked, moves ``last_attempt`` to now.
    An allowed attempt is reserved as pending inside ``check`` and settled by
    ``record_success`` or ``record_failure``, so parallel attempts can never
    get more than ``max_attempts`` through to the verifier.

    Records idle for a full block window are swept, and the map never holds
    more than ``max_identities`` records (least recently seen go first).
    """

    def __init__(self, max_attempts: int = 5, block_seconds: float = 900,
                 max_identities: int = 10_000, sweep_seconds: float = 60,
                 clock: Optional[Callable[[], float]] = None):
        self.max_attempts = max_attempts
        self.block_seconds = block_seconds
        self.max_identities = max_identities
        self.sweep_seconds = sweep_seconds
        self._clock = clock or time.time
        self._lock = threading.Lock()
        # Least recently seen first
        self._records: "OrderedDict[str, AttemptRecord]" = OrderedDict()
        self._last_sweep = self._clock()

    def check(self, identity: str) -> None:
        """Reserve an attempt; raise ``RateLimited`` if the identity is blocked."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            rec = self._records.get(identity)
            if rec is None:
                rec = AttemptRecord(count=0, last_attempt=now)
                self._records[identity] = rec
                self._enforce_capacity()
            else:
                if now - rec.last_attempt >= self.block_seconds:
                    # Nothing is in flight for a whole block window
                    rec.count = 0
                    rec.pending = 0
                self._records.move_to_end(identity)
            rec.last_attempt = now
            blocked = rec.count + rec.pending >= self.max_attempts
            if not blocked:
                rec.pending += 1

        if blocked:
            logger.warning('login blocked for %s', identity)
            raise RateLimited(retry_after=self.block_seconds)

    def record_success(self, identity: str) -> None:
        with self._lock:
            rec = self._records.get(identity)
            if rec is not None:
                rec.count = 0
                rec.pending = max(0, rec.pending - 1)

    def release(self, identity: str) -> None:
        """Drop a reservation without counting it, e.g. when verification itself errored."""
        with self._lock:
            rec = self._records.get(identity)
            if rec is not None:
                rec.pending = max(0, rec.pending - 1)

    def record_failure(self, identity: str) -> int:
        with self._lock:
            rec = self._records.get(identity)
            if rec is None:
                rec = AttemptRecord(count=0, last_attempt=self._clock())
                self._records[identity] = rec
                self._enforce_capacity()
            rec.pending = max(0, rec.pending - 1)
            rec.count += 1
            return rec.count

    def attempts(self, identity: str) -> int:
        with self._lock:
            rec = self._records.get(identity)
            return rec.count if rec else 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def sweep(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self.sweep_seconds:
            self._sweep(now)

    def _sweep(self, now: float) -> int:
        # A record idle for a whole block window would be reset anyway
        stale = [k for k, rec in self._records.items()
                 if now - rec.last_attempt >= self.block_seconds]
        for k in stale:
            del self._records[k]
        self._last_sweep = now
        if stale:
            logger.debug('rate gate swept %d idle identities', len(stale))
        return len(stale)

    def _enforce_capacity(self) -> None:
        while len(self._records) > self.max_identities:
            self._records.popitem(last=False)
