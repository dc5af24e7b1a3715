"""Time-ordered string IDs for markets and positions ("MKT-...", "POS-...").

IDs are snowflake integers rendered as fixed-width decimal strings, so the
lexicographic order of the VARCHAR keys (used by the keyset cursors) matches
creation order. One generator per process; give each worker its own
worker_id.
"""

import threading
import time
from collections.abc import Callable

_DIGITS = 19  # len(str(2**63 - 1))


class SnowflakeIdGenerator:
    """Layout (63 bits): 41 bits ms since EPOCH_MS | 10 bits worker | 12 bits sequence."""

    EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    WORKER_BITS = 10
    SEQUENCE_BITS = 12

    def __init__(self, worker_id: int = 0, clock: Callable[[], float] = time.time) -> None:
        if not 0 <= worker_id < (1 << self.WORKER_BITS):
            raise ValueError(f"worker_id must be 0-{(1 << self.WORKER_BITS) - 1}, got {worker_id}")
        self._worker_bits = worker_id << self.SEQUENCE_BITS
        self._clock = clock
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def next_int(self) -> int:
        with self._lock:
            # a clock stepping backwards reuses the last millisecond
            now = max(self._now_ms(), self._last_ms)
            if now == self._last_ms:
                self._sequence = (self._sequence + 1) % (1 << self.SEQUENCE_BITS)
                if self._sequence == 0:
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._sequence = 0
            self._last_ms = now
            return (
                (now - self.EPOCH_MS) << (self.WORKER_BITS + self.SEQUENCE_BITS)
                | self._worker_bits
                | self._sequence
            )

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{self.next_int():0{_DIGITS}d}"


_default_generator = SnowflakeIdGenerator()


def generate_id(prefix: str = "") -> str:
    """generate_id("POS-") -> "POS-0000123456789012345"."""
    return _default_generator.next_id(prefix)
