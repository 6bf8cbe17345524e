"""
API Key Pool

Load-balances requests across a set of interchangeable API keys for a
single provider.

Selection:
- Keys in cooldown are reinstated once the cooldown window has passed
- The available key with the fewest requests is picked
- If every key is cooling down, the least recently used one is forced back

Keys that fail repeatedly are put in cooldown; successes earn back
error headroom one step at a time.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)


def mask_key(key: str) -> str:
    """Printable form of a secret, safe for logs."""
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}…{key[-4:]}"


@dataclass
class KeyState:
    """Health and load bookkeeping for one key."""
    key: str
    request_count: int = 0
    last_used: float = 0.0
    is_available: bool = True
    error_count: int = 0


@dataclass(frozen=True)
class PoolStats:
    total: int
    available: int
    request_counts: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "request_counts": list(self.request_counts),
        }


class CredentialPool:
    """
    Thread-safe pool of API keys for one provider.

    Usage:
        pool = CredentialPool(["key-a", "key-b"])

        key = pool.next()
        try:
            ...
            pool.report_success(key)
        except SomeError:
            pool.report_error(key)
    """

    COOLDOWN_SECONDS = 60.0
    MAX_ERRORS_BEFORE_COOLDOWN = 3

    def __init__(
        self,
        keys: Iterable[str],
        clock: Callable[[], float] = time.monotonic,
        cooldown_seconds: float = COOLDOWN_SECONDS,
        max_errors: int = MAX_ERRORS_BEFORE_COOLDOWN,
    ):
        """
        Initialize the pool.

        Args:
            keys: API keys, in preference order for ties
            clock: Time source in seconds (injectable for tests)
            cooldown_seconds: How long a failing key is kept out of rotation
            max_errors: Consecutive errors that trigger a cooldown
        """
        self._clock = clock
        self.cooldown_seconds = cooldown_seconds
        self.max_errors = max_errors
        self._lock = threading.Lock()

        self._keys: List[KeyState] = []
        for key in keys:
            if key and not any(k.key == key for k in self._keys):
                self._keys.append(KeyState(key=key))

        logger.info(f"Key pool initialized with {len(self._keys)} keys")

    def __len__(self) -> int:
        return len(self._keys)

    def next(self, exclude: Optional[str] = None) -> Optional[str]:
        """
        Pick the next key to use.

        Args:
            exclude: Key to avoid unless it is the only option left

        Returns:
            A key, or None if the pool holds no keys at all
        """
        if not self._keys:
            return None

        with self._lock:
            now = self._clock()

            for state in self._keys:
                if not state.is_available and now - state.last_used > self.cooldown_seconds:
                    state.is_available = True
                    state.error_count = 0
                    logger.info(f"Key {mask_key(state.key)} recovered from cooldown")

            available = [k for k in self._keys if k.is_available]
            if not available:
                # Everything is cooling down; keep traffic flowing on the stalest key
                oldest = min(self._keys, key=lambda k: k.last_used)
                oldest.is_available = True
                logger.warning(
                    f"All keys in cooldown, forcing {mask_key(oldest.key)} back into rotation"
                )
                return oldest.key

            if exclude is not None:
                preferred = [k for k in available if k.key != exclude]
                if preferred:
                    available = preferred

            # min() keeps the first of equal counts, so ties go to pool order
            selected = min(available, key=lambda k: k.request_count)
            selected.request_count += 1
            selected.last_used = now
            return selected.key

    def report_error(self, key: str) -> None:
        """Record a failed request; enough of them put the key in cooldown."""
        with self._lock:
            state = self._find(key)
            if state is None:
                return
            state.error_count += 1
            if state.error_count >= self.max_errors and state.is_available:
                state.is_available = False
                logger.warning(
                    f"Key {mask_key(key)} put in cooldown after {state.error_count} errors"
                )

    def report_success(self, key: str) -> None:
        """Record a successful request."""
        with self._lock:
            state = self._find(key)
            if state is not None:
                state.error_count = max(0, state.error_count - 1)

    def stats(self) -> PoolStats:
        with self._lock:
            return PoolStats(
                total=len(self._keys),
                available=sum(1 for k in self._keys if k.is_available),
                request_counts=[k.request_count for k in self._keys],
            )

    def state(self, key: str) -> Optional[KeyState]:
        """Snapshot of one key's bookkeeping (copy, safe to inspect)."""
        with self._lock:
            found = self._find(key)
            if found is None:
                return None
            return KeyState(
                key=found.key,
                request_count=found.request_count,
                last_used=found.last_used,
                is_available=found.is_available,
                error_count=found.error_count,
            )

    def _find(self, key: str) -> Optional[KeyState]:
        for state in self._keys:
            if state.key == key:
                return state
        return None
