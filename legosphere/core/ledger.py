"""
Word-quota ledger.

Tracks consumed vs. total words. Deduction is a saturating add: once the
quota is exhausted the ledger keeps accepting calls and stays at the cap.
Gating new requests is the caller's decision, not the ledger's.

Persistence is best-effort metering, not billing: a failed write is
logged and remembered in ``last_persist_error`` but the in-memory state
is NOT rolled back.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class UsageStore(Protocol):
    """Durable storage for the used-units counter."""

    def load(self) -> Optional[int]: ...

    def persist(self, used_units: int, feature: str, units: int) -> None: ...


@dataclass(frozen=True)
class UsageState:
    """Consumed and total words. Invariant: 0 <= used_units <= total_units."""
    total_units: int
    used_units: int

    def __post_init__(self):
        """Validate the quota invariant."""
        if self.total_units <= 0:
            raise ValueError("total_units must be > 0")
        if not 0 <= self.used_units <= self.total_units:
            raise ValueError("used_units must be between 0 and total_units")


def remaining(state: UsageState) -> int:
    """Words left in the quota."""
    return state.total_units - state.used_units


def percentage(state: UsageState) -> float:
    """Share of the quota still available, in [0, 100]."""
    return remaining(state) / state.total_units * 100


def deduct(state: UsageState, units: int) -> UsageState:
    """Return a new state with ``units`` added to used, clamped at the total.

    Raises:
        ValueError: If units is negative
    """
    if units < 0:
        raise ValueError("units must be >= 0")
    return replace(state, used_units=min(state.used_units + units, state.total_units))


class UsageLedger:
    """Process-wide owner of the usage state.

    Initialized once from storage (or a seed value), mutated only through
    ``deduct``, persisted on every mutation. Deductions are serialized with
    a lock so concurrent callers cannot break the saturating-add invariant.
    """

    def __init__(self, state: UsageState, store: Optional[UsageStore] = None):
        self._state = state
        self._store = store
        self._lock = threading.Lock()
        self.last_persist_error: Optional[Exception] = None

    @classmethod
    def open(cls, store: UsageStore, total_units: int, seed_used_units: int = 0) -> "UsageLedger":
        """Build a ledger from durable storage, falling back to the seed.

        A persisted value above the total (e.g. after the plan shrank) is
        clamped to the total.
        """
        stored = store.load()
        used = seed_used_units if stored is None else stored
        used = max(0, min(used, total_units))
        logger.debug("Usage ledger opened: used=%d total=%d", used, total_units)
        return cls(UsageState(total_units=total_units, used_units=used), store)

    @property
    def state(self) -> UsageState:
        return self._state

    @property
    def remaining(self) -> int:
        return remaining(self._state)

    @property
    def percentage(self) -> float:
        return percentage(self._state)

    @property
    def exhausted(self) -> bool:
        return remaining(self._state) == 0

    def deduct(self, units: int, feature: str = "general") -> UsageState:
        """Charge ``units`` words to the quota and persist the result.

        Args:
            units: Words to charge (>= 0)
            feature: Feature tag recorded alongside the deduction

        Returns:
            The new usage state

        Raises:
            ValueError: If units is negative
        """
        with self._lock:
            new_state = deduct(self._state, units)
            self._state = new_state
            if self._store is not None:
                try:
                    self._store.persist(new_state.used_units, feature, units)
                    self.last_persist_error = None
                except Exception as e:
                    self.last_persist_error = e
                    logger.error(
                        "Failed to persist usage (used=%d, feature=%s): %s",
                        new_state.used_units, feature, e
                    )
        return new_state
