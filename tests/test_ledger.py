"""
Unit tests for the usage ledger.

Tests saturating deduction, derived queries, and best-effort persistence.
"""

import threading

import pytest

from legosphere.core.ledger import UsageLedger, UsageState, deduct, percentage, remaining

from conftest import MemoryStore


class TestUsageState:
    """Test the pure ledger functions."""

    def test_invalid_state_rejected(self):
        with pytest.raises(ValueError, match="total_units"):
            UsageState(total_units=0, used_units=0)
        with pytest.raises(ValueError, match="used_units"):
            UsageState(total_units=10, used_units=11)
        with pytest.raises(ValueError, match="used_units"):
            UsageState(total_units=10, used_units=-1)

    @pytest.mark.parametrize("used,delta,expected", [
        (0, 0, 0),
        (0, 5, 5),
        (90, 10, 100),
        (95, 10, 100),
        (100, 7, 100),
    ])
    def test_deduct_is_saturating_add(self, used, delta, expected):
        state = UsageState(total_units=100, used_units=used)
        new_state = deduct(state, delta)
        assert new_state.used_units == min(used + delta, 100)
        assert new_state.used_units == expected
        assert new_state.used_units >= state.used_units

    def test_deduct_does_not_mutate_input(self):
        state = UsageState(total_units=100, used_units=10)
        deduct(state, 5)
        assert state.used_units == 10

    def test_negative_deduction_rejected(self):
        with pytest.raises(ValueError, match="units must be >= 0"):
            deduct(UsageState(total_units=100, used_units=0), -1)

    def test_remaining_plus_used_equals_total(self):
        for used in (0, 1, 50, 99, 100):
            state = UsageState(total_units=100, used_units=used)
            assert remaining(state) + state.used_units == state.total_units

    def test_percentage(self):
        assert percentage(UsageState(total_units=200, used_units=50)) == 75.0
        assert percentage(UsageState(total_units=200, used_units=0)) == 100.0
        assert percentage(UsageState(total_units=200, used_units=200)) == 0.0

    def test_percentage_is_idempotent(self):
        state = UsageState(total_units=10_000_000, used_units=1_508_174)
        assert percentage(state) == percentage(state)


class TestUsageLedger:
    """Test the stateful ledger service."""

    def test_open_uses_seed_when_store_is_empty(self):
        ledger = UsageLedger.open(MemoryStore(), total_units=1000, seed_used_units=250)
        assert ledger.state.used_units == 250
        assert ledger.remaining == 750

    def test_open_prefers_persisted_value(self):
        ledger = UsageLedger.open(MemoryStore(used=400), total_units=1000, seed_used_units=250)
        assert ledger.state.used_units == 400

    def test_open_clamps_persisted_value_to_total(self):
        ledger = UsageLedger.open(MemoryStore(used=5000), total_units=1000)
        assert ledger.state.used_units == 1000
        assert ledger.exhausted

    def test_deduct_persists_every_mutation(self, ledger, memory_store):
        ledger.deduct(10, "drafting")
        ledger.deduct(5, "research")

        assert memory_store.used == 15
        assert memory_store.log == [("drafting", 10), ("research", 5)]

    def test_deduct_past_cap_keeps_operating(self, memory_store):
        ledger = UsageLedger(UsageState(total_units=100, used_units=95), memory_store)
        ledger.deduct(50)
        ledger.deduct(50)

        assert ledger.state.used_units == 100
        assert ledger.remaining == 0
        assert ledger.percentage == 0.0
        assert ledger.exhausted

    def test_persist_failure_keeps_in_memory_state(self):
        store = MemoryStore(fail=True)
        ledger = UsageLedger(UsageState(total_units=100, used_units=0), store)

        state = ledger.deduct(30, "drafting")

        assert state.used_units == 30
        assert ledger.state.used_units == 30
        assert isinstance(ledger.last_persist_error, OSError)

    def test_persist_error_cleared_after_success(self):
        store = MemoryStore(fail=True)
        ledger = UsageLedger(UsageState(total_units=100, used_units=0), store)
        ledger.deduct(1)
        store.fail = False
        ledger.deduct(1)
        assert ledger.last_persist_error is None

    def test_ledger_without_store(self):
        ledger = UsageLedger(UsageState(total_units=100, used_units=0))
        assert ledger.deduct(3).used_units == 3

    def test_concurrent_deductions_respect_cap(self):
        ledger = UsageLedger(UsageState(total_units=1000, used_units=0), MemoryStore())

        def worker():
            for _ in range(100):
                ledger.deduct(1)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert ledger.state.used_units == 1000
