"""Tests for the exponential-backoff login guard."""

import threading

import pytest

from duell.core.logger import logger
from duell.core.rate_limit import InMemoryAttemptStore, LoginGuard, format_lockout_message


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def guard(clock):
    return LoginGuard(store=InMemoryAttemptStore(), clock=clock)


class TestEscalation:

    def test_unknown_identifier_is_allowed(self, guard):
        check = guard.check_attempt("1.2.3.4:admin")
        assert check.allowed is True
        assert check.retry_after is None

    def test_lockouts_escalate_and_cap(self, guard, clock):
        identifier = "1.2.3.4:admin"
        seen = []
        for _ in range(5):
            seen.append(guard.record_failed_attempt(identifier).retry_after)
            clock.advance(1)
        assert seen == [5, 50, 500, 3600, 3600]

    def test_failures_keep_escalating_while_locked(self, guard):
        identifier = "1.2.3.4:admin"
        assert guard.record_failed_attempt(identifier).retry_after == 5
        assert guard.record_failed_attempt(identifier).retry_after == 50


class TestEnforcement:

    def test_locked_identifier_is_rejected_until_lockout_ends(self, guard, clock):
        identifier = "1.2.3.4:admin"
        guard.record_failed_attempt(identifier)
        guard.record_failed_attempt(identifier)  # 50s

        check = guard.check_attempt(identifier)
        assert check.allowed is False
        assert check.retry_after == 50
        assert "50 Sekunden" in check.message

        clock.advance(20.5)
        assert guard.check_attempt(identifier).retry_after == 30

        clock.advance(29.5)
        assert guard.check_attempt(identifier).allowed is True

    def test_retry_after_rounds_up(self, guard, clock):
        identifier = "1.2.3.4:admin"
        guard.record_failed_attempt(identifier)
        clock.advance(4.2)
        assert guard.check_attempt(identifier).retry_after == 1


class TestReset:

    def test_history_expires_after_inactivity(self, guard, clock):
        identifier = "1.2.3.4:admin"
        for _ in range(3):
            guard.record_failed_attempt(identifier)

        clock.advance(3600 + 1)
        assert guard.check_attempt(identifier).allowed is True
        assert guard.store.get(identifier) is None
        assert guard.record_failed_attempt(identifier).retry_after == 5

    def test_stale_history_restarts_even_without_check(self, guard, clock):
        identifier = "1.2.3.4:admin"
        guard.record_failed_attempt(identifier)
        guard.record_failed_attempt(identifier)
        clock.advance(3601)
        assert guard.record_failed_attempt(identifier).retry_after == 5

    def test_history_kept_inside_reset_window(self, guard, clock):
        identifier = "1.2.3.4:admin"
        guard.record_failed_attempt(identifier)
        clock.advance(600)
        assert guard.check_attempt(identifier).allowed is True
        assert guard.record_failed_attempt(identifier).retry_after == 50

    def test_clear_starts_fresh(self, guard):
        identifier = "1.2.3.4:admin"
        for _ in range(3):
            guard.record_failed_attempt(identifier)
        guard.clear_attempts(identifier)
        assert guard.check_attempt(identifier).allowed is True
        assert guard.record_failed_attempt(identifier).retry_after == 5

    def test_clear_unknown_identifier_is_noop(self, guard):
        guard.clear_attempts("nobody")


class TestIsolation:

    def test_identifiers_do_not_affect_each_other(self, guard):
        guard.record_failed_attempt("ip1:alice")
        assert guard.check_attempt("ip1:alice").allowed is False
        assert guard.check_attempt("ip1:bob").allowed is True
        assert guard.check_attempt("ip2:alice").allowed is True


class TestSweep:

    def test_sweep_removes_only_stale_records(self, guard, clock):
        guard.record_failed_attempt("old")
        clock.advance(3000)
        guard.record_failed_attempt("recent")
        clock.advance(700)

        assert guard.sweep() == 1
        assert guard.store.get("old") is None
        assert guard.store.get("recent") is not None


class TestMessages:

    @pytest.mark.parametrize("seconds,expected", [
        (5, "5 Sekunden."),
        (59, "59 Sekunden."),
        (60, "1 Minute."),
        (61, "2 Minuten."),
        (500, "9 Minuten."),
        (3600, "1 Stunde."),
        (7201, "3 Stunden."),
    ])
    def test_message_phrasing(self, seconds, expected):
        message = format_lockout_message(seconds)
        assert message.startswith("Zu viele fehlgeschlagene Anmeldeversuche.")
        assert message.endswith(expected)


class TestConcurrency:

    def test_concurrent_failures_are_all_counted(self, guard):
        identifier = "1.2.3.4:admin"
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            for _ in range(5):
                guard.record_failed_attempt(identifier)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert guard.store.get(identifier).failed_attempts == 100


def test_failures_go_to_security_channel(guard):
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        guard.record_failed_attempt("1.2.3.4:admin")
    finally:
        logger.remove(sink_id)

    failures = [r for r in records if r["message"].startswith("Login failed")]
    assert failures and failures[0]["extra"]["channel"] == "security"
