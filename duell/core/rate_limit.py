# duell/core/rate_limit.py
"""
Login throttling with exponential backoff.

Every failed login for an identifier (``"<client ip>:<username>"``) locks that
identifier for ``BASE * MULTIPLIER ** (failures - 1)`` seconds, capped at
``MAX``: 5s, 50s, 500s, then one hour. A success clears the record; so does one
hour without a new failure.

State lives in an ``AttemptStore``. The default in-memory store is process
local, so several app instances behind a load balancer throttle independently.
A shared store (Redis, database) can be plugged in without touching callers.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from duell.core.constants import (
    BASE_LOCKOUT_SECONDS, LOCKOUT_MULTIPLIER, MAX_LOCKOUT_SECONDS, RESET_AFTER_SECONDS
)
from duell.core.logger import logger, security_logger


@dataclass
class LoginAttemptRecord:
    identifier: str
    failed_attempts: int = 0
    last_failed_at: float = 0.0
    locked_until: Optional[float] = None


@dataclass(frozen=True)
class AttemptCheck:
    allowed: bool
    retry_after: Optional[int] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class LockoutInfo:
    retry_after: int
    message: str


class AttemptStore(Protocol):
    def get(self, identifier: str) -> Optional[LoginAttemptRecord]: ...

    def put(self, record: LoginAttemptRecord) -> None: ...

    def delete(self, identifier: str) -> None: ...

    def sweep(self, older_than: float) -> int: ...

    def clear(self) -> None: ...


class InMemoryAttemptStore:
    def __init__(self):
        self._records: Dict[str, LoginAttemptRecord] = {}

    def get(self, identifier: str) -> Optional[LoginAttemptRecord]:
        return self._records.get(identifier)

    def put(self, record: LoginAttemptRecord) -> None:
        self._records[record.identifier] = record

    def delete(self, identifier: str) -> None:
        self._records.pop(identifier, None)

    def sweep(self, older_than: float) -> int:
        """Drop records whose last failure happened before ``older_than``."""
        stale = [key for key, rec in self._records.items() if rec.last_failed_at < older_than]
        for key in stale:
            del self._records[key]
        return len(stale)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


def format_lockout_message(seconds: int) -> str:
    prefix = "Zu viele fehlgeschlagene Anmeldeversuche. Bitte warten Sie"
    if seconds < 60:
        return f"{prefix} {seconds} Sekunden."
    if seconds < 3600:
        minutes = math.ceil(seconds / 60)
        return f"{prefix} {minutes} Minute{'n' if minutes > 1 else ''}."
    hours = math.ceil(seconds / 3600)
    return f"{prefix} {hours} Stunde{'n' if hours > 1 else ''}."


class LoginGuard:
    def __init__(self,
                 store: Optional[AttemptStore] = None,
                 clock: Callable[[], float] = time.time,
                 base_lockout_seconds: int = BASE_LOCKOUT_SECONDS,
                 lockout_multiplier: int = LOCKOUT_MULTIPLIER,
                 max_lockout_seconds: int = MAX_LOCKOUT_SECONDS,
                 reset_after_seconds: int = RESET_AFTER_SECONDS):
        self.store = store if store is not None else InMemoryAttemptStore()
        self.clock = clock
        self.base_lockout_seconds = base_lockout_seconds
        self.lockout_multiplier = lockout_multiplier
        self.max_lockout_seconds = max_lockout_seconds
        self.reset_after_seconds = reset_after_seconds
        # sync endpoints run in a thread pool; one lock keeps read-modify-write atomic
        self._lock = threading.Lock()

    def lockout_seconds(self, failed_attempts: int) -> int:
        return min(
            self.base_lockout_seconds * self.lockout_multiplier ** (failed_attempts - 1),
            self.max_lockout_seconds,
        )

    def check_attempt(self, identifier: str) -> AttemptCheck:
        """Call before checking credentials."""
        with self._lock:
            record = self.store.get(identifier)
            if record is None:
                return AttemptCheck(allowed=True)

            now = self.clock()
            if record.locked_until is not None and now < record.locked_until:
                retry_after = math.ceil(record.locked_until - now)
                return AttemptCheck(allowed=False, retry_after=retry_after,
                                    message=format_lockout_message(retry_after))

            if now - record.last_failed_at > self.reset_after_seconds:
                self.store.delete(identifier)
            return AttemptCheck(allowed=True)

    def record_failed_attempt(self, identifier: str) -> LockoutInfo:
        """Call exactly once per failed credential check."""
        with self._lock:
            now = self.clock()
            record = self.store.get(identifier)
            if record is None:
                record = LoginAttemptRecord(identifier=identifier)
            elif now - record.last_failed_at > self.reset_after_seconds:
                # stale history the sweep has not caught yet
                record = LoginAttemptRecord(identifier=identifier)

            record.failed_attempts += 1
            record.last_failed_at = now
            seconds = self.lockout_seconds(record.failed_attempts)
            record.locked_until = now + seconds
            self.store.put(record)

        security_logger.warning(f"Login failed | identifier={identifier} attempts={record.failed_attempts} lockout={seconds}s")
        return LockoutInfo(retry_after=seconds, message=format_lockout_message(seconds))

    def clear_attempts(self, identifier: str) -> None:
        with self._lock:
            self.store.delete(identifier)

    def sweep(self) -> int:
        with self._lock:
            removed = self.store.sweep(self.clock() - self.reset_after_seconds)
        if removed:
            logger.debug(f"Login guard sweep removed {removed} stale record(s)")
        return removed


login_guard = LoginGuard()
