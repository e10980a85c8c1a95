# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# RETRY POLICY
# -----------------------------------------------------------------------------
# Responsibility: Bridge the race between "container started" and "database
# accepts connections" with a bounded, fixed-interval retry loop.
#
# - Always attempts at least once
# - Waits a fixed interval between attempts
# - Gives up once max_duration has elapsed
# - Stops early when the cancellation event is set
# -----------------------------------------------------------------------------

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from rich.console import Console

from dbpods.config import RETRY_CONFIG

console = Console()

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when the deadline passes without a successful attempt."""

    def __init__(self, message: str, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RetryCancelledError(RetryExhaustedError):
    """Raised when the cancellation event stops the loop early."""

    pass


@dataclass
class RetryPolicy:
    """
    Fixed-interval retry policy.

    Defaults come from RETRY_CONFIG (5s interval, 5min deadline unless
    DBPODS_RETRY_INTERVAL / DBPODS_RETRY_TIMEOUT say otherwise).
    """

    interval: float = field(default_factory=lambda: RETRY_CONFIG["interval"])
    max_duration: float = field(default_factory=lambda: RETRY_CONFIG["max_duration"])
    cancel: threading.Event | None = None

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError("interval must be >= 0")
        if self.max_duration < 0:
            raise ValueError("max_duration must be >= 0")

    def _wait(self, seconds: float) -> bool:
        """Sleep between attempts; True if cancelled meanwhile."""
        if self.cancel is not None:
            return self.cancel.wait(seconds)
        time.sleep(seconds)
        return False

    def run(self, operation: Callable[[], T], label: str = "operation") -> T:
        """
        Call `operation` until it returns without raising.

        Args:
            operation: Zero-argument callable; any exception counts as a
                failed attempt.
            label: Name used in log lines.

        Returns:
            Whatever the first successful attempt returned.

        Raises:
            RetryExhaustedError: Deadline elapsed; carries the last error.
            RetryCancelledError: Cancellation event was set.
        """
        start = time.monotonic()
        attempts = 0
        last_error: BaseException | None = None

        while True:
            attempts += 1
            try:
                return operation()
            except Exception as e:
                last_error = e
                console.print(f"[yellow][RETRY] {label} attempt {attempts} failed: {e}[/yellow]")

            elapsed = time.monotonic() - start
            if elapsed >= self.max_duration:
                raise RetryExhaustedError(
                    f"{label} did not succeed within {self.max_duration:g}s "
                    f"({attempts} attempt(s)): {last_error}",
                    attempts,
                    last_error,
                )

            if self._wait(self.interval):
                raise RetryCancelledError(
                    f"{label} cancelled after {attempts} attempt(s)", attempts, last_error
                )


def retry(
    operation: Callable[[], T],
    label: str = "operation",
    policy: RetryPolicy | None = None,
) -> T:
    """Run `operation` under `policy` (default policy if None)."""
    return (policy or RetryPolicy()).run(operation, label)
