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
# EXIT HOOKS
# -----------------------------------------------------------------------------
# Runs teardown callables once, when the interpreter exits or when the test
# run is interrupted (SIGINT / SIGTERM).
# -----------------------------------------------------------------------------

import atexit
import signal
import threading
from collections.abc import Callable

from rich.console import Console

console = Console()


class OnExit:
    """
    Ordered list of teardown callables that run at most once.

    Handlers run in the order they were added. An exception in one handler
    propagates and the remaining handlers are skipped, so a failed cleanup
    is never silent.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._done = False
        self._installed = False

    def add(self, handler: Callable[[], None]) -> "OnExit":
        """Append a handler. Returns self for chaining."""
        with self._lock:
            self._handlers.append(handler)
        return self

    def __len__(self) -> int:
        return len(self._handlers)

    def run(self) -> None:
        """Run every handler once; later calls are no-ops."""
        with self._lock:
            if self._done:
                return
            self._done = True
            handlers = list(self._handlers)

        console.print(f"[dim][EXIT] Running {len(handlers)} exit handler(s)[/dim]")
        for handler in handlers:
            handler()

    def _on_signal(self, signum: int, frame) -> None:
        console.print(f"[yellow][EXIT] Caught signal {signum}, cleaning up[/yellow]")
        self.run()
        raise SystemExit(128 + signum)

    def install(self, signals: bool = True) -> "OnExit":
        """
        Hook `run` into interpreter exit and, optionally, SIGINT/SIGTERM.

        Signal handlers can only be installed from the main thread; from any
        other thread only the atexit hook is registered.
        """
        if self._installed:
            return self
        self._installed = True

        atexit.register(self.run)
        if signals and threading.current_thread() is threading.main_thread():
            for signum in (signal.SIGINT, signal.SIGTERM):
                signal.signal(signum, self._on_signal)
        return self
