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

import os
import threading
from typing import NoReturn

from rich.console import Console
from rich.panel import Panel

console = Console()


def halt(message: str, exit_code: int = 1) -> NoReturn:
    """
    Print a fatal panel and terminate the process.

    Used where a leaked container is worse than a loud crash. On the main
    thread this raises SystemExit so atexit hooks (the registry purge) still
    run. Any other thread, e.g. a parallel() worker, would swallow
    SystemExit, so there the process is ended with os._exit().
    """
    console.print(
        Panel(
            f"[bold red]FATAL: {message}[/bold red]",
            title="SYSTEM HALT",
            border_style="red",
        )
    )
    if threading.current_thread() is not threading.main_thread():
        console.file.flush()
        os._exit(exit_code)
    raise SystemExit(exit_code)
