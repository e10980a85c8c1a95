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

import threading
from collections.abc import Callable, Iterable


def parallel(tasks: Iterable[Callable[[], object]]) -> None:
    """
    Run zero-argument tasks on their own threads and wait for all of them.

    A join barrier and nothing more: return values are dropped, exceptions
    go to threading.excepthook, nothing is cancelled. Typical use is
    starting several database Pods at once:

        parallel([
            lambda: urls.update(pg=run_postgresql()),
            lambda: urls.update(mysql=run_mysql()),
        ])
    """
    threads = [
        threading.Thread(target=task, daemon=True, name=f"parallel-{i}")
        for i, task in enumerate(tasks)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
