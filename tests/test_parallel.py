# =============================================================================
# DBPODS PARALLEL HELPER TESTS
# =============================================================================

import threading
import time
from unittest.mock import patch

from dbpods.core.parallel import parallel


class TestParallel:
    """Test parallel()."""

    def test_no_tasks_returns(self):
        """Zero tasks is a trivial return."""
        parallel([])

    def test_all_tasks_complete(self):
        """Returns only after every task has finished."""
        done = []
        lock = threading.Lock()

        def task(i):
            time.sleep(0.01 * (i % 3))
            with lock:
                done.append(i)

        parallel([lambda i=i: task(i) for i in range(8)])
        assert sorted(done) == list(range(8))

    def test_tasks_run_concurrently(self):
        """Tasks overlap: a barrier for all of them can only be passed together."""
        barrier = threading.Barrier(4, timeout=5)
        passed = []

        def task():
            barrier.wait()
            passed.append(True)

        parallel([task] * 4)
        assert len(passed) == 4

    def test_failing_task_does_not_block_others(self):
        """An exception in one task does not propagate or stop the rest."""
        done = []

        def bad():
            raise RuntimeError("boom")

        with patch("threading.excepthook", lambda args: None):
            parallel([bad, lambda: done.append(1), lambda: done.append(2)])
        assert sorted(done) == [1, 2]

    def test_accepts_generator(self):
        done = []
        parallel(lambda i=i: done.append(i) for i in range(3))
        assert sorted(done) == [0, 1, 2]
