# =============================================================================
# DBPODS EXIT HOOK TESTS
# =============================================================================

import signal
from unittest.mock import MagicMock, patch

import pytest

from dbpods.core.exit_hooks import OnExit


class TestOnExit:
    """Test OnExit."""

    def test_runs_handlers_in_order(self):
        calls = []
        on_exit = OnExit().add(lambda: calls.append(1)).add(lambda: calls.append(2))
        on_exit.run()
        assert calls == [1, 2]

    def test_runs_only_once(self):
        handler = MagicMock()
        on_exit = OnExit().add(handler)
        on_exit.run()
        on_exit.run()
        handler.assert_called_once()

    def test_handler_error_propagates(self):
        """A failing handler is not swallowed."""

        def bad():
            raise RuntimeError("purge failed")

        with pytest.raises(RuntimeError):
            OnExit().add(bad).run()

    def test_len(self):
        assert len(OnExit().add(lambda: None)) == 1

    @patch("dbpods.core.exit_hooks.signal.signal")
    @patch("dbpods.core.exit_hooks.atexit.register")
    def test_install_registers_atexit_and_signals(self, mock_register, mock_signal):
        on_exit = OnExit()
        on_exit.install()
        mock_register.assert_called_once_with(on_exit.run)
        installed = {c.args[0] for c in mock_signal.call_args_list}
        assert installed == {signal.SIGINT, signal.SIGTERM}

    @patch("dbpods.core.exit_hooks.signal.signal")
    @patch("dbpods.core.exit_hooks.atexit.register")
    def test_install_is_idempotent(self, mock_register, mock_signal):
        on_exit = OnExit()
        on_exit.install()
        on_exit.install()
        mock_register.assert_called_once()

    @patch("dbpods.core.exit_hooks.signal.signal")
    @patch("dbpods.core.exit_hooks.atexit.register")
    def test_install_without_signals(self, mock_register, mock_signal):
        OnExit().install(signals=False)
        mock_signal.assert_not_called()

    def test_signal_runs_handlers_and_exits(self):
        handler = MagicMock()
        on_exit = OnExit().add(handler)
        with pytest.raises(SystemExit) as exc_info:
            on_exit._on_signal(signal.SIGTERM, None)
        handler.assert_called_once()
        assert exc_info.value.code == 128 + signal.SIGTERM
