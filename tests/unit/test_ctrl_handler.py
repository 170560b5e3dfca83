from __future__ import annotations

import signal

from utils.ctrl_handler import CtrlCHandler


def test_sigint_sets_should_stop():
    previous = signal.getsignal(signal.SIGINT)
    try:
        handler = CtrlCHandler()
        assert handler.should_stop is False

        signal.getsignal(signal.SIGINT)(signal.SIGINT, None)

        assert handler.should_stop is True
    finally:
        signal.signal(signal.SIGINT, previous)
