"""Directory creation and waiting for termination signals."""

from __future__ import annotations

import os
import signal
import threading

_QUIT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class QuitCode(Exception):
    """Process exit code derived from a received signal."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return str(self.code)


def make_dir_all(home: str | os.PathLike) -> None:
    """Create home and its parents unless something already exists there."""
    try:
        os.stat(home)
        return
    except FileNotFoundError:
        pass
    os.makedirs(home, mode=0o755, exist_ok=True)


def wait_for_quit_signals() -> QuitCode:
    """Block until SIGINT or SIGTERM arrives; return 128 plus its number.

    Must be called from the main thread.
    """
    caught: list[int] = []
    done = threading.Event()

    def _handler(signum, _frame):
        caught.append(signum)
        done.set()

    previous = {sig: signal.signal(sig, _handler) for sig in _QUIT_SIGNALS}
    try:
        while not done.wait(0.1):
            pass
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
    return QuitCode(int(caught[0]) + 128)