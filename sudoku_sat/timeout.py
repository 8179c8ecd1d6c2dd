"""Wall-clock budget for a solver run (SIGALRM; a no-op where it is unavailable)."""
from __future__ import annotations

import signal
from contextlib import contextmanager
from typing import Iterator, Optional


class Timeout(Exception):
    pass


def _timeout_handler(signum, frame):  # noqa: ARG001
    raise Timeout()


@contextmanager
def time_limit(timeout_s: Optional[float]) -> Iterator[None]:
    """Raise Timeout in the block after roughly timeout_s seconds (rounded up to whole seconds)."""
    old_handler = None
    if timeout_s and timeout_s > 0 and hasattr(signal, "SIGALRM"):
        old_handler = signal.signal(signal.SIGALRM, _timeout_handler)
        signal.alarm(max(1, int(timeout_s + 0.999)))
    try:
        yield
    finally:
        if hasattr(signal, "SIGALRM") and old_handler is not None:
            signal.alarm(0)
            signal.signal(signal.SIGALRM, old_handler)
