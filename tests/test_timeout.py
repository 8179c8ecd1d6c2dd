import signal
import time

import pytest

from sudoku_sat.timeout import Timeout, time_limit


def test_no_limit():
    with time_limit(None):
        pass
    with time_limit(0):
        pass


@pytest.mark.skipif(not hasattr(signal, "SIGALRM"), reason="needs SIGALRM")
def test_limit_interrupts_block():
    started = time.perf_counter()
    with pytest.raises(Timeout):
        with time_limit(0.5):
            while True:
                time.sleep(0.01)
    assert time.perf_counter() - started < 5
    assert signal.getsignal(signal.SIGALRM) is not None
