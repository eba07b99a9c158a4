# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/readiness.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Poll-with-deadline readiness primitive used after service starts

"""
Readiness Polling

Blocks until a readiness probe succeeds or the deadline passes.
Clock and sleep are injectable so tests do not spend real time.
"""

import logging
import time
from typing import Callable


logger = logging.getLogger(__name__)


def wait_until(probe: Callable[[], bool], timeout: float, interval: float = 2.0,
               clock: Callable[[], float] = time.monotonic,
               sleep: Callable[[float], None] = time.sleep) -> bool:
    """
    Poll a readiness probe until it succeeds or the deadline passes.

    Args:
        probe: Zero-argument callable, truthy when ready
        timeout: Upper time limit in seconds
        interval: Delay between attempts in seconds
        clock: Monotonic clock
        sleep: Sleep function

    Returns:
        True if the probe succeeded before the deadline, False otherwise
    """
    deadline = clock() + timeout

    while True:
        try:
            if probe():
                return True
        except Exception as e:
            # Probe errors mean "not ready yet"
            logger.debug("readiness probe error: %s", e)

        remaining = deadline - clock()
        if remaining <= 0:
            return False
        sleep(min(interval, remaining))
