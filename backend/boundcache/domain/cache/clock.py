"""Clock abstraction used for expiry and recency timestamps."""

import time
from typing import Callable

# Any zero-argument callable returning monotonically non-decreasing seconds.
Clock = Callable[[], float]

system_clock: Clock = time.monotonic
