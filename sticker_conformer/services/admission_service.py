"""
Admission control: at most one conversion in flight per caller.

The registry is owned by the boundary layer and shared between its worker
threads. A second request from a busy caller is rejected outright rather than
queued.
"""
import threading
from contextlib import contextmanager
from typing import Iterator, Set

from loguru import logger

from ..domain.exceptions import CallerBusyError


class AdmissionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()

    def is_busy(self, caller_id: str) -> bool:
        with self._lock:
            return caller_id in self._in_flight

    def try_acquire(self, caller_id: str) -> bool:
        with self._lock:
            if caller_id in self._in_flight:
                return False
            self._in_flight.add(caller_id)
            return True

    def release(self, caller_id: str):
        with self._lock:
            self._in_flight.discard(caller_id)

    @contextmanager
    def admit(self, caller_id: str) -> Iterator[None]:
        """
        Marks `caller_id` as busy for the duration of the block.

        Raises:
            CallerBusyError: If the caller already has a conversion running.
        """
        if not self.try_acquire(caller_id):
            logger.warning(f"Rejected request from {caller_id}: a conversion is already running.")
            raise CallerBusyError(f"Caller {caller_id} already has a conversion in progress")
        try:
            yield
        finally:
            self.release(caller_id)
