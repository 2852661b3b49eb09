import threading
from datetime import date
from typing import Callable, Dict, Optional

from .logger import StructuredLogger, get_logger
from .models import ResolutionResult


class DailyQuota:
    """
    Process-wide daily search counter, reset at local-date rollover.

    ``check_and_reserve`` is atomic, so one instance can be shared by the
    threads of a server.
    """

    def __init__(
        self,
        limit: int = 500,
        today_fn: Optional[Callable[[], date]] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        self._today = today_fn or date.today
        self._logger = logger
        self._lock = threading.Lock()
        self._date = self._today()
        self._count = 0

    def _roll_over(self) -> None:
        today = self._today()
        if today != self._date:
            self._date = today
            self._count = 0

    def check_and_reserve(self) -> bool:
        """Reserve one search for today. False when the limit is reached."""
        with self._lock:
            self._roll_over()
            if self._count >= self.limit:
                return False
            self._count += 1
            return True

    def record(self, result: ResolutionResult) -> None:
        logger = self._logger or get_logger()
        logger.info(
            f"Processed {self.count}/{self.limit} searches today",
            found=result.found,
            name=result.identity.display_name,
        )

    @property
    def count(self) -> int:
        with self._lock:
            self._roll_over()
            return self._count

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            self._roll_over()
            return {"date": self._date.isoformat(), "count": self._count, "limit": self.limit}
