"""
Logging for profilefinder.

Every message goes to the console at the configured level and, at DEBUG, to an
append-only file per calendar day. Keyword context is appended as JSON. The
logger also counts results-page acquisitions so a run can end with a summary
of how each search provider behaved.
"""

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "[%(asctime)s] %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


class DailyFileHandler(logging.FileHandler):
    """Appends to ``<prefix>_YYYYMMDD.log``, moving to a new file when the local date changes."""

    def __init__(self, log_dir: Path, prefix: str = "profilefinder"):
        self.log_dir = log_dir
        self.prefix = prefix
        self.current_date = date.today()
        super().__init__(self._path_for(self.current_date), mode="a", encoding="utf-8")

    def _path_for(self, day: date) -> Path:
        return self.log_dir / f"{self.prefix}_{day:%Y%m%d}.log"

    def emit(self, record: logging.LogRecord):
        today = date.today()
        if today != self.current_date:
            self.acquire()
            try:
                self.close()
                self.current_date = today
                self.baseFilename = str(self._path_for(today).resolve())
            finally:
                self.release()
        super().emit(record)


def _fresh_metrics() -> dict:
    return {
        "searches_attempted": 0,
        "searches_successful": 0,
        "searches_failed": 0,
        "profiles_found": 0,
        "misses": 0,
        "errors_by_type": {},
        "provider_success_rate": {},
    }


class StructuredLogger:
    """
    Wraps a stdlib logger with JSON context and search-provider counters.

    Args:
        name: Logger name
        level: Console level name (DEBUG ... CRITICAL)
        log_dir: Where the daily files go (default: logs/)
        enable_file: Attach the daily file handler
        enable_console: Attach a stdout handler
    """

    def __init__(
        self,
        name: str = "profilefinder",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        self.logger = logging.getLogger(name)
        # Handlers filter; the file keeps DEBUG even when the console does not
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()
        self.metrics = _fresh_metrics()

        if enable_console:
            stdout = logging.StreamHandler(sys.stdout)
            stdout.setLevel(logging.getLevelName(level.upper()))
            stdout.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            self.logger.addHandler(stdout)

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            daily = DailyFileHandler(log_dir)
            daily.setLevel(logging.DEBUG)
            daily.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
            self.logger.addHandler(daily)

    def debug(self, message: str, **context):
        self._emit(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._emit(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._emit(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._emit(logging.CRITICAL, message, context)

    def _emit(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Search counters

    def _provider_stats(self, provider: str) -> dict:
        return self.metrics["provider_success_rate"].setdefault(
            provider, {"attempts": 0, "successes": 0}
        )

    def record_search_attempt(self, provider: str):
        """Count one results-page fetch against ``provider``."""
        self.metrics["searches_attempted"] += 1
        self._provider_stats(provider)["attempts"] += 1

    def record_search_success(self, provider: str):
        self.metrics["searches_successful"] += 1
        self._provider_stats(provider)["successes"] += 1

    def record_search_failure(self, provider: str, error_type: str):
        """Count a failed fetch, bucketed by ``error_type`` (Timeout, Challenge, HTTPError_503 ...)."""
        self.metrics["searches_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def record_resolution(self, found: bool):
        self.metrics["profiles_found" if found else "misses"] += 1

    def get_metrics(self) -> dict:
        """Snapshot of the counters, with a ``success_rate`` per provider that has attempts."""
        snapshot = dict(self.metrics)
        snapshot["errors_by_type"] = dict(self.metrics["errors_by_type"])
        snapshot["provider_success_rate"] = {}
        for provider, stats in self.metrics["provider_success_rate"].items():
            entry = dict(stats)
            if entry["attempts"]:
                entry["success_rate"] = round(entry["successes"] / entry["attempts"], 3)
            snapshot["provider_success_rate"][provider] = entry
        return snapshot

    def log_metrics_summary(self):
        """Write the session counters at INFO."""
        metrics = self.get_metrics()
        attempted = metrics["searches_attempted"]
        acquired = metrics["searches_successful"]
        percent = round(acquired / attempted * 100, 1) if attempted else 0

        self.info("=== Search Session Metrics ===")
        self.info(f"Searches: {acquired}/{attempted} ({percent}% acquired)")
        self.info(f"Profiles found: {metrics['profiles_found']}, misses: {metrics['misses']}")

        providers = metrics["provider_success_rate"]
        if providers:
            self.info("Provider Success Rates:")
            for provider, stats in providers.items():
                self.info(
                    f"  {provider}: {stats['successes']}/{stats['attempts']} "
                    f"({stats.get('success_rate', 0) * 100:.1f}%)"
                )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "profilefinder",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Return the process-wide logger, creating it on first use.

    Level and log directory default to PROFILEFINDER_LOG_LEVEL and
    PROFILEFINDER_LOG_DIR when not given. Later calls ignore their arguments.
    """
    global _global_logger

    if _global_logger is None:
        from .config import Settings

        settings = Settings.from_env()
        kwargs.setdefault("log_dir", Path(settings.log_dir))
        _global_logger = StructuredLogger(name=name, level=level or settings.log_level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger builds a fresh one."""
    global _global_logger
    _global_logger = None
