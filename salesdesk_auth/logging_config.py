r"""
Logging setup for the SalesDesk auth client.

colorlog console output, a filter that keeps bearer tokens and passwords out
of log lines, and per-category aggregation of auth/network/server errors.
"""

import atexit
import logging
import os
import re
import sys
import threading
import time
from collections import Counter, defaultdict, deque
from typing import Any

import colorlog

_SECRET_PATTERNS = (
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*"), r"\1***"),
    (re.compile(r"((?:password|accessToken|refreshToken)['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.I), r"\1***"),
)


def redact_secrets(text: str) -> str:
    """Mask bearer tokens and password/token fields in a log line."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Rewrites records so credentials never reach a handler."""

    def filter(self, record):
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


class ErrorAggregator:
    """Counts classified errors per category (network, auth, server, ...).

    Keeps the last ``max_per_type`` occurrences of each category plus a tally
    of HTTP statuses seen, for the summary printed on exit or on demand.
    """

    def __init__(self, max_per_type: int = 1000):
        self.max_per_type = max_per_type
        self.errors: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=self.max_per_type)
        )
        self.statuses: Counter[int] = Counter()
        self.lock = threading.Lock()
        self.start_time = time.time()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] | None = None) -> None:
        context = context or {}
        with self.lock:
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": context}
            )
            status = context.get("status")
            if isinstance(status, int):
                self.statuses[status] += 1

    def get_error_summary(self) -> dict[str, Any]:
        """Per-category totals, last-hour counts and hourly rate."""
        now = time.time()
        with self.lock:
            hours = max((now - self.start_time) / 3600, 1)
            return {
                error_type: {
                    "total_count": len(entries),
                    "recent_count": sum(1 for e in entries if now - e["timestamp"] < 3600),
                    "rate_per_hour": len(entries) / hours,
                    "last_occurrence": entries[-1] if entries else None,
                }
                for error_type, entries in self.errors.items()
            }

    def status_counts(self) -> dict[int, int]:
        with self.lock:
            return dict(self.statuses)

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.statuses.clear()
            self.start_time = time.time()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("📊 No auth client errors recorded")
            return

        logging.warning("🚨 AUTH CLIENT ERROR SUMMARY")
        for error_type, stats in sorted(summary.items()):
            last = stats["last_occurrence"]
            logging.warning(
                f"  {error_type}: total={stats['total_count']} last_hour={stats['recent_count']} "
                f"rate={stats['rate_per_hour']:.1f}/h last={last['message'] if last else '-'}"
            )
        statuses = self.status_counts()
        if statuses:
            tally = " ".join(f"{code}x{count}" for code, count in sorted(statuses.items()))
            logging.warning(f"  statuses: {tally}")


# Process-wide aggregator fed by log_structured_error
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (e.g., 'network', 'auth', 'validation')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception:
        parts.append(f"Exception: {type(exception).__name__}: {str(exception)}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Configures root logging with colorlog and secret redaction.

    Args:
        debug: Force DEBUG on or off; None reads the DEBUG env variable.
    """

    def __init__(self, debug: bool | None = None):
        self.debug = debug

    def _resolve_level(self) -> int:
        if self.debug is not None:
            return logging.DEBUG if self.debug else logging.INFO
        debug_env = os.environ.get("DEBUG", "").lower()
        return logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

    @staticmethod
    def _build_formatter() -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )

    def configure(self) -> None:
        level = self._resolve_level()
        formatter = self._build_formatter()
        redaction = SecretRedactionFilter()

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logging.basicConfig(level=level, handlers=[handler], format="%(message)s")

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for h in root_logger.handlers:
            h.setFormatter(formatter)
            h.addFilter(redaction)

        # aiohttp's own client chatter stays at INFO even in debug runs
        logging.getLogger("aiohttp").setLevel(logging.INFO)

        atexit.register(self._log_final_error_summary)

    @staticmethod
    def _log_final_error_summary() -> None:
        try:
            error_aggregator.log_summary_report()
        except Exception as e:  # noqa: BLE001
            logging.error(f"Failed to log final error summary: {e}")
