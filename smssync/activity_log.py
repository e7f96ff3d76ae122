"""Human-readable activity log for sync status messages.

This is separate from developer logging: lines written here are meant for
the operator of the device and are kept in a plain text file.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class Messages:
    """Status texts written to the activity log."""

    PROCESSED_SUCCESS = "Messages processed successfully"
    PROCESSED_FAILED = "Processing messages failed:"
    JSON_FAILED = "Failed to parse the server response:"
    SECRET_ENCODING_FAILED = "Could not encode the secret, sending it unencoded:"

    @staticmethod
    def result_request_status(code: int, reason: str) -> str:
        return f"Message results request failed with status {code} ({reason})"

    @staticmethod
    def queued_request_status(code: int, reason: str) -> str:
        return f"Queued messages request failed with status {code} ({reason})"


class LogSink(ABC):
    """Destination for activity log lines."""

    @abstractmethod
    def append(self, text: str) -> None:
        """Append one line of text."""
        pass


class FileLogSink(LogSink):
    """Appends timestamped lines to a UTF-8 text file."""

    def __init__(self, path: str | Path):
        """Initialize the sink.

        Args:
            path: File to append to. Parent directories are created on
                first write.
        """
        self.path = Path(path).expanduser()

    def append(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = f"{datetime.now().strftime('%Y-%m-%d %H:%M:%S')} {text}\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)

    def read_lines(self, limit: int | None = None) -> list[str]:
        """Return the last ``limit`` lines (all lines if None)."""
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            lines = [line.rstrip("\n") for line in f]
        return lines[-limit:] if limit else lines


class MemoryLogSink(LogSink):
    """Keeps lines in memory; used when no file is wanted."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def append(self, text: str) -> None:
        logger.debug(f"Activity: {text}")
        self.lines.append(text)
