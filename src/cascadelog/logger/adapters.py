"""
Concrete sink providers.

  memory      ring buffer of the last N entries
  terminator  accepts and discards everything (ends fallback chains)
  console     stdout/stderr with ANSI colors
  file        appends formatted lines, optional daily rotation
  sql         DuckDB events + exception tree, one transaction per entry
"""

from __future__ import annotations

import logging
import sys
import threading
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, MutableMapping, Optional

import duckdb

from cascadelog.logger.errors import ConfigurationError
from cascadelog.logger.formatters import FORMATTERS, LogFormatter
from cascadelog.logger.providers import (
    LoggingProvider,
    check_for_unrecognized_attributes,
    pop_bool,
    pop_choice,
    pop_int,
    pop_required,
)
from cascadelog.logger.records import LogEntry, Severity
from cascadelog.logger.schema import ALL_SCHEMA, INSERT_EVENT, INSERT_EXCEPTION

logger = logging.getLogger(__name__)


class MemoryProvider(LoggingProvider):
    """
    Keeps the last `capacity` entries in memory.
    Mostly useful in tests and as a diagnostic window.
    """

    default_description = "Memory logging provider"
    DEFAULT_CAPACITY = 10000

    def __init__(self) -> None:
        super().__init__()
        self._buffer: deque[LogEntry] = deque(maxlen=self.DEFAULT_CAPACITY)
        self._lock = threading.Lock()
        self._seq = 0

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        capacity = pop_int(name, attributes, "capacity", self.DEFAULT_CAPACITY)
        self._buffer = deque(maxlen=capacity)

    def _write(self, entry: LogEntry) -> int:
        with self._lock:
            self._buffer.append(entry)
            self._seq += 1
            return self._seq

    def get_logged_entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._buffer)

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    @property
    def capacity(self) -> Optional[int]:
        return self._buffer.maxlen

    @property
    def count(self) -> int:
        return len(self._buffer)


class TerminatorProvider(LoggingProvider):
    """Discards every entry. Placed at the end of a fallback chain."""

    default_description = "Terminator logging provider"

    def _write(self, entry: LogEntry) -> None:
        return None


class ConsoleProvider(LoggingProvider):
    """
    Writes to stdout/stderr with ANSI color coding.
    ERROR and above go to stderr, everything else to stdout.
    """

    default_description = "Console logging provider"

    COLORS = {
        Severity.DEBUG: "\033[36m",        # cyan
        Severity.INFORMATION: "\033[37m",  # white/default
        Severity.WARNING: "\033[33m",      # yellow
        Severity.ERROR: "\033[31m",        # red
        Severity.CRITICAL: "\033[1;91m",   # bold bright red
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        super().__init__()
        self.color = True
        self._formatter: LogFormatter = FORMATTERS["compact"]()
        self._lock = threading.Lock()
        self._seq = 0

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        self.color = pop_bool(name, attributes, "color", True)
        formatter = pop_choice(name, attributes, "formatter", tuple(FORMATTERS), "compact")
        self._formatter = FORMATTERS[formatter]()

    @property
    def formatter(self) -> LogFormatter:
        return self._formatter

    def _write(self, entry: LogEntry) -> int:
        formatted = self._formatter.format(entry)
        if self.color:
            formatted = f"{self.COLORS[entry.severity]}{formatted}{self.RESET}"
        stream = sys.stderr if entry.severity >= Severity.ERROR else sys.stdout
        with self._lock:
            print(formatted, file=stream, flush=True)
            self._seq += 1
            return self._seq


class FileProvider(LoggingProvider):
    """
    Appends one formatted entry per line to a text file.
    Daily rotation opens `<stem>_<YYYY-MM-DD><suffix>` when the date changes.
    """

    default_description = "File logging provider"

    def __init__(self) -> None:
        super().__init__()
        self.base_path: Optional[Path] = None
        self.rotation = "none"
        self._formatter: LogFormatter = FORMATTERS["detailed"]()
        self._current_date: Optional[str] = None
        self._file: Optional[IO[str]] = None
        self._lock = threading.Lock()
        self._seq = 0

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        self.base_path = Path(pop_required(name, attributes, "path"))
        self.rotation = pop_choice(name, attributes, "rotation", ("daily", "none"), "none")
        formatter = pop_choice(name, attributes, "formatter", tuple(FORMATTERS), "detailed")
        self._formatter = FORMATTERS[formatter]()

    def _ensure_file(self, entry_time: datetime) -> IO[str]:
        """Open or rotate file as needed. Must hold self._lock."""
        date_str = entry_time.strftime("%Y-%m-%d")
        if self._file is not None and (self.rotation != "daily" or self._current_date == date_str):
            return self._file

        if self._file is not None:
            self._file.close()

        self.base_path.parent.mkdir(parents=True, exist_ok=True)

        if self.rotation == "daily":
            stem = self.base_path.stem
            suffix = self.base_path.suffix or ".log"
            file_path = self.base_path.parent / f"{stem}_{date_str}{suffix}"
        else:
            file_path = self.base_path

        self._file = open(file_path, "a", encoding="utf-8")
        self._current_date = date_str
        return self._file

    def _write(self, entry: LogEntry) -> int:
        formatted = self._formatter.format(entry)
        with self._lock:
            handle = self._ensure_file(entry.timestamp)
            handle.write(formatted + "\n")
            handle.flush()
            self._seq += 1
            return self._seq

    def close(self) -> None:
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None
                self._current_date = None


class SqlProvider(LoggingProvider):
    """
    Stores entries in a DuckDB database file.

    Each write opens its own connection and runs in a single transaction:
    the event row plus one row per exception in the entry's exception
    tree. Returns the generated event_id.
    """

    default_description = "SQL logging provider"

    def __init__(self) -> None:
        super().__init__()
        self._database: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def database(self) -> Optional[str]:
        return self._database

    def _configure(self, name: str, attributes: MutableMapping[str, str]) -> None:
        database = pop_required(name, attributes, "database")
        if database.strip() == ":memory:":
            raise ConfigurationError(
                f"Provider '{name}' cannot use an in-memory database: every write "
                f"opens a new connection",
                provider_name=name,
                attribute="database",
            )
        initialize_schema = pop_bool(name, attributes, "initializeSchema", False)
        self._database = database

        if initialize_schema:
            # Reject bad configuration before touching the database.
            check_for_unrecognized_attributes(name, attributes)
            self._initialize_schema(name)

    def _initialize_schema(self, name: str) -> None:
        try:
            with self._connect() as conn:
                for _, ddl in ALL_SCHEMA:
                    conn.execute(ddl)
        except duckdb.Error as exc:
            raise ConfigurationError(
                f"Initialization of the database schema for provider '{name}' failed: {exc}",
                provider_name=name,
                attribute="initializeSchema",
            ) from exc
        logger.info("Logging schema initialized in %s for provider '%s'", self._database, name)

    def _connect(self) -> duckdb.DuckDBPyConnection:
        path = Path(self._database)
        path.parent.mkdir(parents=True, exist_ok=True)
        return duckdb.connect(str(path))

    def _write(self, entry: LogEntry) -> int:
        with self._lock, self._connect() as conn:
            conn.begin()
            try:
                event_id = self._save_event(conn, entry)
                self._save_exception_tree(conn, entry, event_id)
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            return event_id

    def _save_event(self, conn: duckdb.DuckDBPyConnection, entry: LogEntry) -> int:
        event_time = entry.timestamp.astimezone(timezone.utc).replace(tzinfo=None)
        row = conn.execute(
            INSERT_EVENT,
            [event_time, int(entry.severity), entry.severity_name, entry.message, entry.source],
        ).fetchone()
        return row[0]

    def _save_exception_tree(
        self, conn: duckdb.DuckDBPyConnection, entry: LogEntry, event_id: int
    ) -> None:
        if entry.exception is None:
            return
        ids: dict[int, Any] = {}
        for node, parent in entry.exception.walk():
            parent_id = ids[id(parent)] if parent is not None else None
            row = conn.execute(
                INSERT_EXCEPTION,
                [event_id, parent_id, node.type_name, node.message, node.stack_trace],
            ).fetchone()
            ids[id(node)] = row[0]

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["database"] = self._database
        return info
