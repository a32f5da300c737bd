"""
Entry formatters used by the text-based providers.

  - compact:  "{timestamp:%H:%M:%S} [{severity:>11}] {message}"
  - detailed: "{timestamp} [{severity}] {source}: {message}" plus the exception tree
  - json:     one JSON object per line, exception tree as a flat list
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from cascadelog.logger.records import ExceptionNode, LogEntry


class LogFormatter(ABC):
    """Base formatter. Transforms LogEntry → string."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str: ...


class CompactFormatter(LogFormatter):
    """
    Compact single-line format for terminal display.
    Example: 14:32:05 [INFORMATION] Order accepted
    """

    def format(self, entry: LogEntry) -> str:
        ts = entry.timestamp.strftime("%H:%M:%S")
        line = f"{ts} [{entry.severity_name:>11}] {entry.message}"
        if entry.exception is not None:
            line += f" ({entry.exception.type_name}: {entry.exception.message})"
        return line


class DetailedFormatter(LogFormatter):
    """
    Detailed format with source and the full exception tree.
    Example: 2026-02-12 14:32:05.123456 [      ERROR] billing: Charge failed
    """

    def format(self, entry: LogEntry) -> str:
        ts = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")
        parts = [f"{ts} [{entry.severity_name:>11}]"]
        if entry.source:
            parts.append(f"{entry.source}:")
        parts.append(entry.message)
        line = " ".join(parts)

        if entry.exception is not None:
            line += "\n" + "\n".join(_exception_lines(entry.exception, depth=1))
        return line


class JsonFormatter(LogFormatter):
    """
    Structured JSON for machine parsing.
    One JSON object per line.
    """

    def format(self, entry: LogEntry) -> str:
        obj: dict[str, Any] = {
            "timestamp": entry.timestamp.isoformat(),
            "severity": int(entry.severity),
            "severity_name": entry.severity_name,
            "message": entry.message,
            "source": entry.source,
        }
        if entry.exception is not None:
            obj["exceptions"] = _exception_list(entry.exception)
        return json.dumps(obj, default=str)


FORMATTERS: dict[str, type[LogFormatter]] = {
    "compact": CompactFormatter,
    "detailed": DetailedFormatter,
    "json": JsonFormatter,
}


def _exception_lines(root: ExceptionNode, depth: int) -> list[str]:
    lines = []
    stack = [(root, depth)]
    while stack:
        node, level = stack.pop()
        lines.append(f"{'  ' * level}{node.type_name}: {node.message}")
        for child in reversed(node.children):
            stack.append((child, level + 1))
    return lines


def _exception_list(root: ExceptionNode) -> list[dict[str, Any]]:
    """Flat pre-order list; `parent` is the index of the parent entry."""
    items: list[dict[str, Any]] = []
    index: dict[int, int] = {}
    for node, parent in root.walk():
        obj: dict[str, Any] = {
            "type": node.type_name,
            "message": node.message,
            "parent": index[id(parent)] if parent is not None else None,
        }
        if node.stack_trace:
            obj["stack_trace"] = node.stack_trace
        index[id(node)] = len(items)
        items.append(obj)
    return items
