"""
Log entries, severities and exception trees.

Severities use Python-compatible numeric values so they compare cleanly
against stdlib logging levels. Exception chains are captured as a tree:
an exception that aggregates several causes gets one child per cause.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Iterator, Optional


class Severity(IntEnum):
    """Ordered event severities."""
    DEBUG = 10
    INFORMATION = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        """Resolve severity from string name, case-insensitive."""
        name_upper = name.strip().upper()
        name_upper = _ALIASES.get(name_upper, name_upper)
        try:
            return cls[name_upper]
        except KeyError:
            raise ValueError(
                f"Unknown severity '{name}'. "
                f"Valid severities: {', '.join(m.name for m in cls)}"
            )

    @classmethod
    def from_value(cls, value: "int | str | Severity") -> "Severity":
        """Resolve severity from an int, a numeric string or a name."""
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            if value.strip().lstrip("-").isdigit():
                return cls.from_value(int(value))
            return cls.from_name(value)
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.value == value:
                    return member
            raise ValueError(
                f"No severity with value {value}. "
                f"Valid values: {', '.join(f'{m.name}={m.value}' for m in cls)}"
            )
        raise TypeError(f"Expected int or str, got {type(value).__name__}")


_ALIASES = {"INFO": "INFORMATION", "FATAL": "CRITICAL", "WARN": "WARNING"}


@dataclass(frozen=True)
class ExceptionNode:
    """
    One exception in a captured chain.

    `children` holds the causes: a single child for an ordinary
    `raise ... from` chain, several for aggregating exceptions (the
    grouped exceptions, then the explicit `__cause__` if one was set).
    """
    type_name: str
    message: str
    stack_trace: str = ""
    children: tuple["ExceptionNode", ...] = ()

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ExceptionNode":
        return _capture(exc)

    def walk(self) -> Iterator[tuple["ExceptionNode", Optional["ExceptionNode"]]]:
        """Yield (node, parent) pairs depth-first, parents before children."""
        stack: list[tuple[ExceptionNode, Optional[ExceptionNode]]] = [(self, None)]
        while stack:
            node, parent = stack.pop()
            yield node, parent
            for child in reversed(node.children):
                stack.append((child, node))

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


def _inner_exceptions(exc: BaseException) -> list[BaseException]:
    """Grouped exceptions first, then the explicit cause; else the context."""
    grouped = getattr(exc, "exceptions", None)
    if isinstance(grouped, (list, tuple)) and grouped:
        inner = [e for e in grouped if isinstance(e, BaseException)]
        if exc.__cause__ is not None:
            inner.append(exc.__cause__)
        return inner
    if exc.__cause__ is not None:
        return [exc.__cause__]
    if exc.__context__ is not None and not exc.__suppress_context__:
        return [exc.__context__]
    return []


def _capture(root: BaseException) -> ExceptionNode:
    # Pre-order pass with an explicit stack; chains may be deeper than the
    # recursion limit. An exception already captured is not captured again.
    order: list[BaseException] = []
    children: dict[int, list[BaseException]] = {}
    stack: list[tuple[BaseException, Optional[BaseException]]] = [(root, None)]
    while stack:
        exc, parent = stack.pop()
        if id(exc) in children:
            continue
        children[id(exc)] = []
        order.append(exc)
        if parent is not None:
            children[id(parent)].append(exc)
        for inner in reversed(_inner_exceptions(exc)):
            stack.append((inner, exc))

    # Children follow their parent in pre-order, so build leaves first.
    nodes: dict[int, ExceptionNode] = {}
    for exc in reversed(order):
        stack_trace = ""
        if exc.__traceback__ is not None:
            stack_trace = "".join(traceback.format_tb(exc.__traceback__))
        nodes[id(exc)] = ExceptionNode(
            type_name=type(exc).__name__,
            message=str(exc),
            stack_trace=stack_trace,
            children=tuple(nodes[id(child)] for child in children[id(exc)]),
        )
    return nodes[id(root)]


@dataclass(frozen=True)
class LogEntry:
    """
    Immutable log event handed to providers.

    Created by the Logger facade (or directly in tests) and passed
    unchanged through thresholds, fallbacks and composites.
    """
    severity: Severity
    message: str
    source: Optional[str] = None
    exception: Optional[ExceptionNode] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.message is None:
            raise TypeError("LogEntry message must not be None")
        if not isinstance(self.message, str):
            raise TypeError(
                f"LogEntry message must be a str, got {type(self.message).__name__}"
            )
        object.__setattr__(self, "severity", Severity.from_value(self.severity))

    @classmethod
    def create(
        cls,
        severity: int | str | Severity,
        message: str,
        source: Optional[str] = None,
        exception: BaseException | ExceptionNode | None = None,
    ) -> "LogEntry":
        """Factory accepting severity names and live exceptions."""
        if isinstance(exception, BaseException):
            exception = ExceptionNode.from_exception(exception)
        return cls(
            severity=Severity.from_value(severity),
            message=message,
            source=source,
            exception=exception,
        )

    @property
    def severity_name(self) -> str:
        return self.severity.name
