"""
Exception hierarchy.

ConfigurationError is fatal at wiring time. LoggingWriteError and
AggregateLoggingError surface from log calls and keep the original
failures reachable through __cause__ and `exceptions`. All of them
pickle with their structured fields, so they can cross process and
queue boundaries.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CascadeLogError(Exception):
    """Base class for every error raised by cascadelog."""


class ConfigurationError(CascadeLogError, ValueError):
    """Invalid provider configuration or wiring."""

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        attribute: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider_name = provider_name
        self.attribute = attribute

    def __reduce__(self):
        return (
            type(self),
            (self.args[0], self.provider_name, self.attribute),
            {"__cause__": self.__cause__},
        )


class ProviderNotInitializedError(CascadeLogError, RuntimeError):
    """A provider was used before initialize() completed."""


class LoggingWriteError(CascadeLogError):
    """A single provider failed to write an entry."""

    def __init__(self, provider_name: str, cause: BaseException):
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Provider '{provider_name}' failed to write log entry: {detail}")
        self.provider_name = provider_name
        self.__cause__ = cause

    def __reduce__(self):
        return type(self), (self.provider_name, self.__cause__)


class AggregateLoggingError(CascadeLogError):
    """
    Failure of one or more providers referenced by a composite.

    Raised even for a single failure so composite failures are always
    distinguishable from a plain provider failure.
    """

    def __init__(self, provider_name: str, exceptions: Sequence[BaseException]):
        if not exceptions:
            raise ValueError("AggregateLoggingError requires at least one exception")
        self.provider_name = provider_name
        self.exceptions: tuple[BaseException, ...] = tuple(exceptions)
        details = "; ".join(str(e) or type(e).__name__ for e in self.exceptions)
        super().__init__(
            f"Composite provider '{provider_name}' failed on "
            f"{len(self.exceptions)} referenced provider(s): {details}"
        )

    def __reduce__(self):
        return (
            type(self),
            (self.provider_name, self.exceptions),
            {"__cause__": self.__cause__},
        )
