"""
cascadelog provider core.

Providers described by name, type and attributes are wired into a graph
(fallbacks, composites), checked for cycles, and reached through the
Logger facade.
"""

from cascadelog.logger.core import Logger
from cascadelog.logger.records import LogEntry, Severity, ExceptionNode
from cascadelog.logger.errors import (
    CascadeLogError,
    ConfigurationError,
    ProviderNotInitializedError,
    LoggingWriteError,
    AggregateLoggingError,
)
from cascadelog.logger.providers import LoggingProvider
from cascadelog.logger.composite import CompositeProvider
from cascadelog.logger.adapters import (
    MemoryProvider,
    TerminatorProvider,
    ConsoleProvider,
    FileProvider,
    SqlProvider,
)
from cascadelog.logger.wiring import ProviderRegistry, build_registry
from cascadelog.logger.formatters import LogFormatter, CompactFormatter, DetailedFormatter, JsonFormatter

__all__ = [
    "Logger",
    "LogEntry",
    "Severity",
    "ExceptionNode",
    "CascadeLogError",
    "ConfigurationError",
    "ProviderNotInitializedError",
    "LoggingWriteError",
    "AggregateLoggingError",
    "LoggingProvider",
    "CompositeProvider",
    "MemoryProvider",
    "TerminatorProvider",
    "ConsoleProvider",
    "FileProvider",
    "SqlProvider",
    "ProviderRegistry",
    "build_registry",
    "LogFormatter",
    "CompactFormatter",
    "DetailedFormatter",
    "JsonFormatter",
]
