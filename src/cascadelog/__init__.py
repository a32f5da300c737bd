"""
cascadelog: pluggable logging providers with fallback and composition.

    from cascadelog import Logger
    Logger.instance().configure_from_yaml("logging.yaml")
    Logger.instance().error("Payment gateway timed out", source="billing")
"""

import logging

# logger first: cascadelog.config imports cascadelog.logger.errors
from cascadelog.logger import (
    AggregateLoggingError,
    CascadeLogError,
    CompositeProvider,
    ConfigurationError,
    ExceptionNode,
    LogEntry,
    Logger,
    LoggingProvider,
    LoggingWriteError,
    ProviderNotInitializedError,
    ProviderRegistry,
    Severity,
    build_registry,
)
from cascadelog.config import LoggingConfig, ProviderDescriptor
from cascadelog.registry import ProviderTypeRegistry

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AggregateLoggingError",
    "CascadeLogError",
    "CompositeProvider",
    "ConfigurationError",
    "ExceptionNode",
    "LogEntry",
    "Logger",
    "LoggingConfig",
    "LoggingProvider",
    "LoggingWriteError",
    "ProviderDescriptor",
    "ProviderNotInitializedError",
    "ProviderRegistry",
    "ProviderTypeRegistry",
    "Severity",
    "build_registry",
]
