"""
Logger: the single entry point applications call.

Holds a wired ProviderRegistry and sends every entry to its default
provider. Failures from the provider graph reach the caller unchanged.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from cascadelog.config import LoggingConfig
from cascadelog.logger.errors import ConfigurationError
from cascadelog.logger.providers import LoggingProvider
from cascadelog.logger.records import ExceptionNode, LogEntry, Severity
from cascadelog.logger.wiring import ProviderRegistry, build_registry

if TYPE_CHECKING:
    from cascadelog.registry import ProviderTypeRegistry

logger = logging.getLogger(__name__)


class Logger:
    """
    Facade over the default provider.

    Usage:
        log = Logger.instance()
        log.configure_from_yaml("logging.yaml")
        log.info("Order accepted", source="checkout")
        log.log_exception(exc)
    """

    _instance: Optional["Logger"] = None
    _lock = threading.Lock()

    # Re-export severities for convenience: Logger.WARNING, etc.
    DEBUG = Severity.DEBUG
    INFORMATION = Severity.INFORMATION
    WARNING = Severity.WARNING
    ERROR = Severity.ERROR
    CRITICAL = Severity.CRITICAL

    def __init__(self, registry: Optional[ProviderRegistry] = None) -> None:
        self._registry = registry
        self._configure_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "Logger":
        """Get or create the singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton. For testing only.
        Closes all providers before resetting.
        """
        with cls._lock:
            if cls._instance is not None:
                cls._instance.close()
                cls._instance = None

    # ── Configuration ─────────────────────────────────────────────

    def configure(
        self,
        config: LoggingConfig | dict,
        types: Optional["ProviderTypeRegistry"] = None,
    ) -> ProviderRegistry:
        """
        Build the provider graph and make it current.

        The previous registry, if any, is closed only after the new one
        was wired successfully.
        """
        if not isinstance(config, LoggingConfig):
            config = LoggingConfig.from_dict(config)

        registry = build_registry(config.providers, config.default_provider, types)

        with self._configure_lock:
            previous, self._registry = self._registry, registry
        if previous is not None:
            previous.close()

        logger.info(
            "Logging configured with %d provider(s), default provider '%s'",
            len(registry), registry.default_provider_name,
        )
        return registry

    def configure_from_yaml(
        self,
        path: str | Path,
        types: Optional["ProviderTypeRegistry"] = None,
    ) -> ProviderRegistry:
        return self.configure(LoggingConfig.from_yaml(path), types)

    @property
    def is_configured(self) -> bool:
        return self._registry is not None

    @property
    def registry(self) -> ProviderRegistry:
        if self._registry is None:
            raise ConfigurationError("The logging system has not been configured")
        return self._registry

    @property
    def default_provider(self) -> LoggingProvider:
        return self.registry.default_provider

    def get_provider(self, name: str) -> LoggingProvider | None:
        return self.registry.get(name)

    # ── Core Logging ──────────────────────────────────────────────

    def log(
        self,
        severity: int | str | Severity,
        message: str,
        source: Optional[str] = None,
        exception: BaseException | ExceptionNode | None = None,
    ) -> Any:
        """
        Log to the default provider.

        Returns the provider's id for the entry, or None when the entry
        was below the provider's threshold.
        """
        entry = LogEntry.create(severity, message, source=source, exception=exception)
        return self.default_provider.log(entry)

    def log_message(self, message: str, exception: BaseException | None = None) -> Any:
        """Log a message at ERROR severity."""
        return self.log(Severity.ERROR, message, exception=exception)

    def log_exception(self, exception: BaseException, source: Optional[str] = None) -> Any:
        """Log an exception at ERROR severity, using its text as the message."""
        message = str(exception) or type(exception).__name__
        return self.log(Severity.ERROR, message, source=source, exception=exception)

    # ── Convenience Methods ───────────────────────────────────────

    def debug(self, message: str, source: Optional[str] = None,
              exception: BaseException | None = None) -> Any:
        return self.log(Severity.DEBUG, message, source, exception)

    def info(self, message: str, source: Optional[str] = None,
             exception: BaseException | None = None) -> Any:
        return self.log(Severity.INFORMATION, message, source, exception)

    def warning(self, message: str, source: Optional[str] = None,
                exception: BaseException | None = None) -> Any:
        return self.log(Severity.WARNING, message, source, exception)

    def error(self, message: str, source: Optional[str] = None,
              exception: BaseException | None = None) -> Any:
        return self.log(Severity.ERROR, message, source, exception)

    def critical(self, message: str, source: Optional[str] = None,
                 exception: BaseException | None = None) -> Any:
        return self.log(Severity.CRITICAL, message, source, exception)

    # ── Status ────────────────────────────────────────────────────

    def status(self) -> dict:
        """Current provider graph, for display."""
        if self._registry is None:
            return {"configured": False, "default_provider": None, "providers": {}}
        return {
            "configured": True,
            "default_provider": self._registry.default_provider_name,
            "providers": self._registry.describe(),
        }

    # ── Cleanup ───────────────────────────────────────────────────

    def close(self) -> None:
        """Close all providers. Call during shutdown."""
        if self._registry is not None:
            self._registry.close()
