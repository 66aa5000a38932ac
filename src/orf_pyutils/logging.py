from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from loguru import Record
import os
import sys
import threading
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger as _loguru_logger


class LogFormat(StrEnum):
    """Supported logging output formats."""

    STANDARD = "standard"
    JSON = "json"


class LogLevel(StrEnum):
    """Supported log levels."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class CorrelationInfo:
    """Correlation information for tracking one analysis across log lines.

    Args:
        request_id: Unique identifier for the analysis request
        assessment_id: Optional assessment identifier for context
    """

    request_id: str
    assessment_id: str | None = None

    def __post_init__(self) -> None:
        if not self.request_id:
            object.__setattr__(self, "request_id", uuid.uuid4().hex)

    def __str__(self) -> str:
        if self.assessment_id:
            return self.assessment_id
        return self.request_id


@dataclass(frozen=True)
class LoggerConfig:
    """Configuration for logger setup.

    Args:
        level: Logging level
        format_type: Output format type
        include_correlation: Whether to include correlation info
    """

    level: LogLevel = LogLevel.INFO
    format_type: LogFormat = LogFormat.STANDARD
    include_correlation: bool = True


class CorrelationManager:
    """Thread-safe correlation context manager."""

    def __init__(self) -> None:
        self._correlation = threading.local()

    @property
    def current(self) -> CorrelationInfo | None:
        """Get current correlation info for this thread."""
        return getattr(self._correlation, "info", None)

    def set(self, *, correlation_info: CorrelationInfo) -> None:
        """Set correlation info for current thread.

        Args:
            correlation_info: Correlation information to set
        """
        setattr(self._correlation, "info", correlation_info)

    def clear(self) -> None:
        """Clear correlation info for current thread."""
        setattr(self._correlation, "info", None)

    def create_new(
        self, *, request_id: str | None = None, assessment_id: str | None = None
    ) -> CorrelationInfo:
        """Create and set new correlation info.

        Args:
            request_id: Optional specific request ID to use
            assessment_id: Optional assessment ID for context

        Returns:
            Created correlation info
        """
        correlation_info = CorrelationInfo(
            request_id=request_id or uuid.uuid4().hex, assessment_id=assessment_id
        )
        self.set(correlation_info=correlation_info)
        return correlation_info


class PropagatingCorrelation:
    """Callable wrapper that carries the caller's correlation into worker threads.

    Args:
        func: Function to wrap with correlation propagation
        correlation_manager: Manager for correlation context
    """

    def __init__(
        self, *, func: Callable[..., Any], correlation_manager: CorrelationManager
    ) -> None:
        self._func = func
        self._correlation_info = correlation_manager.current
        self._correlation_manager = correlation_manager

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._correlation_info:
            self._correlation_manager.set(correlation_info=self._correlation_info)
        try:
            return self._func(*args, **kwargs)
        finally:
            if self._correlation_info:
                self._correlation_manager.clear()


class EngineLogger:
    """Loguru-backed logger with correlation support.

    Args:
        name: Logger name/identifier
        config: Logger configuration
    """

    def __init__(self, *, name: str, config: LoggerConfig) -> None:
        self._name = name
        self._config = config
        self._correlation_manager = _correlation_manager
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure the shared loguru sink for this configuration."""
        global _configured_with

        if _configured_with == self._config:
            return

        _loguru_logger.remove()
        correlation_filter = self._correlation_filter if self._config.include_correlation else None

        if self._config.format_type == LogFormat.JSON:
            _loguru_logger.add(
                sys.stderr,
                level=self._config.level.value,
                filter=correlation_filter,  # type: ignore[arg-type]
                serialize=True,
            )
        else:
            _loguru_logger.add(
                sys.stderr,
                format=self._get_format_string(),
                level=self._config.level.value,
                filter=correlation_filter,  # type: ignore[arg-type]
                colorize=True,
            )
        _configured_with = self._config

    def _get_format_string(self) -> str:
        """Get the console format string for the configured context fields."""
        correlation_part = (
            " | <yellow>{extra[correlation]}</yellow>" if self._config.include_correlation else ""
        )
        return f"<green>{{time:HH:mm:ss.SSS}}</green> | <level>{{level: <8}}</level> | <cyan>{{name}}</cyan>:<cyan>{{function}}</cyan>:<cyan>{{line}}</cyan>{correlation_part} - <level>{{message}}</level>"

    def _correlation_filter(self, record: "Record") -> bool:
        """Add correlation info to log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True to allow record through
        """
        correlation_info = self._correlation_manager.current
        record["extra"]["correlation"] = str(correlation_info) if correlation_info else ""
        return True

    @contextmanager
    def correlation_context(
        self,
        *,
        description: str,
        request_id: str | None = None,
        assessment_id: str | None = None,
    ) -> Generator[CorrelationInfo, None, None]:
        """Context manager for correlation tracking.

        Args:
            description: Description of the operation
            request_id: Optional specific request ID
            assessment_id: Optional assessment ID for context

        Yields:
            Created correlation info
        """
        correlation_info = self._correlation_manager.create_new(
            request_id=request_id, assessment_id=assessment_id
        )
        _loguru_logger.opt(depth=2).debug(
            f"Setting correlation id for '{description}' to {correlation_info}"
        )

        try:
            yield correlation_info
        finally:
            self._correlation_manager.clear()

    def create_propagating_wrapper(self, *, func: Callable[..., Any]) -> PropagatingCorrelation:
        """Wrap ``func`` so a worker thread logs under the caller's correlation id.

        Args:
            func: Function to wrap

        Returns:
            Wrapped function that propagates correlation
        """
        return PropagatingCorrelation(func=func, correlation_manager=self._correlation_manager)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        _loguru_logger.opt(depth=1).debug(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        _loguru_logger.opt(depth=1).info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        _loguru_logger.opt(depth=1).warning(message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        _loguru_logger.opt(depth=1).error(message, **kwargs)


_loggers: dict[str, EngineLogger] = {}
_correlation_manager = CorrelationManager()
_configured_with: LoggerConfig | None = None

LOGLEVEL: Final[str] = os.getenv("LOGLEVEL", os.getenv("LOG_LEVEL", "INFO"))
LOG_FORMAT: Final[str] = os.getenv("LOG_FORMAT", "standard")


def config_from_env() -> LoggerConfig:
    """Build a logger configuration from ``LOGLEVEL``/``LOG_FORMAT``/``LOG_JSON``.

    Returns:
        Logger configuration reflecting the current environment
    """
    level_env = os.getenv("LOGLEVEL", os.getenv("LOG_LEVEL", LOGLEVEL))
    format_env = os.getenv("LOG_FORMAT", LOG_FORMAT)
    json_env = os.getenv("LOG_JSON", "false")

    serialize = json_env.lower() in {"1", "true", "yes", "on"}
    format_type = LogFormat.JSON if serialize else LogFormat(format_env)

    return LoggerConfig(level=LogLevel(level_env.upper()), format_type=format_type)


def get_logger(name: str, *, config: LoggerConfig | None = None) -> EngineLogger:
    """Get or create a logger instance.

    Args:
        name: Logger name/identifier (use __name__ for module loggers)
        config: Optional explicit configuration; defaults to the environment

    Returns:
        Configured logger instance

    Examples:
        logger = get_logger(__name__)
    """
    if config is None and name in _loggers:
        return _loggers[name]

    effective_config = config or _configured_with or config_from_env()
    logger_instance = EngineLogger(name=name, config=effective_config)
    _loggers[name] = logger_instance

    return logger_instance


def configure_logging(*, level: str = "INFO", json_logs: bool = False) -> None:
    """Reconfigure the shared sink, e.g. from the CLI or a loaded config.

    Args:
        level: Log level name
        json_logs: Emit serialized JSON lines instead of the console format
    """
    global _configured_with

    # Always rebind so the sink follows the current sys.stderr
    _configured_with = None
    config = LoggerConfig(
        level=LogLevel(level.upper()),
        format_type=LogFormat.JSON if json_logs else LogFormat.STANDARD,
    )
    EngineLogger(name="orf_pyutils", config=config)


def thread_ident_string() -> str:
    """Get thread identification string.

    Returns:
        String identifying current process and thread
    """
    return f"({os.getpid()}:{threading.get_ident()})"
