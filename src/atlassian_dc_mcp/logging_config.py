"""Contextual logging configuration for Atlassian DC MCP."""

import logging
import os
import sys
import threading
import time
import types
import uuid
from collections.abc import Callable, Mapping
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TypeVar, cast

DEFAULT_LOGGER_NAME = "atlassian-dc-mcp"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIRECTORY = "logs"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

T = TypeVar("T")


class ContextualLogger(logging.Logger):
    """Logger that carries per-thread context (operation, trace id) into records."""

    def __init__(self, name: str, level: int = 0) -> None:
        super().__init__(name, level)
        self._context_data = threading.local()

    def _get_context_str(self) -> str:
        context_data = getattr(self._context_data, "data", {})
        if not context_data:
            return "no-context"

        # operation=X,trace_id=Y,...
        return ",".join(f"{k}={v}" for k, v in context_data.items())

    def _log(
        self,
        level: int,
        msg: object,
        args: tuple[object, ...] | Mapping[str, object],
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
    ) -> None:
        """Add the context string to every record emitted by this logger."""
        extra = dict(extra) if extra else {}
        extra.setdefault("context", self._get_context_str())
        super()._log(level, msg, args, exc_info, extra, stack_info, stacklevel + 1)

    def get_context(self) -> dict[str, Any]:
        """Return a copy of the current thread's context."""
        return dict(getattr(self._context_data, "data", {}))

    def set_context(self, **kwargs: Any) -> None:
        """
        Sets context values for the logger.

        Args:
            **kwargs: Key-value pairs to add to the context
        """
        if not hasattr(self._context_data, "data"):
            self._context_data.data = {}
        self._context_data.data.update(kwargs)

    def clear_context(self) -> None:
        """Removes all context data from the logger."""
        self._context_data.data = {}


class _ContextFilter(logging.Filter):
    """Supply a default `context` attribute for records from plain loggers."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = "no-context"
        return True


class LoggingContextManager:
    """Context manager that logs the start, end and duration of an operation."""

    def __init__(
        self, logger: logging.Logger, operation: str, **context: Any
    ) -> None:
        """
        Initializes the logging context manager.

        Args:
            logger: Logger to report through; context is only attached when
                it is a ContextualLogger
            operation: Name of the operation being executed
            **context: Additional context data
        """
        self.logger = logger
        self.operation = operation
        self.context = context.copy()
        self.trace_id = context.get("trace_id", str(uuid.uuid4())[:8])
        self.start_time = time.perf_counter()
        self.old_context: dict[str, Any] = {}

    @property
    def elapsed(self) -> float:
        """Seconds since the context was created."""
        return time.perf_counter() - self.start_time

    def __enter__(self) -> "LoggingContextManager":
        self.start_time = time.perf_counter()
        if isinstance(self.logger, ContextualLogger):
            self.old_context = self.logger.get_context()
            self.context["operation"] = self.operation
            self.context["trace_id"] = self.trace_id
            self.logger.set_context(**self.context)

        self.logger.debug(f"Operation started: {self.operation}")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        duration = self.elapsed
        if exc_type:
            self.logger.error(
                f"Operation failed: {self.operation} after {duration:.3f}s - {exc_val}"
            )
        else:
            self.logger.debug(
                f"Operation completed: {self.operation} in {duration:.3f}s"
            )

        if isinstance(self.logger, ContextualLogger):
            self.logger.clear_context()
            self.logger.set_context(**self.old_context)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    log_to_file: bool = False,
    log_dir: str | None = None,
    log_format: str | None = None,
) -> ContextualLogger:
    """
    Configures and returns a contextual logger.

    Console output goes to stderr so stdout stays free for tool output and
    the MCP stdio transport. Calling this again for the same name replaces
    the previously installed handlers.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, etc.), defaults to LOG_LEVEL or INFO
        log_to_file: If True, also logs to a rotating file
        log_dir: Directory to store log files, defaults to LOG_DIR or ./logs
        log_format: Log format, defaults to LOG_FORMAT or DEFAULT_FORMAT

    Returns:
        Configured contextual logger
    """
    logging.setLoggerClass(ContextualLogger)
    logger = logging.getLogger(name)

    log_level = level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    formatter = logging.Formatter(log_format or os.getenv("LOG_FORMAT", DEFAULT_FORMAT))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_ContextFilter())
    logger.addHandler(console_handler)

    if log_to_file:
        log_directory = Path(log_dir or os.getenv("LOG_DIR", DEFAULT_LOG_DIRECTORY))
        log_directory.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_directory / f"{name}.log",
            maxBytes=MAX_LOG_SIZE,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_ContextFilter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return cast(ContextualLogger, logger)


def log_operation(
    logger: logging.Logger, operation: str, **context: Any
) -> LoggingContextManager:
    """
    Creates a context manager for operation logging.

    Args:
        logger: Logger to report through
        operation: Name of the operation
        **context: Additional context data

    Returns:
        Context manager configured for operation logging
    """
    return LoggingContextManager(logger, operation, **context)


def _module_logger_name(module: str) -> str:
    package, _, rest = module.partition(".")
    if package != __name__.partition(".")[0]:
        return module
    return f"{DEFAULT_LOGGER_NAME}.{rest}" if rest else DEFAULT_LOGGER_NAME


def log_function(
    operation: str | None = None, **context: Any
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator that runs a function inside `log_operation`.

    Records go to the logger of the decorated function's module, named the
    way modules in this package name theirs
    (`atlassian_dc_mcp.pruning.config` -> `atlassian-dc-mcp.pruning.config`).

    Args:
        operation: Operation name (default: function name)
        **context: Additional context data

    Returns:
        Configured decorator
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        op_name = operation or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = logging.getLogger(_module_logger_name(func.__module__))
            with LoggingContextManager(logger, op_name, **context):
                return func(*args, **kwargs)

        return wrapper

    return decorator
