"""
Unified Logger System.

JSON-only structured logging for live Event Hubs test resources. Output goes
to stdout as one JSON object per line so CI log collectors can index the
resource names created and deleted during a run.

Design Principles:
    - Strong typing with dataclasses (stdlib only)
    - Enum safety for categories
    - Component-specific loggers
    - Clean factory pattern

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    ComponentConfig: Per-component logging settings
    JSONFormatter: JSON log formatter
    LoggerFactory: Factory for creating loggers
    log_exceptions: Exception logging decorator (sync and async)

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from dataclasses import dataclass
import inspect
import logging
import sys
import os
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the layers of the package.

    NO "UTIL" or other non-architectural types.
    """
    SERVICE = "service"        # Scope manager and session orchestration
    REPOSITORY = "repository"  # Azure management API access
    FACTORY = "factory"        # Client / policy creation
    ADAPTER = "adapter"        # Credential and token adapters
    VALIDATOR = "validator"    # Environment validation


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# COMPONENT CONFIGURATION - Per-component settings
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.

    Each component type can have different settings.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "EventHubScopeManager"
        )
        logger.info("Provisioning Event Hub")
    """

    _default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO

    DEFAULT_CONFIGS = {
        ComponentType.SERVICE: ComponentConfig(
            component_type=ComponentType.SERVICE,
            log_level=_default_level
        ),
        ComponentType.REPOSITORY: ComponentConfig(
            component_type=ComponentType.REPOSITORY,
            log_level=_default_level
        ),
        ComponentType.FACTORY: ComponentConfig(
            component_type=ComponentType.FACTORY,
            log_level=_default_level
        ),
        ComponentType.ADAPTER: ComponentConfig(
            component_type=ComponentType.ADAPTER,
            log_level=_default_level
        ),
        ComponentType.VALIDATOR: ComponentConfig(
            component_type=ComponentType.VALIDATOR,
            log_level=_default_level
        ),
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "EventHubScopeManager")
            config: Optional custom configuration

        Returns:
            Configured Python logger
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        logger_name = f"{component_type.value}.{name}"
        logger = logging.getLogger(logger_name)

        if isinstance(config.log_level, str):
            log_level = LogLevel.from_string(config.log_level).to_python_level()
        else:
            log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # One JSON handler per logger, even when create_logger is called repeatedly
        has_json_handler = any(
            isinstance(h.formatter, JSONFormatter) for h in logger.handlers
        )
        if not has_json_handler:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(log_level)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        # Propagate so pytest's caplog sees the records
        logger.propagate = True

        if not hasattr(logger, '_context_wrapped'):
            original_log = logger._log

            def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
                """Wrapper to inject component info as custom dimensions."""
                if extra is None:
                    extra = {}

                custom_dims = {
                    'component_type': component_type.value,
                    'component_name': name
                }

                if 'custom_dimensions' in extra:
                    custom_dims.update(extra['custom_dimensions'])

                extra['custom_dimensions'] = custom_dims

                # +1 to account for this wrapper function
                original_log(level, msg, args, exc_info=exc_info, extra=extra,
                             stack_info=stack_info, stacklevel=stacklevel + 1)

            logger._log = log_with_context
            logger._context_wrapped = True

        return logger


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to automatically log exceptions with full context.

    Works on plain functions and coroutine functions. The exception is
    always re-raised.

    Args:
        component_type: Optional component type for creating logger
        component_name: Optional component name for creating logger
        logger: Optional existing logger to use

    Example:
        @log_exceptions(ComponentType.SERVICE, "EventHubScopeManager")
        async def delete_namespace(self, namespace_name):
            ...
    """
    def decorator(func):
        def _resolve_logger() -> logging.Logger:
            if logger:
                return logger
            if component_type and component_name:
                return LoggerFactory.create_logger(component_type, component_name)
            return LoggerFactory.create_logger(
                ComponentType.SERVICE,
                func.__module__ or "unknown"
            )

        def _log_failure(e: Exception, args, kwargs):
            _resolve_logger().error(
                f"Exception in {func.__name__}",
                exc_info=True,
                extra={
                    'custom_dimensions': {
                        'function_name': func.__name__,
                        'function_module': func.__module__,
                        'exception_type': type(e).__name__,
                        'exception_message': str(e),
                        'function_args': str(args)[:500],
                        'function_kwargs': str(kwargs)[:500],
                        'traceback': traceback.format_exc()
                    }
                }
            )

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(e, args, kwargs)
                    raise
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log_failure(e, args, kwargs)
                raise
        return wrapper
    return decorator
