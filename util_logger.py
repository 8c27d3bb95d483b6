# ============================================================================
# CLAUDE CONTEXT - LOGGING
# ============================================================================
# STATUS: Core Infrastructure - Structured logging
# PURPOSE: JSON-only structured logging for Azure Functions with Application Insights
# EXPORTS: ComponentType, LogLevel, LogContext, JSONFormatter, LoggerFactory, log_exceptions
# INTERFACES: Dataclass context, enums, factory, JSON formatter, exception decorator
# DEPENDENCIES: enum, dataclasses, typing, datetime, logging, json, traceback (stdlib only!)
# SCOPE: Every logger in the reverse geocoding service
# PATTERNS: JSON-only output, Azure Functions integration, Exception decorator pattern
# ENTRY_POINTS: LoggerFactory.create_logger(), @log_exceptions decorator
# ============================================================================

"""
Unified Logger System

All components get their logger from LoggerFactory so that every record
leaves the process as one JSON line with the component type and name
attached as custom dimensions (picked up by Application Insights).

Design Principles:
- Strong typing with dataclasses (stdlib only)
- Enum safety for component categories
- Component-specific loggers
- No external dependencies
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import os
import sys
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES - Aligned with the request pipeline layers
# ============================================================================

class ComponentType(Enum):
    """
    Component types of the reverse geocoding pipeline.

    Each layer has its own default level (see LoggerFactory.DEFAULT_CONFIGS).
    """
    TRIGGER = "trigger"        # HTTP entry points
    SERVICE = "service"        # Pipeline orchestration / response building
    VALIDATOR = "validator"    # Input validation
    RESOLVER = "resolver"      # Containing feature lookup
    ASSEMBLER = "assembler"    # Polygon ring bookkeeping
    RANKER = "ranker"          # Address proximity ordering
    REPOSITORY = "repository"  # PostGIS store access


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """Standard Python log levels as enum for type safety."""
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
# LOG CONTEXT - Request correlation
# ============================================================================

@dataclass
class LogContext:
    """
    Context for correlating log lines of a single lookup request.
    """
    request_id: Optional[str] = None      # HTTP invocation id
    correlation_id: Optional[str] = None  # Caller supplied correlation id
    feature_kind: Optional[str] = None    # building / parcel / land_use
    mode: Optional[str] = None            # simple / full

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'request_id': self.request_id,
                'correlation_id': self.correlation_id,
                'feature_kind': self.feature_kind,
                'mode': self.mode
            }.items() if v is not None
        }


@dataclass
class ComponentConfig:
    """Per-component logging settings."""
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# JSON FORMATTER - Structured logging for Azure Functions
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in Azure Functions.
    Outputs logs in a format that Application Insights can automatically parse.
    """

    def format(self, record: logging.LogRecord) -> str:
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
        logger = LoggerFactory.create_logger(ComponentType.RESOLVER, "FeatureResolver")
        logger.info("Resolving containing building")
    """

    default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO

    DEFAULT_CONFIGS = {
        ComponentType.TRIGGER: ComponentConfig(ComponentType.TRIGGER, default_level),
        ComponentType.SERVICE: ComponentConfig(ComponentType.SERVICE, default_level),
        ComponentType.VALIDATOR: ComponentConfig(ComponentType.VALIDATOR, default_level),
        ComponentType.RESOLVER: ComponentConfig(ComponentType.RESOLVER, default_level),
        ComponentType.ASSEMBLER: ComponentConfig(ComponentType.ASSEMBLER, default_level),
        ComponentType.RANKER: ComponentConfig(ComponentType.RANKER, default_level),
        # Always debug for repositories to track SQL
        ComponentType.REPOSITORY: ComponentConfig(ComponentType.REPOSITORY, LogLevel.DEBUG),
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "GeometryAssembler")
            context: Optional log context for correlation
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

        log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

        # Allow propagation to Azure's root logger for Application Insights
        logger.propagate = True

        original_log = logger._log

        def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
            """Wrapper to inject context as custom dimensions."""
            if extra is None:
                extra = {}

            custom_dims = context.to_dict() if context else {}
            custom_dims['component_type'] = component_type.value
            custom_dims['component_name'] = name

            if 'custom_dimensions' in extra:
                custom_dims.update(extra['custom_dimensions'])

            extra['custom_dimensions'] = custom_dims

            original_log(level, msg, args, exc_info=exc_info, extra=extra,
                         stack_info=stack_info, stacklevel=stacklevel)

        logger._log = log_with_context

        return logger


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to log exceptions with full context and re-raise them.

    Example:
        @log_exceptions(ComponentType.RESOLVER, "FeatureResolver")
        def resolve_containing(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if logger:
                log = logger
            elif component_type and component_name:
                log = LoggerFactory.create_logger(component_type, component_name)
            else:
                log = LoggerFactory.create_logger(
                    ComponentType.SERVICE,
                    func.__module__ or "unknown"
                )

            try:
                return func(*args, **kwargs)
            except Exception as e:
                log.error(
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
                # Re-raise the exception - don't swallow it
                raise
        return wrapper
    return decorator
