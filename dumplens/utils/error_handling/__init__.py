"""Standardized error handling utilities.

Provides consistent error handling patterns across the codebase.
"""

from .handlers import (
    ErrorContext,
    OperationError,
    RenderError,
    ExportError,
    RendererConfigError,
    log_error_with_context,
    create_error_response,
)

__all__ = [
    "ErrorContext",
    "OperationError",
    "RenderError",
    "ExportError",
    "RendererConfigError",
    "log_error_with_context",
    "create_error_response",
]
