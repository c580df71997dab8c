"""Standardized error handling for diagram operations.

Provides consistent error types, logging, and error response creation.
Failures in rendering or exporting are recoverable: callers degrade to a
visible error state instead of propagating to the host application.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
import traceback

from dumplens.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Context information for error handling."""
    operation: str
    dump_id: Optional[str] = None
    table: Optional[str] = None
    additional_context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationError(Exception):
    """Standardized error for failed diagram operations."""
    message: str
    context: Optional[ErrorContext] = None
    original_exception: Optional[Exception] = None
    error_type: str = "operation_error"

    def __str__(self) -> str:
        if self.context is not None:
            return f"[{self.context.operation}] {self.message}"
        return self.message


@dataclass
class RenderError(OperationError):
    """The rendering engine rejected the diagram text."""
    error_type: str = "render_error"


@dataclass
class ExportError(OperationError):
    """Both raster export paths failed."""
    error_type: str = "export_error"


@dataclass
class RendererConfigError(OperationError):
    """The global renderer configuration is missing or conflicting."""
    error_type: str = "renderer_config_error"


def log_error_with_context(
    error: Exception,
    context: ErrorContext,
    level: str = "error"
) -> None:
    """
    Log error with full context information.

    Args:
        error: The exception that occurred
        context: Error context information
        level: Log level ("error", "warning", "critical")
    """
    log_msg_parts = [f"Error in {context.operation}"]

    if context.dump_id:
        log_msg_parts.append(f"Dump: {context.dump_id}")
    if context.table:
        log_msg_parts.append(f"Table: {context.table}")

    log_msg = " | ".join(log_msg_parts)

    if level == "critical":
        logger.critical(f"{log_msg}: {error}", exc_info=True)
    elif level == "warning":
        logger.warning(f"{log_msg}: {error}", exc_info=True)
    else:
        logger.error(f"{log_msg}: {error}", exc_info=True)

    if context.additional_context:
        logger.debug(f"Additional context: {context.additional_context}")


def create_error_response(
    error: Exception,
    context: ErrorContext,
    include_traceback: bool = False
) -> Dict[str, Any]:
    """
    Create standardized error response dictionary.

    Args:
        error: The exception that occurred
        context: Error context information
        include_traceback: If True, attach a truncated traceback

    Returns:
        Dictionary with error information
    """
    error_type = getattr(error, "error_type", None) or type(error).__name__
    message = getattr(error, "message", None) or str(error)

    error_response: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": error_type,
            "message": message,
            "operation": context.operation,
            "timestamp": datetime.now().isoformat(),
        }
    }

    if context.dump_id:
        error_response["error"]["dump_id"] = context.dump_id
    if context.table:
        error_response["error"]["table"] = context.table

    if include_traceback and error.__traceback__ is not None:
        tb_str = "".join(traceback.format_tb(error.__traceback__))
        # Last 500 chars only
        error_response["error"]["traceback"] = tb_str[-500:]

    if context.additional_context:
        error_response["error"]["additional_context"] = context.additional_context

    return error_response
