# =============================================================================
# clineng_core/errors/handlers.py
# Turning workbench errors into log records and Streamlit feedback
# =============================================================================

from __future__ import annotations
from typing import Optional
import streamlit as st

from clineng_core.logging import get_logger
from .exceptions import ClinEngError, RemoteUnavailableError

logger = get_logger(__name__)

# Codes raised by operator input rather than by the system
INPUT_ERROR_CODES = ("DATA_001", "DATA_002")


def log_error(error: Exception, operation: Optional[str] = None) -> None:
    """
    Input errors are logged at WARNING without traceback; everything else at
    ERROR with traceback.
    """
    prefix = f"{operation}: " if operation else ""
    if isinstance(error, ClinEngError):
        if error.code in INPUT_ERROR_CODES:
            logger.warning(f"{prefix}[{error.code}] {error.message}", extra={"details": error.details})
            return
        logger.error(f"{prefix}[{error.code}] {error.message}", extra={"details": error.details}, exc_info=error)
    else:
        logger.error(f"{prefix}unexpected {type(error).__name__}: {error}", exc_info=error)


def show_error(error: Exception, user_message: Optional[str] = None) -> None:
    """
    Display an error in the page.

    A remote failure is shown as a warning: the workbench keeps running on
    local data. Non-recoverable errors ask the operator to restart.
    """
    if isinstance(error, ClinEngError):
        message = user_message or error.user_message()
        if isinstance(error, RemoteUnavailableError):
            st.warning(f"Server unavailable: {message}")
        elif error.recoverable:
            st.error(message)
        else:
            st.error(f"{message}. Restart the workbench after fixing it.")
        if error.details and st.session_state.get("debug_mode", False):
            with st.expander("Error details", expanded=False):
                st.json(error.to_dict())
    else:
        st.error(user_message or f"Unexpected error: {error}")


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """Log an error and optionally show it to the operator."""
    if log:
        log_error(error)
    if show_user_message:
        show_error(error, user_message)


class ErrorContext:
    """
    Wraps one UI action; errors raised inside are logged and shown instead of
    crashing the script run.

    Usage:
        with ErrorContext("Building equipment report", success_message="Report ready"):
            report = dashboard.equipment_report(equipment_id)
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        success_message: Optional[str] = None,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.success_message = success_message

    def __enter__(self) -> ErrorContext:
        logger.debug(f"UI action: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            if self.success_message:
                st.success(self.success_message)
            return False

        log_error(exc_val, self.operation)
        fallback = None if isinstance(exc_val, ClinEngError) else f"{self.operation} failed"
        show_error(exc_val, fallback)

        return self.recoverable and issubclass(exc_type, Exception)
