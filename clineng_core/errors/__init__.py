# =============================================================================
# clineng_core/errors/__init__.py
# Centralized Error Handling for the ALVS workbench
# =============================================================================

from .exceptions import (
    ClinEngError,
    DataValidationError,
    ReferentialIntegrityError,
    RemoteUnavailableError,
    MalformedResponseError,
    PersistenceError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    log_error,
    show_error,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "ClinEngError",
    "DataValidationError",
    "ReferentialIntegrityError",
    "RemoteUnavailableError",
    "MalformedResponseError",
    "PersistenceError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "log_error",
    "show_error",
    "ErrorContext",
]
