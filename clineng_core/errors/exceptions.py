# =============================================================================
# clineng_core/errors/exceptions.py
# Custom Exception Hierarchy for the ALVS workbench
# =============================================================================

from typing import Optional, Dict, Any


class ClinEngError(Exception):
    """
    Base exception for all workbench errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "DATA_001")
        details: Additional context as a dictionary
        recoverable: Whether the session can carry on after the error
        hint: What the operator can do about it, appended to the message in the UI
    """

    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "CE_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def user_message(self) -> str:
        """Message for the UI: the error text followed by its hint, if any."""
        if self.hint:
            return f"{self.message}. {self.hint}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "hint": self.hint,
        }


# =============================================================================
# DATA LAYER EXCEPTIONS
# =============================================================================

class DataValidationError(ClinEngError):
    """Raised when a form payload or field value fails validation"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if expected:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


class ReferentialIntegrityError(ClinEngError):
    """Raised when a service record targets equipment that is not in the store"""

    hint = "Resynchronize and select the equipment again"

    def __init__(
        self,
        message: str,
        equipment_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if equipment_id:
            details["equipment_id"] = equipment_id

        super().__init__(
            message=message,
            code="DATA_002",
            details=details,
            **kwargs,
        )


# =============================================================================
# REMOTE API EXCEPTIONS
# =============================================================================

class RemoteUnavailableError(ClinEngError):
    """Raised when the remote API cannot be reached or answers with non-2xx"""

    hint = "The change is kept on this device"

    def __init__(
        self,
        message: str,
        action: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if action:
            details["action"] = action
        if status_code is not None:
            details["status_code"] = status_code

        kwargs.setdefault("code", "REMOTE_001")
        super().__init__(
            message=message,
            details=details,
            **kwargs,
        )


class MalformedResponseError(RemoteUnavailableError):
    """Raised when the remote API answers with a body of the wrong shape"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "REMOTE_002")
        super().__init__(message, **kwargs)


# =============================================================================
# LOCAL STORAGE EXCEPTIONS
# =============================================================================

class PersistenceError(ClinEngError):
    """Raised when the local mirror cannot be read or written"""

    hint = "Check the free space and permissions of the data directory"

    def __init__(
        self,
        message: str,
        slot: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if slot:
            details["slot"] = slot

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(ClinEngError):
    """Raised when configuration is invalid or missing"""

    hint = "Check .streamlit/secrets.toml or the CLINENG_* environment variables"

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
