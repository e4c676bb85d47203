# =============================================================================
# clineng_core/services/base_service.py
# Service results and the shared error boundary of the service layer
# =============================================================================

from __future__ import annotations
from abc import ABC
from typing import Optional, Dict, Any, Callable
from dataclasses import dataclass

from clineng_core.logging import get_logger, LogContext
from clineng_core.errors import ClinEngError, log_error


@dataclass
class ServiceResult:
    """
    What a service hands back to the UI.

    Falsy on failure. Failures carry the error code and, for form
    validation, the offending field in ``metadata["field"]``.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def field(self) -> Optional[str]:
        return (self.metadata or {}).get("field")

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> ServiceResult:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, error_code: str = "UNKNOWN", metadata: Dict[str, Any] = None) -> ServiceResult:
        return cls(success=False, error=error, error_code=error_code, metadata=metadata)

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        if isinstance(e, ClinEngError):
            return cls.fail(e.user_message(), error_code=e.code, metadata=e.details)
        return cls.fail(str(e), error_code="EXCEPTION")


class BaseService(ABC):
    """
    Base for the UI-facing services.

    Store and synchronizer calls raise on bad input; ``safe_execute`` is the
    boundary where those exceptions become failed ``ServiceResult`` values.
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str) -> LogContext:
        return LogContext(self.logger, operation)

    def safe_execute(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> ServiceResult:
        """
        Run ``func`` under a LogContext and wrap the outcome.

        Nothing is shown to the user here; the page decides how to render
        a failed result.
        """
        try:
            with self.log_operation(operation):
                data = func(*args, **kwargs)
        except Exception as e:
            log_error(e, operation)
            return ServiceResult.from_exception(e)
        return ServiceResult.ok(data)
