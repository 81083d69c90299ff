"""
Exception hierarchy for FlowDoc.

Every error raised by the library derives from FlowdocError, which carries a
human-readable message, a machine-readable error code and optional details.
Storage errors never escape the repository layer; see flowdoc.storage.
"""

from typing import Any, Dict, Optional


class FlowdocError(Exception):
    """Base class for all FlowDoc errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(FlowdocError, ValueError):
    """Raised when an operation receives input it cannot accept."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class DuplicateEmailError(ValidationError):
    """An account with this email address is already registered."""

    def __init__(self, email: str):
        super().__init__(f"Email address is already registered: {email}", field="email")
        self.error_code = "DUPLICATE_EMAIL"
        self.email = email


class CycleDetectedError(ValidationError):
    """Attaching a flow under the requested parent would create a cycle."""

    def __init__(self, flow_id: str, parent_id: str):
        super().__init__(f"Flow {flow_id} cannot be placed under {parent_id}: cycle detected", field="parentId")
        self.error_code = "CYCLE_DETECTED"
        self.details.update({"flow_id": flow_id, "parent_id": parent_id})


class RootFlowDeletionError(ValidationError):
    """The flow is the only root of its project."""

    def __init__(self, flow_id: str):
        super().__init__(f"Flow {flow_id} is the project's only root flow and cannot be deleted")
        self.error_code = "ROOT_FLOW_DELETION"
        self.details["flow_id"] = flow_id


class InvalidCredentialsError(FlowdocError):
    """No account matches the given email and password."""

    def __init__(self, message: str = "Email address or password is incorrect"):
        super().__init__(message, "INVALID_CREDENTIALS")


class NotAuthenticatedError(FlowdocError):
    """The operation requires an active session."""

    def __init__(self, message: str = "No user is logged in"):
        super().__init__(message, "NOT_AUTHENTICATED")


class NotFoundError(FlowdocError, LookupError):
    """An explicitly requested record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}", "NOT_FOUND", {"kind": kind, "id": record_id})
        self.kind = kind
        self.record_id = record_id


class StorageUnavailableError(FlowdocError):
    """The key-value backend could not be read or written."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message, "STORAGE_UNAVAILABLE", {"key": key} if key else {})
