"""
Custom Error Classes for Better Error Handling
"""


class PanelServiceError(Exception):
    """Base exception for panel services"""

    pass


class RecordNotFoundError(PanelServiceError, LookupError):
    """Raised when a requested record does not exist"""

    pass


class DataValidationError(PanelServiceError, ValueError):
    """Raised when the database rejects a row (constraint or field violation)"""

    pass


class HasActiveServersError(DataValidationError):
    """Raised when deleting a user that still owns servers"""

    pass


class DaemonConnectionError(PanelServiceError):
    """Daemon unreachable or rejected the request"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
