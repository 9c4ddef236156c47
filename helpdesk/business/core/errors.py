"""
Domain exceptions for helpdesk business logic

These exceptions represent business rule violations and domain-specific errors.
Their messages are shown to the operator unchanged, so they are written for people.
"""


class HelpdeskError(Exception):
    """Base exception for all helpdesk domain errors"""
    pass


class NotFoundError(HelpdeskError):
    """Raised when a referenced record does not exist"""
    pass


class ValidationError(HelpdeskError):
    """Raised when submitted data is missing or malformed"""
    pass


class StatusError(HelpdeskError):
    """Raised when a record's status does not allow the requested operation"""
    pass


class ConflictError(HelpdeskError):
    """Raised when resource conflicts occur (e.g., an asset already borrowed, a duplicate username)"""
    pass


class InsufficientStockError(ConflictError):
    """Raised when a stock issue asks for more than is on hand"""
    pass


class StorageError(HelpdeskError):
    """Raised when an uploaded file cannot be stored or decoded"""
    pass
