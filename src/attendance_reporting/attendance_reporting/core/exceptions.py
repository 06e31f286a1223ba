class DomainError(Exception):
    """Base exception for reporting errors."""


class ValidationError(DomainError):
    """Raised when caller input is invalid (bad date, unknown format, ...)."""


class TransportError(DomainError):
    """Raised when a record source or live feed cannot be reached.

    Always retryable; callers keep their current data.
    """


class ExportError(DomainError):
    """Raised when an export cannot be serialized or written."""
