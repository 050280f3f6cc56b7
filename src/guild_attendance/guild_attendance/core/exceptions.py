class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateSubmissionError(ValidationError):
    """Raised when a public attendance was already submitted today."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no session exists."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class SubmissionWindowError(AuthorizationError):
    """Raised when a public submission arrives outside the daily window."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""
