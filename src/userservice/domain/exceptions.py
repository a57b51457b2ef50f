"""Domain exceptions for userservice."""


class UserServiceError(Exception):
    """Base exception for domain errors."""
    pass


class ValidationError(UserServiceError):
    """Raised when caller input violates a domain invariant."""
    pass


class InvalidEmailError(ValidationError):
    """Raised when an email address is malformed or too long."""

    def __init__(self, message: str = "invalid email format"):
        super().__init__(message)


class InvalidNameError(ValidationError):
    """Raised when a name is empty after trimming or too long."""

    def __init__(self, message: str = "name cannot be empty"):
        super().__init__(message)


class DuplicateEmailError(UserServiceError):
    """Raised when a live user already owns the email address."""

    def __init__(self, message: str = "email already exists"):
        super().__init__(message)


class UserNotFoundError(UserServiceError):
    """Raised when no live user matches the given id or email."""

    def __init__(self, message: str = "user not found"):
        super().__init__(message)


class StoreError(UserServiceError):
    """Raised when the persistence layer fails."""
    pass


class StoreTimeoutError(StoreError):
    """Raised when a store call exceeds its deadline."""
    pass
