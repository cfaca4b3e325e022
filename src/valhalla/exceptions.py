"""
Custom exceptions for the Valhalla console.
"""


class ValhallaError(Exception):
    """Base exception for all console errors."""
    pass


class RegistryError(ValhallaError):
    """Raised when the feature registry is malformed."""
    pass


class TokenDecodeError(ValhallaError):
    """Raised when a session token cannot be decoded."""
    pass


class SessionStateError(ValhallaError):
    """Raised when a session operation is invalid in the current state."""
    pass


class ConfigError(ValhallaError):
    """Raised for configuration errors."""
    pass


class APIError(ValhallaError):
    """
    Base exception for backend API errors.

    Attributes:
        status_code: HTTP status of the failed response (None for network errors)
        server_message: 'message' field of the response body, when present
    """

    def __init__(self, message, status_code=None, server_message=None):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message

    def user_message(self, fallback: str) -> str:
        """Prefer the server-provided message, else the given fallback."""
        return self.server_message or fallback


class APIAuthError(APIError):
    """Raised for authentication failures (401/403)."""
    pass


class APIValidationError(APIError):
    """Raised for validation errors (400/422)."""
    pass


class APINotFoundError(APIError):
    """Raised when the requested record does not exist (404)."""
    pass


class APIConnectionError(APIError):
    """Raised when the backend cannot be reached after retries."""
    pass
