"""Typed failures raised while resolving secrets."""
from typing import Optional


class SecretLookupError(Exception):
    """Base class for secret resolution failures."""

    def __init__(self, message: str, secret_id: Optional[str] = None):
        super().__init__(message)
        self.secret_id = secret_id


class SecretNotFoundError(SecretLookupError):
    """The secret (or the requested version of it) does not exist."""
    pass


class SecretServiceError(SecretLookupError):
    """Any other failure reported by the secrets service."""

    def __init__(self, message: str, secret_id: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, secret_id)
        self.code = code


class SecretCreateError(SecretLookupError):
    """Generating a password or creating the missing secret failed."""
    pass
