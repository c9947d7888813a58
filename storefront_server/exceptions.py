from typing import Optional


class StorefrontError(Exception):
    pass


class ValidationError(StorefrontError):
    """A required form field is missing; raised before any network call."""


class TransportError(StorefrontError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SoftLoadFailure(StorefrontError):
    """Catalog or cart could not be loaded; the view falls back to an empty list."""
