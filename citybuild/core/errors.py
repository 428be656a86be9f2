from __future__ import annotations


class MarketplaceError(ValueError):
    """
    Base for errors raised by the mock API and domain services.

    Subclasses ValueError so callers that only know the generic
    "service raised ValueError" convention keep working.
    """


class NotFoundError(MarketplaceError):
    """Entity lookup by id or email failed."""


class ConflictError(MarketplaceError):
    """Write would violate a uniqueness or lifecycle rule."""


class ValidationError(MarketplaceError):
    """
    Input rejected before any state change.

    `code` narrows the failure for the HTTP layer (e.g. unsupported
    media type vs. payload too large).
    """

    def __init__(self, message: str, *, code: str = "invalid"):
        super().__init__(message)
        self.code = code


class StorageUnavailable(RuntimeError):
    """
    Raised by key/value backends when there is no usable store.
    Never escapes LocalStorageManager.
    """
