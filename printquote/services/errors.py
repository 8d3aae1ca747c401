"""Exceptions raised by the service layer.

The HTTP layer maps them onto status codes; the services never catch
them themselves.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Malformed or out-of-range user input."""
    pass


class NotFoundError(LookupError):
    """A referenced record does not exist or is inactive."""
    pass


class QuoteSaveError(RuntimeError):
    """Storage failure while saving a quote; nothing was persisted."""
    pass
