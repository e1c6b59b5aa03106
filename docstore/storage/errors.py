class StoreError(Exception):
    """Base class for everything the store raises."""


class ValidationError(StoreError, ValueError):
    """Collection or resource name is empty or reaches outside its collection."""


class NotFoundError(StoreError, LookupError):
    """Requested resource or collection does not exist."""


class StoreIOError(StoreError):
    """Underlying filesystem call failed. The OSError is chained as __cause__."""


class DecodeError(StoreError, ValueError):
    """Stored content is not valid JSON or does not fit the requested type."""


class EncodeError(StoreError, TypeError):
    """Value cannot be serialized to JSON."""
