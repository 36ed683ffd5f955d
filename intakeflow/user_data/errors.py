"""Store error hierarchy for data record stores.

Every DataRecordStore implementation raises these errors so hosts can
handle storage failures the same way whatever the backend. The resolver
never retries and never wraps them.
"""


class StoreError(Exception):
    """Base exception for all data record store errors.

    Backends wrap driver-specific exceptions in one of the subclasses and
    keep the original as `cause`.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the backend cannot be reached."""

    pass


class NotFoundError(StoreError):
    """Raised when a specific record lookup fails.

    An owner without records is not an error; it resolves to an empty view.
    """

    pass


class ConflictError(StoreError):
    """Raised when a concurrent write violates the (owner, scope, key) uniqueness."""

    pass


class ValidationError(StoreError):
    """Raised when a record is rejected, e.g. an empty owner id or key."""

    pass
