"""Domain exceptions for the content store.

Store failures are not recovered inside the ranking engine; they surface to
the caller as a failure of the whole ranking call.
"""


class ContentStoreError(Exception):
    """Base exception for all content store errors."""


class StoreConnectionError(ContentStoreError):
    """Raised when the store is used before it is connected."""

    def __init__(self, message: str = "Database not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
