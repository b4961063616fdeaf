"""Custom exceptions for the S3 put stage."""


class StageError(Exception):
    """Base exception for the package."""


class ConfigurationError(StageError):
    """Raised when required configuration fields are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required field(s): {', '.join(missing)}")


class ItemReadError(StageError):
    """Raised when a file item's content cannot be fully read."""

    def __init__(self, name: str, original_error: Exception | None = None) -> None:
        self.name = name
        self.original_error = original_error
        super().__init__(f"Failed to read '{name}': {original_error}")


class UploadError(StageError):
    """Raised when the object store rejects a put."""

    def __init__(
        self, message: str, key: str, original_error: Exception | None = None
    ) -> None:
        self.key = key
        self.original_error = original_error
        super().__init__(message)


class Cancelled(StageError):
    """Raised when a stage observes cancellation of its context."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(Cancelled):
    """Raised when a context's deadline passes before the stage finishes."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class ChannelClosed(StageError):
    """Raised on send to, or receive from a drained, closed channel."""

    def __init__(self, message: str = "channel closed") -> None:
        super().__init__(message)
