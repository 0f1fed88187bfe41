"""Custom exceptions for depsize."""


class DepsizeError(Exception):
    """Base exception for all depsize errors."""


class InputRejectedError(DepsizeError):
    """Raised when a root package name is empty after trimming."""


class PackageNotFoundError(DepsizeError):
    """Raised when the registry reports that a package does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"package '{name}' not found")


class RegistryError(DepsizeError):
    """Raised when a package document cannot be fetched or decoded."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"registry lookup for '{name}' failed: {reason}")


class RateLimitError(DepsizeError):
    """Raised when the registry keeps answering 429 and retries are exhausted."""

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")
