# src/textnonce/exceptions.py


class NonceConfigError(ValueError):
    """Base exception for an invalid nonce request (caller-side problem)."""

    def __init__(self, length: int, message: str) -> None:
        super().__init__(message)
        self.length = length


class TooShortError(NonceConfigError):
    """Raised when the requested encoded length is below the 16 character floor."""

    def __init__(self, length: int) -> None:
        super().__init__(length, "length must be >= 16")


class NotAlignedError(NonceConfigError):
    """Raised when the requested encoded length is not a multiple of 4."""

    def __init__(self, length: int) -> None:
        super().__init__(length, "length must be divisible by 4")


class EntropyUnavailableError(RuntimeError):
    """Raised when no secure random source can be reached."""
    pass


class MalformedNonceError(ValueError):
    """Raised when a value cannot be decoded as a generated nonce."""
    pass
