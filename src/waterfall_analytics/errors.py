from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when an options object names an unknown strategy or holds invalid values."""


class IndexOutOfRangeError(IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"index {index} out of range for data of length {size}")
        self.index = index
        self.size = size
