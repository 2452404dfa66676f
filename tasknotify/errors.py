"""Failures that end the processing of a single batch."""

from typing import Optional


class BatchError(Exception):
    """Base class for everything the batch boundary catches."""


class DecodeError(BatchError):
    """A record could not be parsed or is missing a required field."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at offset {self.position})"


class MixedBatchError(DecodeError):
    """Records in one batch describe different tasks."""


class EmptyBatchError(BatchError):
    """The stream held no well-formed record; nothing to report."""


class NotifyError(BatchError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BodyTooLargeError(BatchError):
    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit
