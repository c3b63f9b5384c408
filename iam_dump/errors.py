"""Exception hierarchy raised while building IAM reports."""
from __future__ import annotations

from typing import Optional


class DumpError(Exception):
    """Base class for errors that terminate a report run.

    ``operation`` names the API call or processing step that failed and
    ``identifier`` the entity being processed at the time, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.identifier = identifier

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.identifier:
            parts.append(f"[{self.identifier}]")
        prefix = " ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message


class TransportError(DumpError):
    """A remote API call failed.

    ``code`` is the AWS error code (``AccessDenied``, ``NoSuchEntity``...)
    when the service returned one.
    """

    def __init__(self, message: str, *, code: str = "", **kwargs: Optional[str]) -> None:
        super().__init__(message, **kwargs)
        self.code = code


class DecodeError(DumpError):
    """A policy document or identifier could not be decoded."""


class InvalidArnError(DecodeError):
    """An ARN returned by the API does not have the expected shape."""


class CorrelationPreconditionError(DumpError):
    """Job identifiers and tracked records do not line up."""


class JobFailedError(DumpError):
    """A last-accessed job finished with a ``FAILED`` status."""


class JobTimeoutError(DumpError):
    """A last-accessed job did not finish within the configured poll budget."""


__all__ = [
    "CorrelationPreconditionError",
    "DecodeError",
    "DumpError",
    "InvalidArnError",
    "JobFailedError",
    "JobTimeoutError",
    "TransportError",
]
