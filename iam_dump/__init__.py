"""Enumerate IAM entities and their service last-accessed details."""

from __future__ import annotations

from .config import DumpSettings
from .core import DumpResults, collect_reports, print_resources
from .errors import (
    CorrelationPreconditionError,
    DecodeError,
    DumpError,
    InvalidArnError,
    JobFailedError,
    JobTimeoutError,
    TransportError,
)
from .last_accessed import attach_last_accessed
from .policy import decode_policy_document, encode_policy_document
from .resources import ReportResult, Resource
from .session import DumpSession

__all__ = [
    "CorrelationPreconditionError",
    "DecodeError",
    "DumpError",
    "DumpResults",
    "DumpSession",
    "DumpSettings",
    "InvalidArnError",
    "JobFailedError",
    "JobTimeoutError",
    "ReportResult",
    "Resource",
    "TransportError",
    "attach_last_accessed",
    "collect_reports",
    "decode_policy_document",
    "encode_policy_document",
    "print_resources",
]
