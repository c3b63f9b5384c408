"""Data models for enumerated IAM resources and report results."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import CorrelationPreconditionError, DumpError

LAST_USED_KEY = "LastUsed"
SERVICE_LAST_ACCESSED_KEY = "ServiceLastAccessed"
ACCESS_KEY_LAST_USED_KEY = "AccessKeyLastUsed"
DOCUMENT_KEY = "Document"
ASSUME_ROLE_POLICY_KEY = "AssumeRolePolicyDocument"


@dataclass
class Resource:
    """A single enumerated IAM object.

    ``metadata`` holds the provider's fields for the object plus any values
    written by enrichment steps. Enrichment replaces a key's value wholesale.
    """

    id: str
    arn: str
    account_id: str
    region: str
    service: str
    type: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def last_used(self) -> Optional[datetime]:
        """Most recent activity recorded for the resource, if any."""

        return self.metadata.get(LAST_USED_KEY)

    @property
    def services_last_accessed(self) -> Optional[List[Dict[str, Any]]]:
        return self.metadata.get(SERVICE_LAST_ACCESSED_KEY)


@dataclass
class ReportResult:
    """Ordered resources produced by one report plus a terminal error slot."""

    resources: List[Resource] = field(default_factory=list)
    error: Optional[DumpError] = None
    _targets: Dict[str, Resource] = field(default_factory=dict, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def targets(self) -> Mapping[str, Resource]:
        """Resources registered for last-accessed correlation, keyed by identifier."""

        return MappingProxyType(self._targets)

    def add(self, resource: Resource, *, track_as: Optional[str] = None) -> None:
        """Append ``resource`` and optionally register it under ``track_as``."""

        if track_as is not None:
            if track_as in self._targets:
                raise CorrelationPreconditionError(
                    "identifier is already tracked by another resource",
                    operation="track",
                    identifier=track_as,
                )
            self._targets[track_as] = resource
        self.resources.append(resource)

    def extend(self, resources: Iterable[Resource]) -> None:
        self.resources.extend(resources)

    def fail(self, error: DumpError) -> "ReportResult":
        """Record ``error`` unless an earlier error is already recorded."""

        if self.error is None:
            self.error = error
        return self


__all__ = [
    "ACCESS_KEY_LAST_USED_KEY",
    "ASSUME_ROLE_POLICY_KEY",
    "DOCUMENT_KEY",
    "LAST_USED_KEY",
    "ReportResult",
    "Resource",
    "SERVICE_LAST_ACCESSED_KEY",
]
