"""Authenticated context shared by every report."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import boto3

from .config import DumpSettings
from .utils import call_api

DEFAULT_REGION = "us-east-1"


@dataclass
class DumpSession:
    """A boto3 session plus the account and region the reports describe."""

    boto_session: boto3.session.Session
    account_id: str
    region: str = DEFAULT_REGION
    settings: DumpSettings = field(default_factory=DumpSettings)

    @classmethod
    def from_boto_session(
        cls,
        boto_session: boto3.session.Session,
        settings: Optional[DumpSettings] = None,
    ) -> "DumpSession":
        """Resolve the caller's account with STS and wrap ``boto_session``."""

        settings = settings or DumpSettings()
        region = boto_session.region_name or DEFAULT_REGION
        sts = boto_session.client("sts", region_name=region, config=settings.boto_config())
        identity = call_api(sts, "get_caller_identity")
        return cls(
            boto_session=boto_session,
            account_id=identity["Account"],
            region=region,
            settings=settings,
        )

    def client(self, service_name: str):
        """Return a client for ``service_name`` configured from ``settings``."""

        return self.boto_session.client(
            service_name, region_name=self.region, config=self.settings.boto_config()
        )


__all__ = ["DEFAULT_REGION", "DumpSession"]
