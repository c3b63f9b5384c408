"""Shared fixtures: stubbed IAM clients and sessions."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import boto3
import pytest
from botocore.stub import Stubber


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from iam_dump.config import DumpSettings
from iam_dump.session import DumpSession

ACCOUNT_ID = "123456789012"
CREATED = datetime(2023, 1, 1, tzinfo=timezone.utc)


class StubbedBotoSession:
    """Stand-in for ``boto3.Session`` that hands out pre-built clients."""

    def __init__(self, clients: dict, region_name: str = "us-east-1") -> None:
        self._clients = clients
        self.region_name = region_name

    def client(self, service_name: str, **kwargs):
        return self._clients[service_name]


def make_client(service_name: str):
    return boto3.client(
        service_name,
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def iam_client():
    return make_client("iam")


@pytest.fixture
def iam_stub(iam_client):
    with Stubber(iam_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def settings() -> DumpSettings:
    return DumpSettings(poll_interval=0.0, max_poll_interval=0.0, max_poll_attempts=5)


@pytest.fixture
def session(iam_client, settings) -> DumpSession:
    return DumpSession(
        boto_session=StubbedBotoSession({"iam": iam_client}),
        account_id=ACCOUNT_ID,
        region="us-east-1",
        settings=settings,
    )


def iam_arn(resource: str) -> str:
    return f"arn:aws:iam::{ACCOUNT_ID}:{resource}"


def entity_id(prefix: str, name: str) -> str:
    """Return a 20 character IAM unique ID such as ``AIDAALICEXXXXXXXXXXX``."""

    return f"{prefix}{name.upper():X<16}"[:20]


def job_id(number: int) -> str:
    """Return a UUID shaped last-accessed job ID."""

    return f"00000000-0000-4000-8000-{number:012d}"


def job_response(status: str, entries=None, **extra) -> dict:
    """Build a ``GetServiceLastAccessedDetails`` response."""

    response = {
        "JobStatus": status,
        "JobCreationDate": CREATED,
        "JobCompletionDate": CREATED,
        "ServicesLastAccessed": list(entries or []),
    }
    response.update(extra)
    return response


def service_entry(namespace: str, last_authenticated=None) -> dict:
    entry = {"ServiceName": namespace.upper(), "ServiceNamespace": namespace}
    if last_authenticated is not None:
        entry["LastAuthenticated"] = last_authenticated
    return entry
