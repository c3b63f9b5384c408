"""Tests for ARN parsing, API call wrapping and the report result model."""

from __future__ import annotations

import pytest

from conftest import ACCOUNT_ID, iam_arn
from iam_dump.errors import CorrelationPreconditionError, InvalidArnError, JobFailedError, TransportError
from iam_dump.resources import ReportResult, Resource
from iam_dump.utils import call_api, item_metadata, parse_arn


def test_parse_arn_with_path() -> None:
    """IAM ARNs with a path yield the leading resource type."""

    parsed = parse_arn(iam_arn("role/service-role/worker"))

    assert parsed.partition == "aws"
    assert parsed.service == "iam"
    assert parsed.region == ""
    assert parsed.account_id == ACCOUNT_ID
    assert parsed.resource_type == "role"
    assert parsed.resource == "role/service-role/worker"


def test_parse_arn_with_colon_separated_resource() -> None:
    """Colon separated resources yield the leading resource type."""

    parsed = parse_arn("arn:aws:logs:eu-west-1:123456789012:log-group:app")

    assert parsed.region == "eu-west-1"
    assert parsed.resource_type == "log-group"


@pytest.mark.parametrize("arn", ["", "not-an-arn", "arn:aws:iam::123456789012", "arn:aws::::x"])
def test_parse_arn_rejects_malformed_values(arn) -> None:
    """Values that are not ARNs raise InvalidArnError."""

    with pytest.raises(InvalidArnError):
        parse_arn(arn)


def test_call_api_wraps_client_errors(iam_client, iam_stub) -> None:
    """Client errors become TransportError with code and identifier."""

    iam_stub.add_client_error(
        "get_user", service_error_code="NoSuchEntity", service_message="gone", http_status_code=404
    )

    with pytest.raises(TransportError) as excinfo:
        call_api(iam_client, "get_user", identifier="alice", UserName="alice")

    assert excinfo.value.code == "NoSuchEntity"
    assert str(excinfo.value).startswith("get_user [alice]: ")


def test_item_metadata_drops_response_metadata() -> None:
    """Response metadata is not copied into resource metadata."""

    item = {"UserName": "alice", "ResponseMetadata": {"HTTPStatusCode": 200}}

    assert item_metadata(item) == {"UserName": "alice"}


def _resource(name: str) -> Resource:
    arn = iam_arn(f"user/{name}")
    return Resource(id=arn, arn=arn, account_id=ACCOUNT_ID, region="", service="iam", type="user")


def test_report_result_tracks_each_identifier_once() -> None:
    """An identifier can be tracked by only one resource."""

    result = ReportResult()
    alice = _resource("alice")
    result.add(alice, track_as=alice.arn)
    result.add(_resource("alice-key"))

    with pytest.raises(CorrelationPreconditionError):
        result.add(_resource("other"), track_as=alice.arn)

    assert list(result.targets) == [alice.arn]
    assert len(result.resources) == 2


def test_report_result_keeps_the_first_error() -> None:
    """The first recorded error is final."""

    result = ReportResult()
    first = JobFailedError("first")

    assert result.fail(first) is result
    result.fail(JobFailedError("second"))

    assert result.error is first
    assert not result.ok
