"""Shared helpers for talking to the IAM API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, NamedTuple, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, OperationNotPageableError

from .errors import InvalidArnError, TransportError

logger = logging.getLogger(__name__)


class ParsedArn(NamedTuple):
    partition: str
    service: str
    region: str
    account_id: str
    resource_type: str
    resource: str


def parse_arn(arn: str) -> ParsedArn:
    """Split ``arn`` into its components.

    ``resource_type`` is the part of the resource before the first ``/`` or
    ``:``, e.g. ``role`` for ``arn:aws:iam::123456789012:role/admin``.
    """

    parts = arn.split(":", 5) if isinstance(arn, str) else []
    if len(parts) != 6 or parts[0] != "arn" or not parts[2] or not parts[5]:
        raise InvalidArnError("malformed ARN", operation="parse ARN", identifier=str(arn))
    _, partition, service, region, account_id, resource = parts
    resource_type = resource
    for separator in ("/", ":"):
        if separator in resource_type:
            resource_type = resource_type.split(separator, 1)[0]
    return ParsedArn(partition, service, region, account_id, resource_type, resource)


def error_code(exc: Exception) -> str:
    """Return the AWS error code from a botocore exception, if present."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def call_api(
    client: boto3.client,
    method_name: str,
    *,
    identifier: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Invoke ``method_name`` on ``client`` and wrap botocore failures."""

    try:
        return getattr(client, method_name)(**kwargs)
    except (ClientError, BotoCoreError) as exc:
        raise TransportError(
            str(exc), code=error_code(exc), operation=method_name, identifier=identifier
        ) from exc


def safe_paginate(
    client: boto3.client,
    method_name: str,
    result_key: str,
    *,
    identifier: Optional[str] = None,
    **kwargs: Any,
) -> Iterator[dict]:
    """Iterate through paginated boto3 results in provider order.

    Pages are fetched lazily, so a consumer that stops early never requests
    the remaining pages. Any botocore failure is raised as
    :class:`TransportError`.
    """

    try:
        paginator = client.get_paginator(method_name)
    except OperationNotPageableError:
        response = call_api(client, method_name, identifier=identifier, **kwargs)
        for item in response.get(result_key, []):
            yield item
        return

    try:
        for page_number, page in enumerate(paginator.paginate(**kwargs), start=1):
            items = page.get(result_key, [])
            logger.debug("%s page %d returned %d item(s)", method_name, page_number, len(items))
            for item in items:
                yield item
    except (ClientError, BotoCoreError) as exc:
        raise TransportError(
            str(exc), code=error_code(exc), operation=method_name, identifier=identifier
        ) from exc


def item_metadata(item: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of an API item suitable for ``Resource.metadata``."""

    return {key: value for key, value in item.items() if key != "ResponseMetadata"}


__all__ = [
    "ParsedArn",
    "call_api",
    "error_code",
    "item_metadata",
    "parse_arn",
    "safe_paginate",
]
