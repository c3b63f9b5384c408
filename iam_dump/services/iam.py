"""IAM reports: principals, policies, access keys and instance profiles.

Every report enumerates one entity kind, then enriches the principals or
policies it produced with service last-accessed details. Sub-resources that
are not enriched (access keys) are appended after the enrichment step.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import boto3

from ..errors import DumpError
from ..last_accessed import attach_last_accessed
from ..policy import decode_policy_document
from ..resources import (
    ACCESS_KEY_LAST_USED_KEY,
    ASSUME_ROLE_POLICY_KEY,
    DOCUMENT_KEY,
    LAST_USED_KEY,
    ReportResult,
    Resource,
)
from ..session import DumpSession
from ..utils import call_api, item_metadata, parse_arn, safe_paginate
from . import register_report

logger = logging.getLogger(__name__)

IAM_SERVICE = "iam"
POLICY_SCOPE = "Local"


def _path_kwargs(path_prefix: Optional[str]) -> Dict[str, str]:
    return {"PathPrefix": path_prefix} if path_prefix else {}


def resource_from_item(session: DumpSession, arn: str, item: Dict[str, Any]) -> Resource:
    """Build a :class:`Resource` for an API item identified by ``arn``."""

    parsed = parse_arn(arn)
    return Resource(
        id=arn,
        arn=arn,
        account_id=parsed.account_id or session.account_id,
        region=parsed.region or session.region,
        service=parsed.service,
        type=parsed.resource_type,
        metadata=item_metadata(item),
    )


def list_access_keys(client: boto3.client, session: DumpSession, user_name: str) -> List[Resource]:
    """Return the access keys of ``user_name`` with their last-used details."""

    keys: List[Resource] = []
    for key in safe_paginate(
        client, "list_access_keys", "AccessKeyMetadata", identifier=user_name, UserName=user_name
    ):
        key_id = key["AccessKeyId"]
        resource = Resource(
            id=key_id,
            arn="",
            account_id=session.account_id,
            region=session.region,
            service=IAM_SERVICE,
            type="access-key",
            metadata=item_metadata(key),
        )
        response = call_api(client, "get_access_key_last_used", identifier=key_id, AccessKeyId=key_id)
        last_used = dict(response.get("AccessKeyLastUsed") or {})
        resource.metadata[ACCESS_KEY_LAST_USED_KEY] = last_used
        resource.metadata[LAST_USED_KEY] = last_used.get("LastUsedDate")
        keys.append(resource)
    return keys


def list_policy_versions(
    client: boto3.client, session: DumpSession, policy_arn: str
) -> List[Resource]:
    """Return every version of ``policy_arn`` with its decoded document."""

    versions: List[Resource] = []
    for version in safe_paginate(
        client, "list_policy_versions", "Versions", identifier=policy_arn, PolicyArn=policy_arn
    ):
        version_id = version["VersionId"]
        arn = f"{policy_arn}:{version_id}"
        response = call_api(
            client,
            "get_policy_version",
            identifier=arn,
            PolicyArn=policy_arn,
            VersionId=version_id,
        )
        policy_version = response["PolicyVersion"]
        metadata = item_metadata(policy_version)
        metadata[DOCUMENT_KEY] = decode_policy_document(
            policy_version.get(DOCUMENT_KEY), identifier=arn
        )
        versions.append(
            Resource(
                id=arn,
                arn=arn,
                account_id=session.account_id,
                region=session.region,
                service=IAM_SERVICE,
                type="policy-version",
                metadata=metadata,
            )
        )
    return versions


def _finish(name: str, result: ReportResult) -> ReportResult:
    logger.info("Report %s produced %d resource(s)", name, len(result.resources))
    return result


def _fail(name: str, result: ReportResult, exc: DumpError) -> ReportResult:
    logger.warning(
        "Report %s failed after %d resource(s): %s", name, len(result.resources), exc
    )
    return result.fail(exc)


@register_report("users-and-access-keys")
def report_users_and_access_keys(
    session: DumpSession, *, path_prefix: Optional[str] = None
) -> ReportResult:
    """List users with their service last-accessed details, then their access keys."""

    name = "users-and-access-keys"
    iam = session.client("iam")
    result = ReportResult()
    access_keys: List[Resource] = []
    try:
        for user in safe_paginate(iam, "list_users", "Users", **_path_kwargs(path_prefix)):
            resource = resource_from_item(session, user["Arn"], user)
            result.add(resource, track_as=resource.arn)
            access_keys.extend(list_access_keys(iam, session, user["UserName"]))
        attach_last_accessed(iam, result.targets, session.settings)
    except DumpError as exc:
        return _fail(name, result, exc)

    result.extend(access_keys)
    return _finish(name, result)


@register_report("groups")
def report_groups(session: DumpSession, *, path_prefix: Optional[str] = None) -> ReportResult:
    """List groups with their service last-accessed details."""

    name = "groups"
    iam = session.client("iam")
    result = ReportResult()
    try:
        for group in safe_paginate(iam, "list_groups", "Groups", **_path_kwargs(path_prefix)):
            resource = resource_from_item(session, group["Arn"], group)
            result.add(resource, track_as=resource.arn)
        attach_last_accessed(iam, result.targets, session.settings)
    except DumpError as exc:
        return _fail(name, result, exc)
    return _finish(name, result)


@register_report("roles")
def report_roles(session: DumpSession, *, path_prefix: Optional[str] = None) -> ReportResult:
    """List roles with decoded trust policies and service last-accessed details.

    A role's ``id`` is its ``RoleId``; last-accessed jobs are keyed by ARN.
    """

    name = "roles"
    iam = session.client("iam")
    result = ReportResult()
    try:
        for role in safe_paginate(iam, "list_roles", "Roles", **_path_kwargs(path_prefix)):
            resource = resource_from_item(session, role["Arn"], role)
            resource.metadata[ASSUME_ROLE_POLICY_KEY] = decode_policy_document(
                role.get(ASSUME_ROLE_POLICY_KEY), identifier=resource.arn
            )
            resource.id = role["RoleId"]
            result.add(resource, track_as=resource.arn)
        attach_last_accessed(iam, result.targets, session.settings)
    except DumpError as exc:
        return _fail(name, result, exc)
    return _finish(name, result)


@register_report("policies")
def report_policies(session: DumpSession, *, path_prefix: Optional[str] = None) -> ReportResult:
    """List customer-managed policies, each followed by its versions.

    Only the policies are enriched with last-accessed details.
    """

    name = "policies"
    iam = session.client("iam")
    result = ReportResult()
    try:
        for policy in safe_paginate(
            iam, "list_policies", "Policies", Scope=POLICY_SCOPE, **_path_kwargs(path_prefix)
        ):
            resource = resource_from_item(session, policy["Arn"], policy)
            versions = list_policy_versions(iam, session, resource.arn)
            result.add(resource, track_as=resource.arn)
            result.extend(versions)
        attach_last_accessed(iam, result.targets, session.settings)
    except DumpError as exc:
        return _fail(name, result, exc)
    return _finish(name, result)


@register_report("instance-profiles")
def report_instance_profiles(
    session: DumpSession, *, path_prefix: Optional[str] = None
) -> ReportResult:
    """List instance profiles with the trust policies of their roles decoded."""

    name = "instance-profiles"
    iam = session.client("iam")
    result = ReportResult()
    try:
        for profile in safe_paginate(
            iam, "list_instance_profiles", "InstanceProfiles", **_path_kwargs(path_prefix)
        ):
            resource = resource_from_item(session, profile["Arn"], profile)
            resource.id = profile["InstanceProfileId"]
            roles = []
            for role in profile.get("Roles", []):
                role = dict(role)
                role[ASSUME_ROLE_POLICY_KEY] = decode_policy_document(
                    role.get(ASSUME_ROLE_POLICY_KEY), identifier=role.get("Arn")
                )
                roles.append(role)
            resource.metadata["Roles"] = roles
            result.add(resource)
    except DumpError as exc:
        return _fail(name, result, exc)
    return _finish(name, result)


__all__ = [
    "list_access_keys",
    "list_policy_versions",
    "report_groups",
    "report_instance_profiles",
    "report_policies",
    "report_roles",
    "report_users_and_access_keys",
    "resource_from_item",
]
