"""Service last-accessed enrichment backed by asynchronous IAM jobs.

IAM computes "service last accessed" data in a background job. A job is
started per principal or policy ARN with ``GenerateServiceLastAccessedDetails``
and polled with ``GetServiceLastAccessedDetails`` until it leaves
``IN_PROGRESS``. Completed job results are written back onto the resource
registered under the same ARN.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import boto3

from .config import DumpSettings
from .errors import CorrelationPreconditionError, JobFailedError, JobTimeoutError
from .resources import LAST_USED_KEY, SERVICE_LAST_ACCESSED_KEY, Resource
from .utils import call_api

logger = logging.getLogger(__name__)

JOB_IN_PROGRESS = "IN_PROGRESS"
JOB_COMPLETED = "COMPLETED"
JOB_FAILED = "FAILED"


def latest_authenticated(entries: Iterable[Mapping[str, Any]]) -> Optional[datetime]:
    """Return the most recent ``LastAuthenticated`` among ``entries``.

    Entries without a timestamp are ignored; ``None`` is returned when no
    entry carries one.
    """

    timestamps = [
        entry["LastAuthenticated"]
        for entry in entries
        if entry.get("LastAuthenticated") is not None
    ]
    return max(timestamps) if timestamps else None


def submit_last_accessed_jobs(client: boto3.client, identifiers: Sequence[str]) -> List[str]:
    """Start one last-accessed job per identifier and return the job IDs in order."""

    job_ids: List[str] = []
    for identifier in identifiers:
        response = call_api(
            client,
            "generate_service_last_accessed_details",
            identifier=identifier,
            Arn=identifier,
        )
        job_ids.append(response["JobId"])
        logger.debug("Submitted last-accessed job %s for %s", response["JobId"], identifier)
    return job_ids


def wait_for_job(
    client: boto3.client,
    job_id: str,
    identifier: str,
    settings: DumpSettings,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Poll ``job_id`` until it is terminal and return the first completed page."""

    delay = settings.poll_interval
    pending_polls = 0
    while True:
        response = call_api(
            client,
            "get_service_last_accessed_details",
            identifier=identifier,
            JobId=job_id,
        )
        status = response.get("JobStatus")
        if status == JOB_COMPLETED:
            return response
        if status != JOB_IN_PROGRESS:
            error = response.get("Error") or {}
            message = error.get("Message") or f"job {job_id} finished with status {status}"
            raise JobFailedError(
                message,
                operation="get_service_last_accessed_details",
                identifier=identifier,
            )

        pending_polls += 1
        if settings.max_poll_attempts is not None and pending_polls >= settings.max_poll_attempts:
            raise JobTimeoutError(
                f"job {job_id} still {JOB_IN_PROGRESS} after {pending_polls} checks",
                operation="get_service_last_accessed_details",
                identifier=identifier,
            )
        logger.debug("Job %s for %s in progress, retrying in %.2fs", job_id, identifier, delay)
        sleep(delay)
        delay = min(delay * settings.poll_backoff, settings.max_poll_interval)


def _collect_entries(
    client: boto3.client, job_id: str, identifier: str, first_page: Dict[str, Any]
) -> List[Dict[str, Any]]:
    entries = list(first_page.get("ServicesLastAccessed", []))
    response = first_page
    while response.get("IsTruncated") and response.get("Marker"):
        response = call_api(
            client,
            "get_service_last_accessed_details",
            identifier=identifier,
            JobId=job_id,
            Marker=response["Marker"],
        )
        entries.extend(response.get("ServicesLastAccessed", []))
    return entries


def attach_last_accessed(
    client: boto3.client,
    targets: Mapping[str, Resource],
    settings: Optional[DumpSettings] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Enrich every resource in ``targets`` with its last-accessed details.

    ``targets`` maps the ARN a job is generated for to the resource that
    receives the result. Jobs are submitted in mapping order and polled one at
    a time; the first failed or timed-out job raises and leaves the remaining
    resources untouched.
    """

    settings = settings or DumpSettings()
    for identifier, resource in targets.items():
        if resource.arn != identifier:
            raise CorrelationPreconditionError(
                f"tracked resource has ARN {resource.arn!r}",
                operation="attach last accessed",
                identifier=identifier,
            )
    if not targets:
        return

    identifiers = list(targets)
    job_ids = submit_last_accessed_jobs(client, identifiers)
    if len(job_ids) != len(identifiers):
        raise CorrelationPreconditionError(
            f"{len(job_ids)} job(s) submitted for {len(identifiers)} identifier(s)",
            operation="attach last accessed",
        )

    for identifier, job_id in zip(identifiers, job_ids):
        first_page = wait_for_job(client, job_id, identifier, settings, sleep)
        entries = _collect_entries(client, job_id, identifier, first_page)
        resource = targets[identifier]
        resource.metadata[SERVICE_LAST_ACCESSED_KEY] = entries
        resource.metadata[LAST_USED_KEY] = latest_authenticated(entries)

    logger.info("Attached last-accessed details to %d resource(s)", len(identifiers))


__all__ = [
    "JOB_COMPLETED",
    "JOB_FAILED",
    "JOB_IN_PROGRESS",
    "attach_last_accessed",
    "latest_authenticated",
    "submit_last_accessed_jobs",
    "wait_for_job",
]
