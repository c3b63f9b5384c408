"""Core orchestration utilities for IAM dumps."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .resources import ReportResult, Resource
from .services import REPORTS, run_report
from .session import DumpSession


@dataclass
class DumpResults:
    """Report results keyed by report name, in the order they were run."""

    reports: Dict[str, ReportResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.reports.values())

    def iter_resources(self) -> Iterator[Tuple[str, Resource]]:
        for name, result in self.reports.items():
            for resource in result.resources:
                yield name, resource

    def failures(self) -> Dict[str, str]:
        return {name: str(result.error) for name, result in self.reports.items() if result.error}


def collect_reports(
    session: DumpSession,
    names: Optional[Iterable[str]] = None,
    *,
    path_prefix: Optional[str] = None,
) -> DumpResults:
    """Run the requested reports (all of them by default) against ``session``.

    Unknown report names raise :class:`ValueError` before any report runs. A
    failing report does not stop the others; its error is kept on its result.
    """

    requested = list(names) if names else list(REPORTS)
    normalized: List[str] = []
    for name in requested:
        key = name.strip().lower()
        if key not in REPORTS:
            valid = ", ".join(sorted(REPORTS))
            raise ValueError(f"Unknown report '{name}'. Valid reports: {valid}")
        normalized.append(key)

    results = DumpResults()
    for name in dict.fromkeys(normalized):
        results.reports[name] = run_report(name, session, path_prefix=path_prefix)
    return results


def print_resources(results: DumpResults) -> None:
    """Pretty-print resources to stdout."""

    rows = list(results.iter_resources())
    if not rows:
        print("No resources found.")
    else:
        header = f"{'Report':<22} {'Type':<16} {'ID':<40} Last used"
        print(header)
        print("-" * len(header))
        for report, resource in rows:
            resource_id = (resource.id[:37] + "...") if len(resource.id) > 40 else resource.id
            last_used = resource.last_used.isoformat() if resource.last_used else "-"
            print(f"{report:<22} {resource.type:<16} {resource_id:<40} {last_used}")

    for report, error in results.failures().items():
        print(f"Report {report} is incomplete: {error}")


def resources_as_dicts(results: DumpResults) -> List[dict]:
    return [dict(asdict(resource), report=report) for report, resource in results.iter_resources()]


def export_resources_to_json(results: DumpResults, path: str) -> str:
    """Write resources and report errors from *results* to *path* as JSON."""

    payload = {
        "resources": resources_as_dicts(results),
        "errors": results.failures(),
    }
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str)
    return path


def export_resources_to_excel(results: DumpResults, path: str) -> str:
    """Write the resources in *results* to an Excel workbook located at *path*.

    Requires :mod:`openpyxl`; a :class:`RuntimeError` is raised when it is
    not installed.
    """

    try:
        from openpyxl import Workbook
    except ImportError as exc:  # pragma: no cover - dependency missing during tests
        raise RuntimeError(
            "The 'openpyxl' package is required for the Excel export. "
            "Install it with 'pip install iam-dump[excel]'."
        ) from exc

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Resources"
    sheet.append(["Report", "Type", "ID", "ARN", "Account", "Region", "Last used"])
    for report, resource in results.iter_resources():
        sheet.append(
            [
                report,
                resource.type,
                resource.id,
                resource.arn,
                resource.account_id,
                resource.region,
                resource.last_used.isoformat() if resource.last_used else "",
            ]
        )
    sheet.freeze_panes = "A2"

    # Header cells are never empty, so every column has a width candidate.
    for column in sheet.columns:
        longest = max(len(str(cell.value)) for cell in column if cell.value is not None)
        sheet.column_dimensions[column[0].column_letter].width = min(longest + 2, 60)

    workbook.save(path)
    return path


__all__ = [
    "DumpResults",
    "collect_reports",
    "export_resources_to_excel",
    "export_resources_to_json",
    "print_resources",
    "resources_as_dicts",
]
