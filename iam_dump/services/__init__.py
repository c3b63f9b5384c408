"""Report entry points and registry helpers."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Dict, Iterator, Optional

from ..resources import ReportResult
from ..session import DumpSession

Report = Callable[..., ReportResult]
"""``report(session, *, path_prefix=None) -> ReportResult``."""


class ReportRegistry(Mapping):
    """Read-only view of the registered reports, keyed by lower-case name.

    Lookups ignore case and surrounding whitespace. Entries are only added
    through :meth:`register`.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Report] = {}

    @staticmethod
    def _key(name: str) -> str:
        key = name.strip().lower() if name else ""
        if not key:
            raise ValueError("Report name must be a non-empty string")
        return key

    def register(self, name: str) -> Callable[[Report], Report]:
        """Decorate a :data:`Report` callable so it runs under *name*."""

        key = self._key(name)

        def decorator(report: Report) -> Report:
            existing = self._by_name.setdefault(key, report)
            if existing is not report:
                raise ValueError(f"Report '{name}' is already registered")
            return report

        return decorator

    def __getitem__(self, name: str) -> Report:
        return self._by_name[self._key(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)


REPORTS = ReportRegistry()
register_report = REPORTS.register


def run_report(
    name: str, session: DumpSession, *, path_prefix: Optional[str] = None
) -> ReportResult:
    """Look up *name* and run it against *session*."""

    if name not in REPORTS:
        raise ValueError(f"Unknown report '{name}'. Valid reports: {', '.join(sorted(REPORTS))}")
    return REPORTS[name](session, path_prefix=path_prefix)


# Importing the report modules fills REPORTS through their decorators.
from . import iam  # noqa: E402,F401

__all__ = [
    "REPORTS",
    "Report",
    "ReportRegistry",
    "register_report",
    "run_report",
]
