"""Tests for the report registry."""

from __future__ import annotations

import pytest

from iam_dump.resources import ReportResult
from iam_dump.services import REPORTS, ReportRegistry, run_report
from iam_dump.services.iam import report_roles


def test_iam_reports_are_registered() -> None:
    """All five IAM reports are available by name."""

    assert sorted(REPORTS) == [
        "groups",
        "instance-profiles",
        "policies",
        "roles",
        "users-and-access-keys",
    ]
    assert REPORTS["roles"] is report_roles


def test_lookup_is_case_insensitive() -> None:
    """Report names are matched without regard to case or padding."""

    registry = ReportRegistry()

    @registry.register("Roles")
    def report(session, *, path_prefix=None):
        return ReportResult()

    assert " ROLES " in registry
    assert registry["roles"] is report
    assert 42 not in registry


def test_duplicate_registration_is_rejected() -> None:
    """A second function cannot claim a registered name."""

    registry = ReportRegistry()
    registry.register("roles")(lambda session, path_prefix=None: ReportResult())

    with pytest.raises(ValueError, match="already registered"):
        registry.register("roles")(lambda session, path_prefix=None: ReportResult())


def test_empty_names_are_rejected() -> None:
    """Blank report names are refused."""

    with pytest.raises(ValueError):
        ReportRegistry().register("  ")


def test_run_report_rejects_unknown_names(session) -> None:
    """Running an unknown report lists the valid ones."""

    with pytest.raises(ValueError, match="Valid reports"):
        run_report("buckets", session)
