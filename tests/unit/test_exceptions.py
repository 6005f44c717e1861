"""Tests for exception classes."""

import pytest

from bkt.exceptions import (
    BktError,
    CommandError,
    ExecutionError,
    ManifestError,
    OperationError,
    PlanAlreadyExecutedError,
    PlanningError,
    ScanError,
    ValidationError,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_class, base",
        [
            (ManifestError, PlanningError),
            (ScanError, PlanningError),
            (CommandError, OperationError),
            (PlanAlreadyExecutedError, ExecutionError),
            (PlanningError, BktError),
            (OperationError, BktError),
            (ExecutionError, BktError),
            (ValidationError, BktError),
        ],
    )
    def test_inheritance(self, exc_class, base):
        """Each concrete error sits under its category."""
        assert issubclass(exc_class, base)


class TestMessages:
    """Tests for formatted messages and attributes."""

    def test_manifest_error(self):
        """ManifestError names the file."""
        exc = ManifestError("/etc/x.yaml", "expected a mapping")
        assert exc.path == "/etc/x.yaml"
        assert str(exc) == "Invalid manifest /etc/x.yaml: expected a mapping"

    def test_scan_error(self):
        """ScanError names the subsystem."""
        exc = ScanError("Homebrew", "boom")
        assert str(exc) == "Failed to scan Homebrew: boom"

    def test_command_error_with_status(self):
        """Non-zero exits include status and stderr."""
        exc = CommandError("brew", ["install", "jq"], 1, "Error: no bottle\n")
        assert exc.returncode == 1
        assert exc.command_line == "brew install jq"
        assert str(exc) == "'brew install jq' exited with status 1: Error: no bottle"

    def test_command_error_not_started(self):
        """A program that never started has no return code."""
        exc = CommandError("flatpak", ["list"], None)
        assert str(exc) == "Could not run 'flatpak list'"

    def test_validation_error(self):
        """ValidationError keeps field, value and reason."""
        exc = ValidationError("--only", "nope", "Unknown subsystem")
        assert (exc.field, exc.value, exc.reason) == ("--only", "nope", "Unknown subsystem")
        assert "'nope'" in str(exc)

    def test_plan_already_executed(self):
        """The message names the plan."""
        assert "Apply Plan" in str(PlanAlreadyExecutedError("Apply Plan"))
