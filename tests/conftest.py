"""Pytest fixtures for bkt tests."""

from pathlib import Path

import pytest

from bkt.pipeline import ExecutionMode, ExecutionOptions
from bkt.plan import ExecuteContext, PlanContext
from tests.fixtures.host import FakeHost


@pytest.fixture
def host():
    """Empty fake workstation."""
    return FakeHost()


@pytest.fixture
def user_dir(tmp_path):
    """User manifest layer (writable)."""
    return tmp_path / "config" / "bootc"


@pytest.fixture
def system_dir(tmp_path):
    """System manifest layer (shipped with the image)."""
    path = tmp_path / "usr" / "share" / "bootc-bootstrap"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def shims_dir(tmp_path):
    """Directory host shims are written to."""
    return tmp_path / "shims"


def make_plan_ctx(
    host: FakeHost,
    user_dir: Path,
    system_dir: Path,
    shims_dir: Path,
    *,
    dry_run: bool = False,
) -> PlanContext:
    return PlanContext(
        working_dir=user_dir.parent,
        manifest_dir=user_dir,
        system_manifest_dir=system_dir,
        shims_dir=shims_dir,
        options=ExecutionOptions(dry_run=dry_run, mode=ExecutionMode.HOST, runner=host),
    )


@pytest.fixture
def plan_ctx(host, user_dir, system_dir, shims_dir):
    """Planning context wired to the fake host and temporary manifest layers."""
    return make_plan_ctx(host, user_dir, system_dir, shims_dir)


@pytest.fixture
def exec_ctx(plan_ctx):
    """Execution context sharing the planning options."""
    return ExecuteContext(options=plan_ctx.options)
