"""Shared fixtures for unit and feature tests.

The cmd-mox plugin is registered globally via pyproject.toml.
"""

from __future__ import annotations

import dataclasses
import subprocess
import typing as typ

import pytest

from minideploy.config import DeploymentIdentity, DeploySettings
from tests.helpers.toolchain import FakeToolchain, ToolchainState

if typ.TYPE_CHECKING:
    from pathlib import Path


@dataclasses.dataclass(slots=True)
class MockSubprocessCapture:
    """Captured data from mocked subprocess.run calls."""

    calls: list[tuple[str, ...]]
    inputs: list[str]


@pytest.fixture
def mock_subprocess_run(
    monkeypatch: pytest.MonkeyPatch,
) -> MockSubprocessCapture:
    """Mock subprocess.run and return captured calls and inputs.

    Every call succeeds with empty output. Use this for commands whose
    interesting part is the stdin payload, which cmd-mox does not expose.
    """
    capture = MockSubprocessCapture(calls=[], inputs=[])

    def _mock_run(
        args: list[str], **kwargs: object
    ) -> subprocess.CompletedProcess[str]:
        capture.calls.append(tuple(str(arg) for arg in args))
        if "input" in kwargs:
            capture.inputs.append(str(kwargs["input"]))
        return subprocess.CompletedProcess(args=args, returncode=0, stdout="")

    monkeypatch.setattr("subprocess.run", _mock_run)
    return capture


@pytest.fixture
def toolchain_state() -> ToolchainState:
    """Cluster state for the fake toolchain; tweak before running code."""
    return ToolchainState()


@pytest.fixture
def toolchain(
    monkeypatch: pytest.MonkeyPatch, toolchain_state: ToolchainState
) -> FakeToolchain:
    """Replace subprocess.run and shutil.which with the fake toolchain."""
    fake = FakeToolchain(toolchain_state)
    monkeypatch.setattr("subprocess.run", fake)
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    return fake


@pytest.fixture
def identity() -> DeploymentIdentity:
    """Deployment identity used across tests."""
    return DeploymentIdentity.create(
        registry_user="alice",
        app_name="demo",
        tag="v1",
        namespace="default",
        container_port=9090,
    )


@pytest.fixture
def settings(tmp_path: Path) -> DeploySettings:
    """Deploy settings that clone into a temporary directory."""
    return DeploySettings(workdir=tmp_path)
