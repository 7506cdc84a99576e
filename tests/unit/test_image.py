"""Unit tests for image build and publish operations."""

from __future__ import annotations

import subprocess
import typing as typ

import pytest

from minideploy.config import ImageReference
from minideploy.image import build_image, publish_image, push_image, registry_login

if typ.TYPE_CHECKING:
    from pathlib import Path

    from cmd_mox import CmdMox

    from tests.conftest import MockSubprocessCapture

IMAGE = ImageReference("alice", "demo", "v1")


class TestBuildImage:
    """Tests for build_image helper using cmd-mox."""

    @pytest.mark.parametrize(
        ("registry_user", "name", "tag"),
        [
            ("alice", "demo", "v1"),
            ("bob", "my-appscript-7333", "latest"),
        ],
    )
    def test_invokes_docker_build(
        self,
        cmd_mox: CmdMox,
        tmp_path: Path,
        registry_user: str,
        name: str,
        tag: str,
    ) -> None:
        """Should tag the build with the full image reference."""
        cmd_mox.mock("docker").with_args(
            "build", "-t", f"{registry_user}/{name}:{tag}", str(tmp_path)
        ).returns(exit_code=0)

        build_image(ImageReference(registry_user, name, tag), tmp_path)

    def test_raises_when_context_missing(self, tmp_path: Path) -> None:
        """A missing build context fails before docker runs."""
        missing = tmp_path / "missing"

        with pytest.raises(FileNotFoundError, match="does not exist"):
            build_image(IMAGE, missing)

    def test_raises_when_context_is_file(self, tmp_path: Path) -> None:
        """A file is not a valid build context."""
        context = tmp_path / "Dockerfile"
        context.write_text("FROM scratch\n")

        with pytest.raises(NotADirectoryError, match="must be a directory"):
            build_image(IMAGE, context)

    def test_build_failure_propagates(self, cmd_mox: CmdMox, tmp_path: Path) -> None:
        """A failing docker build raises CalledProcessError."""
        cmd_mox.mock("docker").with_args(
            "build", "-t", "alice/demo:v1", str(tmp_path)
        ).returns(exit_code=1)

        with pytest.raises(subprocess.CalledProcessError):
            build_image(IMAGE, tmp_path)


class TestPushImage:
    """Tests for push_image helper using cmd-mox."""

    def test_invokes_docker_push(self, cmd_mox: CmdMox) -> None:
        """Should push the same reference that was built."""
        cmd_mox.mock("docker").with_args("push", "alice/demo:v1").returns(
            exit_code=0
        )

        push_image(IMAGE)


class TestRegistryLogin:
    """Tests for registry_login."""

    def test_interactive_login_has_no_stdin(
        self, mock_subprocess_run: MockSubprocessCapture
    ) -> None:
        """Without a password docker prompts on the terminal."""
        registry_login("alice")

        assert mock_subprocess_run.calls == [("docker", "login", "-u", "alice")]
        assert mock_subprocess_run.inputs == []

    def test_password_goes_through_stdin(
        self, mock_subprocess_run: MockSubprocessCapture
    ) -> None:
        """A password is piped, never placed in the argument vector."""
        registry_login("alice", "s3cret")

        assert mock_subprocess_run.calls == [
            ("docker", "login", "-u", "alice", "--password-stdin")
        ]
        assert mock_subprocess_run.inputs == ["s3cret"]
        assert all("s3cret" not in call for call in mock_subprocess_run.calls)


class TestPublishImage:
    """Tests for publish_image ordering."""

    def test_build_login_push_in_order(
        self, mock_subprocess_run: MockSubprocessCapture, tmp_path: Path
    ) -> None:
        """The three docker steps run strictly in order."""
        result = publish_image(IMAGE, tmp_path)

        assert result == "alice/demo:v1"
        assert mock_subprocess_run.calls == [
            ("docker", "build", "-t", "alice/demo:v1", str(tmp_path)),
            ("docker", "login", "-u", "alice"),
            ("docker", "push", "alice/demo:v1"),
        ]

    def test_login_failure_skips_push(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """A failed login aborts before anything is pushed."""
        calls: list[tuple[str, ...]] = []

        def fake_run(
            args: list[str], **kwargs: object
        ) -> subprocess.CompletedProcess[str]:
            calls.append(tuple(args))
            if args[1] == "login":
                raise subprocess.CalledProcessError(1, args)
            return subprocess.CompletedProcess(args=args, returncode=0)

        monkeypatch.setattr("subprocess.run", fake_run)

        with pytest.raises(subprocess.CalledProcessError):
            publish_image(IMAGE, tmp_path)

        assert [call[1] for call in calls] == ["build", "login"]
