"""Build and publish the application container image.

The three docker steps always run in the same order: build, login, push.
Failures propagate as ``subprocess.CalledProcessError``; nothing built
locally is cleaned up.

Examples
--------
Publish an image from a fresh checkout:

    ref = ImageReference("alice", "demo", "v1")
    publish_image(ref, Path("demo"))

"""

from __future__ import annotations

import subprocess
import typing as typ
from pathlib import Path

from minideploy.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from minideploy.config import ImageReference

logger = get_logger(__name__)


def build_image(image: ImageReference, context: Path | str) -> None:
    """Build ``image`` from the Dockerfile in ``context``.

    Args:
        image: Reference to tag the built image with.
        context: Build context directory path.

    Raises:
        FileNotFoundError: If the context path does not exist.
        NotADirectoryError: If the context path is not a directory.
        subprocess.CalledProcessError: If the docker build command fails.

    """
    context_path = Path(context)
    if not context_path.exists():
        msg = f"Build context path does not exist: {context_path}"
        raise FileNotFoundError(msg)
    if not context_path.is_dir():
        msg = f"Build context must be a directory: {context_path}"
        raise NotADirectoryError(msg)

    # S603/S607: docker via PATH is standard; args are validated inputs
    subprocess.run(  # noqa: S603
        ["docker", "build", "-t", str(image), str(context_path)],  # noqa: S607
        check=True,
    )


def registry_login(user: str, password: str | None = None) -> None:
    """Authenticate against the registry as ``user``.

    Without a password docker prompts on the inherited terminal. With one,
    the password is fed through stdin so it never appears in the process
    list.
    """
    cmd = ["docker", "login", "-u", user]
    if password is None:
        subprocess.run(cmd, check=True)  # noqa: S603
        return

    cmd.append("--password-stdin")
    subprocess.run(  # noqa: S603
        cmd,
        input=password,
        text=True,
        check=True,
    )


def push_image(image: ImageReference) -> None:
    """Push ``image`` to its registry."""
    # S603/S607: docker via PATH is standard; image reference is validated
    subprocess.run(  # noqa: S603
        ["docker", "push", str(image)],  # noqa: S607
        check=True,
    )


def publish_image(
    image: ImageReference, context: Path | str, *, password: str | None = None
) -> str:
    """Build, authenticate and push, strictly in that order.

    Returns:
        The pushed image reference string.

    """
    log_info(logger, "Building Docker image %s...", image)
    build_image(image, context)

    log_info(logger, "Logging in to the registry as %s...", image.registry_user)
    registry_login(image.registry_user, password)

    log_info(logger, "Pushing image %s...", image)
    push_image(image)
    return str(image)
