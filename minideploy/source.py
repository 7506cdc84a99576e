"""Fetch a clean checkout of the application repository."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from minideploy.logging import get_logger, log_info

logger = get_logger(__name__)


def remove_existing_checkout(target: Path) -> bool:
    """Delete ``target`` if it exists.

    Returns:
        True if something was removed, False if the path did not exist.

    """
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return True
    if target.exists() or target.is_symlink():
        target.unlink()
        return True
    return False


def clone_repository(repo_url: str, target: Path) -> None:
    """Clone ``repo_url`` into ``target`` with git.

    Raises:
        subprocess.CalledProcessError: If git exits with non-zero status.

    """
    # S603/S607: git via PATH is standard; shell=False mitigates injection
    subprocess.run(  # noqa: S603
        ["git", "clone", repo_url, str(target)],  # noqa: S607
        check=True,
    )


def acquire_source(repo_url: str, target: Path) -> Path:
    """Produce a fresh checkout of ``repo_url`` at ``target``.

    Any existing file or directory at ``target`` is removed first, so the
    result never mixes files from an earlier run.

    Args:
        repo_url: URL of the git repository to clone.
        target: Directory to clone into.

    Returns:
        The checkout directory.

    Raises:
        ValueError: If ``repo_url`` is empty.
        subprocess.CalledProcessError: If the clone fails.

    """
    if not repo_url:
        msg = "repo_url cannot be empty"
        raise ValueError(msg)

    if remove_existing_checkout(target):
        log_info(logger, "Removed previous checkout at %s", target)

    log_info(logger, "Cloning repo %s into %s...", repo_url, target)
    clone_repository(repo_url, target)
    return target
