"""Validation helpers and the exception hierarchy for minideploy.

This module holds the checks that must pass before any external command runs
(resource names, ports, image tags, executables on ``PATH``) and the custom
exceptions raised throughout the package.

Custom Exceptions
-----------------
- ``MiniDeployError``: Base exception for all package errors
- ``ToolNotFoundError``: A required CLI tool could not be located
- ``InvalidArgumentsError``: Caller-supplied values fail validation
- ``CommandFailedError``: An external command exited with non-zero status
- ``ManifestValidationError``: A generated manifest is inconsistent
- ``ServiceAddressError``: The service URL could not be resolved

Examples
--------
Verify required executables before proceeding:

    require_exe("git")
    require_exe("kubectl")

Reject an application name that Kubernetes would refuse:

    validate_app_name("9app")  # InvalidArgumentsError

"""

from __future__ import annotations

import re
import shutil
import subprocess

# RFC 1123 label: lowercase alphanumerics and '-', alphanumeric at both ends.
_DNS_LABEL_PATTERN = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
_DNS_LABEL_MAX_LENGTH = 63
# RFC 1035 label, required for Service names: as above but starting with a letter.
_SERVICE_NAME_PATTERN = re.compile(r"[a-z]([-a-z0-9]*[a-z0-9])?")

_IMAGE_TAG_PATTERN = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}")
# Docker repository path component: lowercase runs joined by ".", "_", "__" or "-".
_REGISTRY_USER_PATTERN = re.compile(r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*")

_MIN_PORT = 1
_MAX_PORT = 65535


class MiniDeployError(Exception):
    """Base exception for all minideploy errors."""


class ToolNotFoundError(MiniDeployError):
    """Required CLI tool is not installed."""


class InvalidArgumentsError(MiniDeployError):
    """Caller-supplied arguments are missing or malformed."""


class ManifestValidationError(MiniDeployError):
    """A deployment manifest failed its consistency checks."""


class ServiceAddressError(MiniDeployError):
    """The external address of a service could not be determined."""


class CommandFailedError(MiniDeployError):
    """An external command exited with a non-zero status.

    Attributes:
        command: The argument vector that was executed.
        returncode: Exit status reported by the command.

    """

    def __init__(self, command: list[str] | tuple[str, ...], returncode: int) -> None:
        """Record the failed command and build a readable message."""
        self.command = tuple(str(part) for part in command)
        self.returncode = returncode
        super().__init__(
            f"'{' '.join(self.command)}' exited with status {returncode}"
        )

    @classmethod
    def from_called_process_error(
        cls, exc: subprocess.CalledProcessError
    ) -> CommandFailedError:
        """Translate a ``subprocess.CalledProcessError``."""
        cmd = exc.cmd if isinstance(exc.cmd, (list, tuple)) else [str(exc.cmd)]
        return cls(cmd, exc.returncode)


def require_exe(name: str) -> str:
    """Verify a CLI tool is available in PATH.

    Parameters
    ----------
    name : str
        Name of the executable to check for.

    Returns
    -------
    str
        The resolved path of the executable.

    Raises
    ------
    ToolNotFoundError
        If the executable is not found in PATH.

    """
    path = shutil.which(name)
    if path is None:
        msg = f"Required executable '{name}' not found in PATH"
        raise ToolNotFoundError(msg)
    return path


def normalize_posix_path(path: str) -> str:
    """Convert backslash separators to forward slashes."""
    return path.replace("\\", "/")


def validate_resource_name(value: str, *, field: str) -> None:
    """Validate a value as a Kubernetes RFC 1123 DNS label.

    Parameters
    ----------
    value : str
        Candidate resource or namespace name.
    field : str
        Human-readable field name used in the error message.

    Raises
    ------
    InvalidArgumentsError
        If the value is empty, longer than 63 characters, or contains
        characters outside ``[a-z0-9-]`` or starts/ends with ``-``.

    """
    if not value:
        msg = f"{field} cannot be empty"
        raise InvalidArgumentsError(msg)
    if len(value) > _DNS_LABEL_MAX_LENGTH:
        msg = (
            f"{field} '{value}' is longer than {_DNS_LABEL_MAX_LENGTH} characters"
        )
        raise InvalidArgumentsError(msg)
    if not _DNS_LABEL_PATTERN.fullmatch(value):
        msg = (
            f"{field} '{value}' must consist of lowercase alphanumerics or '-', "
            "and start and end with an alphanumeric character"
        )
        raise InvalidArgumentsError(msg)


def validate_app_name(value: str) -> None:
    """Validate the application name.

    The name is also used for the Service, and Service names are RFC 1035
    labels: on top of the RFC 1123 rules they must start with a letter.

    Raises:
        InvalidArgumentsError: If the name is not a valid RFC 1035 label.

    """
    validate_resource_name(value, field="app name")
    if not _SERVICE_NAME_PATTERN.fullmatch(value):
        msg = f"app name '{value}' must start with a lowercase letter"
        raise InvalidArgumentsError(msg)


def validate_port(port: int, *, field: str = "port") -> None:
    """Validate a TCP port number."""
    if not _MIN_PORT <= port <= _MAX_PORT:
        msg = f"{field} must be between {_MIN_PORT} and {_MAX_PORT}, got {port}"
        raise InvalidArgumentsError(msg)


def validate_image_tag(tag: str) -> None:
    """Validate a container image tag."""
    if not _IMAGE_TAG_PATTERN.fullmatch(tag):
        msg = f"image tag '{tag}' is not a valid Docker tag"
        raise InvalidArgumentsError(msg)


def validate_registry_user(user: str) -> None:
    """Validate the registry user/namespace segment of an image reference."""
    if not user:
        msg = "registry user cannot be empty"
        raise InvalidArgumentsError(msg)
    if "/" in user or any(ch.isspace() for ch in user):
        msg = f"registry user '{user}' must not contain '/' or whitespace"
        raise InvalidArgumentsError(msg)
    if not _REGISTRY_USER_PATTERN.fullmatch(user):
        msg = (
            f"registry user '{user}' must be lowercase alphanumerics, "
            "optionally separated by '.', '_' or '-'"
        )
        raise InvalidArgumentsError(msg)
