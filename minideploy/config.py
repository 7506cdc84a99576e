"""Configuration values for a minideploy run.

Everything here is constructed from command-line input and the environment at
process start and discarded at exit.

Environment variables
---------------------
- ``MINIDEPLOY_MINIKUBE_PATHS``: extra minikube install locations, separated
  by ``os.pathsep``, probed after ``PATH`` and before the built-in defaults.
- ``MINIDEPLOY_REGISTRY_PASSWORD``: when set, ``docker login`` reads the
  password from stdin instead of prompting.

"""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

from minideploy.validation import (
    validate_app_name,
    validate_image_tag,
    validate_port,
    validate_registry_user,
    validate_resource_name,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_APP_NAME = "my-appscript-7333"
DEFAULT_TAG = "latest"
DEFAULT_NAMESPACE = "default"
DEFAULT_PORT = 8000

# Known Windows (Git Bash) install locations, probed in this order.
DEFAULT_MINIKUBE_PATHS: tuple[str, ...] = (
    "/c/minikube/minikube.exe",
    "/c/Program Files/Kubernetes/Minikube/minikube.exe",
    "/c/my files/minikube/minikube.exe",
)

MINIKUBE_PATHS_ENV = "MINIDEPLOY_MINIKUBE_PATHS"
# S105 false positive: this is the name of an environment variable.
REGISTRY_PASSWORD_ENV = "MINIDEPLOY_REGISTRY_PASSWORD"  # noqa: S105


@dataclasses.dataclass(frozen=True, slots=True)
class ImageReference:
    """Fully qualified image reference ``{user}/{name}:{tag}``.

    A single instance is shared by the build and push steps so both see the
    same string.
    """

    registry_user: str
    name: str
    tag: str = DEFAULT_TAG

    @property
    def repository(self) -> str:
        """Return the ``{user}/{name}`` part without the tag."""
        return f"{self.registry_user}/{self.name}"

    def __str__(self) -> str:
        """Render the reference as passed to docker and the manifest."""
        return f"{self.repository}:{self.tag}"


@dataclasses.dataclass(frozen=True, slots=True)
class DeploymentIdentity:
    """What gets deployed, and where.

    Attributes:
        app_name: Resource name for the deployment, service, container and
            image. Must be a valid RFC 1123 DNS label.
        image: Image reference built and pushed for this run.
        namespace: Target Kubernetes namespace.
        container_port: Port the application listens on inside the container.

    """

    app_name: str
    image: ImageReference
    namespace: str = DEFAULT_NAMESPACE
    container_port: int = DEFAULT_PORT

    @classmethod
    def create(
        cls,
        *,
        registry_user: str,
        app_name: str = DEFAULT_APP_NAME,
        tag: str = DEFAULT_TAG,
        namespace: str = DEFAULT_NAMESPACE,
        container_port: int = DEFAULT_PORT,
    ) -> DeploymentIdentity:
        """Build an identity whose image name follows the app name."""
        return cls(
            app_name=app_name,
            image=ImageReference(registry_user=registry_user, name=app_name, tag=tag),
            namespace=namespace,
            container_port=container_port,
        )


def validate_identity(identity: DeploymentIdentity) -> None:
    """Check every caller-supplied field of a deployment identity.

    Raises:
        InvalidArgumentsError: On the first field that fails validation.

    """
    validate_app_name(identity.app_name)
    validate_resource_name(identity.namespace, field="namespace")
    validate_registry_user(identity.image.registry_user)
    validate_image_tag(identity.image.tag)
    validate_port(identity.container_port, field="container port")


@dataclasses.dataclass(frozen=True, slots=True)
class ClusterSettings:
    """Fixed properties of the local cluster and the generated resources."""

    context_name: str = "minikube"
    replicas: int = 2
    service_port: int = 80


@dataclasses.dataclass(frozen=True, slots=True)
class DeploySettings:
    """Run-wide settings that are not part of the deployment identity.

    Attributes:
        workdir: Directory under which the repository is cloned.
        minikube_paths: Extra fixed install locations probed after ``PATH``.
            The built-in defaults are appended by the locator.
        registry_password: Optional password for non-interactive login. Kept
            out of ``repr`` so it never reaches logs.
        cluster: Local cluster settings.

    """

    workdir: Path = dataclasses.field(default_factory=lambda: Path())
    minikube_paths: tuple[str, ...] = ()
    registry_password: str | None = dataclasses.field(default=None, repr=False)
    cluster: ClusterSettings = dataclasses.field(default_factory=ClusterSettings)

    @classmethod
    def from_env(
        cls,
        environ: cabc.Mapping[str, str] | None = None,
        *,
        workdir: Path | None = None,
    ) -> DeploySettings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
            workdir: Clone directory; defaults to the current directory.

        """
        env = os.environ if environ is None else environ
        raw_paths = env.get(MINIKUBE_PATHS_ENV, "")
        paths = tuple(part for part in raw_paths.split(os.pathsep) if part.strip())
        password = env.get(REGISTRY_PASSWORD_ENV) or None
        return cls(
            workdir=workdir if workdir is not None else Path(),
            minikube_paths=paths,
            registry_password=password,
        )
