"""Command-line interface for minideploy.

Usage:
    minideploy deploy --repo <git_repo_url> --user <registry_user>
        [--app <app_name>] [--tag <tag>] [--namespace <ns>] [--port <port>]
    minideploy url     # Print the URL of an existing deployment
    minideploy status  # Show deployment, service and pod status
    minideploy down    # Delete the deployment and service

Environment variables:
    MINIDEPLOY_REPO, MINIDEPLOY_USER, MINIDEPLOY_APP, MINIDEPLOY_TAG,
    MINIDEPLOY_NAMESPACE, MINIDEPLOY_PORT, MINIDEPLOY_WORKDIR
                                  - Defaults for the matching flags
    MINIDEPLOY_LOG_LEVEL          - Log level (default: INFO)
    MINIDEPLOY_MINIKUBE_PATHS     - Extra minikube locations (os.pathsep list)
    MINIDEPLOY_REGISTRY_PASSWORD  - Non-interactive registry password
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from minideploy import __version__
from minideploy.config import (
    DEFAULT_APP_NAME,
    DEFAULT_NAMESPACE,
    DEFAULT_PORT,
    DEFAULT_TAG,
    DeploymentIdentity,
    DeploySettings,
    validate_identity,
)
from minideploy.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from minideploy.orchestration import (
    deploy_application,
    print_success_banner,
    show_service_url,
    show_status,
    teardown_application,
)
from minideploy.validation import (
    InvalidArgumentsError,
    validate_app_name,
    validate_resource_name,
)

logger = get_logger(__name__)

app = App(
    name="minideploy",
    help="Clone, build, push and deploy an application to a local Minikube",
    version=__version__,
)

AppName = typ.Annotated[str, Parameter(name="--app", env_var="MINIDEPLOY_APP")]
Namespace = typ.Annotated[str, Parameter(env_var="MINIDEPLOY_NAMESPACE")]
LogLevelOption = typ.Annotated[str, Parameter(env_var="MINIDEPLOY_LOG_LEVEL")]


def _setup_logging(level: str) -> None:
    normalized, invalid = configure_logging(level, force=True)
    if invalid:
        log_warning(
            logger, "Invalid log level %r, falling back to %s", level, normalized
        )


def _check_names(app_name: str, namespace: str) -> bool:
    try:
        validate_app_name(app_name)
        validate_resource_name(namespace, field="namespace")
    except InvalidArgumentsError as exc:
        log_error(logger, "ERROR: %s", exc)
        return False
    return True


@app.command
def deploy(  # noqa: PLR0913
    *,
    repo: typ.Annotated[str, Parameter(env_var="MINIDEPLOY_REPO")],
    user: typ.Annotated[str, Parameter(env_var="MINIDEPLOY_USER")],
    app_name: AppName = DEFAULT_APP_NAME,
    tag: typ.Annotated[str, Parameter(env_var="MINIDEPLOY_TAG")] = DEFAULT_TAG,
    namespace: Namespace = DEFAULT_NAMESPACE,
    port: typ.Annotated[int, Parameter(env_var="MINIDEPLOY_PORT")] = DEFAULT_PORT,
    workdir: typ.Annotated[Path, Parameter(env_var="MINIDEPLOY_WORKDIR")] = Path(),
    log_level: LogLevelOption = "INFO",
) -> int:
    """Clone a repository, publish its image and deploy it to Minikube.

    Safe to run repeatedly: the checkout is recreated, and any deployment or
    service with the same name is deleted before the new one is applied.

    Args:
        repo: Git repository URL to clone.
        user: Registry user/namespace that owns the image.
        app_name: Resource and image name.
        tag: Image tag.
        namespace: Kubernetes namespace.
        port: Port the application listens on inside the container.
        workdir: Directory to clone into (the checkout is <workdir>/<app>).
        log_level: Log level.

    Returns:
        Exit code (0 for success, non-zero for failure).

    """
    _setup_logging(log_level)

    identity = DeploymentIdentity.create(
        registry_user=user,
        app_name=app_name,
        tag=tag,
        namespace=namespace,
        container_port=port,
    )
    try:
        if not repo:
            msg = "--repo cannot be empty"
            raise InvalidArgumentsError(msg)
        validate_identity(identity)
    except InvalidArgumentsError as exc:
        log_error(logger, "ERROR: %s", exc)
        return 1

    settings = DeploySettings.from_env(workdir=workdir)
    outcome = deploy_application(repo, identity, settings)

    failed = outcome.failed
    if failed is not None:
        log_error(logger, "Deployment failed at %s: %s", failed.stage, failed.reason)
        return 1

    access_url = typ.cast("str", outcome.url)
    log_info(logger, "Deployment of %s complete.", identity.app_name)
    print_success_banner(access_url)
    return 0


@app.command
def url(
    *,
    app_name: AppName = DEFAULT_APP_NAME,
    namespace: Namespace = DEFAULT_NAMESPACE,
    log_level: LogLevelOption = "INFO",
) -> int:
    """Print the access URL of an existing deployment.

    Args:
        app_name: Resource name of the deployment.
        namespace: Kubernetes namespace.
        log_level: Log level.

    """
    _setup_logging(log_level)
    if not _check_names(app_name, namespace):
        return 1
    return show_service_url(app_name, namespace)


@app.command
def status(
    *,
    app_name: AppName = DEFAULT_APP_NAME,
    namespace: Namespace = DEFAULT_NAMESPACE,
    log_level: LogLevelOption = "INFO",
) -> int:
    """Show deployment, service and pod status.

    Args:
        app_name: Resource name of the deployment.
        namespace: Kubernetes namespace.
        log_level: Log level.

    """
    _setup_logging(log_level)
    if not _check_names(app_name, namespace):
        return 1
    return show_status(app_name, namespace)


@app.command
def down(
    *,
    app_name: AppName = DEFAULT_APP_NAME,
    namespace: Namespace = DEFAULT_NAMESPACE,
    log_level: LogLevelOption = "INFO",
) -> int:
    """Delete the deployment and service.

    The container image and the local checkout are left untouched.

    Args:
        app_name: Resource name of the deployment.
        namespace: Kubernetes namespace.
        log_level: Log level.

    """
    _setup_logging(log_level)
    if not _check_names(app_name, namespace):
        return 1
    return teardown_application(app_name, namespace)


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
