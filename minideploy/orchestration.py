"""High-level orchestration for CLI commands.

``deploy_application`` runs the four stages in order and converts each one's
outcome into a ``StageResult``. The first failed stage ends the run; the
returned ``DeployOutcome`` lets callers decide what to do next instead of the
process exiting mid-sequence.
"""

from __future__ import annotations

import subprocess
import typing as typ

from minideploy import k8s
from minideploy.config import DeploySettings
from minideploy.image import publish_image
from minideploy.locator import ToolLocator
from minideploy.logging import get_logger, log_error, log_info
from minideploy.reconciler import (
    ensure_context,
    reconcile_cluster,
    remove_stale_resources,
    resolve_service_url,
)
from minideploy.results import DeployOutcome, Stage, StageResult
from minideploy.source import acquire_source
from minideploy.validation import (
    CommandFailedError,
    MiniDeployError,
    require_exe,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from minideploy.config import DeploymentIdentity

logger = get_logger(__name__)

# Tools invoked by name through PATH; minikube goes through the locator.
REQUIRED_TOOLS = ("git", "docker", "kubectl")

_STAGE_ERRORS = (MiniDeployError, subprocess.CalledProcessError, OSError, ValueError)


def describe_failure(exc: BaseException) -> str:
    """Turn a stage exception into a one-line reason."""
    if isinstance(exc, subprocess.CalledProcessError):
        return str(CommandFailedError.from_called_process_error(exc))
    return str(exc) or type(exc).__name__


def _run_stage(
    outcome: DeployOutcome, stage: Stage, action: cabc.Callable[[], str]
) -> StageResult:
    """Run ``action`` and record its result under ``stage``."""
    try:
        value = action()
    except _STAGE_ERRORS as exc:
        reason = describe_failure(exc)
        log_error(logger, "Stage %s failed: %s", stage, reason)
        return outcome.record(StageResult.failure(stage, reason))
    return outcome.record(StageResult.success(stage, value))


def locate_tools(
    settings: DeploySettings,
    locator: ToolLocator | None = None,
    required: cabc.Iterable[str] = REQUIRED_TOOLS,
) -> str:
    """Find minikube and verify the other tools are on PATH.

    Returns:
        The minikube executable path.

    """
    finder = locator or ToolLocator.for_minikube(settings.minikube_paths)
    minikube_exe = finder.locate()
    log_info(logger, "Using Minikube executable: %s", minikube_exe)
    for exe in required:
        require_exe(exe)
    return minikube_exe


def checkout_path(identity: DeploymentIdentity, settings: DeploySettings) -> Path:
    """Return the directory the repository is cloned into."""
    return settings.workdir / identity.app_name


def deploy_application(
    repo_url: str,
    identity: DeploymentIdentity,
    settings: DeploySettings | None = None,
    *,
    locator: ToolLocator | None = None,
) -> DeployOutcome:
    """Clone, build, push and deploy ``identity``.

    Args:
        repo_url: Git repository to deploy.
        identity: Validated deployment identity.
        settings: Run-wide settings; read from the environment when omitted.
        locator: Override for the minikube locator.

    Returns:
        The outcome with one result per stage that ran. ``outcome.ok`` is
        True only when all four stages succeeded.

    """
    cfg = settings or DeploySettings.from_env()
    outcome = DeployOutcome()

    located = _run_stage(
        outcome, Stage.LOCATE_TOOLS, lambda: locate_tools(cfg, locator)
    )
    if not located.ok:
        return outcome
    minikube_exe = typ.cast("str", located.value)

    checkout = _run_stage(
        outcome,
        Stage.ACQUIRE_SOURCE,
        lambda: str(acquire_source(repo_url, checkout_path(identity, cfg))),
    )
    if not checkout.ok:
        return outcome
    context_dir = typ.cast("str", checkout.value)

    published = _run_stage(
        outcome,
        Stage.PUBLISH_IMAGE,
        lambda: publish_image(
            identity.image, context_dir, password=cfg.registry_password
        ),
    )
    if not published.ok:
        return outcome

    _run_stage(
        outcome,
        Stage.RECONCILE_CLUSTER,
        lambda: reconcile_cluster(minikube_exe, identity, cfg.cluster).url,
    )
    return outcome


def print_success_banner(url: str) -> None:
    """Print the access URL; the URL is always the last line."""
    print()
    print("=" * 60)
    print("Your application should be accessible at:")
    print(url)


def show_service_url(
    app_name: str, namespace: str, settings: DeploySettings | None = None
) -> int:
    """Print the URL of an already deployed service.

    Returns:
        Exit code (0 for success, 1 on failure).

    """
    cfg = settings or DeploySettings.from_env()
    try:
        minikube_exe = locate_tools(cfg, required=("kubectl",))
        ensure_context(minikube_exe, cfg.cluster.context_name)
        url = resolve_service_url(minikube_exe, app_name, namespace)
    except _STAGE_ERRORS as exc:
        log_error(
            logger, "Could not resolve URL for %s: %s", app_name, describe_failure(exc)
        )
        return 1

    print(url)
    return 0


def show_status(
    app_name: str, namespace: str, settings: DeploySettings | None = None
) -> int:
    """Print deployment, service and pod status for ``app_name``.

    The minikube context is selected first so the report comes from the same
    cluster that ``deploy`` and ``down`` act on.
    """
    cfg = settings or DeploySettings.from_env()
    try:
        minikube_exe = locate_tools(cfg, required=("kubectl",))
        ensure_context(minikube_exe, cfg.cluster.context_name)
        selector = f"app={app_name}"
        print(f"Status for {app_name} in namespace {namespace}")
        print()
        k8s.print_resources(selector, namespace)
    except _STAGE_ERRORS as exc:
        log_error(logger, "Could not read status: %s", describe_failure(exc))
        return 1
    return 0


def teardown_application(
    app_name: str, namespace: str, settings: DeploySettings | None = None
) -> int:
    """Delete the deployment and service for ``app_name``."""
    cfg = settings or DeploySettings.from_env()
    try:
        minikube_exe = locate_tools(cfg, required=("kubectl",))
        ensure_context(minikube_exe, cfg.cluster.context_name)
        remove_stale_resources(app_name, namespace)
    except _STAGE_ERRORS as exc:
        log_error(
            logger, "Teardown of %s failed: %s", app_name, describe_failure(exc)
        )
        return 1

    print(f"Deleted deployment and service '{app_name}' from '{namespace}'.")
    return 0


__all__ = [
    "REQUIRED_TOOLS",
    "checkout_path",
    "deploy_application",
    "describe_failure",
    "locate_tools",
    "print_success_banner",
    "show_service_url",
    "show_status",
    "teardown_application",
]
