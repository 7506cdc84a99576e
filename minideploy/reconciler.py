"""Converge the local cluster on the desired deployment.

The reconciler runs five steps in a fixed order:

1. select the expected kubectl context, repairing it only when missing;
2. start minikube only when it is not already running;
3. delete any deployment/service left by a previous run;
4. apply the new deployment/service pair in one submission;
5. resolve the external URL from the node port and minikube IP.

Steps 1 and 2 skip their mutations when the cluster is already in the
desired state, and step 3 tolerates absent resources, so running the whole
sequence repeatedly converges on the same result. Pod readiness is not
awaited; the URL may briefly refuse connections after a fresh apply.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from minideploy import k8s, minikube
from minideploy.config import ClusterSettings
from minideploy.logging import get_logger, log_info
from minideploy.manifest import DeploymentManifest

if typ.TYPE_CHECKING:
    from minideploy.config import DeploymentIdentity

logger = get_logger(__name__)

_STALE_KINDS = ("deployment", "service")


class ContextAction(enum.StrEnum):
    """What context selection had to do."""

    ALREADY_ACTIVE = "already-active"
    SWITCHED = "switched"
    REPAIRED = "repaired"


@dataclasses.dataclass(frozen=True, slots=True)
class ReconcileReport:
    """Summary of one reconciliation pass."""

    context_action: ContextAction
    started_cluster: bool
    manifest: DeploymentManifest
    url: str


def ensure_context(minikube_exe: str, context_name: str) -> ContextAction:
    """Make ``context_name`` the active kubectl context.

    If it is already active nothing else is queried. Otherwise a missing
    context is regenerated with ``minikube update-context`` before switching.
    """
    if k8s.current_context() == context_name:
        log_info(logger, "Already using %s context.", context_name)
        return ContextAction.ALREADY_ACTIVE

    log_info(logger, "Current context is not %s, switching...", context_name)
    action = ContextAction.SWITCHED
    if not k8s.context_exists(context_name):
        log_info(logger, "%s context missing, running update-context...", context_name)
        minikube.update_context(minikube_exe)
        action = ContextAction.REPAIRED

    k8s.use_context(context_name)
    return action


def ensure_cluster_running(minikube_exe: str) -> bool:
    """Start minikube unless it is already running.

    Returns:
        True if the cluster had to be started.

    """
    if minikube.is_running(minikube_exe):
        log_info(logger, "Minikube is already running.")
        return False

    log_info(logger, "Minikube not running. Starting Minikube...")
    minikube.start(minikube_exe)
    return True


def remove_stale_resources(name: str, namespace: str) -> None:
    """Delete any deployment and service named ``name`` in ``namespace``."""
    log_info(logger, "Cleaning old deployment/service %s in %s...", name, namespace)
    for kind in _STALE_KINDS:
        k8s.delete_resource(kind, name, namespace)


def apply_deployment(manifest: DeploymentManifest) -> None:
    """Submit the deployment/service pair as one manifest."""
    log_info(logger, "Creating Kubernetes Deployment & Service %s...", manifest.name)
    k8s.apply_manifest(manifest.render(), manifest.namespace)
    log_info(logger, "Deployment applied successfully.")


def resolve_service_url(minikube_exe: str, name: str, namespace: str) -> str:
    """Compose ``http://<minikube-ip>:<node-port>`` for a service."""
    node_port = k8s.get_service_node_port(name, namespace)
    address = minikube.cluster_ip(minikube_exe)
    return f"http://{address}:{node_port}"


def reconcile_cluster(
    minikube_exe: str,
    identity: DeploymentIdentity,
    cluster: ClusterSettings | None = None,
) -> ReconcileReport:
    """Run all five reconciliation steps for ``identity``.

    Raises:
        subprocess.CalledProcessError: If any kubectl or minikube mutation
            or query fails.
        MiniDeployError: If the manifest is inconsistent or the URL cannot
            be resolved.

    """
    settings = cluster or ClusterSettings()
    manifest = DeploymentManifest.for_identity(identity, settings)
    manifest.validate()

    action = ensure_context(minikube_exe, settings.context_name)
    started = ensure_cluster_running(minikube_exe)
    remove_stale_resources(identity.app_name, identity.namespace)
    apply_deployment(manifest)
    url = resolve_service_url(minikube_exe, identity.app_name, identity.namespace)

    return ReconcileReport(
        context_action=action,
        started_cluster=started,
        manifest=manifest,
        url=url,
    )
