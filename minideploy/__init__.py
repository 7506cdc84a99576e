"""Clone, build, push and deploy an application to a local Minikube cluster.

The primary entrypoints are:

- deploy_application: Run the locate, clone, publish and reconcile stages
- DeploymentManifest: The deployment/service pair as a single value
- ToolLocator: Ordered candidate-resolver lookup for minikube

For lower-level operations, import directly from submodules:

- minideploy.source: Repository checkout
- minideploy.image: Docker build, login and push
- minideploy.minikube: Minikube lifecycle and address
- minideploy.k8s: kubectl context and resource operations
- minideploy.reconciler: Cluster reconciliation steps

"""

from __future__ import annotations

__version__ = "0.1.0"

from minideploy.config import (
    ClusterSettings,
    DeploymentIdentity,
    DeploySettings,
    ImageReference,
    validate_identity,
)
from minideploy.locator import FixedPathResolver, SearchPathResolver, ToolLocator
from minideploy.manifest import DeploymentManifest
from minideploy.orchestration import deploy_application
from minideploy.reconciler import ContextAction, ReconcileReport
from minideploy.results import DeployOutcome, Stage, StageResult
from minideploy.validation import (
    CommandFailedError,
    InvalidArgumentsError,
    ManifestValidationError,
    MiniDeployError,
    ServiceAddressError,
    ToolNotFoundError,
)

# Public API: only stable exports for external consumers
__all__ = [
    "ClusterSettings",
    "CommandFailedError",
    "ContextAction",
    "DeployOutcome",
    "DeploySettings",
    "DeploymentIdentity",
    "DeploymentManifest",
    "FixedPathResolver",
    "ImageReference",
    "InvalidArgumentsError",
    "ManifestValidationError",
    "MiniDeployError",
    "ReconcileReport",
    "SearchPathResolver",
    "ServiceAddressError",
    "Stage",
    "StageResult",
    "ToolLocator",
    "ToolNotFoundError",
    "__version__",
    "deploy_application",
    "validate_identity",
]
