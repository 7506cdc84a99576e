"""Declarative Deployment and Service pair for the application.

The pair is modelled as one value so it can be inspected and validated in
unit tests without a cluster, then rendered to a single ``v1/List`` JSON
document for one ``kubectl apply`` call.

Examples
--------
Render the manifest for a deployment identity:

    manifest = DeploymentManifest.for_identity(identity)
    kubectl_input = manifest.render()

"""

from __future__ import annotations

import dataclasses
import json
import typing as typ

from minideploy.config import ClusterSettings
from minideploy.validation import ManifestValidationError

if typ.TYPE_CHECKING:
    from minideploy.config import DeploymentIdentity

APP_LABEL = "app"


@dataclasses.dataclass(frozen=True, slots=True)
class DeploymentManifest:
    """Desired state for the application's Deployment and Service.

    Attributes:
        name: Name shared by the Deployment, Service, container and label.
        namespace: Namespace both resources live in.
        image: Fully qualified image reference for the container.
        container_port: Port the container listens on.
        replicas: Desired pod count.
        service_port: Port exposed by the NodePort service.

    """

    name: str
    namespace: str
    image: str
    container_port: int
    replicas: int = 2
    service_port: int = 80

    @classmethod
    def for_identity(
        cls,
        identity: DeploymentIdentity,
        cluster: ClusterSettings | None = None,
    ) -> DeploymentManifest:
        """Build the manifest for ``identity`` using cluster defaults."""
        settings = cluster or ClusterSettings()
        return cls(
            name=identity.app_name,
            namespace=identity.namespace,
            image=str(identity.image),
            container_port=identity.container_port,
            replicas=settings.replicas,
            service_port=settings.service_port,
        )

    @property
    def labels(self) -> dict[str, str]:
        """Pod labels; also used as the selector of both resources."""
        return {APP_LABEL: self.name}

    @property
    def selector(self) -> str:
        """Label selector string for kubectl ``-l``."""
        return f"{APP_LABEL}={self.name}"

    def deployment(self) -> dict[str, typ.Any]:
        """Return the Deployment resource."""
        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "replicas": self.replicas,
                "selector": {"matchLabels": self.labels},
                "template": {
                    "metadata": {"labels": self.labels},
                    "spec": {
                        "containers": [
                            {
                                "name": self.name,
                                "image": self.image,
                                "ports": [{"containerPort": self.container_port}],
                            }
                        ]
                    },
                },
            },
        }

    def service(self) -> dict[str, typ.Any]:
        """Return the NodePort Service resource."""
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "type": "NodePort",
                "selector": self.labels,
                "ports": [
                    {
                        "protocol": "TCP",
                        "port": self.service_port,
                        "targetPort": self.container_port,
                    }
                ],
            },
        }

    def as_list(self) -> dict[str, typ.Any]:
        """Return both resources wrapped in a ``v1/List``."""
        return {
            "apiVersion": "v1",
            "kind": "List",
            "items": [self.deployment(), self.service()],
        }

    def validate(self) -> None:
        """Check the pair is internally consistent.

        The service must select exactly the pods the deployment creates and
        must forward to the port the container exposes.

        Raises:
            ManifestValidationError: On the first inconsistency found.

        """
        if self.replicas < 1:
            msg = f"replicas must be >= 1, got {self.replicas}"
            raise ManifestValidationError(msg)
        if not self.image:
            msg = "image cannot be empty"
            raise ManifestValidationError(msg)

        deployment = self.deployment()
        service = self.service()
        template = deployment["spec"]["template"]
        pod_labels = template["metadata"]["labels"]
        if deployment["spec"]["selector"]["matchLabels"] != pod_labels:
            msg = "deployment selector does not match its pod template labels"
            raise ManifestValidationError(msg)
        if service["spec"]["selector"] != pod_labels:
            msg = "service selector does not match the deployment's pods"
            raise ManifestValidationError(msg)

        exposed = {
            port["containerPort"]
            for container in template["spec"]["containers"]
            for port in container["ports"]
        }
        for port in service["spec"]["ports"]:
            if port["targetPort"] not in exposed:
                msg = (
                    f"service targetPort {port['targetPort']} is not exposed "
                    f"by any container (exposed: {sorted(exposed)})"
                )
                raise ManifestValidationError(msg)

    def render(self) -> str:
        """Validate and serialize the manifest for ``kubectl apply -f -``."""
        self.validate()
        return json.dumps(self.as_list(), indent=2)
