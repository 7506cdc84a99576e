"""kubectl context and resource operations.

This module wraps the kubectl calls the reconciler needs: reading and
switching the current context, deleting stale resources, applying a manifest
through stdin and reading back a service's node port. All commands target
the current context; the reconciler is responsible for selecting it first.

Examples
--------
Switch to the minikube context if it is not already active:

    if current_context() != "minikube":
        use_context("minikube")

Read the node port assigned to a NodePort service:

    port = get_service_node_port("demo", "default")

"""

from __future__ import annotations

import subprocess

from minideploy.validation import ServiceAddressError

_NODE_PORT_JSONPATH = "jsonpath={.spec.ports[0].nodePort}"


def current_context() -> str:
    """Return the active kubectl context name.

    Returns:
        The context name, or an empty string when kubectl reports that no
        current context is set.

    """
    # S607: kubectl via PATH is standard; no user input
    result = subprocess.run(
        ["kubectl", "config", "current-context"],  # noqa: S607
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def list_contexts() -> list[str]:
    """Return the names of all contexts in the kubeconfig."""
    # S607: kubectl via PATH is standard; no user input
    result = subprocess.run(
        ["kubectl", "config", "get-contexts", "-o", "name"],  # noqa: S607
        capture_output=True,
        text=True,
        check=True,
    )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def context_exists(name: str) -> bool:
    """Check whether a context named ``name`` is configured."""
    return name in list_contexts()


def use_context(name: str) -> None:
    """Make ``name`` the current kubectl context."""
    # S603/S607: kubectl via PATH is standard; context name from settings
    subprocess.run(  # noqa: S603
        ["kubectl", "config", "use-context", name],  # noqa: S607
        check=True,
    )


def delete_resource(kind: str, name: str, namespace: str) -> None:
    """Delete a resource, treating "not found" as success.

    Args:
        kind: Resource kind, such as ``deployment`` or ``service``.
        name: Resource name.
        namespace: Namespace holding the resource.

    """
    # S603/S607: kubectl via PATH is standard; name and namespace validated
    subprocess.run(  # noqa: S603
        [  # noqa: S607
            "kubectl",
            "delete",
            kind,
            name,
            "--ignore-not-found",
            "-n",
            namespace,
        ],
        check=True,
    )


def apply_manifest(manifest: str, namespace: str) -> None:
    """Apply a manifest document to ``namespace`` via stdin.

    Args:
        manifest: JSON or YAML manifest text, passed through verbatim.
        namespace: Target namespace.

    """
    # S603/S607: kubectl via PATH is standard; manifest generated internally
    subprocess.run(  # noqa: S603
        ["kubectl", "apply", "-n", namespace, "-f", "-"],  # noqa: S607
        input=manifest,
        text=True,
        check=True,
    )


def get_service_node_port(name: str, namespace: str) -> int:
    """Return the node port assigned to the first port of a service.

    Raises:
        ServiceAddressError: If the service has no node port yet or the
            value is not numeric.
        subprocess.CalledProcessError: If kubectl fails, for example because
            the service does not exist.

    """
    # S603/S607: kubectl via PATH is standard; name and namespace validated
    result = subprocess.run(  # noqa: S603
        [  # noqa: S607
            "kubectl",
            "get",
            "service",
            name,
            "-n",
            namespace,
            "-o",
            _NODE_PORT_JSONPATH,
        ],
        capture_output=True,
        text=True,
        check=True,
    )
    output = result.stdout.strip()
    if not output.isdigit():
        msg = (
            f"Service '{name}' in namespace '{namespace}' has no node port "
            f"(got {output!r})"
        )
        raise ServiceAddressError(msg)
    return int(output)


def print_resources(selector: str, namespace: str) -> None:
    """Print deployments, services and pods matching ``selector``."""
    # S603/S607: kubectl via PATH is standard; selector built from app name
    subprocess.run(  # noqa: S603
        [  # noqa: S607
            "kubectl",
            "get",
            "deployment,service,pods",
            "-l",
            selector,
            "-n",
            namespace,
            "-o",
            "wide",
        ],
        check=True,
    )
