"""Minikube lifecycle and address operations.

Every function takes the resolved minikube executable path as its first
argument, since minikube is frequently installed outside ``PATH``.

Public API
----------
- ``update_context``: Regenerate the kubectl context from minikube's state.
- ``is_running``: Report whether the cluster runtime is up.
- ``start``: Start the cluster and block until ready or failed.
- ``cluster_ip``: Return the node address of the cluster.

"""

from __future__ import annotations

import subprocess

from minideploy.validation import ServiceAddressError


def update_context(minikube: str) -> None:
    """Rewrite the kubeconfig entry for the minikube cluster."""
    # S603: executable path comes from the tool locator
    subprocess.run([minikube, "update-context"], check=True)  # noqa: S603


def is_running(minikube: str) -> bool:
    """Check whether the minikube cluster is running.

    ``minikube status`` exits non-zero for a stopped or missing cluster, so
    the exit code alone is the answer and output is discarded.
    """
    result = subprocess.run(  # noqa: S603
        [minikube, "status"],
        capture_output=True,
        check=False,
    )
    return result.returncode == 0


def start(minikube: str) -> None:
    """Start the minikube cluster.

    Raises:
        subprocess.CalledProcessError: If minikube fails to start.

    """
    subprocess.run([minikube, "start"], check=True)  # noqa: S603


def cluster_ip(minikube: str) -> str:
    """Return the IP address of the minikube node.

    Raises:
        ServiceAddressError: If minikube prints no address.
        subprocess.CalledProcessError: If the command fails.

    """
    result = subprocess.run(  # noqa: S603
        [minikube, "ip"],
        capture_output=True,
        text=True,
        check=True,
    )
    address = result.stdout.strip()
    if not address:
        msg = "minikube ip returned an empty address"
        raise ServiceAddressError(msg)
    return address
