# /*
# Copyright 2026 The kn-minikube Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""minikube cluster lifecycle: status, reuse decision, delete and create."""

from __future__ import annotations

from dataclasses import dataclass, field

import sh
from rich.panel import Panel

from kn_minikube import console, logger
from kn_minikube.config import ResourceProfile
from kn_minikube.constants import (
    ADMISSION_PLUGINS,
    STATUS_CONFIGURED,
    STATUS_CORRECTLY_CONFIGURED,
    STATUS_KEY_APISERVER,
    STATUS_KEY_HOST,
    STATUS_KEY_KUBELET,
    STATUS_KEYS_CLIENT_CONFIG,
    STATUS_RUNNING,
)
from kn_minikube.errors import ClusterOperationError
from kn_minikube.state import ProfileStore
from kn_minikube.utils import run_minikube


# ============================================================================
# Cluster status
# ============================================================================

@dataclass(frozen=True)
class ClusterStatus:
    """Subsystem states reported by ``minikube status``.

    Attributes:
        components: Mapping of subsystem name (``host``, ``kubelet``, ...) to state.
    """

    components: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, output: str) -> ClusterStatus:
        """Parse ``key: value`` lines, keeping everything after the first colon."""
        components: dict[str, str] = {}
        for line in output.splitlines():
            key, sep, value = line.partition(":")
            if sep:
                components[key.strip().lower()] = value.strip()
        return cls(components)

    def state(self, key: str) -> str:
        return self.components.get(key, "")

    @property
    def client_configuration(self) -> str:
        for key in STATUS_KEYS_CLIENT_CONFIG:
            if key in self.components:
                return self.components[key]
        return ""

    @property
    def healthy(self) -> bool:
        """True when host, kubelet and apiserver run and kubectl points at the cluster."""
        if any(self.state(k) != STATUS_RUNNING for k in (STATUS_KEY_HOST, STATUS_KEY_KUBELET, STATUS_KEY_APISERVER)):
            return False
        client = self.client_configuration
        return client.startswith(STATUS_CORRECTLY_CONFIGURED) or client == STATUS_CONFIGURED


def query_status() -> ClusterStatus:
    """Return the parsed output of ``minikube status``.

    A stopped or missing cluster makes minikube exit non-zero; only the parsed
    states matter, so the exit code is logged and otherwise ignored.
    """
    ok, stdout, stderr = run_minikube(["status"])
    if not ok:
        logger.debug("minikube status exited non-zero: %s", stderr.strip())
    return ClusterStatus.parse(stdout)


def can_reuse(
    profile: ResourceProfile,
    cached: str | None,
    force_recreate: bool,
    status: ClusterStatus,
) -> bool:
    """Decide whether the running cluster already matches the requested profile.

    Args:
        profile: Requested resource profile.
        cached: Profile string of the last successful start, or None.
        force_recreate: Whether the caller asked for a fresh cluster.
        status: Current cluster status.

    Returns:
        True only if the cache matches, recreation was not forced, and the cluster is healthy.
    """
    return (
        cached is not None
        and cached == str(profile)
        and not force_recreate
        and status.healthy
    )


# ============================================================================
# Cluster operations
# ============================================================================

def delete_cluster() -> None:
    """Delete the default minikube cluster, tolerating a missing one.

    Raises:
        ClusterOperationError: If minikube fails for any reason other than a missing cluster.
    """
    console.print("[yellow]\u2139\ufe0f  Deleting minikube cluster...[/yellow]")
    try:
        sh.minikube("delete")
        console.print("[green]\u2705 Cluster deleted[/green]")
    except sh.ErrorReturnCode_1:
        console.print("[yellow]\u26a0\ufe0f  Cluster not found or already deleted[/yellow]")
    except sh.ErrorReturnCode as err:
        raise ClusterOperationError("Failed to delete minikube cluster", _stderr(err)) from err


def create_cluster(profile: ResourceProfile, vm_driver: str, kubernetes_version: str | None = None) -> None:
    """Start a new minikube cluster with the given size.

    Args:
        profile: Memory and CPU count of the VM.
        vm_driver: minikube virtualization driver.
        kubernetes_version: Kubernetes version to run, or None for minikube's default.

    Raises:
        ClusterOperationError: If minikube start fails.
    """
    console.print(f"[yellow]\u2139\ufe0f  Starting minikube ({profile}, driver={vm_driver})...[/yellow]")
    args = [
        "start",
        f"--vm-driver={vm_driver}",
        f"--memory={profile.memory}",
        f"--cpus={profile.cpus}",
        f"--extra-config=apiserver.enable-admission-plugins={','.join(ADMISSION_PLUGINS)}",
    ]
    if kubernetes_version:
        args.append(f"--kubernetes-version={kubernetes_version}")
    try:
        sh.minikube(*args)
    except sh.ErrorReturnCode as err:
        raise ClusterOperationError("Failed to start minikube", _stderr(err)) from err
    console.print("[green]\u2705 Cluster started[/green]")


def ensure_cluster(
    profile: ResourceProfile,
    force_recreate: bool,
    vm_driver: str,
    store: ProfileStore,
    kubernetes_version: str | None = None,
) -> bool:
    """Make sure a healthy cluster with the requested profile is running.

    Reuses the running cluster when it matches; otherwise deletes it and
    starts a new one, then records the profile in *store*.

    Args:
        profile: Requested resource profile.
        force_recreate: Recreate even if a matching cluster is running.
        vm_driver: minikube virtualization driver.
        store: Profile cache consulted for reuse and updated after a start.
        kubernetes_version: Kubernetes version to run, or None for minikube's default.

    Returns:
        True if a new cluster was created, False if the running one was reused.

    Raises:
        ClusterOperationError: If minikube fails to delete or start the cluster.
        PersistenceError: If the profile cannot be saved after a start.
    """
    console.print(Panel.fit("Starting minikube", style="bold blue"))
    status = query_status()
    cached = store.load()
    if can_reuse(profile, cached, force_recreate, status):
        console.print(f"[green]\u2705 Already started ({profile})[/green]")
        return False

    logger.info("Recreating cluster (cached=%s, requested=%s, force=%s, healthy=%s)",
                cached, profile, force_recreate, status.healthy)
    delete_cluster()
    create_cluster(profile, vm_driver, kubernetes_version)
    store.save(str(profile))
    return True


def _stderr(err: sh.ErrorReturnCode) -> str:
    raw = err.stderr or b""
    if isinstance(raw, bytes):
        raw = raw.decode(errors="replace")
    return raw.strip()[:500]
