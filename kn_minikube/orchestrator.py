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

"""Orchestration functions that compose domain modules into workflows."""

from __future__ import annotations

from collections.abc import Sequence

from rich.panel import Panel
from rich.table import Table

from kn_minikube import console
from kn_minikube.cluster import ClusterStatus, delete_cluster, ensure_cluster, query_status
from kn_minikube.components import install_mesh, install_platform
from kn_minikube.config import (
    MESH_NAMESPACES,
    MESH_POLICY,
    PLATFORM_NAMESPACES,
    PLATFORM_POLICY,
    ClusterConfig,
    InstallConfig,
    ResourceProfile,
)
from kn_minikube.constants import CMD_MINIKUBE, START_PREREQUISITES
from kn_minikube.readiness import wait_ready
from kn_minikube.state import FileProfileStore, ProfileStore
from kn_minikube.utils import require_commands

# ============================================================================
# Internal helpers
# ============================================================================


def _check_prerequisites(cmds: Sequence[str]) -> None:
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    require_commands(cmds)
    console.print("[green]\u2705 All required tools are available[/green]")


# ============================================================================
# Public API
# ============================================================================


def run_start(
    cluster_cfg: ClusterConfig,
    install_cfg: InstallConfig,
    *,
    force: bool = False,
    store: ProfileStore | None = None,
) -> None:
    """Bring up minikube, Istio and Knative, waiting for each layer to be ready.

    Args:
        cluster_cfg: Cluster size, driver and cache location.
        install_cfg: Manifest sources and readiness tuning.
        force: Recreate the cluster even if a matching one is running.
        store: Profile cache, or None to use the file at ``cluster_cfg.profile_cache``.

    Raises:
        KnMinikubeError: If any step fails.
    """
    if store is None:
        store = FileProfileStore(cluster_cfg.profile_cache)

    mesh_policy, platform_policy = MESH_POLICY, PLATFORM_POLICY
    if not install_cfg.detect_pod_failures:
        mesh_policy = mesh_policy.without_failure_detection()
        platform_policy = platform_policy.without_failure_detection()

    _check_prerequisites(START_PREREQUISITES)

    ensure_cluster(
        ResourceProfile(memory=cluster_cfg.memory, cpus=cluster_cfg.cpus),
        force,
        cluster_cfg.vm_driver,
        store,
        kubernetes_version=cluster_cfg.kubernetes_version,
    )

    install_mesh(
        install_cfg.istio_crds,
        install_cfg.istio_control_plane,
        install_cfg.exposure_mode_from,
        install_cfg.exposure_mode_to,
    )
    wait_ready(
        MESH_NAMESPACES,
        mesh_policy,
        interval=install_cfg.poll_interval,
        timeout=install_cfg.ready_timeout,
    )

    install_platform(
        install_cfg.knative_manifests,
        PLATFORM_NAMESPACES,
        selector=install_cfg.knative_crd_selector,
        tolerated_error=install_cfg.tolerated_crd_error,
        policy=platform_policy,
        interval=install_cfg.poll_interval,
        timeout=install_cfg.ready_timeout,
    )
    console.print("[bold green]\u2705 Knative is ready[/bold green]")


def run_delete(cluster_cfg: ClusterConfig, *, store: ProfileStore | None = None) -> None:
    """Delete the cluster and forget its cached profile."""
    if store is None:
        store = FileProfileStore(cluster_cfg.profile_cache)
    _check_prerequisites([CMD_MINIKUBE])
    delete_cluster()
    store.clear()


def run_status(cluster_cfg: ClusterConfig, *, store: ProfileStore | None = None) -> ClusterStatus:
    """Print the cluster status and cached profile.

    Returns:
        The parsed cluster status.
    """
    if store is None:
        store = FileProfileStore(cluster_cfg.profile_cache)
    _check_prerequisites([CMD_MINIKUBE])
    status = query_status()
    profile = ResourceProfile.parse(store.load())

    table = Table(title="minikube")
    table.add_column("Component")
    table.add_column("State")
    for name, state in status.components.items():
        table.add_row(name, state)
    console.print(table)
    console.print(f"Cached profile: {profile if profile else 'none'}")
    if status.healthy:
        console.print("[green]\u2705 Cluster is healthy[/green]")
    else:
        console.print("[yellow]\u26a0\ufe0f  Cluster is not running or not healthy[/yellow]")
    return status
