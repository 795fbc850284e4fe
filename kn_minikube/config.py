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

"""Configuration classes and config models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kn_minikube.constants import (
    DEFAULT_CPUS,
    DEFAULT_MEMORY_MB,
    DEFAULT_PROFILE_CACHE,
    DEFAULT_VM_DRIVER,
    EXPOSURE_MODE_FROM,
    EXPOSURE_MODE_TO,
    ISTIO_CONTROL_PLANE,
    ISTIO_CRDS,
    KNATIVE_CRD_SELECTOR,
    KNATIVE_MANIFESTS,
    KNATIVE_TOLERATED_CRD_ERROR,
    NS_MESH,
    NS_PLATFORM,
    PHASE_COMPLETED,
    PHASE_FAILED,
    PHASE_RUNNING,
    PHASE_SUCCEEDED,
    POLL_INTERVAL_SECONDS,
)

_PROFILE_RE = re.compile(r"^memory=(\d+),cpus=(\d+)$")


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """minikube cluster configuration, auto-loaded from KN_* env vars.

    Attributes:
        vm_driver: minikube virtualization driver.
        memory: Memory in MB given to the minikube VM.
        cpus: CPU count given to the minikube VM.
        profile_cache: File holding the last started resource profile.
        kubernetes_version: Kubernetes version passed to minikube, or None for its default.
    """

    model_config = SettingsConfigDict(env_prefix="KN_", extra="ignore")

    vm_driver: str = Field(default=DEFAULT_VM_DRIVER, min_length=1)
    memory: int = Field(default=DEFAULT_MEMORY_MB, ge=1)
    cpus: int = Field(default=DEFAULT_CPUS, ge=1)
    profile_cache: Path = DEFAULT_PROFILE_CACHE
    kubernetes_version: str | None = Field(default=None, pattern=r"^v\d+\.\d+\.\d+$")

    @field_validator("profile_cache")
    @classmethod
    def expand_profile_cache(cls, value: Path) -> Path:
        return value.expanduser()


class InstallConfig(BaseSettings):
    """Manifest sources and readiness tuning, auto-loaded from KN_* env vars.

    Attributes:
        istio_crds: Istio CRD manifest source.
        istio_control_plane: Istio control-plane manifest source.
        exposure_mode_from: Service type rewritten in the control-plane manifest.
        exposure_mode_to: Replacement service type.
        knative_manifests: Ordered Knative manifest sources.
        knative_crd_selector: Label selector matching CRD-installation resources.
        tolerated_crd_error: Error substring tolerated by the CRD apply pass.
        poll_interval: Seconds between readiness polls.
        ready_timeout: Seconds before a readiness wait gives up, or None to wait forever.
        detect_pod_failures: Whether a Failed pod aborts the readiness wait.
    """

    model_config = SettingsConfigDict(env_prefix="KN_", extra="ignore")

    istio_crds: str = ISTIO_CRDS
    istio_control_plane: str = ISTIO_CONTROL_PLANE
    exposure_mode_from: str = Field(default=EXPOSURE_MODE_FROM, min_length=1)
    exposure_mode_to: str = EXPOSURE_MODE_TO
    knative_manifests: list[str] = Field(default_factory=lambda: list(KNATIVE_MANIFESTS))
    knative_crd_selector: str = KNATIVE_CRD_SELECTOR
    tolerated_crd_error: str = KNATIVE_TOLERATED_CRD_ERROR
    poll_interval: float = Field(default=POLL_INTERVAL_SECONDS, gt=0)
    ready_timeout: float | None = Field(default=None, gt=0)
    detect_pod_failures: bool = True


# ============================================================================
# Value types
# ============================================================================

@dataclass(frozen=True)
class ResourceProfile:
    """Requested size of the minikube VM.

    The string form ``memory=<M>,cpus=<C>`` is what the profile cache stores
    and what reuse decisions compare.

    Attributes:
        memory: Memory in MB.
        cpus: CPU count.
    """

    memory: int
    cpus: int

    def __str__(self) -> str:
        return f"memory={self.memory},cpus={self.cpus}"

    @classmethod
    def parse(cls, value: str | None) -> ResourceProfile | None:
        """Parse a cached profile string, returning None if it is malformed."""
        if not value:
            return None
        m = _PROFILE_RE.match(value.strip())
        if not m:
            return None
        return cls(memory=int(m.group(1)), cpus=int(m.group(2)))


@dataclass(frozen=True)
class ReadinessPolicy:
    """Pod phase classification used by the readiness poller.

    Phases are compared case-insensitively.

    Attributes:
        name: Human-readable name used in progress output.
        done_phases: Phases counted as converged.
        failure_phases: Phases that abort the wait. Empty disables failure detection.
    """

    name: str
    done_phases: frozenset[str]
    failure_phases: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "done_phases", frozenset(p.lower() for p in self.done_phases))
        object.__setattr__(self, "failure_phases", frozenset(p.lower() for p in self.failure_phases))

    def is_done(self, phase: str) -> bool:
        return phase.lower() in self.done_phases

    def is_failed(self, phase: str) -> bool:
        return phase.lower() in self.failure_phases

    def without_failure_detection(self) -> ReadinessPolicy:
        return ReadinessPolicy(self.name, self.done_phases, frozenset())


# Mesh pods are long-lived services, but one-shot jobs in istio-system may also complete.
MESH_POLICY = ReadinessPolicy(
    name="istio",
    done_phases=frozenset({PHASE_RUNNING, PHASE_COMPLETED, PHASE_SUCCEEDED}),
    failure_phases=frozenset({PHASE_FAILED}),
)

PLATFORM_POLICY = ReadinessPolicy(
    name="knative",
    done_phases=frozenset({PHASE_RUNNING}),
    failure_phases=frozenset({PHASE_FAILED}),
)

MESH_NAMESPACES: tuple[str, ...] = NS_MESH
PLATFORM_NAMESPACES: tuple[str, ...] = NS_PLATFORM
