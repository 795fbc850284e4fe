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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_dependencies() -> dict:
    """Load manifest sources and cluster parameters from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = Path(__file__).resolve().parent / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- External tools --
CMD_MINIKUBE = "minikube"
CMD_KUBECTL = "kubectl"
START_PREREQUISITES = (CMD_MINIKUBE, CMD_KUBECTL)

# -- Cluster defaults --
DEFAULT_VM_DRIVER = "virtualbox"
DEFAULT_MEMORY_MB = 16384
DEFAULT_CPUS = 8
DEFAULT_PROFILE_CACHE = Path.home() / ".kn-minikube" / "profile"
ADMISSION_PLUGINS = dep_value("minikube", "admission_plugins", default=[])

# -- minikube status --
STATUS_RUNNING = "Running"
STATUS_CORRECTLY_CONFIGURED = "Correctly Configured"
STATUS_CONFIGURED = "Configured"
STATUS_KEY_HOST = "host"
STATUS_KEY_KUBELET = "kubelet"
STATUS_KEY_APISERVER = "apiserver"
STATUS_KEYS_CLIENT_CONFIG = ("kubectl", "kubeconfig")

# -- Namespaces --
NS_DEFAULT = "default"
NS_MESH = tuple(dep_value("istio", "namespaces", default=["istio-system"]))
NS_PLATFORM = tuple(dep_value("knative", "namespaces", default=[]))

# -- Istio --
ISTIO_CRDS = dep_value("istio", "crds")
ISTIO_CONTROL_PLANE = dep_value("istio", "control_plane")
EXPOSURE_MODE_FROM = dep_value("istio", "exposure_mode", "from", default="LoadBalancer")
EXPOSURE_MODE_TO = dep_value("istio", "exposure_mode", "to", default="NodePort")
ISTIO_INJECTION_LABEL = dep_value("istio", "injection_label", default="istio-injection=enabled")

# -- Knative --
KNATIVE_MANIFESTS = tuple(dep_value("knative", "manifests", default=[]))
KNATIVE_CRD_SELECTOR = dep_value("knative", "crd_selector", default="knative.dev/crd-install=true")
KNATIVE_TOLERATED_CRD_ERROR = dep_value("knative", "tolerated_crd_error", default="no matches for kind")

# -- Pod phases --
PHASE_RUNNING = "Running"
PHASE_COMPLETED = "Completed"
PHASE_SUCCEEDED = "Succeeded"
PHASE_FAILED = "Failed"

# -- Polling --
POLL_INTERVAL_SECONDS = 5
MANIFEST_FETCH_TIMEOUT_SECONDS = 60
KUBECTL_TIMEOUT_SECONDS = 300
POD_LIST_TIMEOUT_SECONDS = 60
