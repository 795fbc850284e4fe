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

"""Start subcommand: minikube + Istio + Knative."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from kn_minikube.commands import help_option
from kn_minikube.config import ClusterConfig, InstallConfig
from kn_minikube.errors import BadOptionError
from kn_minikube.orchestrator import run_start


def start(
    force: bool = typer.Option(
        False, "-f", "--force", help="Recreate the cluster even if a matching one is running"),
    vm_driver: str | None = typer.Option(
        None, "-d", "--vm-driver", help="minikube VM driver (default: virtualbox, or KN_VM_DRIVER)"),
    memory: int | None = typer.Option(
        None, "-m", "--memory", min=1, help="VM memory in MB (default: 16384, or KN_MEMORY)"),
    cpus: int | None = typer.Option(
        None, "-c", "--cpus", min=1, help="VM CPU count (default: 8, or KN_CPUS)"),
    timeout: float | None = typer.Option(
        None, "--timeout", min=1, help="Seconds to wait for pods before failing (default: wait forever)"),
    _help: bool = help_option(),
) -> None:
    """Start minikube and install Istio and Knative, waiting until all pods run."""
    cluster_overrides = {
        key: value
        for key, value in (("vm_driver", vm_driver), ("memory", memory), ("cpus", cpus))
        if value is not None
    }
    try:
        cluster_cfg = ClusterConfig(**cluster_overrides)
        install_cfg = InstallConfig()
    except ValidationError as err:
        raise BadOptionError("Invalid configuration", str(err)) from err
    if timeout is not None:
        install_cfg = install_cfg.model_copy(update={"ready_timeout": timeout})

    run_start(cluster_cfg, install_cfg, force=force)
