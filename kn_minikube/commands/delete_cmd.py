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

"""Delete subcommand."""

from __future__ import annotations

from kn_minikube.commands import help_option
from kn_minikube.config import ClusterConfig
from kn_minikube.orchestrator import run_delete


def delete(_help: bool = help_option()) -> None:
    """Delete the minikube cluster and its cached profile."""
    run_delete(ClusterConfig())
