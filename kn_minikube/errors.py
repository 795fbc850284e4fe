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

"""Exception hierarchy. Every error here is fatal to the running command."""

from __future__ import annotations


class KnMinikubeError(RuntimeError):
    """Base exception for all kn-minikube errors.

    Attributes:
        message: Main error message.
        details: Additional details such as captured stderr, or None.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            The message, followed by the details when present.
        """
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class MissingDependencyError(KnMinikubeError):
    """A required executable is not on PATH."""


class UnknownCommandError(KnMinikubeError):
    """No command, or an unrecognised one, was given on the command line."""


class BadOptionError(KnMinikubeError):
    """An unknown flag or an invalid option value was given."""


class ClusterOperationError(KnMinikubeError):
    """minikube failed to start or delete the cluster."""


class PersistenceError(KnMinikubeError):
    """The cluster profile cache could not be written."""


class ApplyError(KnMinikubeError):
    """kubectl apply of a manifest failed, or the manifest could not be fetched."""


class LabelError(KnMinikubeError):
    """kubectl label failed."""


class ReadinessTimeoutError(KnMinikubeError):
    """Pods did not converge before the readiness timeout."""


class PodFailureError(KnMinikubeError):
    """A pod reached a failure phase while waiting for readiness."""
