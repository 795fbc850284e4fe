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

"""Utility functions for kubectl, minikube, manifest fetching, and command checks."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from pathlib import Path

import requests
import sh

from kn_minikube import logger
from kn_minikube.constants import (
    CMD_KUBECTL,
    CMD_MINIKUBE,
    KUBECTL_TIMEOUT_SECONDS,
    MANIFEST_FETCH_TIMEOUT_SECONDS,
)
from kn_minikube.errors import ApplyError, MissingDependencyError


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        MissingDependencyError: If the command is not found.
    """
    try:
        found = sh.which(cmd)
    except sh.ErrorReturnCode:
        found = None
    if not found:
        raise MissingDependencyError(f"Required command '{cmd}' not found. Please install it first.")


def require_commands(cmds: Iterable[str]) -> None:
    """Check each command in order, failing on the first one missing."""
    for cmd in cmds:
        require_command(cmd)


def _run(argv: list[str], timeout: int | None, input: str | None = None) -> tuple[bool, str, str]:
    logger.debug("Running: %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


def run_kubectl(
    args: list[str],
    timeout: int = KUBECTL_TIMEOUT_SECONDS,
    input: str | None = None,
) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because callers inspect stderr for specific
    error strings (e.g. the tolerated CRD registration error) and need stdout
    and stderr kept apart.

    Args:
        args: kubectl arguments (e.g. ``["get", "pods", "-n", "default"]``).
        timeout: Maximum seconds to wait for the command to complete.
        input: Text written to kubectl's stdin, for ``apply -f -``.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    return _run([CMD_KUBECTL, *args], timeout, input)


def run_minikube(args: list[str], timeout: int | None = None) -> tuple[bool, str, str]:
    """Run a minikube command via subprocess and return (success, stdout, stderr).

    ``minikube status`` exits non-zero whenever any component is stopped, so
    the exit code alone is not an error signal for it.

    Args:
        args: minikube arguments (e.g. ``["status"]``).
        timeout: Maximum seconds to wait, or None for no limit.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    return _run([CMD_MINIKUBE, *args], timeout)


def fetch_manifest(source: str, timeout: int = MANIFEST_FETCH_TIMEOUT_SECONDS) -> str:
    """Return the text of a manifest from an http(s) URL or a local path.

    Args:
        source: URL or filesystem path of the manifest.
        timeout: Seconds to wait for the HTTP response.

    Raises:
        ApplyError: If the manifest cannot be retrieved.
    """
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as err:
            raise ApplyError(f"Failed to fetch {source}", str(err)) from err
        return response.text
    try:
        return Path(source).read_text()
    except (OSError, UnicodeDecodeError) as err:
        raise ApplyError(f"Failed to read {source}", str(err)) from err
