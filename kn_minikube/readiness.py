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

"""Pod readiness polling across namespaces."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, stop_never, wait_fixed

from kn_minikube import console, logger
from kn_minikube.config import ReadinessPolicy
from kn_minikube.constants import POD_LIST_TIMEOUT_SECONDS, POLL_INTERVAL_SECONDS
from kn_minikube.errors import PodFailureError, ReadinessTimeoutError
from kn_minikube.utils import run_kubectl


@dataclass(frozen=True)
class PodSnapshot:
    """Pod phases observed in one namespace at one poll.

    Attributes:
        namespace: Kubernetes namespace that was queried.
        phases: Phase of every pod in the namespace.
    """

    namespace: str
    phases: tuple[str, ...] = ()

    def done(self, policy: ReadinessPolicy) -> int:
        return sum(1 for p in self.phases if policy.is_done(p))

    def failed(self, policy: ReadinessPolicy) -> list[str]:
        return [p for p in self.phases if policy.is_failed(p)]


def get_pod_phases(namespace: str) -> PodSnapshot:
    """List pod phases in *namespace*.

    A namespace that does not exist yet, or a failed query, yields an empty
    snapshot so that it never blocks convergence.
    """
    ok, stdout, stderr = run_kubectl(
        ["get", "pods", "-n", namespace, "-o", "jsonpath={.items[*].status.phase}"],
        timeout=POD_LIST_TIMEOUT_SECONDS,
    )
    if not ok:
        logger.debug("Listing pods in %s failed: %s", namespace, stderr.strip())
        return PodSnapshot(namespace)
    return PodSnapshot(namespace, tuple(stdout.split()))


def _poll_once(namespaces: Sequence[str], policy: ReadinessPolicy) -> bool:
    """Take one snapshot of every namespace and report whether all pods are done.

    Raises:
        PodFailureError: If a pod is in one of the policy's failure phases.
    """
    done = total = 0
    for ns in namespaces:
        snapshot = get_pod_phases(ns)
        failed = snapshot.failed(policy)
        if failed:
            raise PodFailureError(
                f"{len(failed)} pod(s) in namespace '{ns}' entered phase {failed[0]}",
                f"run 'kubectl get pods -n {ns}' to inspect",
            )
        done += snapshot.done(policy)
        total += len(snapshot.phases)

    if done == total:
        console.print(f"[green]\u2705 All {policy.name} pods are ready ({done}/{total})[/green]")
        return True
    console.print(f"[yellow]   Waiting for {policy.name} pods: {done}/{total} ready[/yellow]")
    return False


def wait_ready(
    namespaces: Sequence[str],
    policy: ReadinessPolicy,
    *,
    interval: float = POLL_INTERVAL_SECONDS,
    timeout: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Block until every pod in *namespaces* is in one of the policy's done phases.

    Counts are aggregated across all namespaces; zero pods in total counts as
    converged. Progress is printed once per unconverged poll.

    Args:
        namespaces: Namespaces to poll, in order.
        policy: Phase classification for done and failed pods.
        interval: Seconds to sleep between polls.
        timeout: Seconds before giving up, or None to wait indefinitely.
        sleep: Sleep function used between polls.

    Raises:
        ReadinessTimeoutError: If *timeout* elapses before convergence.
        PodFailureError: If a pod enters a failure phase.
    """
    console.print(f"[yellow]\u2139\ufe0f  Waiting for {policy.name} pods in {', '.join(namespaces)}...[/yellow]")
    retrying = Retrying(
        retry=retry_if_result(lambda converged: not converged),
        wait=wait_fixed(interval),
        stop=stop_after_delay(timeout) if timeout is not None else stop_never,
        sleep=sleep,
    )
    try:
        retrying(_poll_once, namespaces, policy)
    except RetryError as err:
        raise ReadinessTimeoutError(f"Timed out after {timeout}s waiting for {policy.name} pods") from err
