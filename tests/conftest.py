"""Pytest configuration and shared fixtures."""

from unittest import mock

import pytest
import sh
from hypothesis import Verbosity, settings

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")

HEALTHY_STATUS = """host: Running
kubelet: Running
apiserver: Running
kubectl: Correctly Configured: pointing to minikube-vm at 192.168.99.100
"""

STOPPED_STATUS = """host: Stopped
kubelet:
apiserver:
kubectl:
"""


class MemoryProfileStore:
    """In-memory ProfileStore."""

    def __init__(self, value=None):
        self.value = value
        self.saved = []

    def load(self):
        return self.value

    def save(self, profile):
        self.value = profile
        self.saved.append(profile)

    def clear(self):
        self.value = None


class FakeKubectl:
    """Stand-in for run_kubectl.

    ``pods`` maps a namespace to a list of polls, each poll a list of phases.
    Polls are consumed in order; the last one repeats. Namespaces not in
    ``pods`` behave like kubectl with no resources found.
    ``responses`` maps an action name (see ``action``) to (ok, stdout, stderr).
    """

    def __init__(self):
        self.calls = []
        self.inputs = []
        self.pods = {}
        self.responses = {}

    @staticmethod
    def action(args):
        if args[:2] == ["get", "pods"]:
            return "get-pods"
        if args[0] == "apply" and "--selector" in args:
            return "apply-crds"
        if args[0] == "apply" and args[-1] == "-":
            return "apply-stdin"
        return args[0]

    def actions(self):
        return [self.action(args) for args in self.calls]

    def __call__(self, args, timeout=None, input=None):
        args = list(args)
        self.calls.append(args)
        self.inputs.append(input)
        if self.action(args) == "get-pods":
            polls = self.pods.get(args[3])
            if polls is None:
                return True, "", ""
            phases = polls.pop(0) if len(polls) > 1 else polls[0]
            return True, " ".join(phases), ""
        return self.responses.get(self.action(args), (True, "", ""))


@pytest.fixture
def store():
    """Empty in-memory profile store."""
    return MemoryProfileStore()


@pytest.fixture
def kubectl():
    """Patch every run_kubectl import with one FakeKubectl."""
    fake = FakeKubectl()
    with mock.patch("kn_minikube.components.run_kubectl", fake), \
            mock.patch("kn_minikube.readiness.run_kubectl", fake):
        yield fake


@pytest.fixture
def fake_sh():
    """Patch the sh module used by cluster operations, keeping its real exception classes."""
    fake = mock.MagicMock()
    fake.ErrorReturnCode = sh.ErrorReturnCode
    fake.ErrorReturnCode_1 = sh.ErrorReturnCode_1
    with mock.patch("kn_minikube.cluster.sh", fake):
        yield fake


@pytest.fixture
def minikube_status():
    """Patch ``minikube status`` output; set ``.return_value`` to (ok, stdout, stderr)."""
    with mock.patch("kn_minikube.cluster.run_minikube") as status:
        status.return_value = (False, STOPPED_STATUS, "")
        yield status


@pytest.fixture
def no_sleep():
    """Sleep function that records requested delays instead of sleeping."""
    return mock.Mock(return_value=None)
