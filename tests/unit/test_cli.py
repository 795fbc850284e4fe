"""Tests for the kn-minikube command line."""

from unittest import mock

import pytest
from conftest import HEALTHY_STATUS
from typer.testing import CliRunner

from kn_minikube.cli import app, main
from kn_minikube.config import MESH_POLICY, PLATFORM_POLICY
from kn_minikube.errors import BadOptionError, MissingDependencyError
from kn_minikube.utils import require_command, require_commands

runner = CliRunner()


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Isolate the profile cache and KN_* settings."""
    for var in ("KN_VM_DRIVER", "KN_MEMORY", "KN_CPUS", "KN_READY_TIMEOUT", "KN_KUBERNETES_VERSION",
                "KN_POLL_INTERVAL", "KN_DETECT_POD_FAILURES"):
        monkeypatch.delenv(var, raising=False)
    cache = tmp_path / "kn" / "profile"
    monkeypatch.setenv("KN_PROFILE_CACHE", str(cache))
    return cache


@pytest.fixture
def tools():
    """Pretend every external tool is on PATH."""
    with mock.patch("kn_minikube.utils.sh") as fake:
        fake.which.side_effect = lambda cmd: f"/usr/local/bin/{cmd}"
        yield fake


@pytest.fixture
def istio_manifest():
    with mock.patch("kn_minikube.components.fetch_manifest", return_value="type: LoadBalancer\n") as fetch:
        yield fetch


# ============================================================================
# Usage errors
# ============================================================================

def test_no_arguments_is_fatal(capsys):
    assert main([]) == 1
    assert "command required" in capsys.readouterr().err


def test_unknown_command_is_fatal(capsys):
    assert main(["stop"]) == 1
    assert "unknown command" in capsys.readouterr().err


def test_unknown_flag_is_fatal(capsys):
    assert main(["start", "--bogus"]) == 1
    assert "--bogus" in capsys.readouterr().err


def test_unknown_flag_is_bad_option(capsys):
    with mock.patch("kn_minikube.cli.BadOptionError", wraps=BadOptionError) as bad_option:
        assert main(["start", "--bogus"]) == 1
    bad_option.assert_called_once()
    assert "No such option" in capsys.readouterr().err


def test_interrupt_reports_aborted(env, capsys):
    with mock.patch("kn_minikube.commands.start_cmd.run_start", side_effect=KeyboardInterrupt):
        assert main(["start"]) == 1
    assert "Aborted" in capsys.readouterr().err


def test_invalid_memory_is_fatal(capsys):
    assert main(["start", "-m", "lots"]) == 1


def test_short_help_exits_one(capsys):
    assert main(["start", "-h"]) == 1
    assert main(["-h"]) == 1


def test_start_help_lists_flags():
    result = runner.invoke(app, ["start", "-h"])
    assert result.exit_code == 1
    for flag in ("--force", "--vm-driver", "--memory", "--cpus"):
        assert flag in result.output


# ============================================================================
# Dependency checks
# ============================================================================

def test_require_command_missing():
    with mock.patch("kn_minikube.utils.sh") as fake:
        fake.which.return_value = None
        with pytest.raises(MissingDependencyError) as exc_info:
            require_command("minikube")
    assert "minikube" in str(exc_info.value)


def test_require_commands_stops_at_first_missing():
    with mock.patch("kn_minikube.utils.sh") as fake:
        fake.which.side_effect = lambda cmd: None if cmd == "minikube" else f"/bin/{cmd}"
        with pytest.raises(MissingDependencyError):
            require_commands(["minikube", "kubectl"])
    assert [c.args[0] for c in fake.which.call_args_list] == ["minikube"]


def test_start_missing_dependency_runs_nothing(env, fake_sh, capsys):
    with mock.patch("kn_minikube.utils.sh") as fake:
        fake.which.return_value = None
        assert main(["start"]) == 1
    fake_sh.minikube.assert_not_called()
    assert "not found" in capsys.readouterr().err


# ============================================================================
# End-to-end start
# ============================================================================

def test_first_start_creates_and_caches_profile(env, tools, fake_sh, minikube_status, kubectl, istio_manifest):
    assert main(["start", "-m", "8192", "-c", "4"]) == 0

    assert [c.args[0] for c in fake_sh.minikube.call_args_list] == ["delete", "start"]
    start_args = fake_sh.minikube.call_args_list[1].args
    assert "--memory=8192" in start_args
    assert "--cpus=4" in start_args
    assert "--vm-driver=virtualbox" in start_args
    assert env.read_text() == "memory=8192,cpus=4"
    assert kubectl.actions()[:3] == ["apply", "apply-stdin", "label"]
    assert "apply-crds" in kubectl.actions()


def test_second_start_reuses_cluster(env, tools, fake_sh, minikube_status, kubectl, istio_manifest, capsys):
    assert main(["start", "-m", "8192", "-c", "4"]) == 0
    fake_sh.minikube.reset_mock()
    minikube_status.return_value = (True, HEALTHY_STATUS, "")
    capsys.readouterr()

    assert main(["start", "-m", "8192", "-c", "4"]) == 0

    fake_sh.minikube.assert_not_called()
    assert "Already started" in capsys.readouterr().err


def test_force_recreates_matching_cluster(env, tools, fake_sh, minikube_status, kubectl, istio_manifest):
    env.parent.mkdir(parents=True)
    env.write_text("memory=16384,cpus=8")
    minikube_status.return_value = (True, HEALTHY_STATUS, "")

    assert main(["start", "-f", "-d", "kvm2"]) == 0

    assert [c.args[0] for c in fake_sh.minikube.call_args_list] == ["delete", "start"]
    assert "--vm-driver=kvm2" in fake_sh.minikube.call_args_list[1].args


def test_start_apply_failure_exits_one(env, tools, fake_sh, minikube_status, kubectl, istio_manifest, capsys):
    kubectl.responses["apply"] = (False, "", "the server could not find the requested resource")

    assert main(["start"]) == 1
    assert "Failed to apply Istio CRDs" in capsys.readouterr().err


# ============================================================================
# Readiness settings reaching the pod waits
# ============================================================================

def pod_polls(kubectl, namespace):
    return sum(1 for args in kubectl.calls if args[:2] == ["get", "pods"] and args[3] == namespace)


def test_start_waits_with_mesh_and_platform_policies(
        env, tools, fake_sh, minikube_status, kubectl, istio_manifest, monkeypatch):
    monkeypatch.setenv("KN_POLL_INTERVAL", "0.01")
    monkeypatch.setenv("KN_READY_TIMEOUT", "5")
    kubectl.pods["istio-system"] = [["Succeeded", "Running"]]
    kubectl.pods["knative-serving"] = [["Succeeded"], ["Running"]]

    assert main(["start"]) == 0

    # A completed job is done for the mesh but not for the platform.
    assert pod_polls(kubectl, "istio-system") == 1
    assert pod_polls(kubectl, "knative-serving") == 2


def test_failed_pod_aborts_start(env, tools, fake_sh, minikube_status, kubectl, istio_manifest, capsys):
    kubectl.pods["istio-system"] = [["Failed"], ["Running"]]

    assert main(["start"]) == 1
    assert "entered phase Failed" in " ".join(capsys.readouterr().err.split())


def test_failure_detection_can_be_disabled(
        env, tools, fake_sh, minikube_status, kubectl, istio_manifest, monkeypatch):
    monkeypatch.setenv("KN_DETECT_POD_FAILURES", "false")
    monkeypatch.setenv("KN_POLL_INTERVAL", "0.01")
    monkeypatch.setenv("KN_READY_TIMEOUT", "5")
    kubectl.pods["istio-system"] = [["Failed"], ["Running"]]

    assert main(["start"]) == 0
    assert pod_polls(kubectl, "istio-system") == 2


def test_timeout_flag_reaches_both_waits(env, tools, fake_sh, minikube_status, kubectl, istio_manifest):
    with mock.patch("kn_minikube.orchestrator.wait_ready") as mesh_wait, \
            mock.patch("kn_minikube.components.wait_ready") as platform_wait:
        assert main(["start", "--timeout", "30"]) == 0

    assert mesh_wait.call_args.args[1] == MESH_POLICY
    assert mesh_wait.call_args.kwargs["timeout"] == 30
    assert platform_wait.call_args.args[1] == PLATFORM_POLICY
    assert platform_wait.call_args.kwargs["timeout"] == 30


# ============================================================================
# delete / status
# ============================================================================

def test_delete_clears_cache(env, tools, fake_sh):
    env.parent.mkdir(parents=True)
    env.write_text("memory=8192,cpus=4")

    assert main(["delete"]) == 0

    fake_sh.minikube.assert_called_once_with("delete")
    assert not env.exists()


def test_status_healthy_exits_zero(env, tools, minikube_status, capsys):
    minikube_status.return_value = (True, HEALTHY_STATUS, "")
    env.parent.mkdir(parents=True)
    env.write_text("memory=8192,cpus=4")

    assert main(["status"]) == 0
    err = capsys.readouterr().err
    assert "memory=8192,cpus=4" in err
    assert "Cluster is healthy" in err


def test_status_stopped_exits_one(env, tools, minikube_status):
    assert main(["status"]) == 1
