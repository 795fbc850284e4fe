"""Tests for the exception hierarchy."""

from kn_minikube.errors import (
    ApplyError,
    BadOptionError,
    ClusterOperationError,
    KnMinikubeError,
    LabelError,
    MissingDependencyError,
    PersistenceError,
    PodFailureError,
    ReadinessTimeoutError,
    UnknownCommandError,
)


def test_exception_with_details():
    error = ApplyError("Failed to apply Knative CRDs", "404 Not Found")

    assert error.message == "Failed to apply Knative CRDs"
    assert error.details == "404 Not Found"
    assert str(error) == "Failed to apply Knative CRDs: 404 Not Found"


def test_exception_without_details():
    error = UnknownCommandError("command required")

    assert error.details is None
    assert str(error) == "command required"


def test_exception_hierarchy():
    for cls in (
        MissingDependencyError, UnknownCommandError, BadOptionError, ClusterOperationError,
        PersistenceError, ApplyError, LabelError, ReadinessTimeoutError, PodFailureError,
    ):
        assert issubclass(cls, KnMinikubeError)
    assert issubclass(KnMinikubeError, RuntimeError)
