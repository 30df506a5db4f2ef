"""Pytest configuration and shared fixtures."""

import pytest
from click.testing import CliRunner

from wherefilter.cli import cli


@pytest.fixture(autouse=True)
def clear_wherefilter_env(monkeypatch):
    """Keep WHEREFILTER_* variables from the calling shell out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("WHEREFILTER_"):
            monkeypatch.delenv(key)
    yield


@pytest.fixture
def cli_runner():
    """Provide Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(cli_runner):
    """Helper to invoke the CLI with args and optional input.

    Usage:
        result = invoke(["parse", "kind = 'Pod'"])
        result = invoke(["select", "kind = 'Pod'"], input_data=yaml_text)
    """

    def _invoke(args, input_data=None):
        return cli_runner.invoke(cli, args, input=input_data)

    return _invoke


@pytest.fixture
def manifests():
    """Provide a small set of Kubernetes-like resources."""
    return [
        {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {
                "name": "web",
                "namespace": "default",
                "labels": {"app": "web", "tier": "frontend", "team": "a"},
            },
            "spec": {
                "replicas": 3,
                "paused": False,
                "template": {
                    "spec": {
                        "containers": [
                            {"name": "main", "image": "nginx:1.25"},
                            {"name": "sidecar", "image": "envoy:1.29"},
                        ]
                    }
                },
            },
        },
        {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": "creds", "namespace": "default"},
        },
        {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {
                "name": "worker",
                "namespace": "batch",
                "labels": {"app": "worker"},
            },
            "spec": {
                "replicas": 1,
                "template": {
                    "spec": {
                        "containers": [
                            {"name": "main", "image": "busybox:1.36", "securityContext": {"privileged": True}},
                        ]
                    }
                },
            },
        },
    ]


class PrefixComparator:
    """Custom comparator matching image references by repository prefix."""

    def __init__(self, path_suffix="image"):
        self.path_suffix = path_suffix
        self.calls = 0

    def matches_path(self, path):
        return path.endswith(self.path_suffix)

    def evaluate(self, expr, value):
        self.calls += 1
        return value.split(":", 1)[0] == expr.unquoted_literal


@pytest.fixture
def prefix_comparator():
    return PrefixComparator()
