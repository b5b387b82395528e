import argparse
import io

import pytest

from kuberlogic_cli.client import CommandContext
from kuberlogic_cli.version import add_version_command, image_tag, run_version


class FakeK8s:
    def __init__(self, pods):
        self.pods = pods
        self.calls = []

    def list_pods(self, namespace, label_selector):
        self.calls.append((namespace, label_selector))
        return self.pods


PODS = [
    {
        "spec": {
            "containers": [
                {"name": "manager", "image": "quay.io/kuberlogic/dynamic-operator:0.0.16"},
                {"name": "apiserver", "image": "quay.io/kuberlogic/dynamic-apiserver:0.0.16"},
            ]
        }
    }
]


def test_image_tag_explicit():
    assert image_tag("quay.io/kuberlogic/dynamic-operator:0.0.16") == "0.0.16"


def test_image_tag_defaults_to_latest():
    assert image_tag("nginx") == "latest"
    assert image_tag("localhost:5000/app") == "latest"


def test_image_tag_digest():
    digest = "sha256:" + "a" * 64
    assert image_tag(f"quay.io/kuberlogic/app@{digest}") == digest


@pytest.mark.parametrize("image", ["", "Invalid:Image:", "quay.io/App:1", "app:bad tag"])
def test_image_tag_invalid(image):
    with pytest.raises(ValueError):
        image_tag(image)


def test_run_version_prints_tags():
    k8s = FakeK8s(PODS)
    ctx = CommandContext(out=io.StringIO(), err=io.StringIO())
    run_version(ctx, k8s, "0.0.16")
    assert ctx.out.getvalue() == "cli: 0.0.16\nmanager: 0.0.16\napiserver: 0.0.16\n"
    assert k8s.calls == [("kuberlogic", "control-plane=controller-manager")]


def test_run_version_propagates_bad_image():
    k8s = FakeK8s([{"spec": {"containers": [{"name": "x", "image": "BAD IMAGE"}]}}])
    ctx = CommandContext(out=io.StringIO(), err=io.StringIO())
    with pytest.raises(ValueError):
        run_version(ctx, k8s, "dev")


def test_version_command_uses_options():
    parser = argparse.ArgumentParser()
    sub = parser.add_subparsers(dest="command")
    add_version_command(sub)
    options = parser.parse_args(["version"])
    options.k8s = FakeK8s([])
    options.cli_version = "0.0.16"
    ctx = CommandContext(out=io.StringIO(), err=io.StringIO())
    options.handler(ctx, options)
    assert ctx.out.getvalue() == "cli: 0.0.16\n"


def test_version_command_without_client():
    parser = argparse.ArgumentParser()
    sub = parser.add_subparsers(dest="command")
    add_version_command(sub)
    options = parser.parse_args(["version"])
    with pytest.raises(RuntimeError):
        options.handler(CommandContext(out=io.StringIO(), err=io.StringIO()), options)