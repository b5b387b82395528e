"""The ``version`` command: versions of the CLI and of deployed components."""

from __future__ import annotations

import argparse
import re
from typing import Any, Iterable, Mapping, Protocol

from .client import CommandContext

NAMESPACE = "kuberlogic"
LABEL_SELECTOR = "control-plane=controller-manager"

_DOMAIN_PART = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN = rf"{_DOMAIN_PART}(?:\.{_DOMAIN_PART})*(?::[0-9]+)?"
_PATH_PART = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_NAME = re.compile(rf"(?:{_DOMAIN}/)?{_PATH_PART}(?:/{_PATH_PART})*")
_TAG = re.compile(r"\w[\w.-]{0,127}")
_DIGEST = re.compile(r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}")


class PodLister(Protocol):
    """What the version command needs from a Kubernetes client."""

    def list_pods(self, namespace: str, label_selector: str) -> Iterable[Mapping[str, Any]]:
        """Return pods as Kubernetes API objects (mappings with ``spec.containers``)."""


def image_tag(image: str) -> str:
    """Return the tag (or digest) of a container image reference; ``latest`` when absent."""
    ref = image.strip()
    if not ref:
        raise ValueError("invalid reference format")

    name, at, digest = ref.partition("@")
    if at and not _DIGEST.fullmatch(digest):
        raise ValueError("invalid reference format")

    tag = ""
    colon = name.rfind(":")
    if colon > name.rfind("/"):
        name, tag = name[:colon], name[colon + 1:]
        if not _TAG.fullmatch(tag):
            raise ValueError("invalid reference format")

    if not _NAME.fullmatch(name):
        if _NAME.fullmatch(name.lower()):
            raise ValueError("invalid reference format: repository name must be lowercase")
        raise ValueError("invalid reference format")

    if at:
        return digest
    return tag or "latest"


def run_version(ctx: CommandContext, k8s: PodLister, cli_version: str) -> None:
    """Print the CLI version and the image tag of every controller container."""
    pods = list(k8s.list_pods(NAMESPACE, LABEL_SELECTOR))
    ctx.out.write(f"cli: {cli_version}\n")
    for pod in pods:
        for container in (pod.get("spec") or {}).get("containers") or []:
            ctx.out.write(f"{container.get('name', '')}: {image_tag(container.get('image', ''))}\n")


def _version_handler(ctx: CommandContext, options: argparse.Namespace) -> None:
    k8s = getattr(options, "k8s", None)
    if k8s is None:
        raise RuntimeError("kubernetes client is not configured")
    run_version(ctx, k8s, getattr(options, "cli_version", "") or "")


def add_version_command(subparsers) -> argparse.ArgumentParser:
    """Register the ``version`` command; it reads ``k8s`` and ``cli_version`` from the options."""
    parser = subparsers.add_parser("version", help="Version of kuberlogic components")
    parser.set_defaults(handler=_version_handler)
    return parser