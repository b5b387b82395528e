"""The ``diag`` command: gathers cluster state into a zip archive."""

from __future__ import annotations

import argparse
import io
import subprocess
import time
import zipfile
from pathlib import Path

from .client import CommandContext

DEFAULT_KUBECTL = "kubectl"

_STEPS = (
    ("Gathering pods status", "{kubectl} get pods --all-namespaces -o yaml", "pods-status.yaml"),
    (
        "Gathering Kuberlogic pods logs",
        "{kubectl} -n kuberlogic logs -l control-plane=controller-manager --all-containers=true",
        "kuberlogic-logs.txt",
    ),
    (
        "Gathering Kuberlogic configuration information",
        "{kubectl} -n kuberlogic get secrets -l kl-config=true -o yaml",
        "kuberlogic-configs.yaml",
    ),
    (
        "Gathering Kuberlogic endpoints info",
        "{kubectl} -n kuberlogic get ep,svc -o yaml",
        "kuberlogic-endpoints.yaml",
    ),
    (
        "Gathering Kuberlogic resources status",
        "{kubectl} get kuberlogic -o yaml",
        "kuberlogic-resources.yaml",
    ),
)


def save_diag_info(command: str, fname: str, archive: zipfile.ZipFile) -> None:
    """Run ``command`` and store its combined output in ``archive`` as ``fname``.

    When the command fails, the failure is stored as ``fname`` + ``-error``.
    """
    args = command.split(" ")
    if len(args) < 2:
        raise ValueError("failed to parse diag command")

    output = b""
    failure: str | None = None
    try:
        result = subprocess.run(args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False)
    except FileNotFoundError:
        failure = f'exec: "{args[0]}": executable file not found in $PATH'
    except OSError as exc:
        failure = f'exec: "{args[0]}": {exc.strerror or exc}'
    else:
        output = result.stdout
        if result.returncode != 0:
            failure = (
                f"signal: {-result.returncode}"
                if result.returncode < 0
                else f"exit status {result.returncode}"
            )

    if failure is not None:
        archive.writestr(fname + "-error", failure)
    archive.writestr(fname, output)


def run_diag(ctx: CommandContext, kubectl_bin: str = DEFAULT_KUBECTL) -> Path:
    """Gather diagnostics into ``kuberlogic-diag-<time>.zip`` in the current directory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for message, template, fname in _STEPS:
            ctx.out.write(message + "\n")
            command = template.format(kubectl=kubectl_bin)
            try:
                save_diag_info(command, fname, archive)
            except (ValueError, OSError) as exc:
                raise RuntimeError(f"failed to save {command} info: {exc}") from exc

    archive_path = Path(f"kuberlogic-diag-{int(time.time())}.zip")
    try:
        archive_path.write_bytes(buffer.getvalue())
    except OSError as exc:
        raise RuntimeError(
            f"failed to create diagnostics archive {archive_path}: {exc}"
        ) from exc

    ctx.out.write(f"Diagnostics information is saved into {archive_path}\n")
    return archive_path


def _diag_handler(ctx: CommandContext, options: argparse.Namespace) -> Path:
    return run_diag(ctx, getattr(options, "kubectl_bin", None) or DEFAULT_KUBECTL)


def add_diag_command(subparsers) -> argparse.ArgumentParser:
    """Register the ``diag`` command."""
    parser = subparsers.add_parser(
        "diag", help="Gather diagnostic information about Kuberlogic installation"
    )
    parser.set_defaults(handler=_diag_handler)
    return parser