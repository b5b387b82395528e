"""Service commands for backups, credentials, explanations, logs and secrets."""

from __future__ import annotations

import argparse
from typing import Any, Iterable, Mapping

from .client import CommandContext
from .output import (
    FORMAT_FLAG,
    SERVICE_ID_FLAG,
    is_default_format,
    parse_format,
    print_result,
    render_table,
)

CONTAINER_NAME_FLAG = "container"
_DRY_RUN_MESSAGE = "dry-run flag specified. Skip sending request."


class CredentialsError(ValueError):
    """Credentials given as ``key=value`` arguments could not be used."""


CREDENTIALS_NOT_FOUND = "credentials pairs not found"
PARTIAL_CREDENTIALS = "failed to parse provided credentials pairs"
DUPLICATE_CREDENTIALS = "duplicate credentials key"


def parse_credentials(args: Iterable[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a mapping.

    Raises CredentialsError when there are none, when one is not exactly
    one ``key=value`` pair, or when a key repeats.
    """
    items = list(args)
    if not items:
        raise CredentialsError(CREDENTIALS_NOT_FOUND)
    credentials: dict[str, str] = {}
    for arg in items:
        parts = arg.split("=")
        if len(parts) != 2:
            raise CredentialsError(PARTIAL_CREDENTIALS)
        key, value = parts
        if key in credentials:
            raise CredentialsError(DUPLICATE_CREDENTIALS)
        credentials[key] = value
    return credentials


def _add_format_flag(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps a value given to the top-level parser from being overwritten.
    parser.add_argument(
        f"--{FORMAT_FLAG}",
        type=parse_format,
        default=argparse.SUPPRESS,
        help="Format response value: json, yaml or string. (default: string)",
    )


def _option(options: argparse.Namespace, name: str) -> Any:
    return getattr(options, name, None)


def _add_service_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        f"--{SERVICE_ID_FLAG}", dest="service_id", default=None, help="Required. Service id"
    )


def add_service_tool_commands(subparsers) -> None:
    """Register the backup, credentials, explain, logs and secrets commands.

    ``subparsers`` is the sub-command action of the ``service`` group.
    """
    backup = subparsers.add_parser(
        "serviceBackup", aliases=["backup"], help="Creates a backup request for a service"
    )
    _add_service_id(backup)
    _add_format_flag(backup)
    backup.set_defaults(handler=run_service_backup)

    credentials = subparsers.add_parser(
        "serviceCredentialsUpdate",
        aliases=["credentials-update"],
        help="Updates a service credentials. Pass credentials in key=value args.",
    )
    _add_service_id(credentials)
    _add_format_flag(credentials)
    credentials.add_argument("credentials", nargs="*", metavar="KEY=VALUE")
    credentials.set_defaults(handler=run_service_credentials_update)

    explain = subparsers.add_parser(
        "serviceExplain", aliases=["explain"], help="Explain status of service"
    )
    _add_service_id(explain)
    _add_format_flag(explain)
    explain.set_defaults(handler=run_service_explain)

    logs = subparsers.add_parser("serviceLogs", aliases=["logs"], help="Show service pod logs")
    _add_service_id(logs)
    logs.add_argument(
        f"--{CONTAINER_NAME_FLAG}",
        dest="container",
        default=None,
        help="List logs only for specified container",
    )
    logs.set_defaults(handler=run_service_logs)

    secrets = subparsers.add_parser(
        "serviceSecretsList", aliases=["secrets"], help="Retrieves service secrets"
    )
    _add_service_id(secrets)
    _add_format_flag(secrets)
    secrets.set_defaults(handler=run_service_secrets_list)


def run_service_backup(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Request a backup of a service."""
    backup = {"service_id": _option(options, "service_id") or ""}
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {backup}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.backup_add(backup)
    if is_default_format(fmt):
        ctx.out.write(
            f"A request for backup '{(payload or {}).get('id', '')}' successfully created\n"
        )
    else:
        print_result(ctx.out, fmt, payload)


def run_service_credentials_update(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Update service credentials from ``key=value`` arguments."""
    service_id = _option(options, "service_id") or ""
    fmt = _option(options, "format")
    credentials = parse_credentials(_option(options, "credentials") or [])
    if ctx.dry_run:
        ctx.debug_log(f"Params: service_id={service_id} credentials={credentials}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        response = api.service_credentials_update(service_id, credentials)
    if is_default_format(fmt):
        ctx.out.write("Credentials updated\n")
    else:
        print_result(ctx.out, fmt, response if response is not None else {})


def _print_ingress(ctx: CommandContext, data: Mapping[str, Any]) -> None:
    ingress_class = data.get("ingressClass", "")
    rows = (
        [str(i), host, ingress_class] for i, host in enumerate(data.get("hosts") or [], start=1)
    )
    ctx.out.write("Ingress:\n")
    ctx.out.write(render_table(["№", "HOST", "INGRESS CLASS"], rows))
    ctx.out.write("\n")


def _print_containers(ctx: CommandContext, data: Mapping[str, Any]) -> None:
    rows = (
        [
            str(i),
            item.get("name", ""),
            item.get("status", ""),
            str(int(item.get("restartCount") or 0)),
        ]
        for i, item in enumerate(data.get("containers") or [], start=1)
    )
    ctx.out.write("Containers:\n")
    ctx.out.write(render_table(["№", "NAME", "STATUS", "RESTART COUNT"], rows))
    ctx.out.write("\n")


def _print_pvc(ctx: CommandContext, data: Mapping[str, Any]) -> None:
    row = [data.get("phase", ""), data.get("size", ""), data.get("storageClass", "")]
    ctx.out.write("Storage:\n")
    ctx.out.write(render_table(["PHASE", "SIZE", "STORAGE CLASS"], [row]))
    ctx.out.write("\n")


def run_service_explain(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Explain the state of a service's ingress, containers and storage."""
    service_id = _option(options, "service_id")
    if service_id is None:
        raise ValueError("Service id is required")
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {service_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.service_explain(service_id)
    if not is_default_format(fmt):
        print_result(ctx.out, fmt, payload)
        return

    payload = payload or {}
    ingress = payload.get("ingress") or {}
    pod = payload.get("pod") or {}
    pvc = payload.get("pvc") or {}

    if ingress.get("error"):
        ctx.out.write(f"Ingress error: {ingress['error']}")
    else:
        _print_ingress(ctx, ingress)

    if pod.get("error"):
        ctx.out.write(f"Container errors: {pod['error']}\n")
    else:
        _print_containers(ctx, pod)

    if pvc.get("error"):
        ctx.out.write(f"PVC error: {pvc['error']}\n")
    else:
        _print_pvc(ctx, pvc)


def run_service_logs(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Print the logs of a service's containers, each line prefixed by its container."""
    service_id = _option(options, "service_id")
    if service_id is None:
        raise ValueError("Service id is required")
    container = _option(options, "container")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {container}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.service_logs(service_id, container)
    output = "".join(
        f"{entry.get('container_name', '')}:\t{line}\n"
        for entry in payload or []
        for line in (entry.get("logs") or "").split("\n")
    )
    ctx.out.write(output)


def run_service_secrets_list(ctx: CommandContext, options: argparse.Namespace) -> None:
    """List a service's secrets."""
    service_id = _option(options, "service_id") or ""
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: service_id={service_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.service_secrets_list(service_id)
    if not is_default_format(fmt):
        print_result(ctx.out, fmt, payload)
        return
    rows = ([item.get("id", ""), item.get("value", "")] for item in payload or [])
    ctx.out.write(render_table(["ID", "Value"], rows))