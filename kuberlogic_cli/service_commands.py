"""Commands that create, edit, delete, list, archive and unarchive services."""

from __future__ import annotations

import argparse
from typing import Any

from .client import CommandContext
from .output import (
    FORMAT_FLAG,
    ID_FLAG,
    SUBSCRIPTION_ID_FLAG,
    is_default_format,
    parse_format,
    print_result,
    render_table,
)

_DRY_RUN_MESSAGE = "dry-run flag specified. Skip sending request."
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_LIST_HEADER = [
    "№", "ID", "Subscription ID", "Type", "Replica", "Version", "Backup Schedule", "Status",
    "Endpoint",
]


def _parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def _add_format_flag(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps a value given to the top-level parser from being overwritten.
    parser.add_argument(
        f"--{FORMAT_FLAG}",
        type=parse_format,
        default=argparse.SUPPRESS,
        help="Format response value: json, yaml or string. (default: string)",
    )


def _add_bool_flag(parser: argparse.ArgumentParser, name: str, help_text: str) -> None:
    parser.add_argument(
        f"--{name}", dest=name, nargs="?", const=True, default=None, type=_parse_bool,
        help=help_text,
    )


def _add_common_service_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--replicas", type=int, default=None, help="Service replicas count")
    parser.add_argument("--version", default=None, help="Service version")
    parser.add_argument("--backup_schedule", default=None, help="Backup schedule in cron format")
    _add_bool_flag(parser, "insecure", "Use HTTP protocol instead of HTTPS")
    parser.add_argument("--domain", default=None, help="Custom domain for a service")
    parser.add_argument("--limits.cpu", dest="limits_cpu", default=None, help="CPU limits")
    parser.add_argument("--limits.memory", dest="limits_memory", default=None, help="Memory limits")
    parser.add_argument(
        "--limits.storage", dest="limits_storage", default=None, help="Storage limits"
    )


def _option(options: argparse.Namespace, name: str) -> Any:
    return getattr(options, name, None)


def add_service_commands(subparsers):
    """Register the ``service`` command group.

    Returns the group's sub-command action so that further service commands
    can be registered on it.
    """
    group = subparsers.add_parser("service", help="Service related operations")
    commands = group.add_subparsers(dest="service_command", metavar="COMMAND", required=True)

    add = commands.add_parser("serviceAdd", aliases=["add"], help="Adds service object")
    add.add_argument(f"--{ID_FLAG}", dest="id", default=None, help="Required. Service id")
    add.add_argument("--type", dest="type", default=None, help="Required. Supported service type")
    _add_common_service_flags(add)
    add.add_argument(
        f"--{SUBSCRIPTION_ID_FLAG}", dest="subscription_id", default=None, help="Subscription ID"
    )
    _add_bool_flag(
        add, "use_letsencrypt", "use Let's Encrypt for service as TLS certificate issuer"
    )
    _add_format_flag(add)
    add.set_defaults(handler=run_service_add)

    edit = commands.add_parser("serviceEdit", aliases=["edit"], help="Edit service object")
    edit.add_argument(f"--{ID_FLAG}", dest="id", default=None, help="Required. Service id")
    _add_common_service_flags(edit)
    _add_format_flag(edit)
    edit.set_defaults(handler=run_service_edit)

    delete = commands.add_parser(
        "serviceDelete", aliases=["delete"], help="Deletes a service object"
    )
    delete.add_argument(f"--{ID_FLAG}", dest="id", default=None, help="Required. Service id")
    _add_format_flag(delete)
    delete.set_defaults(handler=run_service_delete)

    listing = commands.add_parser("serviceList", aliases=["list"], help="List of service objects")
    listing.add_argument(
        f"--{SUBSCRIPTION_ID_FLAG}", dest="subscription_id", default=None,
        help="Subscription id to filter by",
    )
    _add_format_flag(listing)
    listing.set_defaults(handler=run_service_list)

    archive = commands.add_parser(
        "serviceArchive", aliases=["archive"], help="Archive service object"
    )
    archive.add_argument(f"--{ID_FLAG}", dest="id", default=None, help="Required. Service id")
    archive.set_defaults(handler=run_service_archive)

    unarchive = commands.add_parser(
        "serviceUnarchive", aliases=["unarchive"], help="Unarchive service object"
    )
    unarchive.add_argument(f"--{ID_FLAG}", dest="id", default=None, help="Required. Service ID.")
    unarchive.set_defaults(handler=run_service_unarchive)
    return commands


def _fill_common(service: dict[str, Any], options: argparse.Namespace) -> None:
    if (value := _option(options, "replicas")) is not None:
        service["replicas"] = value
    if value := _option(options, "version"):
        service["version"] = value
    if value := _option(options, "backup_schedule"):
        service["backupSchedule"] = value
    if _option(options, "insecure"):
        service["insecure"] = True
    if value := _option(options, "domain"):
        service["domain"] = value
    limits = service.setdefault("limits", {})
    for key in ("cpu", "memory", "storage"):
        if value := _option(options, f"limits_{key}"):
            limits[key] = value


def run_service_add(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Create a service from the command options."""
    service: dict[str, Any] = {}
    if (value := _option(options, "id")) is not None:
        service["id"] = value
    if (value := _option(options, "type")) is not None:
        service["type"] = value
    _fill_common(service, options)
    if _option(options, "use_letsencrypt"):
        service["use_letsencrypt"] = True
    if value := _option(options, "subscription_id"):
        service["subscription"] = value
    fmt = _option(options, "format")

    if ctx.dry_run:
        ctx.debug_log(f"Params: {service}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.service_add(service)
    if is_default_format(fmt):
        ctx.out.write(f"Service '{(payload or {}).get('id', '')}' successfully created\n")
    else:
        print_result(ctx.out, fmt, payload)


def run_service_edit(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Change a service; its type and, unless given, its domain come from the server."""
    service_id = _option(options, "id")
    if service_id is None:
        raise ValueError("ID is not specified")
    service: dict[str, Any] = {"id": service_id}
    _fill_common(service, options)
    fmt = _option(options, "format")

    if ctx.dry_run:
        ctx.debug_log(f"edit params: {service}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        current = api.service_get(service_id) or {}
        if "type" in current:
            service["type"] = current["type"]
        if not service.get("domain") and current.get("domain"):
            service["domain"] = current["domain"]
        payload = api.service_edit(service_id, service)
    if is_default_format(fmt):
        ctx.out.write(f"Service '{service_id}' successfully edited\n")
    else:
        print_result(ctx.out, fmt, payload)


def run_service_delete(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Delete a service by its ID."""
    service_id = _option(options, "id") or ""
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        response = api.service_delete(service_id)
    if is_default_format(fmt):
        ctx.out.write(f"Service '{service_id}' successfully removed\n")
    else:
        print_result(ctx.out, fmt, response if response is not None else {})


def run_service_list(ctx: CommandContext, options: argparse.Namespace) -> None:
    """List services as a table or in the requested format."""
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.service_list()
    if not is_default_format(fmt):
        print_result(ctx.out, fmt, payload)
        return
    rows = (
        [
            str(i),
            item.get("id", ""),
            item.get("subscription", ""),
            item.get("type", ""),
            str(int(item.get("replicas") or 0)),
            item.get("version", ""),
            item.get("backupSchedule", ""),
            item.get("status", ""),
            item.get("endpoint", ""),
        ]
        for i, item in enumerate(payload or [])
    )
    ctx.out.write(render_table(_LIST_HEADER, rows))


def run_service_archive(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Request archiving of a service."""
    service_id = _option(options, "id") or ""
    if ctx.dry_run:
        ctx.debug_log(f"Params: {service_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        api.service_archive(service_id)
    ctx.out.write(f"Request for archive service '{service_id}' has been sent\n")


def run_service_unarchive(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Request unarchiving of a service."""
    service_id = _option(options, "id") or ""
    if ctx.dry_run:
        ctx.debug_log(f"Params: {service_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        api.service_unarchive(service_id)
    ctx.out.write(f"Request for archive service '{service_id}' has been sent\n")