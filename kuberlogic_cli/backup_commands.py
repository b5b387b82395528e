"""Commands for listing, deleting and restoring backups and restores."""

from __future__ import annotations

import argparse
from typing import Any

from .client import CommandContext
from .output import (
    BACKUP_ID_FLAG,
    FORMAT_FLAG,
    ID_FLAG,
    SERVICE_ID_FLAG,
    is_default_format,
    parse_format,
    print_result,
    render_table,
)

_DRY_RUN_MESSAGE = "dry-run flag specified. Skip sending request."


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


def add_backup_commands(subparsers) -> argparse.ArgumentParser:
    """Register the ``backup`` command group."""
    group = subparsers.add_parser("backup", help="Backups related operations")
    commands = group.add_subparsers(dest="backup_command", metavar="COMMAND", required=True)

    delete = commands.add_parser("backupDelete", aliases=["delete"], help="Deletes a backup by ID")
    delete.add_argument(f"--{ID_FLAG}", dest="id", help="Required. Backup ID.")
    _add_format_flag(delete)
    delete.set_defaults(handler=run_backup_delete)

    listing = commands.add_parser("backupList", aliases=["list"], help="List of backup objects")
    listing.add_argument(f"--{SERVICE_ID_FLAG}", dest="service_id", help="Service id to filter by")
    _add_format_flag(listing)
    listing.set_defaults(handler=run_backup_list)

    restore = commands.add_parser(
        "backupRestore", aliases=["restore"], help="Creates a restore request for a service"
    )
    restore.add_argument(f"--{BACKUP_ID_FLAG}", dest="backup_id", help="Required. Backup ID")
    _add_format_flag(restore)
    restore.set_defaults(handler=run_backup_restore)
    return group


def add_restore_commands(subparsers) -> argparse.ArgumentParser:
    """Register the ``restore`` command group."""
    group = subparsers.add_parser("restore", help="Restores related operations")
    commands = group.add_subparsers(dest="restore_command", metavar="COMMAND", required=True)

    delete = commands.add_parser("restoreDelete", aliases=["delete"], help="Deletes a restore object")
    delete.add_argument(f"--{ID_FLAG}", dest="id", help="Required. Restore id")
    _add_format_flag(delete)
    delete.set_defaults(handler=run_restore_delete)

    listing = commands.add_parser("restoreList", aliases=["list"], help="List of restore objects")
    listing.add_argument(f"--{SERVICE_ID_FLAG}", dest="service_id", help="Service id to filter by")
    _add_format_flag(listing)
    listing.set_defaults(handler=run_restore_list)
    return group


def run_backup_delete(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Delete a backup by its ID."""
    backup_id = _option(options, "id") or ""
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {backup_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        response = api.backup_delete(backup_id)
    if is_default_format(fmt):
        ctx.out.write(f"Backup '{backup_id}' successfully deleted\n")
    else:
        print_result(ctx.out, fmt, response if response is not None else {})


def run_backup_list(ctx: CommandContext, options: argparse.Namespace) -> None:
    """List backups, optionally those of one service."""
    service_id = _option(options, "service_id")
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.backup_list(service_id)
    if not is_default_format(fmt):
        print_result(ctx.out, fmt, payload)
        return
    rows = (
        [str(i), item.get("id", ""), item.get("service_id", ""), item.get("created_at", ""),
         item.get("status", "")]
        for i, item in enumerate(payload or [])
    )
    ctx.out.write(render_table(["№", "ID", "Service ID", "Created", "Status"], rows))


def run_backup_restore(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Request a restore of a backup."""
    restore = {"backup_id": _option(options, "backup_id") or ""}
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {restore}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.restore_add(restore)
    if is_default_format(fmt):
        data = payload or {}
        ctx.out.write(
            f"A request '{data.get('id', '')}' to restore backup "
            f"'{data.get('backup_id', '')}' successfully created\n"
        )
    else:
        print_result(ctx.out, fmt, payload)


def run_restore_delete(ctx: CommandContext, options: argparse.Namespace) -> None:
    """Delete a restore object by its ID."""
    restore_id = _option(options, "id") or ""
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(f"Params: {restore_id}")
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        response = api.restore_delete(restore_id)
    if is_default_format(fmt):
        ctx.out.write(f"Restore '{restore_id}' successfully deleted\n")
    else:
        print_result(ctx.out, fmt, response if response is not None else {})


def run_restore_list(ctx: CommandContext, options: argparse.Namespace) -> None:
    """List restores, optionally those of one service."""
    service_id = _option(options, "service_id")
    fmt = _option(options, "format")
    if ctx.dry_run:
        ctx.debug_log(_DRY_RUN_MESSAGE)
        return
    with ctx.client() as api:
        payload = api.restore_list(service_id)
    if not is_default_format(fmt):
        print_result(ctx.out, fmt, payload)
        return
    rows = (
        [str(i), item.get("id", ""), item.get("backup_id", ""), item.get("created_at", ""),
         item.get("status", "")]
        for i, item in enumerate(payload or [])
    )
    ctx.out.write(render_table(["№", "ID", "Backup ID", "Created", "Status"], rows))