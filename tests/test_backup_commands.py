import argparse
import io
import json

import httpx
import pytest
import yaml

from kuberlogic_cli.backup_commands import add_backup_commands, add_restore_commands
from kuberlogic_cli.client import ApiError, CommandContext
from kuberlogic_cli.output import parse_format, render_table

BACKUPS = [
    {
        "created_at": "2022-05-10T16:00:53.000Z",
        "id": "test-1",
        "service_id": "test-1",
        "status": "Unknown",
    },
    {
        "created_at": "2022-05-10T16:00:53.000Z",
        "id": "test-2",
        "service_id": "test-2",
        "status": "Unknown",
    },
]

RESTORES = [
    {
        "created_at": "2022-05-10T16:00:53.000Z",
        "id": "test-1",
        "status": "Unknown",
        "backup_id": "test-1",
    },
    {
        "created_at": "2022-05-10T16:00:53.000Z",
        "id": "test-2",
        "status": "Unknown",
        "backup_id": "test-2",
    },
]

RESTORE = {
    "created_at": "2022-05-10T16:00:53.000Z",
    "id": "test",
    "status": "Unknown",
    "backup_id": "test",
}


def _parser():
    parser = argparse.ArgumentParser(prog="kuberlogic")
    sub = parser.add_subparsers(dest="command", required=True)
    add_backup_commands(sub)
    add_restore_commands(sub)
    return parser


def _execute(argv, status, payload, requests=None, dry_run=False):
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, json=payload)

    out = io.StringIO()
    ctx = CommandContext(
        token="token",
        transport=httpx.MockTransport(handler),
        out=out,
        err=io.StringIO(),
        dry_run=dry_run,
        debug=True,
    )
    options = _parser().parse_args(argv)
    options.handler(ctx, options)
    return out.getvalue()


def test_backup_delete_invalid_validation():
    with pytest.raises(ApiError) as exc:
        _execute(["backup", "delete"], 400, {"message": "id can't be empty"})
    assert str(exc.value) == "id can't be empty"


def test_backup_delete_not_found():
    expected = "kuberlogic backup not found: test"
    with pytest.raises(ApiError) as exc:
        _execute(["backup", "delete", "--id", "test"], 404, {"message": expected})
    assert str(exc.value) == expected
    assert exc.value.status == 404


def test_backup_delete_format_json():
    out = _execute(["backup", "delete", "--id", "test", "--format", "json"], 200, {})
    assert json.loads(out) == {}


def test_backup_delete_format_yaml():
    out = _execute(["backup", "delete", "--id", "test", "--format", "yaml"], 200, {})
    assert out.strip() == yaml.safe_dump({}).strip()


def test_backup_delete_format_str():
    requests = []
    out = _execute(["backup", "delete", "--id", "test"], 200, {}, requests)
    assert out.strip() == "Backup 'test' successfully deleted"
    assert requests[0].method == "DELETE"
    assert requests[0].headers["X-Token"] == "token"


def test_backup_delete_dry_run_sends_nothing():
    requests = []
    out = _execute(["backup", "delete", "--id", "test"], 200, {}, requests, dry_run=True)
    assert out == ""
    assert requests == []


def test_backup_list_format_json():
    out = _execute(["backup", "list", "--format", "json"], 200, BACKUPS)
    assert json.loads(out) == BACKUPS


def test_backup_list_empty_format_json():
    out = _execute(["backup", "list", "--format", "json"], 200, None)
    assert json.loads(out) is None


def test_backup_list_format_yaml():
    out = _execute(["backup", "list", "--format", "yaml"], 200, BACKUPS)
    assert yaml.safe_load(out) == BACKUPS


def test_backup_list_format_str():
    out = _execute(["backup", "list"], 200, BACKUPS)
    expected = render_table(
        ["№", "ID", "Service ID", "Created", "Status"],
        [[str(i), b["id"], b["id"], b["created_at"], b["status"]] for i, b in enumerate(BACKUPS)],
    )
    assert out.strip() == expected.strip()
    assert len(out.strip().splitlines()) == 4


def test_backup_list_filters_by_service():
    requests = []
    _execute(["backup", "list", "--service_id", "svc", "--format", "json"], 200, [], requests)
    assert requests[0].url.params["service_id"] == "svc"


def test_backup_restore_invalid_validation():
    with pytest.raises(ApiError) as exc:
        _execute(["backup", "restore"], 422, {"message": "id in body is required"})
    assert str(exc.value) == "id in body is required"


def test_backup_restore_format_json():
    requests = []
    out = _execute(
        ["backup", "restore", "--backup_id", "test", "--format", "json"], 201, RESTORE, requests
    )
    assert json.loads(out) == RESTORE
    assert json.loads(requests[0].content) == {"backup_id": "test"}


def test_backup_restore_format_yaml():
    out = _execute(["backup", "restore", "--backup_id", "test", "--format", "yaml"], 201, RESTORE)
    assert yaml.safe_load(out) == RESTORE


def test_backup_restore_format_str():
    out = _execute(["backup", "restore", "--backup_id", "test"], 201, RESTORE)
    assert out.strip() == "A request 'test' to restore backup 'test' successfully created"


def test_restore_delete_invalid_validation():
    with pytest.raises(ApiError) as exc:
        _execute(["restore", "delete"], 400, {"message": "id can't be empty"})
    assert str(exc.value) == "id can't be empty"


def test_restore_delete_not_found():
    expected = "kuberlogic restore not found: test"
    with pytest.raises(ApiError) as exc:
        _execute(["restore", "delete", "--id", "test"], 404, {"message": expected})
    assert str(exc.value) == expected


def test_restore_delete_format_json():
    out = _execute(["restore", "delete", "--id", "test", "--format", "json"], 200, {})
    assert json.loads(out) == {}


def test_restore_delete_format_yaml():
    out = _execute(["restore", "delete", "--id", "test", "--format", "yaml"], 200, {})
    assert out.strip() == yaml.safe_dump({}).strip()


def test_restore_delete_format_str():
    out = _execute(["restore", "delete", "--id", "test"], 200, {})
    assert out.strip() == "Restore 'test' successfully deleted"


def test_restore_list_format_json():
    out = _execute(["restore", "list", "--format", "json"], 200, RESTORES)
    assert json.loads(out) == RESTORES


def test_restore_list_empty_format_json():
    out = _execute(["restore", "list", "--format", "json"], 200, None)
    assert json.loads(out) is None


def test_restore_list_format_yaml():
    out = _execute(["restore", "list", "--format", "yaml"], 200, RESTORES)
    assert yaml.safe_load(out) == RESTORES


def test_restore_list_format_str():
    out = _execute(["restore", "list"], 200, RESTORES)
    expected = render_table(
        ["№", "ID", "Backup ID", "Created", "Status"],
        [[str(i), r["id"], r["backup_id"], r["created_at"], r["status"]] for i, r in enumerate(RESTORES)],
    )
    assert out.strip() == expected.strip()
    assert "test-2" in out


def test_invalid_format_rejected():
    parser = argparse.ArgumentParser(prog="kuberlogic")
    sub = parser.add_subparsers(dest="command", required=True)
    add_backup_commands(sub)
    parsed = parser.parse_args(["backup", "list", "--format", "json"])
    assert parsed.format == parse_format("json")
    with pytest.raises(SystemExit) as exc:
        parser.parse_args(["backup", "list", "--format", "xml"])
    assert exc.value.code == 2