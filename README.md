# kuberlogic-cli

`kuberlogic` is a command-line client for the KuberLogic API server. It
creates and manages services, requests backups and restores, and collects
diagnostic information from a cluster with `kubectl`.

## Installation

```
pip install .
```

This installs the `kuberlogic` command. Tests need the `test` extra:

```
pip install .[test]
pytest
```

## Connecting

Every command accepts these options, before or after the command name:

- `--hostname`: address of the API server (default `localhost:8001`)
- `--scheme`: URL scheme (default `http`)
- `--token`: API token, sent in the `X-Token` header
- `--config`: config file (default `~/.config/kuberlogic/config.yaml`)
- `--format`: `json`, `yaml` or `string` (the default: a table or a message)
- `--debug`: write debug messages to standard error
- `--dry-run`: do not send the request to the server

Requests go to `<scheme>://<hostname>/api/v1`. The config file is YAML (JSON
works too) and may set `hostname`, `scheme` and `token`; options given on the
command line take precedence. A missing or unreadable config file is skipped.

```yaml
hostname: localhost:8001
scheme: http
token: token
```

When a command fails, `kuberlogic` prints `Error: <message>` to standard error
and exits with status 1. For API errors the message is the one the server sent.

## Services

```
kuberlogic service add --id demo --type postgresql --replicas 1
kuberlogic service list
kuberlogic service edit --id demo --version 13
kuberlogic service delete --id demo
kuberlogic service archive --id demo
kuberlogic service unarchive --id demo
kuberlogic service logs --service_id demo
kuberlogic service explain --service_id demo
kuberlogic service secrets --service_id demo
kuberlogic service credentials-update --service_id demo token=secret
kuberlogic service backup --service_id demo
```

Each command also answers to a long name (`serviceAdd`, `serviceList`,
`serviceEdit`, `serviceDelete`, `serviceArchive`, `serviceUnarchive`,
`serviceLogs`, `serviceExplain`, `serviceSecretsList`,
`serviceCredentialsUpdate`, `serviceBackup`).

`service add` and `service edit` take `--replicas`, `--version`,
`--backup_schedule`, `--insecure`, `--domain`, `--limits.cpu`,
`--limits.memory` and `--limits.storage`. `service add` also takes `--type`,
`--subscription_id` and `--use_letsencrypt`. `service edit` fetches the
service first and keeps its type, and its domain unless `--domain` is given.

`service logs --container NAME` shows the logs of one container; each line is
prefixed with its container name. `service explain` prints ingress hosts,
containers and storage as tables. `service credentials-update` takes one or
more `key=value` arguments; it fails when there are none, when an argument is
not exactly one pair, or when a key repeats.

## Backups and restores

```
kuberlogic backup list --service_id demo
kuberlogic backup restore --backup_id demo-backup
kuberlogic backup delete --id demo-backup
kuberlogic restore list --service_id demo
kuberlogic restore delete --id demo-restore
```

## Output formats

Lists are printed as borderless tables and other commands print a short
message. `--format json` or `--format yaml` prints the API response instead:

```
kuberlogic service list --format json
```

## Diagnostics

```
kuberlogic diag
```

runs `kubectl` to collect pod status, controller logs, configuration secrets,
endpoints and KuberLogic resources, and writes them into
`kuberlogic-diag-<unix time>.zip` in the current directory. When a `kubectl`
call fails, its error is stored next to the output as `<file>-error`.

## Shell completion

```
kuberlogic completion bash
```

prints a completion script for `bash`, `zsh`, `fish` or `powershell`.

## Using it as a library

- `kuberlogic_cli.client.ApiClient(hostname, scheme, token, transport)` has one
  method per endpoint (`service_add`, `service_list`, `backup_list`,
  `restore_delete`, ...). It is a context manager and raises `ApiError`.
- `kuberlogic_cli.cli.run(argv, transport, k8s, out)` runs a command line and
  raises instead of exiting; `transport` is an `httpx` transport and `out` the
  stream written to.
- `kuberlogic_cli.output` holds `OutputFormat`, `print_result` and
  `render_table`.
- `kuberlogic_cli.config.init_config(prefix, environ)` reads API server
  settings from environment variables named `<PREFIX>_DOMAIN` (required),
  `_BIND_HOST`, `_HTTP_BIND_PORT`, `_KUBECONFIG_PATH`, `_DEBUG_LOGS`,
  `_CORS_ALLOWED_ORIGINS` (comma separated), `_SENTRY_DSN` and
  `_DEPLOYMENT_ID`, and raises `ConfigError` when they are not valid.

```python
import io
from kuberlogic_cli.cli import run

out = io.StringIO()
run(["--hostname", "localhost:8001", "--token", "token", "service", "list"], out=out)
print(out.getvalue())
```

## What it does not do

- The `version` command needs a Kubernetes client, an object with a
  `list_pods(namespace, label_selector)` method, passed as `k8s` to `run()`.
  Run from the shell, `kuberlogic version` has none and fails with
  "kubernetes client is not configured".
- There is no command to install KuberLogic into a cluster and no command that
  reports the health of its components; `diag` only collects raw data.
- Flags marked "Required" in the help are not enforced by the client; a
  missing value is left to the server to reject.
- It is only a client: it contains no API server, and `config` only reads
  settings.