"""Output formats, flag names and table rendering for command results."""

from __future__ import annotations

import enum
import json
import re
from typing import Any, Iterable, Sequence, TextIO

import yaml

ID_FLAG = "id"
SERVICE_ID_FLAG = "service_id"
BACKUP_ID_FLAG = "backup_id"
SUBSCRIPTION_ID_FLAG = "subscription_id"
TOKEN_FLAG = "token"
API_HOST_FLAG = "hostname"
SCHEME_FLAG = "scheme"
FORMAT_FLAG = "format"

_NUMERIC = re.compile(r"[-+]?\d+(\.\d+)?")


class OutputFormat(str, enum.Enum):
    """Format in which a command prints its response."""

    JSON = "json"
    YAML = "yaml"
    STRING = "string"

    def __str__(self) -> str:
        return self.value


def parse_format(value: str) -> OutputFormat:
    """Return the output format named by ``value``; raise ValueError otherwise."""
    try:
        return OutputFormat(value)
    except ValueError:
        raise ValueError(
            f"must be one of [{OutputFormat.JSON}, {OutputFormat.YAML}, {OutputFormat.STRING}]"
        ) from None


def is_default_format(fmt: OutputFormat | str | None) -> bool:
    """True when the human-readable output should be used."""
    return not fmt or fmt == OutputFormat.STRING


def print_result(out: TextIO, fmt: OutputFormat | str | None, payload: Any) -> None:
    """Write ``payload`` to ``out`` as JSON or YAML."""
    if fmt == OutputFormat.JSON:
        text = json.dumps(payload, indent="\t", ensure_ascii=False)
    elif fmt == OutputFormat.YAML:
        text = yaml.safe_dump(payload, default_flow_style=False, allow_unicode=True)
    else:
        raise ValueError(f"undefined format: {fmt or ''}")
    out.write(f"{text}\n")


def _title(name: str) -> str:
    return name.replace("_", " ").replace(".", " ").upper()


def render_table(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Render a borderless table with a centred, upper-cased header."""
    head = [_title(str(h)) for h in header]
    body = [[str(cell) for cell in row] for row in rows]
    widths = [max(len(cell) for cell in column) for column in zip(head, *body)]

    def line(cells: Iterable[str]) -> str:
        return " " + " | ".join(cells) + " "

    lines = [line(h.center(w) for h, w in zip(head, widths))]
    lines.append("+".join("-" * (w + 2) for w in widths))
    for row in body:
        lines.append(
            line(
                cell.rjust(w) if _NUMERIC.fullmatch(cell) else cell.ljust(w)
                for cell, w in zip(row, widths)
            )
        )
    return "\n".join(lines) + "\n"