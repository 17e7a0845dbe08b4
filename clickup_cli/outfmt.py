"""
Output modes for the CLI.

Three modes are supported:
- JSON: indented JSON on stdout, for scripting
- Plain: tab-separated values with a header row, stable for parsing
- Human (default): aligned columns
"""

import dataclasses
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from clickup_cli.core.client import ValidationError

TRUE_VALUES = {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Mode:
    """Selected output mode. Neither flag set means human output."""

    json: bool = False
    plain: bool = False

    @property
    def human(self) -> bool:
        return not (self.json or self.plain)


def from_flags(json_out: bool, plain_out: bool) -> Mode:
    """Build a Mode from command-line flags."""
    if json_out and plain_out:
        raise ValidationError("invalid output mode (cannot combine --json and --plain)")
    return Mode(json=json_out, plain=plain_out)


def _env_bool(key: str) -> bool:
    return os.environ.get(key, "").strip().lower() in TRUE_VALUES


def from_env(prefix: str) -> Mode:
    """Read <PREFIX>_JSON and <PREFIX>_PLAIN."""
    return Mode(json=_env_bool(f"{prefix}_JSON"), plain=_env_bool(f"{prefix}_PLAIN"))


def to_jsonable(data: Any) -> Any:
    """Convert dataclasses (and lists of them) into plain JSON values."""
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


def write_json(data: Any, file: TextIO | None = None) -> None:
    """Print indented JSON, keeping non-ASCII characters as-is."""
    print(json.dumps(to_jsonable(data), indent=2, ensure_ascii=False, default=str), file=file or sys.stdout)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    # Tabs and newlines would break the column layout.
    return str(value).replace("\t", " ").replace("\n", " ")


def write_plain(headers: list[str], rows: list[list[Any]], file: TextIO | None = None) -> None:
    """Print tab-separated rows, preceded by a header row when given."""
    out = file or sys.stdout
    if headers:
        print("\t".join(headers), file=out)
    for row in rows:
        print("\t".join(_cell(v) for v in row), file=out)


def table_output(
    headers: list[str],
    rows: list[list[Any]],
    widths: list[int],
    file: TextIO | None = None,
) -> None:
    """Print a formatted table for human output. Cells are cut to their width."""
    out = file or sys.stdout
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line.rstrip(), file=out)
    print("-" * len(header_line.rstrip()), file=out)

    for row in rows:
        row_line = "  ".join(_cell(v)[:w].ljust(w) for v, w in zip(row, widths))
        print(row_line.rstrip(), file=out)
