"""TOML reading and rendering shared by the settings and fixture files."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any


def toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    # JSON string escapes are valid TOML basic-string escapes
    return json.dumps(str(value))


def render_table(header: str, values: Mapping[str, Any]) -> list[str]:
    lines = [header]
    lines.extend(f"{key} = {toml_value(value)}" for key, value in values.items())
    lines.append("")
    return lines


def read_toml(path: Path, kind: str) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {kind} file: {path}\n{exc}") from exc


def write_lines(path: Path, lines: Iterable[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines))
