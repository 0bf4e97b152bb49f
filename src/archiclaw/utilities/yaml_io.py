"""
archiclaw.utilities.yaml_io - YAML file helpers.

Landscape records are plain YAML documents. Reading uses a safe loader
that leaves dates as plain strings; writing keeps key order so that
round-tripped files diff cleanly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class LandscapeLoader(yaml.SafeLoader):
    """Safe loader that keeps dates as strings (`created: 2020-03-15`)."""


LandscapeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def read_yaml(path: Path) -> Any:
    """Parse a YAML file and return its content.

    Args:
        path: File to read.

    Returns:
        The parsed document (``None`` for an empty file).

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the content is not valid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.load(f, Loader=LandscapeLoader)


def dump_yaml(data: Any) -> str:
    """Serialize data to a YAML string, preserving mapping order."""
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def write_yaml(path: Path, data: Any) -> None:
    """Write data to a YAML file, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_yaml(data), encoding="utf-8")


def describe_yaml_error(err: yaml.YAMLError) -> str:
    """Render a YAML parse error as a single line with its position."""
    mark = getattr(err, "problem_mark", None)
    problem = getattr(err, "problem", None) or str(err)
    if mark is not None:
        return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
    return problem
