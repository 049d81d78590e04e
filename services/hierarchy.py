"""Loading and rendering of the four-level product classification tree."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from services.hierarchy_data import CLASSIFICATION_HIERARCHY
from services.models import ClassificationNode

MAX_LEVEL = 4
INDENT = "  "
SEGMENT_SEPARATOR = " > "

logger = logging.getLogger(__name__)


class HierarchyError(ValueError):
    """Raised when a hierarchy definition breaks the tree invariants."""


def _clean(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def build_hierarchy(records: Iterable[Mapping[str, object]]) -> tuple[ClassificationNode, ...]:
    """Validate flat ``level/code/name/parent_code`` records into nodes.

    Definition order is kept. Any orphaned or inconsistent record rejects the
    whole definition.
    """

    nodes: List[ClassificationNode] = []
    levels_by_code: Dict[str, int] = {}
    for index, record in enumerate(records, start=1):
        raw_level = _clean(record.get("level"))
        try:
            level = int(raw_level)
        except ValueError:
            raise HierarchyError(f"Entry {index}: invalid level {raw_level!r}") from None
        if not 1 <= level <= MAX_LEVEL:
            raise HierarchyError(f"Entry {index}: level {level} is outside 1..{MAX_LEVEL}")

        code = _clean(record.get("code"))
        name = _clean(record.get("name"))
        if not code or not name:
            raise HierarchyError(f"Entry {index}: code and name are required")
        if code in levels_by_code:
            raise HierarchyError(f"Entry {index}: duplicate code {code!r}")

        parent_code: Optional[str] = _clean(record.get("parent_code")) or None
        if level == 1:
            if parent_code is not None:
                raise HierarchyError(f"Entry {index}: Secteur {code!r} cannot have a parent")
        else:
            if parent_code is None:
                raise HierarchyError(f"Entry {index}: node {code!r} has no parent")
            parent_level = levels_by_code.get(parent_code)
            if parent_level is None:
                raise HierarchyError(
                    f"Entry {index}: node {code!r} references unknown parent {parent_code!r}"
                )
            if parent_level != level - 1:
                raise HierarchyError(
                    f"Entry {index}: parent {parent_code!r} of {code!r} is at level "
                    f"{parent_level}, expected {level - 1}"
                )

        levels_by_code[code] = level
        nodes.append(ClassificationNode(level=level, code=code, name=name, parent_code=parent_code))

    return tuple(nodes)


def parse_hierarchy(text: str) -> tuple[ClassificationNode, ...]:
    """Parse the indented ``<code> <name>`` outline format."""

    records: List[Dict[str, object]] = []
    ancestors: List[str] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        if not raw_line.strip() or raw_line.lstrip().startswith("#"):
            continue
        stripped = raw_line.lstrip(" ")
        indent = len(raw_line) - len(stripped)
        if indent % len(INDENT):
            raise HierarchyError(f"Line {line_no}: indentation must be a multiple of two spaces")
        level = indent // len(INDENT) + 1
        if level > len(ancestors) + 1:
            raise HierarchyError(f"Line {line_no}: level {level} has no parent on the line above")

        parts = stripped.strip().split(None, 1)
        if len(parts) != 2:
            raise HierarchyError(f"Line {line_no}: expected '<code> <name>'")
        code, name = parts

        del ancestors[level - 1:]
        records.append(
            {
                "level": level,
                "code": code,
                "name": name,
                "parent_code": ancestors[-1] if ancestors else None,
            }
        )
        ancestors.append(code)

    return build_hierarchy(records)


def load_hierarchy_csv(path: str | Path) -> tuple[ClassificationNode, ...]:
    """Read a hierarchy from a CSV with ``level,code,name,parent_code`` columns."""

    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    frame.columns = [str(col).strip().lower() for col in frame.columns]
    missing = {"level", "code", "name", "parent_code"} - set(frame.columns)
    if missing:
        raise HierarchyError(f"{path}: missing column(s) {', '.join(sorted(missing))}")
    nodes = build_hierarchy(frame.to_dict(orient="records"))
    logger.info("Loaded %d hierarchy nodes from %s", len(nodes), path)
    return nodes


@lru_cache(maxsize=1)
def default_hierarchy() -> tuple[ClassificationNode, ...]:
    return parse_hierarchy(CLASSIFICATION_HIERARCHY)


def hierarchy_to_text(nodes: Sequence[ClassificationNode]) -> str:
    """Render every node as an indented breadcrumb line.

    Each line lists the node's ancestors down to the node itself, e.g.
    ``"    - 01 PRODUITS FRAIS > 0101 FRUITS ET LEGUMES > 010101 FRUITS"``.
    """

    lines: List[str] = []
    path: List[str] = []
    for node in nodes:
        del path[node.level - 1:]
        path.append(f"{node.code} {node.name}")
        lines.append(f"{INDENT * (node.level - 1)}- {SEGMENT_SEPARATOR.join(path)}")
    return "\n".join(lines)
