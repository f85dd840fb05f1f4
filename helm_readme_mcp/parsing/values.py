"""Helpers for chart ``values.yaml`` text.

``extract_values_documentation`` turns commented value blocks into
usage examples.  ``parse_dependencies`` reads a Chart.yaml-style
``dependencies:`` list out of whatever document it is handed.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from helm_readme_mcp.constants import MAX_VALUES_EXAMPLES
from helm_readme_mcp.models import UsageExample

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^\s*([^:#\s][^:#]*):")
_CAMEL_RE = re.compile(r"([A-Z])")

_DEPENDENCIES_RE = re.compile(r"^\s*dependencies:\s*$")
_DEP_NAME_RE = re.compile(r"^\s*-\s*name:\s*(.+?)\s*$")
_DEP_VERSION_RE = re.compile(r"^\s*version:\s*(.+?)\s*$")
_DEP_REPOSITORY_RE = re.compile(r"^\s*repository:\s*(.+?)\s*$")


def values_title(value_line: str) -> str:
    """``"replicaCount: 1"`` -> ``"Replica Count Configuration"``."""
    match = _KEY_RE.match(value_line)
    if match is None:
        return "Values Configuration"
    key = match.group(1).strip()
    spaced = _CAMEL_RE.sub(r" \1", key).strip()
    return spaced[:1].upper() + spaced[1:] + " Configuration"


def extract_values_documentation(
    values_content: Optional[str],
    limit: int = MAX_VALUES_EXAMPLES,
) -> List[UsageExample]:
    """Build one example per comment block that documents a run of values.

    A run of ``#`` lines followed by one or more value lines forms an
    example; its description is the joined comment text.  A blank line
    discards whatever has been accumulated, and a comment after value
    lines closes the current example.
    """
    if not values_content:
        return []

    examples: List[UsageExample] = []
    comments: List[str] = []
    values: List[str] = []

    def _flush() -> None:
        if comments and values:
            examples.append(
                UsageExample(
                    title=values_title(values[0]),
                    description=" ".join(comments),
                    code="\n".join(values),
                    language="yaml",
                )
            )
        comments.clear()
        values.clear()

    for line in values_content.split("\n"):
        if len(examples) >= limit:
            break
        stripped = line.strip()
        if not stripped:
            _flush()
        elif stripped.startswith("#"):
            if values:
                _flush()
            text = stripped.lstrip("#").strip()
            if text:
                comments.append(text)
        elif comments:
            values.append(line.rstrip())
    _flush()

    return examples[:limit]


def parse_dependencies(document: Optional[str]) -> Optional[Dict[str, str]]:
    """Read ``name -> version`` pairs from a ``dependencies:`` list.

    Returns ``None`` when *document* has no ``dependencies:`` block.
    Entries without a version are skipped.
    """
    if not document:
        return None

    lines = document.split("\n")
    start = next((i for i, ln in enumerate(lines) if _DEPENDENCIES_RE.match(ln)), None)
    if start is None:
        return None

    dependencies: Dict[str, str] = {}
    name: Optional[str] = None
    version: Optional[str] = None
    for line in lines[start + 1 :]:
        if not line.strip():
            continue
        name_match = _DEP_NAME_RE.match(line)
        if name_match:
            if name and version:
                dependencies[name] = version
            name, version = name_match.group(1), None
            continue
        version_match = _DEP_VERSION_RE.match(line)
        if version_match and name:
            version = version_match.group(1)
            continue
        if _DEP_REPOSITORY_RE.match(line):
            continue
        break
    if name and version:
        dependencies[name] = version

    logger.debug("Parsed %d chart dependencies", len(dependencies))
    return dependencies
