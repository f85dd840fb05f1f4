"""Usage-example extraction and light clean-up for chart READMEs.

Sections are found with a small line-oriented state machine: a heading
whose title matches :data:`SECTION_PATTERNS` opens a section, and any
later heading at the same or a shallower level closes it.  Fenced code
blocks inside open sections become :class:`UsageExample` records.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

from helm_readme_mcp.constants import MAX_README_EXAMPLES
from helm_readme_mcp.models import UsageExample

logger = logging.getLogger(__name__)


class SectionCategory(str, Enum):
    """Kind of README section that usage examples are taken from."""

    USAGE = "usage"
    EXAMPLES = "examples"
    INSTALLATION = "installation"
    DEPLOYMENT = "deployment"


# Heading title -> category.  Matched against the full heading text.
SECTION_PATTERNS: Tuple[Tuple[re.Pattern[str], SectionCategory], ...] = (
    (
        re.compile(
            r"(usage|use|using|how to use|getting started|quick start|basic usage)",
            re.IGNORECASE,
        ),
        SectionCategory.USAGE,
    ),
    (re.compile(r"examples?", re.IGNORECASE), SectionCategory.EXAMPLES),
    (re.compile(r"(installation|installing|install)", re.IGNORECASE), SectionCategory.INSTALLATION),
    (
        re.compile(r"(deploying|deployment|deploy|helm install|chart usage)", re.IGNORECASE),
        SectionCategory.DEPLOYMENT,
    ),
)

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*$")
# A fence opens with an optional language tag and closes only on a bare
# ``` line.  Another fence line before that means the block never closed.
_CODE_BLOCK_RE = re.compile(
    r"^[ \t]*```([\w.+-]+)?[ \t]*\r?\n((?:(?!^[ \t]*```).)*?)^[ \t]*```[ \t]*\r?$",
    re.DOTALL | re.MULTILINE,
)

_SHELL_LANGS = frozenset({"bash", "shell", "sh", "console"})

_LANGUAGE_ALIASES = {
    "js": "javascript",
    "ts": "typescript",
    "sh": "bash",
    "shell": "bash",
    "console": "bash",
    "yml": "yaml",
    "md": "markdown",
    "dockerfile": "docker",
    "gotmpl": "helm",
    "go-template": "helm",
    "py": "python",
}

_CODE_INDICATORS = (
    re.compile(r"^\s*[{}\[\]();,]"),  # starts with a code character
    re.compile(r"[{}\[\]();,]\s*$"),  # ends with a code character
    re.compile(r"^\s*(helm|kubectl|docker|git)\s+"),
    re.compile(r"^\s*\$"),  # shell prompt
    re.compile(r"^\s*//"),
    re.compile(r"^\s*#"),
    re.compile(r"^\s*(apiVersion|kind|name|image):"),
)


def classify_heading(line: str) -> Optional[Tuple[int, Optional[SectionCategory]]]:
    """Return ``(level, category)`` for a heading line, ``None`` otherwise.

    *category* is ``None`` for headings that do not start a usage section.
    """
    match = _HEADING_RE.match(line.rstrip("\r"))
    if match is None:
        return None
    level = len(match.group(1))
    title = match.group(2).rstrip(":").strip()
    for pattern, category in SECTION_PATTERNS:
        if pattern.fullmatch(title):
            return level, category
    return level, None


@dataclass
class Section:
    """The lines of one usage section, heading included."""

    category: SectionCategory
    level: int
    lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def _fenced_line_indexes(lines: List[str]) -> Set[int]:
    """Indexes of lines strictly inside a closed code fence.

    Only a bare ```` ``` ```` line closes a fence.  A fence line carrying a
    language tag while a fence is open starts a new block, and the earlier
    one is treated as never closed.
    """
    inside: Set[int] = set()
    opened: Optional[int] = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith("```"):
            continue
        if opened is not None and stripped == "```":
            inside.update(range(opened + 1, index))
            opened = None
        else:
            opened = index
    return inside


def split_usage_sections(content: str) -> List[Section]:
    """Split *content* into usage sections, in document order.

    States are *outside* (``current is None``) and *in section(level)*.
    A recognised heading always starts a new section.  Inside a section,
    an unrecognised heading at ``level <= section.level`` ends it; deeper
    headings are kept as content.  ``#`` lines inside code fences are
    never headings.
    """
    sections: List[Section] = []
    current: Optional[Section] = None
    lines = content.split("\n")
    fenced = _fenced_line_indexes(lines)

    for index, line in enumerate(lines):
        heading = None if index in fenced else classify_heading(line)
        if heading is None:
            if current is not None:
                current.lines.append(line)
            continue

        level, category = heading
        if category is not None:
            if current is not None:
                sections.append(current)
            current = Section(category=category, level=level, lines=[line])
        elif current is not None and level <= current.level:
            sections.append(current)
            current = None
        elif current is not None:
            current.lines.append(line)

    if current is not None:
        sections.append(current)
    return sections


def normalize_language(language: str) -> str:
    lowered = language.lower()
    return _LANGUAGE_ALIASES.get(lowered, lowered)


def infer_example_title(code: str, language: str) -> str:
    """Guess a human-readable title from the block's language and content."""
    first_line = code.split("\n", 1)[0].strip()
    lang = language.lower()

    if lang in _SHELL_LANGS:
        if "helm repo add" in first_line:
            return "Add Helm Repository"
        if "helm install" in first_line:
            return "Install Chart"
        if "helm upgrade" in first_line:
            return "Upgrade Chart"
        if "helm uninstall" in first_line or "helm delete" in first_line:
            return "Uninstall Chart"
        if "kubectl" in first_line:
            return "Kubernetes Command"
        return "Command Line Usage"

    if lang in ("yaml", "yml"):
        if "apiVersion:" in code and "kind:" in code:
            return "Kubernetes Manifest"
        if "replicaCount:" in code or "image:" in code or "service:" in code:
            return "Values Configuration"
        if "global:" in code:
            return "Global Values"
        return "YAML Configuration"

    if lang == "json":
        return "JSON Configuration"
    if lang in ("dockerfile", "docker"):
        return "Docker Configuration"
    if lang in ("helm", "gotmpl", "go-template"):
        return "Helm Template"
    if lang in ("javascript", "js"):
        return "JavaScript Example"
    if lang in ("typescript", "ts"):
        return "TypeScript Example"
    if lang in ("python", "py"):
        return "Python Example"
    return "Code Example"


def looks_like_code(text: str) -> bool:
    return any(pattern.search(text) for pattern in _CODE_INDICATORS)


def infer_example_description(section_text: str, block_start: int) -> Optional[str]:
    """Use the nearest prose line above a code block as its description.

    Only the closest non-empty, non-heading line is considered.  It must
    be 11-299 characters long and not look like code.
    """
    before = section_text[:block_start]
    for line in reversed(before.split("\n")):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if 10 < len(stripped) < 300 and not looks_like_code(stripped):
            return re.sub(r"^[*-]\s*", "", stripped)
        return None
    return None


def extract_code_blocks(section_text: str) -> List[UsageExample]:
    """Turn every closed, non-empty fenced block in *section_text* into an example."""
    examples: List[UsageExample] = []
    for match in _CODE_BLOCK_RE.finditer(section_text):
        language = match.group(1) or "text"
        code = match.group(2).strip()
        if not code:
            continue
        examples.append(
            UsageExample(
                title=infer_example_title(code, language),
                description=infer_example_description(section_text, match.start()),
                code=code,
                language=normalize_language(language),
            )
        )
    return examples


def deduplicate_examples(examples: List[UsageExample]) -> List[UsageExample]:
    """Drop examples whose whitespace-normalised code was already seen."""
    seen = set()
    unique: List[UsageExample] = []
    for example in examples:
        fingerprint = " ".join(example.code.split())
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        unique.append(example)
    return unique


def parse_usage_examples(
    readme_content: str,
    include_examples: bool = True,
    limit: int = MAX_README_EXAMPLES,
) -> List[UsageExample]:
    """Extract up to *limit* usage examples from a README, in document order."""
    if not include_examples or not readme_content:
        return []

    examples: List[UsageExample] = []
    for section in split_usage_sections(readme_content):
        examples.extend(extract_code_blocks(section.text))

    unique = deduplicate_examples(examples)[:limit]
    logger.debug("Extracted %d usage examples from README", len(unique))
    return unique


# ── README clean-up ──────────────────────────────────────────────────────

_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
_RELATIVE_LINK_RE = re.compile(r"\[([^\]]+)\]\((?!https?://)([^)]+)\)")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def clean_markdown(content: str) -> str:
    """Strip badges and relative links and squeeze blank-line runs."""
    cleaned = _IMAGE_RE.sub(lambda m: m.group(1) if len(m.group(1)) > 3 else "", content)
    cleaned = _RELATIVE_LINK_RE.sub(r"\1", cleaned)
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def extract_description(content: str) -> str:
    """Return the first prose paragraph of a README.

    Headings, blank lines and badge/image lines are skipped; lines of 20
    characters or fewer are ignored.  The paragraph stops at the next
    heading or blank line, or before it would pass 500 characters.
    """
    description = ""
    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            if description:
                break
            continue
        if stripped.startswith("![") or stripped.startswith("[!["):
            continue
        if len(stripped) <= 20:
            continue
        if not description:
            description = stripped
        elif len(description) + len(stripped) < 500:
            description += " " + stripped
        else:
            break
    return description or "No description available"
