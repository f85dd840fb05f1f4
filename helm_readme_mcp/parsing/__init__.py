"""Text extraction from chart READMEs and values files."""

from helm_readme_mcp.parsing.readme import (
    SectionCategory,
    clean_markdown,
    extract_description,
    parse_usage_examples,
    split_usage_sections,
)
from helm_readme_mcp.parsing.values import extract_values_documentation, parse_dependencies

__all__ = [
    "SectionCategory",
    "clean_markdown",
    "extract_description",
    "extract_values_documentation",
    "parse_dependencies",
    "parse_usage_examples",
    "split_usage_sections",
]
