"""Tests for README usage-example extraction and clean-up."""

from __future__ import annotations

import pytest

from helm_readme_mcp.parsing.readme import (
    SectionCategory,
    classify_heading,
    clean_markdown,
    extract_description,
    infer_example_title,
    normalize_language,
    parse_usage_examples,
    split_usage_sections,
)

FENCE = "```"


def _block(lang: str, body: str) -> str:
    return f"{FENCE}{lang}\n{body}\n{FENCE}"


class TestClassifyHeading:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("## Installation", (2, SectionCategory.INSTALLATION)),
            ("# Usage", (1, SectionCategory.USAGE)),
            ("### Getting Started", (3, SectionCategory.USAGE)),
            ("## Examples:", (2, SectionCategory.EXAMPLES)),
            ("## Helm Install", (2, SectionCategory.DEPLOYMENT)),
            ("## Parameters", (2, None)),
        ],
    )
    def test_classification(self, line, expected):
        assert classify_heading(line) == expected

    def test_requires_whitespace_after_hashes(self):
        assert classify_heading("##Installation") is None

    def test_partial_title_does_not_match(self):
        assert classify_heading("## Installing the Chart") == (2, None)

    def test_non_heading(self):
        assert classify_heading("plain text") is None


class TestSplitSections:
    def test_section_closed_by_same_level_heading(self):
        readme = "\n".join(
            ["## Usage", "use it", "### Details", "deeper", "## Parameters", "not included"]
        )
        sections = split_usage_sections(readme)
        assert len(sections) == 1
        assert "deeper" in sections[0].text
        assert "not included" not in sections[0].text

    def test_hash_comments_in_code_do_not_close_section(self):
        readme = "\n".join(
            [
                "## Installation",
                FENCE + "bash",
                "# add the repo first",
                "helm repo add bitnami https://charts.bitnami.com/bitnami",
                FENCE,
            ]
        )
        sections = split_usage_sections(readme)
        assert len(sections) == 1
        assert "helm repo add" in sections[0].text

    def test_recognised_heading_starts_new_section(self):
        readme = "## Usage\na\n### Examples\nb"
        sections = split_usage_sections(readme)
        assert [s.category for s in sections] == [SectionCategory.USAGE, SectionCategory.EXAMPLES]


class TestParseUsageExamples:
    def test_single_install_block(self):
        readme = "## Installation\n\n" + _block("bash", "helm install x y")
        examples = parse_usage_examples(readme)
        assert len(examples) == 1
        assert examples[0].title == "Install Chart"
        assert examples[0].language == "bash"
        assert examples[0].code == "helm install x y"

    def test_duplicates_across_sections_kept_once_in_order(self):
        readme = "\n".join(
            [
                "## Usage",
                _block("bash", "helm repo add bitnami https://charts.bitnami.com/bitnami"),
                _block("yaml", "replicaCount: 2"),
                "## Examples",
                _block("bash", "helm  repo add bitnami   https://charts.bitnami.com/bitnami"),
            ]
        )
        examples = parse_usage_examples(readme)
        assert [e.title for e in examples] == ["Add Helm Repository", "Values Configuration"]

    def test_blocks_outside_sections_ignored(self):
        readme = "# Chart\n" + _block("bash", "helm install a b") + "\n## Parameters\n" + _block(
            "yaml", "a: 1"
        )
        assert parse_usage_examples(readme) == []

    def test_empty_and_unterminated_blocks_dropped(self):
        readme = "## Usage\n" + _block("bash", "   ") + "\n" + FENCE + "bash\nhelm install a b\n"
        assert parse_usage_examples(readme) == []

    def test_unclosed_block_does_not_swallow_next_section(self):
        readme = "\n".join(
            [
                "## Installation",
                "",
                FENCE + "bash",
                "helm install a b",
                "",
                "## Usage",
                "",
                _block("bash", "helm upgrade c d"),
            ]
        )
        sections = split_usage_sections(readme)
        assert [s.category for s in sections] == [SectionCategory.INSTALLATION, SectionCategory.USAGE]
        examples = parse_usage_examples(readme)
        assert [(e.title, e.code) for e in examples] == [("Upgrade Chart", "helm upgrade c d")]

    def test_tagged_fence_line_never_closes_a_block(self):
        readme = "## Usage\n" + FENCE + "bash\nhelm install a b\n" + _block("yaml", "replicaCount: 3")
        examples = parse_usage_examples(readme)
        assert [(e.language, e.code) for e in examples] == [("yaml", "replicaCount: 3")]

    def test_crlf_line_endings(self):
        readme = "## Installation\r\n\r\n```bash\r\nhelm install x y\r\n```\r\n"
        examples = parse_usage_examples(readme)
        assert [(e.title, e.language, e.code) for e in examples] == [
            ("Install Chart", "bash", "helm install x y")
        ]

    def test_untagged_block_is_text(self):
        readme = "## Usage\n" + _block("", "some command")
        examples = parse_usage_examples(readme)
        assert examples[0].language == "text"
        assert examples[0].title == "Code Example"

    def test_description_from_preceding_prose(self):
        readme = "\n".join(
            [
                "## Installation",
                "- To install the chart with the release name my-release:",
                "",
                _block("console", "helm install my-release bitnami/nginx"),
            ]
        )
        example = parse_usage_examples(readme)[0]
        assert example.description == "To install the chart with the release name my-release:"
        assert example.language == "bash"

    def test_code_like_line_gives_no_description(self):
        readme = "## Usage\nkubectl get pods -n default\n" + _block("bash", "helm upgrade a b")
        example = parse_usage_examples(readme)[0]
        assert example.description is None
        assert example.title == "Upgrade Chart"

    def test_capped_at_limit(self):
        blocks = "\n".join(_block("bash", f"helm install r{i} c") for i in range(20))
        examples = parse_usage_examples("## Usage\n" + blocks)
        assert len(examples) == 15

    def test_disabled(self):
        assert parse_usage_examples("## Usage\n" + _block("bash", "ls"), include_examples=False) == []


class TestTitlesAndLanguages:
    @pytest.mark.parametrize(
        "code, lang, title",
        [
            ("helm uninstall my-release", "sh", "Uninstall Chart"),
            ("kubectl get svc", "shell", "Kubernetes Command"),
            ("echo hi", "bash", "Command Line Usage"),
            ("apiVersion: v1\nkind: Service", "yaml", "Kubernetes Manifest"),
            ("global:\n  storageClass: x", "yml", "Global Values"),
            ("foo: bar", "yaml", "YAML Configuration"),
            ('{"a": 1}', "json", "JSON Configuration"),
            ("FROM alpine", "dockerfile", "Docker Configuration"),
            ("{{ .Values.x }}", "gotmpl", "Helm Template"),
            ("print(1)", "py", "Python Example"),
            ("x", "rust", "Code Example"),
        ],
    )
    def test_titles(self, code, lang, title):
        assert infer_example_title(code, lang) == title

    @pytest.mark.parametrize(
        "raw, expected",
        [("JS", "javascript"), ("console", "bash"), ("yml", "yaml"), ("go-template", "helm"), ("toml", "toml")],
    )
    def test_normalize_language(self, raw, expected):
        assert normalize_language(raw) == expected


class TestCleanup:
    def test_clean_markdown(self):
        text = (
            "# Title\n\n\n\n![Build Status](https://img/badge.svg) ![ci](x.png)\n"
            "See [docs](docs/README.md) and [site](https://example.com).\n"
        )
        cleaned = clean_markdown(text)
        assert "Build Status" in cleaned
        assert "![" not in cleaned
        assert "ci" not in cleaned.split("\n")[2]
        assert "See docs and [site](https://example.com)." in cleaned
        assert "\n\n\n" not in cleaned

    def test_extract_description_first_paragraph(self):
        text = "# nginx\n\n![badge](x)\n\nshort\nNGINX Open Source is a web server that can be used.\nIt also proxies.\n\nMore."
        assert extract_description(text) == (
            "NGINX Open Source is a web server that can be used."
        )

    def test_extract_description_default(self):
        assert extract_description("# Title\n\nshort") == "No description available"
