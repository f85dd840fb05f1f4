"""Tests for values.yaml documentation extraction and dependency parsing."""

from __future__ import annotations

from helm_readme_mcp.parsing.values import (
    extract_values_documentation,
    parse_dependencies,
    values_title,
)

VALUES = """\
## @param replicaCount Number of replicas
# Number of nginx replicas to deploy
replicaCount: 1

# Container image settings
image:
  registry: docker.io
  repository: bitnami/nginx
# Service exposure
service:
  type: LoadBalancer

undocumented: true
"""


class TestValuesTitle:
    def test_camel_case(self):
        assert values_title("replicaCount: 1") == "Replica Count Configuration"

    def test_indented_key(self):
        assert values_title("  podSecurityContext:") == "Pod Security Context Configuration"

    def test_fallback(self):
        assert values_title("- item") == "Values Configuration"


class TestExtractValuesDocumentation:
    def test_comment_blocks_become_examples(self):
        examples = extract_values_documentation(VALUES)
        assert [e.title for e in examples] == [
            "Replica Count Configuration",
            "Image Configuration",
            "Service Configuration",
        ]
        first = examples[0]
        assert first.language == "yaml"
        assert first.code == "replicaCount: 1"
        assert first.description == (
            "@param replicaCount Number of replicas Number of nginx replicas to deploy"
        )

    def test_multi_line_values_kept_together(self):
        image = extract_values_documentation(VALUES)[1]
        assert image.code == "image:\n  registry: docker.io\n  repository: bitnami/nginx"
        assert image.description == "Container image settings"

    def test_values_without_comment_skipped(self):
        codes = [e.code for e in extract_values_documentation(VALUES)]
        assert all("undocumented" not in c for c in codes)

    def test_blank_line_resets_comment(self):
        text = "# orphan comment\n\nkey: value\n"
        assert extract_values_documentation(text) == []

    def test_capped_at_five(self):
        text = "\n".join(f"# doc {i}\nkey{i}: {i}\n" for i in range(8))
        assert len(extract_values_documentation(text)) == 5

    def test_empty(self):
        assert extract_values_documentation(None) == []
        assert extract_values_documentation("") == []


class TestParseDependencies:
    def test_parses_list(self):
        doc = """\
apiVersion: v2
dependencies:
  - name: common
    version: 2.x.x
    repository: oci://registry-1.docker.io/bitnamicharts
  - name: redis
    repository: https://charts.bitnami.com/bitnami
    version: 18.1.0
maintainers:
  - name: someone
"""
        assert parse_dependencies(doc) == {"common": "2.x.x", "redis": "18.1.0"}

    def test_entry_without_version_skipped(self):
        doc = "dependencies:\n  - name: a\n  - name: b\n    version: 1.0.0\n"
        assert parse_dependencies(doc) == {"b": "1.0.0"}

    def test_no_block(self):
        assert parse_dependencies("replicaCount: 1\n") is None
        assert parse_dependencies(None) is None

    def test_empty_block(self):
        assert parse_dependencies("dependencies:\nother: 1\n") == {}
