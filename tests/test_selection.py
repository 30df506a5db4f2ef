"""Tests for selecting resources with standard where-filters."""

import pytest

from wherefilter.errors import InternalEvaluationError, QuerySyntaxError
from wherefilter.parser import parse_standard_where_filter
from wherefilter.resolver import DocumentResolver
from wherefilter.selection import declare_types, infer_length_type, select_resources
from wherefilter.types import DataType, ResolvedValue


def names(resources):
    return [r["metadata"]["name"] for r in resources]


@pytest.fixture
def resolver():
    return DocumentResolver()


class TestSelectResources:
    def test_equality(self, manifests, resolver):
        selected = select_resources("kind = 'Deployment'", manifests, resolver)
        assert names(selected) == ["web", "worker"]

    def test_and_requires_every_clause(self, manifests, resolver):
        selected = select_resources(
            "kind = 'Deployment' AND metadata.namespace = 'batch'", manifests, resolver
        )
        assert names(selected) == ["worker"]

    def test_empty_query_selects_everything(self, manifests, resolver):
        assert select_resources("", manifests, resolver) == manifests
        assert select_resources("   ", manifests, resolver) == manifests

    def test_missing_attribute_never_matches(self, manifests, resolver):
        selected = select_resources("spec.replicas != 3", manifests, resolver)
        assert names(selected) == ["worker"]

    def test_any_value_of_a_wildcard_matches(self, manifests, resolver):
        selected = select_resources(
            "spec.template.spec.containers.*.image LIKE 'envoy:%'", manifests, resolver
        )
        assert names(selected) == ["web"]

    def test_associative_path(self, manifests, resolver):
        selected = select_resources(
            "spec.template.spec.containers.?name=main.image ~ '^busybox'", manifests, resolver
        )
        assert names(selected) == ["worker"]

    def test_bool_attribute(self, manifests, resolver):
        selected = select_resources("spec.paused = false", manifests, resolver)
        assert names(selected) == ["web"]

    def test_int_ordering(self, manifests, resolver):
        selected = select_resources("spec.replicas >= 2", manifests, resolver)
        assert names(selected) == ["web"]

    def test_accepts_parsed_expressions(self, manifests, resolver):
        expressions = parse_standard_where_filter("metadata.name = 'creds'")
        assert names(select_resources(expressions, manifests, resolver)) == ["creds"]

    def test_syntax_error_propagates(self, manifests, resolver):
        with pytest.raises(QuerySyntaxError):
            select_resources("kind IN ('Pod')", manifests, resolver)

    def test_untyped_resolver_surfaces_internal_errors(self, manifests):
        with pytest.raises(InternalEvaluationError):
            select_resources("spec.replicas = 'three'", manifests, DocumentResolver(typed=False))


class TestSplitPaths:
    QUERY = "spec.template.spec.containers.*.|securityContext.privileged != true"

    def test_missing_sub_path_satisfies_inequality(self, manifests, resolver):
        assert names(select_resources(self.QUERY, manifests, resolver)) == ["web"]

    def test_missing_sub_path_fails_equality(self, manifests, resolver):
        query = "spec.template.spec.containers.*.|securityContext.privileged = true"
        assert names(select_resources(query, manifests, resolver)) == ["worker"]


class TestDeclaredTypes:
    def test_containment_on_declared_map(self, manifests, resolver):
        selected = select_resources(
            "metadata.labels ? 'tier'",
            manifests,
            resolver,
            declared_types={"metadata.labels": DataType.STRING_MAP},
        )
        assert names(selected) == ["web"]

    def test_length_of_undeclared_map(self, manifests, resolver):
        selected = select_resources("LEN(metadata.labels) >= 2", manifests, resolver)
        assert names(selected) == ["web"]

    def test_length_of_undeclared_list(self, manifests, resolver):
        selected = select_resources(
            "LEN(spec.template.spec.containers) = 1", manifests, resolver
        )
        assert names(selected) == ["worker"]

    def test_declare_types_skips_in_clauses(self):
        from wherefilter.parser import parse_import_where_filter

        expressions = parse_import_where_filter("kind IN ('Pod') AND kind = 'Pod'")
        typed = declare_types(expressions, {"kind": DataType.ENUM})
        assert [e.data_type for e in typed] == [DataType.STRING, DataType.ENUM]

    def test_declare_types_without_declarations(self):
        expressions = parse_standard_where_filter("kind = 'Pod'")
        assert declare_types(expressions, None) == expressions

    def test_infer_length_type_keeps_declared_storage_type(self):
        expr = parse_standard_where_filter("LEN(a) > 0")[0].with_data_type(DataType.STRING_BOOL_MAP)
        assert infer_length_type(expr, {}).data_type == DataType.STRING_BOOL_MAP

    def test_infer_length_type_ignores_plain_expressions(self):
        expr = parse_standard_where_filter("a > 0")[0]
        assert infer_length_type(expr, {}) is expr


class TestCustomResolvers:
    def test_right_operand_from_resolver(self):
        docs = [{"spec": 3, "status": 3}, {"spec": 3, "status": 2}]

        def resolve(doc, expr):
            return [ResolvedValue(doc["spec"], right=doc["status"])]

        selected = select_resources("spec = 0", docs, resolve)
        assert selected == [docs[0]]

    def test_comparator(self, manifests, resolver, prefix_comparator):
        query = "spec.template.spec.containers.*.image = 'nginx'"
        assert select_resources(query, manifests, resolver) == []
        selected = select_resources(query, manifests, resolver, comparators=[prefix_comparator])
        assert names(selected) == ["web"]
        assert prefix_comparator.calls == 2
