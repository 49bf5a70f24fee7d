"""
Key Resolver Tests

Verifies the resolution order: no params, mapping, endpoint rule, join.
Mapping and no-parameter cases are checked as properties.
"""

from urllib.parse import parse_qsl, urlsplit

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from studio.contracts import MapParams, QueryDescriptor
from studio.query import DEFAULT_RULES, EndpointRule, KeyResolver


# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

paths = st.from_regex(r"/api/[a-z][a-z\-]{0,15}", fullmatch=True)

scalar_values = st.one_of(
    st.text(min_size=1, max_size=12),
    st.integers(min_value=-1000, max_value=1000),
    st.booleans(),
)


@composite
def mappings(draw):
    """Non-empty mappings with some None values mixed in."""
    keys = draw(st.lists(
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8),
        min_size=1, max_size=6, unique=True
    ))
    return {k: draw(st.one_of(st.none(), scalar_values)) for k in keys}


def expected_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# PROPERTIES
# =============================================================================

class TestResolverProperties:
    """Properties that hold for every descriptor."""

    @given(path=paths)
    def test_no_params_returns_base_path(self, path):
        assert KeyResolver().resolve(QueryDescriptor.of(path)) == path

    @given(path=paths)
    def test_undefined_first_param_returns_base_path(self, path):
        assert KeyResolver().resolve(QueryDescriptor.of(path, None)) == path

    @given(path=paths, mapping=mappings())
    def test_mapping_emits_exactly_defined_keys_in_order(self, path, mapping):
        target = KeyResolver().resolve(QueryDescriptor.of(path, mapping))

        defined = [(k, expected_value(v)) for k, v in mapping.items() if v is not None]
        parts = urlsplit(target)
        assert parts.path == path
        assert parse_qsl(parts.query, keep_blank_values=True) == defined

    @given(path=paths, mapping=mappings())
    def test_resolution_is_deterministic(self, path, mapping):
        resolver = KeyResolver()
        descriptor = QueryDescriptor.of(path, mapping)
        assert resolver.resolve(descriptor) == resolver.resolve(descriptor)


# =============================================================================
# ENDPOINT RULES
# =============================================================================

class TestEndpointRules:
    """Per-endpoint query-string rules."""

    @pytest.fixture
    def resolver(self):
        return KeyResolver()

    def test_scripts_by_project(self, resolver):
        assert resolver.resolve(QueryDescriptor.of("/api/scripts", "p1")) == "/api/scripts?projectId=p1"

    @pytest.mark.parametrize("path,name", [
        ("/api/scenes", "projectId"),
        ("/api/characters", "projectId"),
        ("/api/shots", "sceneId"),
        ("/api/production-notes", "sceneId"),
    ])
    def test_single_parent_rules(self, resolver, path, name):
        assert resolver.resolve(QueryDescriptor.of(path, "x1")) == f"{path}?{name}=x1"

    def test_performance_guides_with_character(self, resolver):
        descriptor = QueryDescriptor.of("/api/performance-guides", "sceneA", "charB")
        assert resolver.resolve(descriptor) == "/api/performance-guides?sceneId=sceneA&characterId=charB"

    def test_performance_guides_scene_only(self, resolver):
        descriptor = QueryDescriptor.of("/api/performance-guides", "sceneA")
        assert resolver.resolve(descriptor) == "/api/performance-guides?sceneId=sceneA"

    def test_performance_guides_skips_empty_character(self, resolver):
        descriptor = QueryDescriptor.of("/api/performance-guides", "sceneA", "")
        assert resolver.resolve(descriptor) == "/api/performance-guides?sceneId=sceneA"

    def test_rule_values_are_percent_encoded(self, resolver):
        descriptor = QueryDescriptor.of("/api/scripts", "a b&c")
        assert resolver.resolve(descriptor) == "/api/scripts?projectId=a%20b%26c"

    def test_numeric_id(self, resolver):
        assert resolver.resolve(QueryDescriptor.of("/api/shots", 42)) == "/api/shots?sceneId=42"

    def test_custom_rule_added(self, resolver):
        extended = resolver.with_rule(EndpointRule("/api/call-sheets", ("projectId",)))

        descriptor = QueryDescriptor.of("/api/call-sheets", "p9")
        assert extended.resolve(descriptor) == "/api/call-sheets?projectId=p9"
        # the source resolver is unchanged
        assert resolver.resolve(descriptor) == "/api/call-sheets/p9"

    def test_rule_needs_a_name(self):
        with pytest.raises(ValueError):
            EndpointRule("/api/x", ())

    def test_default_rule_table(self):
        assert {rule.path for rule in DEFAULT_RULES} == {
            "/api/scripts", "/api/scenes", "/api/shots", "/api/characters",
            "/api/performance-guides", "/api/production-notes",
        }


# =============================================================================
# FALLBACK JOIN
# =============================================================================

class TestFallbackJoin:
    """Descriptors no rule claims are joined with '/'."""

    @pytest.fixture
    def resolver(self):
        return KeyResolver()

    def test_detail_path(self, resolver):
        assert resolver.resolve(QueryDescriptor.of("/api/projects", "p1")) == "/api/projects/p1"

    def test_multi_segment_path(self, resolver):
        descriptor = QueryDescriptor.of("/api/projects", "p1", "analysis")
        assert resolver.resolve(descriptor) == "/api/projects/p1/analysis"

    def test_falsy_id_falls_through_to_join(self, resolver):
        # absent and empty ids are not distinguished
        assert resolver.resolve(QueryDescriptor.of("/api/scripts", "")) == "/api/scripts/"

    def test_zero_id_falls_through_to_join(self, resolver):
        assert resolver.resolve(QueryDescriptor.of("/api/scenes", 0)) == "/api/scenes/0"

    def test_empty_mapping_returns_base_path(self, resolver):
        assert resolver.resolve(QueryDescriptor.of("/api/projects", {})) == "/api/projects"

    def test_all_none_mapping_returns_base_path(self, resolver):
        descriptor = QueryDescriptor("/api/projects", (MapParams.from_mapping({"q": None}),))
        assert resolver.resolve(descriptor) == "/api/projects"
