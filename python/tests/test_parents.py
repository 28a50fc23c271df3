"""Tests for the multi-version index and the ancestor closure built on it."""

from depcheck.graph_builder import PackageGraph
from depcheck.models import Package
from depcheck.multi_version import MultiVersionIndex
from depcheck.parents import ParentClosureIndex


def build(records):
    graph = PackageGraph.build(records)
    index = MultiVersionIndex.from_graph(graph)
    return graph, index


class TestMultiVersionIndex:
    """Tests for MultiVersionIndex."""

    def test_only_names_with_several_versions(self, mixed_blame_records):
        """Test that only names with two or more versions are indexed."""
        _, index = build(mixed_blame_records)

        assert index.names() == ["d", "y"]
        assert index.versions("y") == ("1.0.0", "2.0.0")
        assert index.versions("e") == ()
        assert "e" not in index
        assert len(index) == 2

    def test_packages_in_order(self, diamond_records):
        """Test that occurrences are listed by name then version."""
        _, index = build(diamond_records)

        assert index.packages() == [
            Package("a", "1.0.0"),
            Package("a", "2.0.0"),
            Package("c", "1.0.0"),
            Package("c", "2.0.0"),
        ]

    def test_empty_when_no_duplicates(self, make_record):
        """Test the index of a graph without duplicates."""
        _, index = build([make_record("app", "0.1.0", "x 1.0.0", workspace=True), make_record("x", "1.0.0")])

        assert index.is_empty()
        assert index.packages() == []


class TestParentClosureIndex:
    """Tests for ParentClosureIndex views."""

    def test_views(self, diamond_records):
        """Test the duplicated names each ancestor sees."""
        graph, index = build(diamond_records)
        parents = ParentClosureIndex.build(graph, index)

        w = Package("w", "0.1.0")
        assert parents.view(w) == {"a": {"1.0.0", "2.0.0"}, "c": {"1.0.0", "2.0.0"}}
        assert parents.view(Package("b", "1.0.0")) == {"a": {"2.0.0"}, "c": {"2.0.0"}}
        assert parents.view(Package("a", "1.0.0")) == {"c": {"1.0.0"}}
        assert parents.view(Package("a", "2.0.0")) == {"c": {"2.0.0"}}

    def test_duplicates_are_not_their_own_ancestors(self, diamond_records):
        """Test that a duplicate is not recorded above itself."""
        graph, index = build(diamond_records)
        parents = ParentClosureIndex.build(graph, index)

        assert Package("c", "1.0.0") not in parents
        assert parents.view(Package("c", "2.0.0")) is None
        assert "a" not in parents.view(Package("a", "2.0.0"))

    def test_has_all_is_superset(self, partial_cover_records):
        """Test that has_all is a superset check."""
        graph, index = build(partial_cover_records)
        parents = ParentClosureIndex.build(graph, index)

        q = Package("q", "1.0.0")
        assert parents.has_all(q, "s", {"1.0.0", "2.0.0"})
        assert parents.has_all(q, "s", {"1.0.0"})
        assert not parents.has_all(q, "s", {"1.0.0", "2.0.0", "3.0.0"})
        assert not parents.has_all(q, "other", {"1.0.0"})
        assert not parents.has_all(Package("s", "1.0.0"), "s", {"1.0.0"})

    def test_multi_version_items_skip_single_versions(self, mixed_blame_records):
        """Test that names seen at one version are skipped."""
        graph, index = build(mixed_blame_records)
        parents = ParentClosureIndex.build(graph, index)

        x = Package("x", "1.0.0")
        assert parents.versions(x, "d") == {"2.0.0"}
        assert parents.multi_version_items(x) == [("y", {"1.0.0", "2.0.0"})]
        assert parents.multi_version_items(Package("e", "1.0.0")) == []

    def test_merged_roots_equal_full_build(self, all_records):
        """Test that merging per-root indexes equals one full build."""
        graph, index = build(all_records)
        full = ParentClosureIndex.build(graph, index)

        pieces = [ParentClosureIndex.build_for_root(graph, root) for root in reversed(index.packages())]
        merged = ParentClosureIndex.merge(*pieces)

        assert list(merged.ancestors()) == list(full.ancestors())
        for ancestor in full.ancestors():
            assert merged.view(ancestor) == full.view(ancestor)

    def test_root_order_does_not_matter(self, all_records):
        """Test that the root order does not change the views."""
        graph, index = build(all_records)
        forward = ParentClosureIndex.build(graph, index)
        backward = ParentClosureIndex.build(graph, index, roots=reversed(index.packages()))

        for ancestor in forward.ancestors():
            assert backward.view(ancestor) == forward.view(ancestor)
