"""Tests for the Elasticsearch response cache."""

from clusterscope.view.data import ElasticsearchData, TableFilter

from conftest import make_alias, make_health, make_index


class TestElasticsearchData:
    """Tests for ElasticsearchData."""

    def test_empty_cache(self):
        data = ElasticsearchData()

        assert data.get_cluster_health("a") is None
        assert data.get_visible_indices("a") is None
        assert data.get_visible_aliases("a") is None
        assert data.cluster_names() == []

    def test_update_replaces_slot(self):
        data = ElasticsearchData()
        data.update_indices("a", [make_index("one"), make_index("two")])
        data.update_indices("a", [make_index("three")])

        assert [i.index for i in data.get_indices("a")] == ["three"]

    def test_clusters_are_separate(self):
        data = ElasticsearchData()
        data.update_cluster_health("a", make_health("a", "green"))
        data.update_cluster_health("b", make_health("b", "red"))

        assert data.get_cluster_health("a").status == "green"
        assert data.get_cluster_health("b").status == "red"
        assert data.cluster_names() == ["a", "b"]

    def test_indices_stored_sorted(self):
        data = ElasticsearchData()
        data.update_indices("a", [make_index("b"), make_index("a"), make_index(".c")])

        assert [i.index for i in data.get_indices("a")] == [".c", "a", "b"]

    def test_filter_applies_at_read_time(self):
        data = ElasticsearchData()
        data.update_indices("a", [make_index(".security"), make_index("logs")])

        visible = data.get_visible_indices("a", TableFilter.HIDE_SYSTEM)
        assert [i.index for i in visible] == ["logs"]
        assert len(data.get_visible_indices("a")) == 2

    def test_alias_filter(self):
        data = ElasticsearchData()
        data.update_aliases("a", [make_alias("logs", "logs-1"), make_alias(".hidden", "x")])

        visible = data.get_visible_aliases("a", TableFilter.HIDE_SYSTEM)
        assert [a.alias for a in visible] == ["logs"]

    def test_empty_catalog_is_not_missing(self):
        data = ElasticsearchData()
        data.update_indices("a", [make_index(".only-system")])

        assert data.get_visible_indices("a", TableFilter.HIDE_SYSTEM) == []


class TestTableFilter:
    def test_hide_system(self):
        assert TableFilter.HIDE_SYSTEM.apply("logs")
        assert not TableFilter.HIDE_SYSTEM.apply(".kibana")
