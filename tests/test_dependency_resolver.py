"""Tests for ancestor population."""

import pytest
from unittest.mock import Mock

from conftest import column_values, count_rows
from schemaseed.core.assembler import RowAssembler
from schemaseed.core.dependency_resolver import DependencyResolver
from schemaseed.core.exceptions import SchemaNotFoundError, UnsatisfiableDependencyError
from schemaseed.core.inserter import DataInserter
from schemaseed.core.metadata import MetadataProvider
from schemaseed.core.models import ForeignKeyEdge, GenerationConfig, TableRelations
from schemaseed.core.synthesizer import ValueSynthesizer


def make_resolver(db_conn, config):
    return DependencyResolver(
        MetadataProvider(db_conn),
        RowAssembler(db_conn, ValueSynthesizer(config), config),
        DataInserter(db_conn, config),
        config,
    )


class TestEnsurePopulated:
    """Underpopulated ancestors are seeded parents-first."""

    def test_chain_seeds_root_ancestor_first(self, blog_db, generation_config):
        state = make_resolver(blog_db, generation_config).ensure_populated("comments")

        assert state.seed_order == ["users", "posts"]
        assert state.seeded == {"users": 10, "posts": 10}
        user_ids = set(column_values(blog_db, "users", "id"))
        assert set(column_values(blog_db, "posts", "user_id")) <= user_ids

    def test_populated_parents_left_alone(self, blog_db, generation_config):
        DataInserter(blog_db).insert_rows("users", [
            {"username": "ann", "email": "ann@example.com", "is_active": 1},
        ])

        state = make_resolver(blog_db, generation_config).ensure_populated("posts")

        assert state.seeded == {}
        assert count_rows(blog_db, "users") == 1

    def test_min_rows_threshold(self, blog_db, generation_config):
        DataInserter(blog_db).insert_rows("users", [
            {"username": f"u{i}", "email": f"u{i}@example.com", "is_active": 1} for i in range(2)
        ])

        state = make_resolver(blog_db, generation_config).ensure_populated("posts", min_rows=5)

        assert state.seeded == {"users": 10}
        assert count_rows(blog_db, "users") == 12

    def test_seed_rows_setting(self, blog_db):
        config = GenerationConfig(seed_rows=3, null_probability=0.0)

        state = make_resolver(blog_db, config).ensure_populated("posts")

        assert state.seeded == {"users": 3}

    def test_table_without_foreign_keys(self, blog_db, generation_config):
        state = make_resolver(blog_db, generation_config).ensure_populated("users")

        assert state.seeded == {}
        assert state.visited == {"users"}

    def test_diamond_seeds_shared_ancestor_once(self, diamond_db, generation_config):
        state = make_resolver(diamond_db, generation_config).ensure_populated("orders")

        assert state.seeded == {"regions": 10, "customers": 10, "suppliers": 10}
        assert state.seed_order.index("regions") == 0
        assert count_rows(diamond_db, "regions") == 10

    def test_cycle_terminates(self, cycle_db, generation_config):
        state = make_resolver(cycle_db, generation_config).ensure_populated("beta")

        assert state.seeded == {"alpha": 10}
        assert column_values(cycle_db, "alpha", "beta_id") == [None] * 10

    def test_cycle_through_required_reference(self, cycle_db, generation_config):
        with pytest.raises(UnsatisfiableDependencyError, match="alpha"):
            make_resolver(cycle_db, generation_config).ensure_populated("alpha")

    def test_required_self_reference_on_empty_table(self, self_reference_db, generation_config):
        with pytest.raises(UnsatisfiableDependencyError, match="employees"):
            make_resolver(self_reference_db, generation_config).ensure_populated("employees")

    def test_optional_self_reference(self, self_reference_db, generation_config):
        state = make_resolver(self_reference_db, generation_config).ensure_populated("categories")
        assert state.seeded == {}

    def test_dangling_reference(self, dangling_db, generation_config):
        with pytest.raises(SchemaNotFoundError, match="ghosts"):
            make_resolver(dangling_db, generation_config).ensure_populated("orphans")


def test_dangling_reference_detected_before_any_write():
    metadata = Mock(spec=MetadataProvider)
    metadata.list_tables.return_value = ["orders"]
    metadata.get_relations.return_value = TableRelations(outgoing=[
        ForeignKeyEdge("orders", "user_id", "users", "id", "fk_orders_user"),
    ])
    assembler = Mock(spec=RowAssembler)
    inserter = Mock(spec=DataInserter)

    resolver = DependencyResolver(metadata, assembler, inserter, GenerationConfig())

    with pytest.raises(SchemaNotFoundError) as exc_info:
        resolver.ensure_populated("orders")

    assert exc_info.value.code == "NOT_FOUND"
    inserter.insert_rows.assert_not_called()
    metadata.count_rows.assert_not_called()
