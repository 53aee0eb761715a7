"""End-to-end tests for the generation and diagram operations."""

import pytest

from conftest import column_values, count_rows
from schemaseed.core.exceptions import (
    ConstraintViolationError, InvalidArgumentError, NotFoundError, SchemaNotFoundError,
    UnsatisfiableDependencyError
)
from schemaseed.core.inserter import DataInserter
from schemaseed.core.models import GenerationConfig
from schemaseed.core.service import SchemaSeedService


class TestGenerateTestData:
    """generate_test_data against real SQLite schemas."""

    def test_posts_with_empty_users(self, blog_db, generation_config):
        service = SchemaSeedService(blog_db, generation_config)

        result = service.generate_test_data("posts", 5)

        assert result.inserted == 5
        assert len(result.rows) == 5
        assert result.seeded == {"users": 10}
        assert count_rows(blog_db, "users") == 10
        assert count_rows(blog_db, "posts") == 5

        user_ids = set(column_values(blog_db, "users", "id"))
        assert all(row["user_id"] in user_ids for row in result.rows)
        assert set(column_values(blog_db, "posts", "user_id")) <= user_ids

    def test_result_shape(self, blog_db, generation_config):
        data = SchemaSeedService(blog_db, generation_config).generate_test_data("users", 2).to_dict()

        assert set(data) == {"inserted", "rows"}
        assert data["inserted"] == 2

    def test_deep_chain(self, blog_db, generation_config):
        result = SchemaSeedService(blog_db, generation_config).generate_test_data("comments", 7)

        assert result.inserted == 7
        assert result.seeded == {"users": 10, "posts": 10}
        post_ids = set(column_values(blog_db, "posts", "id"))
        assert set(column_values(blog_db, "comments", "post_id")) <= post_ids

    def test_existing_parents_reused(self, blog_db, generation_config):
        DataInserter(blog_db).insert_rows("users", [
            {"username": "ann", "email": "ann@example.com", "is_active": 1},
        ])
        service = SchemaSeedService(blog_db, generation_config)

        result = service.generate_test_data("posts", 3)

        assert result.seeded == {}
        assert count_rows(blog_db, "users") == 1
        assert {row["user_id"] for row in result.rows} == set(column_values(blog_db, "users", "id"))

    def test_repeated_calls_do_not_reseed(self, blog_db, generation_config):
        service = SchemaSeedService(blog_db, generation_config)
        service.generate_test_data("posts", 2)

        second = service.generate_test_data("posts", 2)

        assert second.seeded == {}
        assert count_rows(blog_db, "users") == 10
        assert count_rows(blog_db, "posts") == 4

    def test_diamond(self, diamond_db, generation_config):
        result = SchemaSeedService(diamond_db, generation_config).generate_test_data("orders", 4)

        assert result.inserted == 4
        assert count_rows(diamond_db, "regions") == 10

    @pytest.mark.parametrize("table,count", [
        ("", 5),
        ("posts", 0),
        ("posts", 1001),
        ("posts", -1),
        ("posts", "5"),
        ("posts", 2.5),
        ("posts", True),
        ("posts", None),
    ])
    def test_invalid_arguments(self, blog_db, generation_config, table, count):
        with pytest.raises(InvalidArgumentError):
            SchemaSeedService(blog_db, generation_config).generate_test_data(table, count)

        assert count_rows(blog_db, "users") == 0

    def test_max_rows_setting(self, blog_db):
        service = SchemaSeedService(blog_db, GenerationConfig(max_rows=3))
        with pytest.raises(InvalidArgumentError, match="between 1 and 3"):
            service.generate_test_data("users", 4)

    def test_missing_table(self, blog_db, generation_config):
        with pytest.raises(NotFoundError):
            SchemaSeedService(blog_db, generation_config).generate_test_data("missing", 1)

    def test_required_self_reference(self, self_reference_db, generation_config):
        service = SchemaSeedService(self_reference_db, generation_config)

        with pytest.raises(UnsatisfiableDependencyError):
            service.generate_test_data("employees", 1)

        assert count_rows(self_reference_db, "employees") == 0

    def test_optional_self_reference(self, self_reference_db, generation_config):
        result = SchemaSeedService(self_reference_db, generation_config).generate_test_data(
            "categories", 5
        )
        assert result.inserted == 5

    def test_dangling_reference(self, dangling_db, generation_config):
        with pytest.raises(SchemaNotFoundError):
            SchemaSeedService(dangling_db, generation_config).generate_test_data("orphans", 1)

    def test_unique_violation_leaves_no_rows(self, unique_db, generation_config):
        service = SchemaSeedService(unique_db, generation_config)

        with pytest.raises(ConstraintViolationError) as exc_info:
            service.generate_test_data("flags", 3)

        assert exc_info.value.table == "flags"
        assert count_rows(unique_db, "flags") == 0

    def test_failure_does_not_affect_next_request(self, unique_db, generation_config):
        service = SchemaSeedService(unique_db, generation_config)
        with pytest.raises(ConstraintViolationError):
            service.generate_test_data("flags", 3)

        assert service.generate_test_data("counters", 2).inserted == 2


class TestCatalogOperations:
    """Diagram and pass-through lookups."""

    def test_generate_schema_diagram(self, blog_db):
        graph = SchemaSeedService(blog_db).generate_schema_diagram()

        assert {node.id for node in graph.nodes} == {"users", "posts", "comments"}
        assert len(graph.edges) == 3

    def test_lookups(self, blog_db):
        service = SchemaSeedService(blog_db)

        assert set(service.list_tables()) == {"users", "posts", "comments"}
        assert service.describe_table("posts")[1].name == "user_id"
        assert len(service.table_relations("users").incoming) == 2

    def test_sample_rows(self, blog_db, generation_config):
        service = SchemaSeedService(blog_db, generation_config)
        service.generate_test_data("users", 4)

        rows = service.sample_rows("users", 3)

        assert len(rows) == 3
        assert all("email" in row for row in rows)

    @pytest.mark.parametrize("count", [0, 1001, "2", True])
    def test_sample_rows_checks_count(self, blog_db, count):
        with pytest.raises(InvalidArgumentError):
            SchemaSeedService(blog_db).sample_rows("users", count)

    def test_summarize_after_generation(self, blog_db, generation_config):
        service = SchemaSeedService(blog_db, generation_config)
        service.generate_test_data("posts", 6)

        summary = service.summarize_table("posts")

        assert summary.row_count == 6
        user_id = next(column for column in summary.columns if column.name == "user_id")
        assert user_id.null_count == 0
        assert set(user_id.sample_values) <= set(column_values(blog_db, "users", "id"))

    def test_list_indexes(self, blog_db):
        indexes = SchemaSeedService(blog_db).list_indexes("posts")
        assert [index.columns for index in indexes if index.is_primary] == [["id"]]
