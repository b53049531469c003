import pytest

from tablemodel import MysqlGateway, SqliteGateway, TableModel


class PostModel(TableModel):
    """Single primary key table."""

    allow_drop = True

    def table_name(self):
        return "model_table"

    def schema(self):
        return f"""CREATE TABLE {self.full_table_name()} (
            user_id INTEGER NOT NULL,
            post_id INTEGER NOT NULL,
            type_id INTEGER NOT NULL,
            {self.timestamp_field('created_at')},
            {self.timestamp_field('updated_at', True)},
            PRIMARY KEY (user_id)
        ) {self.charset_collate()}"""

    def column_defaults(self):
        return {"type_id": 1}

    def columns(self):
        return {
            "user_id": "%d",
            "post_id": "%d",
            "type_id": "integer",
            "created_at": "%s",
            "updated_at": "str",
        }

    def primary_key(self):
        return "user_id"


class PostModelWithBackticks(PostModel):
    def schema(self):
        return f"""CREATE TABLE `{self.full_table_name()}` (
            `user_id` INTEGER NOT NULL,
            `post_id` INTEGER NOT NULL,
            `type_id` INTEGER NOT NULL,
            {self.timestamp_field('created_at')},
            PRIMARY KEY (`user_id`)
        ) {self.charset_collate()}"""


class PostCompositeModel(PostModel):
    """Composite primary key table."""

    def table_name(self):
        return "model_composite_key_table"

    def schema(self):
        return f"""CREATE TABLE {self.full_table_name()} (
            user_id INTEGER NOT NULL,
            post_id INTEGER NOT NULL,
            type_id INTEGER NOT NULL,
            {self.timestamp_field('created_at')},
            {self.timestamp_field('updated_at', True)},
            PRIMARY KEY (user_id, post_id)
        ) {self.charset_collate()}"""

    def primary_key(self):
        return ["user_id", "post_id"]


@pytest.fixture()
def sqlite_gateway(tmp_path):
    return SqliteGateway(f"sqlite:///{tmp_path / 'tables.db'}", table_prefix="test_")


@pytest.fixture()
def memory_gateway():
    """Gateway for rendering statements; never executes anything."""
    return SqliteGateway("sqlite://", table_prefix="test_")


@pytest.fixture()
def reported_errors():
    return []


@pytest.fixture()
def model(sqlite_gateway, reported_errors):
    model = PostModel(sqlite_gateway, error_handler=reported_errors.append)
    assert model.create_table()
    return model


@pytest.fixture()
def composite_model(sqlite_gateway, reported_errors):
    model = PostCompositeModel(sqlite_gateway, error_handler=reported_errors.append)
    assert model.create_table()
    return model


@pytest.fixture()
def unsaved_model(memory_gateway, reported_errors):
    return PostModel(memory_gateway, error_handler=reported_errors.append)


@pytest.fixture()
def unsaved_composite_model(memory_gateway, reported_errors):
    return PostCompositeModel(memory_gateway, error_handler=reported_errors.append)


@pytest.fixture()
def backtick_model(sqlite_gateway, reported_errors):
    return PostModelWithBackticks(sqlite_gateway, error_handler=reported_errors.append)


@pytest.fixture()
def mysql_model():
    """Model bound to an unconnected MySQL gateway, for DDL rendering."""
    return PostModel(MysqlGateway(table_prefix="wp_", charset="utf8mb4", collate="utf8mb4_unicode_ci"))
