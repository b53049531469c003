from unittest.mock import MagicMock

from tablemodel.gateway import SchemaApplier, split_statements

DDL = """
CREATE TABLE test_authors (
    author_id INTEGER NOT NULL,
    name TEXT DEFAULT 'a;b',
    PRIMARY KEY (author_id)
);
CREATE TABLE test_books (
    book_id INTEGER NOT NULL,
    author_id INTEGER NOT NULL,
    PRIMARY KEY (book_id)
);
"""


def test_split_statements_ignores_semicolons_in_literals():
    statements = split_statements(DDL, "sqlite")

    assert len(statements) == 2
    assert statements[0].startswith("CREATE TABLE test_authors")
    assert "'a;b'" in statements[0]
    assert statements[1].endswith(")")


def test_apply_creates_every_table_once(sqlite_gateway):
    applier = SchemaApplier(sqlite_gateway)

    changes = applier.apply(DDL)

    assert set(changes) == {"test_authors", "test_books"}
    assert {"test_authors", "test_books"} <= set(sqlite_gateway.list_tables())
    assert applier.apply(DDL) == {}


def test_apply_adds_columns_to_existing_table(sqlite_gateway):
    applier = SchemaApplier(sqlite_gateway)
    applier.apply(DDL)

    changes = applier.apply(
        "CREATE TABLE test_books (book_id INTEGER NOT NULL, author_id INTEGER NOT NULL, "
        "title TEXT, pages INTEGER DEFAULT 0, PRIMARY KEY (book_id))"
    )

    assert set(changes) == {"test_books.title", "test_books.pages"}
    assert sqlite_gateway.list_columns("test_books") == ["book_id", "author_id", "title", "pages"]


def test_apply_executes_other_statements(sqlite_gateway):
    applier = SchemaApplier(sqlite_gateway)

    changes = applier.apply(
        "CREATE TABLE test_tags (tag_id INTEGER NOT NULL, PRIMARY KEY (tag_id));"
        "CREATE INDEX test_tags_idx ON test_tags (tag_id);"
        "INSERT INTO test_tags (tag_id) VALUES (1)"
    )

    assert changes == {"test_tags": "Created table test_tags"}
    assert sqlite_gateway.query_scalar("SELECT count(*) FROM test_tags") == 1


def test_sqlglot_dialect_mapping():
    gateway = MagicMock()
    gateway.dialect = "mariadb"

    assert SchemaApplier(gateway).sqlglot_dialect == "mysql"
