import pytest

from tablemodel.clauses import (
    MAX_LIMIT,
    build_limit_clause,
    build_values_list,
    build_where_clause,
    is_predicate,
    prepare_fields_string,
)
from tablemodel.formats import ColumnFormat, guess_format


def _guess(column, value):
    return guess_format(value)


def test_build_where_clause_single_pair(memory_gateway):
    clause = build_where_clause(memory_gateway, {"arg1": 1}, _guess)

    assert memory_gateway.render(clause) == "WHERE `arg1` = 1"
    assert clause.values == [1]


def test_build_where_clause_mixed_formats(memory_gateway):
    # Arrange
    args = {"arg1": 1, "arg2": "string", "arg3": 0.1234}
    expected_float = memory_gateway.render(memory_gateway.prepare("%f", 0.1234))

    # Act
    clause = build_where_clause(memory_gateway, args, _guess)

    # Assert
    assert memory_gateway.render(clause) == f"WHERE `arg1` = 1 AND `arg2` = 'string' AND `arg3` = {expected_float}"
    assert expected_float == "0.1234"


def test_build_where_clause_keeps_values_out_of_the_sql(memory_gateway):
    clause = build_where_clause(memory_gateway, {"na`me": "O'Reilly"}, _guess)

    assert "O'Reilly" not in clause.sql
    assert clause.sql.startswith("WHERE `na``me` = :")
    assert clause.values == ["O'Reilly"]
    assert memory_gateway.render(clause) == "WHERE `na``me` = 'O''Reilly'"


def test_build_where_clause_uses_resolver_format(memory_gateway):
    clause = build_where_clause(memory_gateway, {"user_id": 12}, lambda column, value: ColumnFormat.STRING)

    assert clause.values == ["12"]
    assert memory_gateway.render(clause) == "WHERE `user_id` = '12'"


def test_build_where_clause_renders_null_checks(memory_gateway):
    clause = build_where_clause(memory_gateway, {"deleted_at": None, "user_id": 3}, _guess)

    assert memory_gateway.render(clause) == "WHERE `deleted_at` IS NULL AND `user_id` = 3"
    assert clause.values == [3]


def test_build_where_clause_empty_predicate(memory_gateway):
    clause = build_where_clause(memory_gateway, {}, _guess)
    assert not clause
    assert clause.sql == ""


@pytest.mark.parametrize(
    "predicate, expected",
    [
        ({"user_id": 1}, True),
        ({}, False),
        ([1, 2], False),
        ([("user_id", 1)], False),
        ({0: 1}, False),
        ("user_id", False),
        (None, False),
    ],
)
def test_is_predicate(predicate, expected):
    assert is_predicate(predicate) is expected


def test_prepare_fields_string(memory_gateway):
    assert prepare_fields_string(memory_gateway, ["one", "two", "three"]) == "`one`,`two`,`three`"


def test_build_values_list_uses_first_row_formats(memory_gateway):
    rows = [{"user_id": 1, "name": "a"}, {"user_id": "2", "name": 5}]
    formats = [ColumnFormat.INTEGER, ColumnFormat.STRING]

    values = build_values_list(memory_gateway, rows, formats)

    assert values.values == [1, "a", 2, "5"]
    assert memory_gateway.render(values) == "(1,'a'),(2,'5')"


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (0, 0, ""),
        (5, 0, " LIMIT 5"),
        (5, 5, " LIMIT 5 OFFSET 5"),
        (-1, 0, ""),
        (0, 3, f" LIMIT {MAX_LIMIT} OFFSET 3"),
    ],
)
def test_build_limit_clause(memory_gateway, limit, offset, expected):
    assert memory_gateway.render(build_limit_clause(memory_gateway, limit, offset)) == expected
