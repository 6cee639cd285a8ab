"""
Tests for column metadata and its per-dialect SQL rendering.
"""

from __future__ import annotations

import dataclasses

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects import postgresql, sqlite

from shared.repository import (
    ColumnDefinition,
    ColumnType,
    Repository,
    convert_column_to_sql,
    convert_unique_to_sql,
)
from shared.repositories import REPOSITORIES, PermissionsRepository, RepositoryName

SQLITE = sqlite.dialect()
POSTGRES = postgresql.dialect()


class WidgetRepository(Repository):
    table = "Widgets"
    columns = (
        ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
        ColumnDefinition("label", ColumnType.STRING, length=20, nullable=False, unique=True),
    )


@pytest.mark.parametrize(
    "column, dialect, expected",
    [
        (
            ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
            SQLITE,
            "id VARCHAR(36) PRIMARY KEY NOT NULL",
        ),
        (
            ColumnDefinition("name", ColumnType.STRING, length=64, nullable=False, unique=True),
            POSTGRES,
            "name VARCHAR(64) NOT NULL UNIQUE",
        ),
        (
            ColumnDefinition(
                "created_at", ColumnType.TIMESTAMP, nullable=False, default="CURRENT_TIMESTAMP"
            ),
            POSTGRES,
            "created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP",
        ),
        (
            ColumnDefinition("created_at", ColumnType.TIMESTAMP),
            SQLITE,
            "created_at DATETIME",
        ),
        (
            ColumnDefinition("bits", ColumnType.INTEGER, nullable=False, default="0"),
            SQLITE,
            "bits INTEGER NOT NULL DEFAULT 0",
        ),
        (ColumnDefinition("description", ColumnType.TEXT), POSTGRES, "description TEXT"),
        (ColumnDefinition("views", ColumnType.BIG_INTEGER), POSTGRES, "views BIGINT"),
        (ColumnDefinition("settings", ColumnType.JSON), POSTGRES, "settings JSON"),
    ],
)
def test_convert_column_to_sql(column, dialect, expected):
    assert convert_column_to_sql(column, dialect) == expected


def test_convert_column_is_deterministic():
    column = ColumnDefinition("label", ColumnType.STRING, length=20, nullable=False)
    rendered = {convert_column_to_sql(column, POSTGRES) for _ in range(5)}
    assert rendered == {"label VARCHAR(20) NOT NULL"}


def test_reserved_column_names_are_quoted():
    column = ColumnDefinition("user", ColumnType.STRING, length=36)
    assert convert_column_to_sql(column, POSTGRES) == '"user" VARCHAR(36)'


def test_string_without_length_defaults_to_255():
    column = ColumnDefinition("title", ColumnType.STRING)
    assert convert_column_to_sql(column, SQLITE) == "title VARCHAR(255)"


def test_column_definitions_are_immutable():
    column = WidgetRepository.columns[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        column.name = "other"  # type: ignore[misc]
    assert isinstance(WidgetRepository.columns, tuple)


def test_sql_table_mirrors_columns_with_lowercase_name():
    repository = WidgetRepository()

    assert repository.sql_table.name == "widgets"
    assert [c.name for c in repository.sql_table.columns] == ["id", "label"]
    assert repository.sql_table.c.id.primary_key
    assert repository.sql_table.c.label.nullable is False


def test_repository_requires_table_and_columns():
    class Incomplete(Repository):
        table = "incomplete"

    with pytest.raises(TypeError, match="Incomplete"):
        Incomplete()


def test_database_access_before_init_fails():
    with pytest.raises(RuntimeError, match="before init"):
        WidgetRepository().get("missing")


def test_known_repositories_use_their_registry_name_as_table():
    for name, repository_cls in REPOSITORIES.items():
        assert repository_cls.table == name.value
    assert set(REPOSITORIES) == set(RepositoryName)


def test_convert_unique_to_sql_quotes_each_column():
    assert convert_unique_to_sql(("user", "project_id"), POSTGRES) == 'UNIQUE ("user", project_id)'


def test_unique_together_becomes_table_constraint():
    repository = PermissionsRepository()

    constraints = [
        sorted(column.name for column in constraint.columns)
        for constraint in repository.sql_table.constraints
        if isinstance(constraint, UniqueConstraint)
    ]

    assert ["project_id", "user_id"] in constraints
