"""
Schema verification tests for database table conventions.

Ensures all tables follow SealFlow's standards:
- Every table has an integer ``id`` primary key
- Application tables carry a unique, non-null application_no
- Application tables carry the workflow columns (status, approver, approve_time)
- apply_time and update_time are never null
- Seal names and minting applications are unique
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.types import DateTime, Integer

from sealflow.models import Base

APPLICATION_TABLES = ("seal_applications", "seal_create_applications")


@pytest.fixture
def inspector(db_session):
    return inspect(db_session.get_bind())


def _columns(inspector, table_name):
    return {col["name"]: col for col in inspector.get_columns(table_name)}


def _unique_columns(inspector, table_name):
    """Column sets covered by a unique constraint or unique index."""
    unique = [tuple(c["column_names"]) for c in inspector.get_unique_constraints(table_name)]
    unique += [tuple(i["column_names"]) for i in inspector.get_indexes(table_name) if i.get("unique")]
    return unique


class TestTableConventions:
    """Verify all tables follow SealFlow database conventions."""

    def test_expected_tables_exist(self, inspector):
        tables = set(inspector.get_table_names())
        assert tables == {"seals", "seal_applications", "seal_create_applications", "users"}
        assert tables == set(Base.metadata.tables)

    def test_all_tables_have_integer_id(self, inspector):
        for table_name in inspector.get_table_names():
            columns = _columns(inspector, table_name)
            assert "id" in columns, f"Table '{table_name}' missing 'id' column"
            assert isinstance(columns["id"]["type"], Integer)
            assert inspector.get_pk_constraint(table_name)["constrained_columns"] == ["id"]

    @pytest.mark.parametrize("table_name", APPLICATION_TABLES)
    def test_application_no_is_unique(self, inspector, table_name):
        columns = _columns(inspector, table_name)
        assert columns["application_no"]["nullable"] is False
        assert ("application_no",) in _unique_columns(inspector, table_name)

    @pytest.mark.parametrize("table_name", APPLICATION_TABLES)
    def test_workflow_columns(self, inspector, table_name):
        columns = _columns(inspector, table_name)
        for name in ("status", "approver", "approve_time", "approve_remark", "apply_time", "update_time"):
            assert name in columns, f"Table '{table_name}' missing '{name}'"

        assert columns["status"]["nullable"] is False
        assert columns["approver"]["nullable"] is True
        for name in ("apply_time", "update_time"):
            assert isinstance(columns[name]["type"], DateTime)
            assert columns[name]["nullable"] is False

    def test_seal_uniqueness(self, inspector):
        unique = _unique_columns(inspector, "seals")
        assert ("name",) in unique
        assert ("source_application_id",) in unique

    def test_seal_mint_link(self, inspector):
        foreign_keys = inspector.get_foreign_keys("seals")
        assert any(
            fk["referred_table"] == "seal_create_applications"
            and fk["constrained_columns"] == ["source_application_id"]
            for fk in foreign_keys
        )

    def test_usernames_unique(self, inspector):
        assert ("username",) in _unique_columns(inspector, "users")
