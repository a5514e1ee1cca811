"""
Mapping table schemas.

A schema is an ordered list of fields. Comparison is order and count
sensitive: two schemas are equal only if every position has the same
name, type, repeated flag and required flag.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, MetaData, String, Table
from sqlalchemy import types as sqltypes

STRING = "STRING"
INTEGER = "INTEGER"
BOOLEAN = "BOOLEAN"
DATETIME = "DATETIME"

_SQL_TYPES: dict[str, Any] = {
    STRING: String,
    INTEGER: BigInteger,
    BOOLEAN: Boolean,
    DATETIME: DateTime,
}


@dataclass(frozen=True)
class FieldSchema:
    """One column of a mapping table."""

    name: str
    type: str
    repeated: bool = False
    required: bool = False

    def to_column(self) -> Column:
        """SQLAlchemy column for this field. Repeated fields are stored as JSON."""
        sql_type = JSON if self.repeated else _SQL_TYPES[self.type]
        return Column(self.name, sql_type, nullable=not self.required)


Schema = list[FieldSchema]


def schemas_equal(a: Schema, b: Schema) -> bool:
    if len(a) != len(b):
        return False
    for left, right in zip(a, b):
        if (
            left.name != right.name
            or left.type != right.type
            or left.repeated != right.repeated
            or left.required != right.required
        ):
            return False
    return True


def build_table(name: str, schema: Schema, metadata: MetaData | None = None) -> Table:
    """SQLAlchemy table (or view) definition for a schema."""
    return Table(name, metadata or MetaData(), *(f.to_column() for f in schema))


def field_from_column(column: dict[str, Any]) -> FieldSchema:
    """
    Convert a column reflected by ``sqlalchemy.inspect`` back into a field.

    Unknown column types are reported by their SQL name so they never
    compare equal to a declared field.
    """
    sql_type = column["type"]
    required = not column.get("nullable", True)

    if isinstance(sql_type, sqltypes.JSON):
        return FieldSchema(column["name"], STRING, repeated=True, required=required)
    if isinstance(sql_type, sqltypes.Boolean):
        field_type = BOOLEAN
    elif isinstance(sql_type, sqltypes.Integer):
        field_type = INTEGER
    elif isinstance(sql_type, sqltypes.DateTime):
        field_type = DATETIME
    elif isinstance(sql_type, sqltypes.String):
        field_type = STRING
    else:
        field_type = str(sql_type).upper()
    return FieldSchema(column["name"], field_type, required=required)


TEST_MAPPING_SCHEMA: Schema = [
    FieldSchema("id", STRING, required=True),
    FieldSchema("name", STRING, required=True),
    FieldSchema("suite", STRING),
    FieldSchema("product", STRING),
    FieldSchema("component", STRING, required=True),
    FieldSchema("jira_component", STRING),
    FieldSchema("jira_component_id", INTEGER),
    FieldSchema("capabilities", STRING, repeated=True),
    FieldSchema("priority", INTEGER),
    FieldSchema("staff_approved_obsolete", BOOLEAN),
    FieldSchema("kind", STRING),
    FieldSchema("api_version", STRING),
    FieldSchema("created_at", DATETIME, required=True),
]

VARIANT_MAPPING_SCHEMA: Schema = [
    FieldSchema("variant_category", STRING, required=True),
    FieldSchema("variant_value", STRING, required=True),
    FieldSchema("jira_project", STRING),
    FieldSchema("jira_component", STRING),
    FieldSchema("product", STRING),
    FieldSchema("kind", STRING),
    FieldSchema("api_version", STRING),
    FieldSchema("created_at", DATETIME, required=True),
]
