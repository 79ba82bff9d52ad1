"""Column type of the JSON document being compiled against."""

from __future__ import annotations

import enum


class ColumnType(enum.StrEnum):
    """Declared storage type of the JSON column.

    Only PostgreSQL distinguishes the two; other backends store JSON as text
    or in a single JSON type.
    """

    JSON = "json"
    JSONB = "jsonb"
