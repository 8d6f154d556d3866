"""Case-insensitive substring filters with LIKE wildcards escaped."""

from sqlalchemy import ColumnElement


def contains(column, text: str) -> ColumnElement[bool]:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")
