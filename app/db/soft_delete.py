"""Tombstone convention shared by every table.

Rows are never removed by the API. Deleting sets ``is_deleted`` and
``deleted_at``; every read goes through :func:`live` so tombstoned rows stay
invisible without relying on model inheritance or ORM events.
"""

from datetime import datetime, timezone

from sqlalchemy import false
from sqlalchemy.sql.elements import ColumnElement


def live(model) -> ColumnElement[bool]:
    return model.is_deleted == false()


def mark_deleted(instance) -> None:
    instance.is_deleted = True
    instance.deleted_at = datetime.now(timezone.utc)
