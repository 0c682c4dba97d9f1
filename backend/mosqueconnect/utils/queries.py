"""Lookup helpers shared by the endpoint modules"""
from typing import Type, TypeVar, Iterable
from sqlalchemy import or_, cast, String
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.core.exceptions import InvalidIdError, ResourceNotFoundError
from mosqueconnect.core.types import is_valid_uuid

ModelT = TypeVar("ModelT")

LIKE_ESCAPE = "\\"


async def get_or_404(db: AsyncSession, model: Type[ModelT], entity_id: str, label: str) -> ModelT:
    """Fetch by primary key; 400 on a malformed id, 404 when missing"""
    if not is_valid_uuid(entity_id):
        raise InvalidIdError(label, entity_id)
    entity = await db.get(model, entity_id)
    if entity is None:
        raise ResourceNotFoundError(label, entity_id)
    return entity


def escape_like(value: str) -> str:
    """Make % and _ match literally in a LIKE pattern"""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def search_filter(term: str, columns: Iterable):
    """Case-insensitive substring match over several text columns"""
    pattern = f"%{escape_like(term.strip())}%"
    return or_(*[column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns])


def json_contains(column, value: str):
    """Match a JSON list column containing a string value (works on SQLite and PostgreSQL)"""
    return cast(column, String).ilike(f'%"{escape_like(value)}"%', escape=LIKE_ESCAPE)
