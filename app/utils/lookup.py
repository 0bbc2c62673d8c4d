# app/utils/lookup.py
import re
from sqlalchemy import and_, false

from app.utils.errors import InvalidInput

OPAQUE_ID_RE = re.compile(r"^[0-9a-f]{32}$")
SEQUENCE_ID_RE = re.compile(r"^[0-9]+$")
# Sequential ids are stored in a 32-bit integer column
MAX_SEQUENCE_DIGITS = 9


def is_opaque_id(value) -> bool:
    return isinstance(value, str) and bool(OPAQUE_ID_RE.match(value))


def id_predicate(model, raw_id: str):
    """Dual-mode lookup: ASCII digits mean the sequential id, otherwise the opaque id"""
    raw_id = str(raw_id).strip()
    if SEQUENCE_ID_RE.match(raw_id):
        if len(raw_id.lstrip("0")) > MAX_SEQUENCE_DIGITS:
            # Larger than any sequence ever issued
            return false()
        return getattr(model, model.__sequence_column__) == int(raw_id)
    if is_opaque_id(raw_id):
        return model.id == raw_id
    raise InvalidInput(f"Malformed id: {raw_id}")


def find_by_id(db, model, raw_id: str, scope=None):
    """Fetch one record by either id form, optionally restricted to a scope predicate"""
    predicate = id_predicate(model, raw_id)
    if scope is not None:
        predicate = and_(predicate, scope)
    return db.query(model).filter(predicate).first()
