# app/models/counter.py
import uuid
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import Session

from app.database import Base
from app.utils.errors import Internal

# First value handed out is COUNTER_START + 1
COUNTER_START = 100


class Counter(Base):
    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)  # 'user', 'task', 'group'
    seq = Column(Integer, nullable=False, default=COUNTER_START)


def new_id() -> str:
    """Opaque record identifier"""
    return uuid.uuid4().hex


def _upsert_for(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise Internal(f"Sequences are not supported on the '{dialect_name}' dialect")
    return insert


def next_sequence(db: Session, name: str) -> int:
    """Atomically increment and read the named sequence.

    A single INSERT .. ON CONFLICT DO UPDATE .. RETURNING statement creates the
    counter row on first use and otherwise bumps it in place, so concurrent
    writers never receive the same value.
    """
    table = Counter.__table__
    insert = _upsert_for(db.get_bind().dialect.name)
    stmt = insert(table).values(name=name, seq=COUNTER_START + 1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.name],
        set_={"seq": table.c.seq + 1},
    ).returning(table.c.seq)
    return db.execute(stmt).scalar_one()


def assign_sequence(db: Session, record) -> int:
    """Give a new record its sequential id the first time it is saved"""
    column = record.__sequence_column__
    value = getattr(record, column)
    if value is None:
        value = next_sequence(db, record.__sequence__)
        setattr(record, column, value)
    return value
