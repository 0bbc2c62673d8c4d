# create_tables.py
import sys

from app.database import Base, engine
import app.models  # noqa: F401  registers every model on Base.metadata


def create_tables(drop_existing: bool = False):
    """Create all tables, optionally dropping existing ones first"""
    if drop_existing:
        Base.metadata.drop_all(bind=engine)
        print("🗑️  Dropped existing tables")

    Base.metadata.create_all(bind=engine)
    print(f"✅ All tables created successfully on {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    create_tables(drop_existing="--drop" in sys.argv)
