from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from app.config.settings import settings


def build_engine(url: str = None):
    url = url or settings.DATABASE['url']
    connect_args = {}
    if url.startswith('sqlite'):
        # FastAPI runs sync dependencies in a threadpool
        connect_args = {"check_same_thread": False}
    elif url.startswith(('postgresql', 'postgres')):
        connect_args = {"sslmode": settings.DATABASE['sslmode']}
    return create_engine(url, connect_args=connect_args, echo=settings.DATABASE['echo'])


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# ✅ This is required to be imported wherever DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
