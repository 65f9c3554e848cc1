from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


class Database:
    """Engine + fabrique de sessions, ouverte au démarrage et fermée à l'arrêt"""

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        if url.startswith("sqlite"):
            # SQLite n'applique les FK (ON DELETE CASCADE) que si on le demande
            event.listen(self.engine, "connect", _enable_sqlite_fks)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    def create_all(self):
        # import des modèles pour qu'ils soient enregistrés dans Base.metadata
        from taskhub.models import user, task  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def close(self):
        self.engine.dispose()


def _enable_sqlite_fks(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request):
    """Dépendance sessionDB"""
    db = request.app.state.db.SessionLocal()
    try:
        yield db
    finally:
        db.close()
