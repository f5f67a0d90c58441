from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from db.models import Base


def init_db(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    engine: Engine = create_engine(database_url, echo=echo)

    Base.metadata.create_all(engine)
    return sessionmaker(engine)
