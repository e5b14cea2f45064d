from __future__ import annotations

from sqlalchemy import Engine

from restbucks.infrastructure.db.models import order, payment  # noqa: F401
from restbucks.infrastructure.db.models.drink import Base

metadata = Base.metadata


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)
