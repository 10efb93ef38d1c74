"""
Shared Database Infrastructure
Declarative base, session management and the generic repository
"""
from shared.infrastructure.database.base_model import Base, as_utc
from shared.infrastructure.database.session import DatabaseSessionFactory
from shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository

__all__ = [
    "Base",
    "as_utc",
    "DatabaseSessionFactory",
    "SQLAlchemyRepository",
]
