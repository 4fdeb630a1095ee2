from .base_model import Base
from .engine import Database
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "Database",
    "SQLAlchemyUnitOfWork",
]
