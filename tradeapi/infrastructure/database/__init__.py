"""
Database Module

SQLAlchemy models, engine/session management and repositories.
"""

from .models import Base, TradeRecord, UserRecord
from .repositories import SqlRepository, TradeRepository, UserRepository
from .session import Database

__all__ = [
    "Base",
    "Database",
    "SqlRepository",
    "TradeRecord",
    "TradeRepository",
    "UserRecord",
    "UserRepository",
]
