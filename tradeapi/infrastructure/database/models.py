"""
SQLAlchemy ORM models for users and trades.

Tables mirror the relational schema the service has always exposed:
``users(id, name)`` and ``trades(id, symbol, quantity, price, type, status,
trade_date, settlement_date, counterparty, notes)``.
"""

from sqlalchemy import Column, Date, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UserRecord(Base):  # type: ignore[valid-type,misc]
    """Row in the ``users`` table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"UserRecord(id={self.id}, name={self.name!r})"


class TradeRecord(Base):  # type: ignore[valid-type,misc]
    """Row in the ``trades`` table."""

    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(20), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    type = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False)
    trade_date = Column(Date, nullable=False)
    settlement_date = Column(Date, nullable=False)
    counterparty = Column(String(100), nullable=False)
    notes = Column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"TradeRecord(id={self.id}, symbol={self.symbol!r}, quantity={self.quantity})"
