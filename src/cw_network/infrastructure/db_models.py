"""SQLAlchemy ORM model for the network_configs table.

Table is created by Alembic migration: alembic/versions/006_create_network_configs.py
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.cw_common.database import Base


class NetworkConfigORM(Base):
    __tablename__ = "network_configs"

    network: Mapped[str] = mapped_column(String(32), primary_key=True)
    chain_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    native_symbol: Mapped[str | None] = mapped_column(String(16), nullable=True)
    withdrawal_fee: Mapped[Decimal] = mapped_column(Numeric(38, 18), nullable=False, default=0)
    min_withdrawal: Mapped[Decimal] = mapped_column(Numeric(38, 18), nullable=False, default=0)
    required_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
