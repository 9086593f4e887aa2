# src/pm_secret/infrastructure/db_models.py
"""SQLAlchemy ORM model for darkpool_pending_secrets (DDL reference only: queries use raw SQL)."""
from sqlalchemy import BigInteger, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from src.pm_common.database import Base


class PendingSecretORM(Base):
    __tablename__ = "darkpool_pending_secrets"

    commitment_hash: Mapped[str] = mapped_column(String(66), primary_key=True)
    instrument_address: Mapped[str] = mapped_column(String(42), nullable=False)
    instrument_id: Mapped[str] = mapped_column(String(78), nullable=False)
    order_kind: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    side: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    quantity: Mapped[str] = mapped_column(String(78), nullable=False)
    limit_price: Mapped[str] = mapped_column(String(78), nullable=False)
    minimum_fill: Mapped[str] = mapped_column(String(78), nullable=False)
    expiry: Mapped[int] = mapped_column(BigInteger, nullable=False)
    salt: Mapped[str] = mapped_column(String(78), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    escrow_amount: Mapped[str] = mapped_column(String(78), nullable=False, default="0")
