from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, Index
from database.models.base import Base, JsonPayload, BigIntPrimaryKey


class WalletBalance(Base):
    """Append-only balance snapshot; payload holds total_usd_value and the balance entries."""
    __tablename__ = 'wallet_balances'

    id = Column(BigIntPrimaryKey, primary_key=True, autoincrement=True)
    address = Column(Text, nullable=False)
    as_of = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    payload = Column(JsonPayload, nullable=False)

    __table_args__ = (
        Index('idx_wallet_balances_address', 'address'),
        Index('idx_wallet_balances_as_of', 'as_of'),
    )
