from sqlalchemy import Column, Integer, DateTime, Text, Index
from sqlalchemy.sql import func
from database.models.base import Base

WALLET_STATUS_ACTIVE = 'active'


class Wallet(Base):
    __tablename__ = 'user_wallets'

    id = Column(Integer, primary_key=True)
    address = Column(Text, nullable=False, unique=True)
    chain = Column(Text, nullable=False, default='base')
    status = Column(Text, nullable=False, default=WALLET_STATUS_ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_user_wallets_status', 'status'),
    )
