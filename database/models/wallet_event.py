from sqlalchemy import Column, Text, DateTime, Index, UniqueConstraint, CheckConstraint
from database.models.base import Base, JsonPayload, BigIntPrimaryKey

EVENT_KINDS = ('transfer_in', 'transfer_out', 'swap', 'other')


class WalletEvent(Base):
    __tablename__ = 'wallet_events'

    id = Column(BigIntPrimaryKey, primary_key=True, autoincrement=True)
    address = Column(Text, nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    kind = Column(Text, nullable=False)
    tx_hash = Column(Text, nullable=False)
    chain = Column(Text, nullable=False, default='base')
    details = Column(JsonPayload)

    __table_args__ = (
        UniqueConstraint('chain', 'tx_hash', name='uq_wallet_events_chain_tx_hash'),
        CheckConstraint(
            "kind IN (" + ", ".join(f"'{kind}'" for kind in EVENT_KINDS) + ")",
            name='ck_wallet_events_kind'
        ),
        Index('idx_wallet_events_address', 'address'),
        Index('idx_wallet_events_occurred_at', 'occurred_at'),
    )
