from typing import List, Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from sqlalchemy import select, exists
from database.models.wallet import Wallet, WALLET_STATUS_ACTIVE
from database.models.wallet_event import WalletEvent
from database.repositories.base_repository import BaseRepository


class WalletEventRepository(BaseRepository[WalletEvent]):
    """
    Repository for classified transaction events (wallet_events).
    Uniqueness per (chain, tx_hash) is enforced by the table; insert_event raises
    DuplicateEntityError when a concurrent writer got there first.
    """
    def __init__(self, engine=None):
        super().__init__(model_class=WalletEvent, engine=engine)

    def event_exists(self, chain: str, tx_hash: str) -> bool:
        """Check whether an event for this transaction is already stored."""
        with self.session(read_only=True) as session:
            stmt = select(exists().where(WalletEvent.chain == chain, WalletEvent.tx_hash == tx_hash))
            return bool(session.execute(stmt).scalar())

    def insert_event(
        self,
        address: str,
        occurred_at: datetime,
        kind: str,
        tx_hash: str,
        chain: str,
        details: Dict[str, Any],
    ) -> WalletEvent:
        """Insert one event row."""
        return self.create(WalletEvent(
            address=address,
            occurred_at=occurred_at,
            kind=kind,
            tx_hash=tx_hash,
            chain=chain,
            details=details,
        ))

    def get_events(self, address: str, limit: Optional[int] = None) -> List[WalletEvent]:
        """Event history for an address, newest first."""
        with self.session(read_only=True) as session:
            stmt = (
                select(WalletEvent)
                .where(WalletEvent.address == address)
                .order_by(WalletEvent.occurred_at.desc(), WalletEvent.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return session.execute(stmt).scalars().all()

    def get_recent_activity(self, hours: int = 24, now: Optional[datetime] = None) -> List[WalletEvent]:
        """Events of active wallets within the last `hours`, newest first."""
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(hours=hours)
        with self.session(read_only=True) as session:
            stmt = (
                select(WalletEvent)
                .join(Wallet, Wallet.address == WalletEvent.address)
                .where(Wallet.status == WALLET_STATUS_ACTIVE, WalletEvent.occurred_at >= since)
                .order_by(WalletEvent.occurred_at.desc(), WalletEvent.id.desc())
            )
            return session.execute(stmt).scalars().all()

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete events that occurred before the cutoff."""
        return self.delete_where(WalletEvent.occurred_at < cutoff)
