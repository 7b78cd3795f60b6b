from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy import select, func
from database.models.wallet import Wallet, WALLET_STATUS_ACTIVE
from database.models.wallet_balance import WalletBalance
from database.repositories.base_repository import BaseRepository


class BalanceSnapshotRepository(BaseRepository[WalletBalance]):
    """
    Repository for wallet balance snapshots (wallet_balances).
    """
    def __init__(self, engine=None):
        super().__init__(model_class=WalletBalance, engine=engine)

    def insert_snapshot(self, address: str, payload: Dict[str, Any]) -> WalletBalance:
        """Insert a new snapshot; as_of defaults to the insertion time."""
        return self.create(WalletBalance(address=address, payload=payload))

    def get_latest_snapshot(self, address: str) -> Optional[WalletBalance]:
        """Most recently inserted snapshot for an address, or None."""
        with self.session(read_only=True) as session:
            stmt = (
                select(WalletBalance)
                .where(WalletBalance.address == address)
                .order_by(WalletBalance.as_of.desc(), WalletBalance.id.desc())
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def get_portfolio_metrics(self) -> List[Dict[str, Any]]:
        """
        Latest total USD value and token count per active wallet.
        Wallets without any snapshot are left out.
        """
        latest = (
            select(
                WalletBalance.id,
                func.row_number().over(
                    partition_by=WalletBalance.address,
                    order_by=(WalletBalance.as_of.desc(), WalletBalance.id.desc()),
                ).label('rn'),
            )
            .subquery()
        )
        stmt = (
            select(Wallet.address, Wallet.chain, WalletBalance.as_of, WalletBalance.payload)
            .join(WalletBalance, WalletBalance.address == Wallet.address)
            .join(latest, latest.c.id == WalletBalance.id)
            .where(Wallet.status == WALLET_STATUS_ACTIVE, latest.c.rn == 1)
            .order_by(Wallet.id)
        )
        with self.session(read_only=True) as session:
            rows = session.execute(stmt).all()

        return [
            {
                'address': row.address,
                'chain': row.chain,
                'as_of': row.as_of,
                'total_usd_value': (row.payload or {}).get('total_usd_value', '0'),
                'token_count': len((row.payload or {}).get('balances', [])),
            }
            for row in rows
        ]

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete snapshots captured before the cutoff."""
        return self.delete_where(WalletBalance.as_of < cutoff)
