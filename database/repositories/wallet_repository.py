from typing import List
from sqlalchemy import select
from database.models.wallet import Wallet, WALLET_STATUS_ACTIVE
from database.repositories.base_repository import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """
    Read access to tracked wallets. Wallet rows are owned by account management.
    """
    def __init__(self, engine=None):
        super().__init__(model_class=Wallet, engine=engine)

    def get_active_wallets(self) -> List[Wallet]:
        """Get all wallets with status 'active', in id order."""
        with self.session(read_only=True) as session:
            stmt = select(Wallet).where(Wallet.status == WALLET_STATUS_ACTIVE).order_by(Wallet.id)
            return session.execute(stmt).scalars().all()
