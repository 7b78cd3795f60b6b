import logging
import time
from typing import Optional

from data_ingestion.sync_wallet_balances import sync_wallet_balances
from data_ingestion.sync_wallet_transactions import sync_wallet_transactions
from database.repositories.wallet_repository import WalletRepository
from database.repositories.balance_snapshot_repository import BalanceSnapshotRepository
from database.repositories.wallet_event_repository import WalletEventRepository

logger = logging.getLogger(__name__)


def sync_wallet_data(
    wallet,
    snapshot_repo: Optional[BalanceSnapshotRepository] = None,
    event_repo: Optional[WalletEventRepository] = None,
) -> bool:
    """
    Sync one wallet: balances first, then transactions.
    Returns True only when both steps succeeded.
    """
    try:
        logger.info(f"Syncing wallet {wallet.address} on {wallet.chain}")

        balances_ok = sync_wallet_balances(wallet, snapshot_repo=snapshot_repo)
        inserted = sync_wallet_transactions(wallet, event_repo=event_repo)

        if balances_ok and inserted is not None:
            logger.info(f"Successfully synced wallet {wallet.address}")
            return True
        logger.warning(f"Wallet {wallet.address} not fully synced this cycle")
        return False
    except Exception as e:
        logger.exception(f"Error syncing wallet {getattr(wallet, 'address', wallet)}: {e}")
        return False


def sync_all_wallets(
    wallet_repo: Optional[WalletRepository] = None,
    snapshot_repo: Optional[BalanceSnapshotRepository] = None,
    event_repo: Optional[WalletEventRepository] = None,
) -> None:
    """
    Run one sync cycle over every active wallet, sequentially and in query order.
    A failing wallet never stops the remaining ones; a failing wallet listing
    ends the cycle early. Nothing is raised to the caller.
    """
    wallet_repo = wallet_repo or WalletRepository()
    snapshot_repo = snapshot_repo or BalanceSnapshotRepository()
    event_repo = event_repo or WalletEventRepository()

    logger.info("Starting wallet data sync cycle")
    started = time.monotonic()

    try:
        wallets = wallet_repo.get_active_wallets()
    except Exception as e:
        logger.error(f"Error in wallet sync cycle, could not list active wallets: {e}")
        return

    failed = []
    for wallet in wallets:
        if not sync_wallet_data(wallet, snapshot_repo=snapshot_repo, event_repo=event_repo):
            failed.append(wallet.address)

    elapsed = time.monotonic() - started
    logger.info(
        f"Completed sync for {len(wallets)} wallets in {elapsed:.1f}s "
        f"({len(wallets) - len(failed)} synced, {len(failed)} failed)"
    )
    if failed:
        logger.warning(f"Wallets not synced this cycle: {', '.join(failed)}")
