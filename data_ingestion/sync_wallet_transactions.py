import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import config
from api_clients.cdp_client import get_wallet_transactions
from api_clients.exceptions import ProviderError, PriceUnavailable
from data_ingestion.price_resolver import resolve_price, to_decimal, format_usd, ZERO
from database.repositories.wallet_event_repository import WalletEventRepository
from database.repositories.exceptions import DuplicateEntityError, RepositoryError

logger = logging.getLogger(__name__)

USD = "USD"


def classify_transaction(tx: Dict[str, Any], wallet_address: str) -> str:
    """
    Classify a transaction relative to the wallet: transfer_out, transfer_in, swap or other.
    A provider type containing "swap" wins over direction.
    """
    wallet = (wallet_address or "").lower()
    kind = "other"
    if (tx.get("from_address") or "").lower() == wallet:
        kind = "transfer_out"
    elif (tx.get("to_address") or "").lower() == wallet:
        kind = "transfer_in"

    if "swap" in (tx.get("type") or "").lower():
        kind = "swap"
    return kind


def value_transaction(tx: Dict[str, Any]) -> Decimal:
    """USD value of a transaction; zero when it has no value or no resolvable price."""
    value = tx.get("value")
    if not value:
        return ZERO

    amount = to_decimal(value.get("amount"))
    currency = value.get("currency")
    if currency and currency.upper() == USD:
        return amount

    try:
        return amount * resolve_price(currency)
    except PriceUnavailable as e:
        logger.warning(f"Failed to calculate USD value for transaction {tx.get('hash')}: {e}")
        return ZERO


def parse_block_timestamp(value: Any) -> datetime:
    """ISO-8601 block timestamp as an aware datetime; falls back to now (UTC)."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except (TypeError, ValueError):
            return datetime.now(timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def build_event_details(tx: Dict[str, Any], usd_value: Decimal) -> Dict[str, Any]:
    value = tx.get("value") or {}
    return {
        "block_height": tx.get("block_height"),
        "from_address": tx.get("from_address"),
        "to_address": tx.get("to_address"),
        "amount": value.get("amount") or "0",
        "currency": value.get("currency"),
        "usd_value": format_usd(usd_value),
        "type": tx.get("type"),
    }


def sync_wallet_transactions(
    wallet,
    event_repo: Optional[WalletEventRepository] = None,
    limit: Optional[int] = None,
) -> Optional[int]:
    """
    Ingest the wallet's most recent transactions as classified, USD-valued events.
    Transactions already stored for the wallet's chain are skipped, so re-runs are idempotent.

    Returns:
        Number of events inserted, or None when the sync failed (logged, not raised).
    """
    event_repo = event_repo or WalletEventRepository()
    limit = limit or config.TRANSACTION_FETCH_LIMIT

    try:
        transactions = get_wallet_transactions(wallet.address, wallet.chain, limit)

        inserted = 0
        skipped = 0
        for tx in transactions:
            tx_hash = tx.get("hash")
            if not tx_hash:
                logger.warning(f"Skipping transaction without hash for wallet {wallet.address}")
                skipped += 1
                continue

            if event_repo.event_exists(wallet.chain, tx_hash):
                skipped += 1
                continue

            usd_value = value_transaction(tx)
            try:
                event_repo.insert_event(
                    address=wallet.address,
                    occurred_at=parse_block_timestamp(tx.get("block_timestamp")),
                    kind=classify_transaction(tx, wallet.address),
                    tx_hash=tx_hash,
                    chain=wallet.chain,
                    details=build_event_details(tx, usd_value),
                )
            except DuplicateEntityError:
                # Another writer stored it between the existence check and the insert
                logger.info(f"Transaction {tx_hash} already recorded on {wallet.chain}, skipping")
                skipped += 1
                continue
            inserted += 1

        logger.info(
            f"Stored {inserted} new transactions for wallet {wallet.address} "
            f"({skipped} skipped, {len(transactions)} fetched)"
        )
        return inserted
    except ProviderError as e:
        logger.error(f"Provider unavailable while syncing transactions for wallet {wallet.address}: {e}")
    except RepositoryError as e:
        logger.error(f"Store failure while syncing transactions for wallet {wallet.address}: {e}")
    except Exception as e:
        logger.exception(f"Error syncing transactions for wallet {wallet.address}: {e}")
    return None
