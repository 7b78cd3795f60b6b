import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from api_clients.cdp_client import get_wallet_balances
from api_clients.exceptions import ProviderError, PriceUnavailable
from data_ingestion.price_resolver import resolve_price, to_decimal, format_usd, ZERO
from database.repositories.balance_snapshot_repository import BalanceSnapshotRepository
from database.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


def value_balance(balance: Dict[str, Any]) -> Tuple[Decimal, Decimal]:
    """
    Compute (usd_value, unit_price) for one provider balance entry.

    A USD value supplied by the provider for a positive amount is used as-is, with
    the unit price derived from it. Otherwise the price is resolved per currency
    code; an unresolvable price values the entry at zero.
    """
    amount = to_decimal(balance.get("amount"))
    supplied = balance.get("usd_value")
    code = (balance.get("currency") or {}).get("code")

    if isinstance(supplied, dict) and supplied.get("amount") is not None and amount > 0:
        usd_value = to_decimal(supplied.get("amount"))
        return usd_value, usd_value / amount

    try:
        unit_price = resolve_price(code)
    except PriceUnavailable as e:
        logger.warning(f"Failed to get price for {code}: {e}")
        return ZERO, ZERO
    return amount * unit_price, unit_price


def build_snapshot_payload(balances: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Value every balance entry and total them; entries that failed pricing count as zero."""
    total_usd_value = ZERO
    entries = []

    for balance in balances:
        currency = balance.get("currency") or {}
        usd_value, unit_price = value_balance(balance)
        total_usd_value += usd_value
        entries.append({
            "symbol": currency.get("code"),
            "name": currency.get("name"),
            "address": currency.get("address"),
            "balance": balance.get("amount"),
            "usd_value": format_usd(usd_value),
            "price_per_token": float(unit_price),
        })

    return {
        "total_usd_value": format_usd(total_usd_value),
        "balances": entries,
    }


def sync_wallet_balances(wallet, snapshot_repo: Optional[BalanceSnapshotRepository] = None) -> bool:
    """
    Fetch a wallet's balances, value them in USD and append one snapshot.
    An empty balance list still produces a snapshot with a zero total.

    Failures are logged and reported through the return value, never raised.
    """
    snapshot_repo = snapshot_repo or BalanceSnapshotRepository()

    try:
        balances = get_wallet_balances(wallet.address, wallet.chain)
        payload = build_snapshot_payload(balances)
        snapshot_repo.insert_snapshot(wallet.address, payload)
        logger.info(
            f"Stored balance snapshot for wallet {wallet.address} with total value "
            f"${to_decimal(payload['total_usd_value']):.2f} ({len(payload['balances'])} tokens)"
        )
        return True
    except ProviderError as e:
        logger.error(f"Provider unavailable while syncing balances for wallet {wallet.address}: {e}")
    except RepositoryError as e:
        logger.error(f"Store failure while syncing balances for wallet {wallet.address}: {e}")
    except Exception as e:
        logger.exception(f"Error syncing balances for wallet {wallet.address}: {e}")
    return False
