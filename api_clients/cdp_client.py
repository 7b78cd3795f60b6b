import logging
import time
import requests
from typing import Any, Dict, List, Optional

import config
from api_clients.exceptions import ProviderUnavailable, PriceUnavailable

logger = logging.getLogger(__name__)


def _request(method: str, url: str, timeout: Optional[int] = None, **kwargs) -> Any:
    """
    Perform an HTTP request against the provider and return the decoded JSON body.
    HTTP 429 is retried with exponential backoff up to PROVIDER_MAX_RETRIES times;
    every other failure raises ProviderUnavailable immediately.
    """
    max_retries = config.PROVIDER_MAX_RETRIES
    timeout = timeout or config.PROVIDER_TIMEOUT_SECONDS
    backoff = 2

    for attempt in range(max_retries + 1):
        try:
            resp = requests.request(method, url, timeout=timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise ProviderUnavailable(f"Request to {url} failed: {e}") from e

        if resp.status_code == 429 and attempt < max_retries:
            logger.warning(f"Rate limited by provider at {url}. Attempt {attempt + 1}/{max_retries}. Retrying in {backoff} seconds.")
            time.sleep(backoff)
            backoff *= 2
            continue

        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ProviderUnavailable(f"Provider request failed: {resp.status_code} {resp.reason}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderUnavailable(f"Failed to decode JSON response from {url}: {e}") from e


def _rpc_call(chain: str, method: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Call a CDP JSON-RPC method for a network and return result.data.
    """
    if not config.CDP_API_KEY_ID or not config.CDP_API_KEY_SECRET:
        raise ProviderUnavailable("CDP_API_KEY_ID / CDP_API_KEY_SECRET are not configured")

    url = f"{config.CDP_RPC_BASE_URL}/{chain}/{config.CDP_API_KEY_ID}"
    body = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": [params],
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config.CDP_API_KEY_SECRET}",
    }

    data = _request("POST", url, json=body, headers=headers)
    if not isinstance(data, dict):
        raise ProviderUnavailable(f"CDP returned non-dict response for {method}")
    if data.get("error"):
        error = data["error"]
        message = error.get("message", "Unknown error") if isinstance(error, dict) else error
        raise ProviderUnavailable(f"CDP API error: {message}")

    result = data.get("result") or {}
    if not isinstance(result, dict):
        raise ProviderUnavailable(f"CDP returned malformed result for {method}")
    items = result.get("data") or []
    if not isinstance(items, list):
        raise ProviderUnavailable(f"CDP returned malformed result.data for {method}")
    return items


def _to_int(value: Any) -> int:
    """Block numbers arrive as ints, decimal strings or hex strings."""
    if isinstance(value, int):
        return value
    if not value:
        return 0
    try:
        text = str(value)
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    except ValueError:
        return 0


def _normalize_balance(raw: Dict[str, Any]) -> Dict[str, Any]:
    asset = raw.get("asset") or {}
    if not isinstance(asset, dict):
        raise ProviderUnavailable(f"Malformed asset in balance entry: {asset!r}")
    usd_value = raw.get("usd_value")
    return {
        "amount": str(raw.get("amount") or "0"),
        "currency": {
            "code": asset.get("symbol") or "ETH",
            "name": asset.get("name") or "Ethereum",
            "address": asset.get("contract_address") or None,
        },
        # Only present when the provider reports a valuation itself
        "usd_value": {"amount": str(usd_value), "currency": "USD"} if usd_value not in (None, "") else None,
    }


def _normalize_transaction(raw: Dict[str, Any]) -> Dict[str, Any]:
    amount = raw.get("value")
    if amount in (None, ""):
        amount = raw.get("amount")
    return {
        "hash": raw.get("transaction_hash") or raw.get("hash") or "",
        "block_height": _to_int(raw.get("block_number")),
        "block_timestamp": raw.get("block_timestamp"),
        "from_address": raw.get("from_address") or "",
        "to_address": raw.get("to_address") or "",
        "type": raw.get("type") or "transfer",
        "value": {
            "amount": str(amount),
            "currency": raw.get("symbol") or raw.get("token_symbol") or "ETH",
        } if amount not in (None, "") else None,
    }


def get_wallet_balances(address: str, chain: str, page_size: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Fetch current token balances via cdp_listAddressBalances.

    Returns:
        List of {currency: {code, name, address}, amount, usd_value: {amount, currency} | None}
    """
    raw_balances = _rpc_call(chain, "cdp_listAddressBalances", {
        "address": address,
        "pageSize": page_size or config.BALANCE_PAGE_SIZE,
    })
    return [_normalize_balance(b) for b in raw_balances if isinstance(b, dict)]


def get_wallet_transactions(address: str, chain: str, limit: int = 100) -> List[Dict[str, Any]]:
    """
    Fetch the most recent transactions via cdp_listAddressTransactions, in provider order.

    Returns:
        List of {hash, block_height, block_timestamp, from_address, to_address, type, value | None}
    """
    raw_transactions = _rpc_call(chain, "cdp_listAddressTransactions", {
        "address": address,
        "pageSize": limit,
        "pageToken": "",
    })
    return [_normalize_transaction(t) for t in raw_transactions[:limit] if isinstance(t, dict)]


def get_token_price(currency_code: str) -> Dict[str, str]:
    """
    Fetch the USD rate for a currency code from the Coinbase exchange-rates API.

    Returns:
        {amount, currency: "USD", base}
    Raises:
        ProviderUnavailable: the request itself failed
        PriceUnavailable: the response carries no USD rate for the code
    """
    data = _request("GET", config.PRICE_API_URL, params={"currency": currency_code})
    body = data.get("data") if isinstance(data, dict) else None
    rates = body.get("rates") if isinstance(body, dict) else None
    if not isinstance(rates, dict):
        raise PriceUnavailable(f"Malformed exchange-rate response for {currency_code}")

    rate = rates.get("USD")
    if rate in (None, ""):
        raise PriceUnavailable(f"No USD rate returned for {currency_code}")

    return {
        "amount": str(rate),
        "currency": "USD",
        "base": currency_code,
    }
