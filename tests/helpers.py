"""Shared test helpers: in-memory store and provider payload builders."""
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from database.models import Base, Wallet

WALLET_A = "0xAbC0000000000000000000000000000000000001"
WALLET_B = "0xAbC0000000000000000000000000000000000002"
WALLET_C = "0xAbC0000000000000000000000000000000000003"
COUNTERPARTY = "0xC000000000000000000000000000000000000009"


def make_engine():
    """In-memory SQLite engine shared across threads/sessions, with the schema created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_wallet(address=WALLET_A, chain="base", status="active"):
    return Wallet(address=address, chain=chain, status=status)


def balance(code, amount, usd=None, name=None, address=None):
    return {
        "currency": {"code": code, "name": name or code, "address": address},
        "amount": amount,
        "usd_value": {"amount": usd, "currency": "USD"} if usd is not None else None,
    }


def transaction(tx_hash, from_address, to_address, amount=None, currency=None,
                tx_type="transfer", block_height=100,
                block_timestamp="2026-10-18T12:00:00Z"):
    return {
        "hash": tx_hash,
        "block_height": block_height,
        "block_timestamp": block_timestamp,
        "from_address": from_address,
        "to_address": to_address,
        "type": tx_type,
        "value": {"amount": amount, "currency": currency} if amount is not None else None,
    }


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)
