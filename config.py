import os
from dotenv import load_dotenv

# Load .env file only in development environment
if os.getenv("ENVIRONMENT", "development") == "development":
    load_dotenv()  # Load environment variables from .env file

# Database Configuration
DB_HOST = os.getenv("DB_HOST")
DB_NAME = os.getenv("DB_NAME")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_PORT = os.getenv("DB_PORT")

# Wallet data provider (Coinbase Developer Platform)
CDP_API_KEY_ID = os.getenv("CDP_API_KEY_ID")
CDP_API_KEY_SECRET = os.getenv("CDP_API_KEY_SECRET")
CDP_RPC_BASE_URL = os.getenv("CDP_RPC_BASE_URL", "https://api.developer.coinbase.com/rpc/v1")
PRICE_API_URL = os.getenv("PRICE_API_URL", "https://api.coinbase.com/v2/exchange-rates")
PROVIDER_TIMEOUT_SECONDS = int(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))
PROVIDER_MAX_RETRIES = int(os.getenv("PROVIDER_MAX_RETRIES", "3"))

# Sync cadence
SYNC_INTERVAL_SECONDS = int(os.getenv("SYNC_INTERVAL_SECONDS", "300"))
SYNC_ON_STARTUP = os.getenv("SYNC_ON_STARTUP", "true").lower() in ("1", "true", "yes")
TRANSACTION_FETCH_LIMIT = int(os.getenv("TRANSACTION_FETCH_LIMIT", "20"))
BALANCE_PAGE_SIZE = int(os.getenv("BALANCE_PAGE_SIZE", "100"))

# Retention (local wall-clock time for the daily run)
PRUNE_HOUR = int(os.getenv("PRUNE_HOUR", "2"))
PRUNE_MINUTE = int(os.getenv("PRUNE_MINUTE", "0"))
SNAPSHOT_RETENTION_DAYS = int(os.getenv("SNAPSHOT_RETENTION_DAYS", "30"))
EVENT_RETENTION_DAYS = int(os.getenv("EVENT_RETENTION_DAYS", "90"))
EVALUATION_RETENTION_DAYS = int(os.getenv("EVALUATION_RETENTION_DAYS", "30"))

# Process lifecycle
SHUTDOWN_GRACE_SECONDS = float(os.getenv("SHUTDOWN_GRACE_SECONDS", "30"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "data-ingestion.log")
