import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import config
from database.repositories.balance_snapshot_repository import BalanceSnapshotRepository
from database.repositories.wallet_event_repository import WalletEventRepository
from database.repositories.rule_evaluation_repository import RuleEvaluationRepository

logger = logging.getLogger(__name__)


def prune_old_data(
    snapshot_repo: Optional[BalanceSnapshotRepository] = None,
    event_repo: Optional[WalletEventRepository] = None,
    evaluation_repo: Optional[RuleEvaluationRepository] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Optional[int]]:
    """
    Delete balance snapshots, wallet events and rule evaluations past their retention windows.
    Each table is pruned independently; a failure on one is logged and the others still run.

    Returns:
        Deleted row count per table, None where that delete failed.
    """
    now = now or datetime.now(timezone.utc)
    targets = [
        ("wallet_balances", snapshot_repo or BalanceSnapshotRepository(), config.SNAPSHOT_RETENTION_DAYS),
        ("wallet_events", event_repo or WalletEventRepository(), config.EVENT_RETENTION_DAYS),
        ("rule_evaluations", evaluation_repo or RuleEvaluationRepository(), config.EVALUATION_RETENTION_DAYS),
    ]

    logger.info("Starting data cleanup")
    deleted = {}
    for table, repo, retention_days in targets:
        cutoff = now - timedelta(days=retention_days)
        try:
            deleted[table] = repo.delete_older_than(cutoff)
            logger.info(f"Deleted {deleted[table]} rows from {table} older than {retention_days} days")
        except Exception as e:
            deleted[table] = None
            logger.error(f"Error pruning {table}: {e}")

    logger.info("Completed data cleanup")
    return deleted
