from database.repositories.base_repository import BaseRepository
from database.repositories.wallet_repository import WalletRepository
from database.repositories.balance_snapshot_repository import BalanceSnapshotRepository
from database.repositories.wallet_event_repository import WalletEventRepository
from database.repositories.rule_evaluation_repository import RuleEvaluationRepository

__all__ = [
    'BaseRepository',
    'WalletRepository',
    'BalanceSnapshotRepository',
    'WalletEventRepository',
    'RuleEvaluationRepository',
]
