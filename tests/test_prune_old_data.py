import unittest
from unittest.mock import patch, MagicMock

from sqlalchemy import select, func

from data_processing.prune_old_data import prune_old_data
from database.models import WalletBalance, WalletEvent, RuleEvaluation
from database.repositories import (
    BalanceSnapshotRepository,
    WalletEventRepository,
    RuleEvaluationRepository,
)
from database.repositories.exceptions import StoreWriteFailed
from tests.helpers import make_engine, utc, WALLET_A

NOW = utc(2026, 10, 19, 2, 0)


@patch.multiple(
    "config",
    SNAPSHOT_RETENTION_DAYS=30,
    EVENT_RETENTION_DAYS=90,
    EVALUATION_RETENTION_DAYS=30,
)
class TestPruneOldData(unittest.TestCase):

    def setUp(self):
        self.engine = make_engine()
        self.snapshot_repo = BalanceSnapshotRepository(engine=self.engine)
        self.event_repo = WalletEventRepository(engine=self.engine)
        self.evaluation_repo = RuleEvaluationRepository(engine=self.engine)

        # One row just inside and one just outside each retention window
        for as_of in (utc(2026, 9, 18), utc(2026, 9, 20)):
            self.snapshot_repo.create(WalletBalance(address=WALLET_A, as_of=as_of, payload={}))
        for i, occurred_at in enumerate((utc(2026, 7, 20), utc(2026, 7, 22))):
            self.event_repo.create(WalletEvent(address=WALLET_A, occurred_at=occurred_at, kind="other",
                                               tx_hash=f"0x{i}", chain="base", details={}))
        for timestamp in (utc(2026, 9, 18), utc(2026, 9, 20)):
            self.evaluation_repo.create(RuleEvaluation(rule_id="r1", triggered=False, timestamp=timestamp))

    def tearDown(self):
        self.engine.dispose()

    def _count(self, model):
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(model)).scalar()

    def _prune(self, **overrides):
        repos = {
            "snapshot_repo": self.snapshot_repo,
            "event_repo": self.event_repo,
            "evaluation_repo": self.evaluation_repo,
        }
        repos.update(overrides)
        return prune_old_data(now=NOW, **repos)

    def test_deletes_rows_outside_retention(self):
        deleted = self._prune()

        self.assertEqual(deleted, {"wallet_balances": 1, "wallet_events": 1, "rule_evaluations": 1})
        self.assertEqual(self._count(WalletBalance), 1)
        self.assertEqual(self._count(WalletEvent), 1)
        self.assertEqual(self._count(RuleEvaluation), 1)

    def test_second_run_deletes_nothing(self):
        self._prune()

        self.assertEqual(self._prune(), {"wallet_balances": 0, "wallet_events": 0, "rule_evaluations": 0})

    def test_failure_on_one_table_does_not_block_the_others(self):
        failing_repo = MagicMock()
        failing_repo.delete_older_than.side_effect = StoreWriteFailed("lock timeout")

        deleted = self._prune(event_repo=failing_repo)

        self.assertIsNone(deleted["wallet_events"])
        self.assertEqual(deleted["wallet_balances"], 1)
        self.assertEqual(deleted["rule_evaluations"], 1)

    def test_cutoff_uses_configured_windows(self):
        repo = MagicMock()
        repo.delete_older_than.return_value = 0

        prune_old_data(snapshot_repo=repo, event_repo=repo, evaluation_repo=repo, now=NOW)

        cutoffs = [c.args[0] for c in repo.delete_older_than.call_args_list]
        self.assertEqual(cutoffs, [utc(2026, 9, 19, 2, 0), utc(2026, 7, 21, 2, 0), utc(2026, 9, 19, 2, 0)])


if __name__ == "__main__":
    unittest.main()
