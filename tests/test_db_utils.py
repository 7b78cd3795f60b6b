import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from database import db_utils
from database.db_utils import list_migrations, apply_migrations, get_db_connection


class TestMigrations(unittest.TestCase):

    def setUp(self):
        self.migration_dir = tempfile.mkdtemp()
        self.engine = create_engine("sqlite://", poolclass=StaticPool)

    def tearDown(self):
        self.engine.dispose()
        shutil.rmtree(self.migration_dir)

    def _write(self, filename, sql):
        with open(os.path.join(self.migration_dir, filename), "w") as f:
            f.write(sql)

    def test_list_migrations_orders_by_version(self):
        self._write("V10__later.sql", "SELECT 1;")
        self._write("V2__second.sql", "SELECT 1;")
        self._write("V1__first.sql", "SELECT 1;")
        self._write("notes.sql", "SELECT 1;")
        self._write("README.md", "docs")

        self.assertEqual(
            list_migrations(self.migration_dir),
            [("1", "V1__first.sql"), ("2", "V2__second.sql"), ("10", "V10__later.sql")],
        )

    def test_apply_migrations_runs_each_file_once(self):
        self._write("V1__create_wallets.sql", "CREATE TABLE user_wallets (id INTEGER PRIMARY KEY, address TEXT)")
        self._write("V2__add_chain.sql", "ALTER TABLE user_wallets ADD COLUMN chain TEXT")

        applied = apply_migrations(self.migration_dir, engine=self.engine)
        self.assertEqual(applied, ["V1__create_wallets.sql", "V2__add_chain.sql"])

        columns = {c["name"] for c in inspect(self.engine).get_columns("user_wallets")}
        self.assertEqual(columns, {"id", "address", "chain"})

        self.assertEqual(apply_migrations(self.migration_dir, engine=self.engine), [])
        with self.engine.connect() as conn:
            versions = conn.execute(text("SELECT version FROM applied_migrations ORDER BY version")).scalars().all()
        self.assertEqual(versions, ["1", "2"])

    def test_failed_migration_rolls_back_and_raises(self):
        self._write("V1__broken.sql", "CREATE TABLE oops (")

        with self.assertRaises(Exception):
            apply_migrations(self.migration_dir, engine=self.engine)

    def test_bundled_migrations_are_discoverable(self):
        self.assertEqual(list_migrations()[0], ("1", "V1__wallet_sync_schema.sql"))


class TestGetDbConnection(unittest.TestCase):

    def setUp(self):
        db_utils._engine_cache.clear()

    def tearDown(self):
        db_utils._engine_cache.clear()

    @patch("database.db_utils.create_engine")
    def test_missing_parameters_return_none(self, mock_create_engine):
        with patch("database.db_utils.DB_PASSWORD", None):
            self.assertIsNone(get_db_connection("wallets"))
        mock_create_engine.assert_not_called()

    @patch("database.db_utils.create_engine")
    def test_engine_is_cached(self, mock_create_engine):
        with patch.multiple("database.db_utils", DB_USER="u", DB_PASSWORD="p", DB_HOST="h", DB_PORT="5432"):
            first = get_db_connection("wallets")
            second = get_db_connection("wallets")

        self.assertIs(first, second)
        self.assertIs(first, mock_create_engine.return_value)
        mock_create_engine.assert_called_once()


if __name__ == "__main__":
    unittest.main()
