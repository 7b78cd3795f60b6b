import logging
import os
import re
import time
from pathlib import Path

from sqlalchemy import create_engine, text
from config import DB_HOST, DB_NAME, DB_USER, DB_PASSWORD, DB_PORT

logger = logging.getLogger(__name__)

MIGRATION_DIR = Path(__file__).parent / "migrations"
MIGRATION_FILE_PATTERN = re.compile(r"V(\d+)__.*\.sql")

# Memoization cache for database engines
_engine_cache = {}


def get_db_connection(dbname=DB_NAME):
    """
    Establishes and retrieves a database engine, caching the engine for reuse.
    Returns None when the connection cannot be established.
    """
    if dbname in _engine_cache:
        logger.debug(f"Using cached connection for database: {dbname}")
        return _engine_cache[dbname]

    if not all([DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, dbname]):
        missing = [
            name for name, value in (
                ("DB_USER", DB_USER), ("DB_PASSWORD", DB_PASSWORD),
                ("DB_HOST", DB_HOST), ("DB_PORT", DB_PORT), ("DB_NAME", dbname),
            ) if not value
        ]
        logger.error(f"❌ Missing required database connection parameters: {', '.join(missing)}")
        return None

    logger.info(f"🔄 Establishing new database connection to {dbname} at {DB_HOST}:{DB_PORT}")

    try:
        engine = create_engine(
            f'postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{dbname}',
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_size=5,
            max_overflow=5,
            connect_args={
                "connect_timeout": 30,
                "application_name": "wallet_sync_worker",
                "keepalives": 1,
                "keepalives_idle": 30,
                "keepalives_interval": 10,
                "keepalives_count": 5
            }
        )

        max_retries = 3
        retry_delay = 2

        for attempt in range(max_retries):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                break
            except Exception as e:
                if attempt < max_retries - 1:
                    logger.warning(f"⚠️ Connection attempt {attempt + 1}/{max_retries} failed: {e}. Retrying in {retry_delay}s...")
                    time.sleep(retry_delay)
                else:
                    logger.error("❌ All connection attempts failed.")
                    raise

        _engine_cache[dbname] = engine
        logger.info(f"✅ Database connection to {dbname} established successfully.")
        return engine

    except Exception as e:
        logger.error(f"❌ Error connecting to database {dbname} at {DB_HOST}:{DB_PORT}: {e}")
        return None


def list_migrations(migration_dir=MIGRATION_DIR):
    """
    Return (version, filename) pairs for the migration files in version order.
    Files that do not match V<n>__<name>.sql are skipped.
    """
    migrations = []
    for filename in os.listdir(migration_dir):
        match = MIGRATION_FILE_PATTERN.fullmatch(filename)
        if not match:
            if filename.endswith(".sql"):
                logger.warning(f"⚠️ Skipping invalid migration file name: {filename}")
            continue
        migrations.append((match.group(1), filename))
    return sorted(migrations, key=lambda m: int(m[0]))


def apply_migrations(migration_dir=MIGRATION_DIR, engine=None):
    """
    Apply every migration not yet recorded in applied_migrations, each inside the
    same transaction as its bookkeeping row.
    """
    logger.info("=== STARTING MIGRATION PROCESS ===")

    owns_engine = engine is None
    if engine is None:
        engine = get_db_connection()
        if not engine:
            raise Exception(f"Failed to connect to application database '{DB_NAME}'")

    migrations_applied = []
    migrations_skipped = []

    try:
        if not os.path.exists(migration_dir):
            raise Exception(f"Migration directory not found: {migration_dir}")

        with engine.begin() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS applied_migrations (
                    id SERIAL PRIMARY KEY,
                    version VARCHAR(255) UNIQUE NOT NULL,
                    applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                );
            """))

            result = conn.execute(text("SELECT version, applied_at FROM applied_migrations"))
            applied_migrations = {row[0]: row[1] for row in result.fetchall()}
            logger.info(f"Currently applied migrations: {sorted(applied_migrations.keys(), key=int)}")

            for version, migration_file in list_migrations(migration_dir):
                if version in applied_migrations:
                    logger.info(f"⏭️ Migration {migration_file} already applied at {applied_migrations[version]}. Skipping.")
                    migrations_skipped.append(migration_file)
                    continue

                logger.info(f"🔄 Applying migration: {migration_file}")
                with open(os.path.join(migration_dir, migration_file), 'r') as f:
                    sql_script = f.read()

                if not sql_script.strip():
                    logger.warning(f"⚠️ Migration {migration_file} is empty")
                    continue

                try:
                    conn.exec_driver_sql(sql_script)
                    conn.execute(text("INSERT INTO applied_migrations (version) VALUES (:version)"), {"version": version})
                except Exception as migration_error:
                    logger.error(f"❌ Failed to apply migration {migration_file}: {migration_error}")
                    raise
                logger.info(f"✅ Successfully applied migration: {migration_file}")
                migrations_applied.append(migration_file)

        logger.info("=== MIGRATION SUMMARY ===")
        logger.info(f"✅ Applied migrations: {len(migrations_applied)} - {migrations_applied}")
        logger.info(f"⏭️ Skipped migrations: {len(migrations_skipped)} - {migrations_skipped}")

    except Exception as e:
        logger.error(f"❌ Error applying migrations: {e}")
        raise
    finally:
        if owns_engine:
            engine.dispose()
            _engine_cache.pop(DB_NAME, None)

    return migrations_applied


if __name__ == "__main__":
    apply_migrations()
