#!/usr/bin/env python3
"""
Step runner.
Executes one worker step by name, once, outside the scheduler (manual re-runs, cron, CI).

Usage:
    python pipeline_runner.py <step_name>
"""

import sys
import logging
import traceback

from log_config import setup_logging

logger = logging.getLogger(__name__)


def run_apply_migrations():
    from database.db_utils import apply_migrations
    apply_migrations()


def run_sync_all_wallets():
    from data_ingestion.sync_all_wallets import sync_all_wallets
    sync_all_wallets()


def run_prune_old_data():
    from data_processing.prune_old_data import prune_old_data
    prune_old_data()


STEPS = {
    "apply_migrations": run_apply_migrations,
    "sync_all_wallets": run_sync_all_wallets,
    "prune_old_data": run_prune_old_data,
}


def main(argv=None):
    """Main entry point for the step runner."""
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    if len(argv) != 1:
        logger.error("Usage: python pipeline_runner.py <step_name>")
        logger.error(f"Available steps: {', '.join(sorted(STEPS))}")
        sys.exit(1)

    step_name = argv[0]
    if step_name not in STEPS:
        logger.error(f"Unknown step: {step_name}")
        logger.error(f"Available steps: {', '.join(sorted(STEPS))}")
        sys.exit(1)

    logger.info(f"Starting step: {step_name}")
    try:
        STEPS[step_name]()
    except Exception as e:
        logger.error(f"Error executing {step_name}: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)
    logger.info(f"Step {step_name} completed successfully")


if __name__ == "__main__":
    main()
