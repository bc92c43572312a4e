"""
Process entry points.

- r2vault-backup: run one backup and exit
- r2vault-verify: run the storage identity check and exit
- r2vault-scheduler: host the daily backup scheduler until interrupted

None take flags; everything comes from the environment. Exit code is 0 on
success (a skipped backup included) and 1 on any unhandled error.
"""

import asyncio
import logging
import signal
from typing import Optional

from r2vault.backup import ArchiveUploader, init_scheduler
from r2vault.config import VaultConfig, load_config
from r2vault.diagnostics import run_identity_check
from r2vault.errors import VaultError
from r2vault.logging_utils import log_event, setup_logging

logger = logging.getLogger(__name__)


def _bootstrap(config: Optional[VaultConfig]) -> VaultConfig:
    config = config or load_config()
    setup_logging(config.log_level, config.log_format, system_name=config.system_name)
    return config


def backup_main(config: Optional[VaultConfig] = None) -> int:
    try:
        config = _bootstrap(config)
        result = ArchiveUploader(config).run_backup()
    except VaultError as e:
        log_event(logger, logging.ERROR, f"Backup failed: {e}", error=e.to_dict())
        return 1
    except Exception as e:
        logger.exception(f"Backup failed: {e}")
        return 1

    level = logging.INFO if result.success else logging.WARNING
    log_event(logger, level, f"Backup finished: {result.status}", **result.to_dict())
    return 0


def verify_main(config: Optional[VaultConfig] = None) -> int:
    try:
        config = _bootstrap(config)
        report = run_identity_check(config)
    except Exception as e:
        logger.error(f"Identity check failed: {e}")
        return 1

    print(report.summary())
    return 0


async def _serve(config: VaultConfig) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    scheduler = init_scheduler(config)
    try:
        await stop.wait()
    finally:
        scheduler.stop()


def scheduler_main(config: Optional[VaultConfig] = None) -> int:
    try:
        config = _bootstrap(config)
        asyncio.run(_serve(config))
    except Exception as e:
        logger.exception(f"Scheduler stopped with error: {e}")
        return 1
    return 0

