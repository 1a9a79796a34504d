"""
promo_engine/utils/logging.py
─────────────────────────────
Configures logging for the engine and the CLI tester.
"""
import os
import logging
from logging.handlers import RotatingFileHandler


LOGGER_NAME = 'promo_engine'


class EvaluationFormatter(logging.Formatter):
    """
    Formatter that always has a `promo_id` to print.
    The engine passes it through `extra=`; other records get '-'.
    """
    def format(self, record):
        if getattr(record, 'promo_id', None) is None:
            record.promo_id = '-'
        return super().format(record)


def setup_logging(cfg) -> logging.Logger:
    """
    Configure the `promo_engine` logger.

    File: <LOG_DIR>/promo_engine.log, rotating, when cfg.LOG_TO_FILE
    Console: always
    Format: timestamp | level | module | promo_id | message
    """
    logger = logging.getLogger(LOGGER_NAME)
    level  = getattr(logging, str(cfg.LOG_LEVEL).upper(), logging.INFO)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # 1. File logger (skipped if the directory is not writable)
    if cfg.LOG_TO_FILE:
        try:
            os.makedirs(cfg.LOG_DIR, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(cfg.LOG_DIR, 'promo_engine.log'),
                maxBytes=cfg.LOG_MAX_BYTES,
                backupCount=cfg.LOG_BACKUP_COUNT,
            )
            file_handler.setFormatter(EvaluationFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(promo_id)s | %(message)s'
            ))
            file_handler.setLevel(level)
            logger.addHandler(file_handler)
        except OSError:
            pass  # read-only filesystem: console only

    # 2. Console logger (stderr, keeps stdout clean for --json)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(EvaluationFormatter(
        '%(asctime)s | %(levelname)s | %(promo_id)s | %(message)s'
    ))
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    logger.setLevel(level)
    logger.debug('Promo engine logging configured')
    return logger
