"""Logging setup for processes hosting the economy core."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from profile_economy.config import Settings, get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class SQLTransactionFilter(logging.Filter):
    """Drop transaction bookkeeping noise and flatten multi-line statements."""

    def filter(self, record):
        # Only filter INFO level messages
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            if any(kw in message for kw in ['SELECT', 'UPDATE', 'DELETE', 'INSERT']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Install console and rotating file handlers.

    General logs go to ``<log_dir>/profile_economy.log`` and SQL statements to
    ``<log_dir>/profile_economy_sql.log`` so ledger traffic can be audited
    without flooding the main log.
    """
    settings = settings or get_settings()

    logs_dir = Path(settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_file = logs_dir / "profile_economy.log"
    sql_log_file = logs_dir / "profile_economy_sql.log"

    rotating_handler = RotatingFileHandler(
        log_file,
        maxBytes=1024 * 1024,
        backupCount=5,
        encoding='utf-8',
    )  # 1 MB
    rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    sql_rotating_handler = RotatingFileHandler(
        sql_log_file,
        maxBytes=1024 * 1024,
        backupCount=5,
        encoding='utf-8',
    )
    sql_rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Force=True ensures we override any existing configuration
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            rotating_handler,
        ],
        force=True,
    )

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
    sqlalchemy_logger.handlers.clear()
    sqlalchemy_logger.addHandler(sql_rotating_handler)
    sqlalchemy_logger.setLevel(logging.INFO if settings.environment == "development" else logging.WARNING)
    sqlalchemy_logger.propagate = False  # Prevent duplication in the general log
    sqlalchemy_logger.addFilter(SQLTransactionFilter())

    logger = logging.getLogger("profile_economy")
    logger.info(f"Logging initialized: general={log_file.absolute()}, sql={sql_log_file.absolute()}")
    return logger
