import sys
from pathlib import Path

from loguru import logger

LOG_FILE_NAME = "signal-audit.log"

# Records outside a market context show "-" in the market column
DEFAULT_MARKET_TAG = "-"

_LINE = "{level: <8} | {extra[market]: <9} | {name}:{function} | {message}"


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs")) -> Path:
    """
    Route loguru output to stderr and to a rotating file under ``log_dir``.

    Every line carries the market tag bound with ``logger.contextualize(market=...)``
    by the audit and validation runs, so interleaved per-market output stays
    readable.

    Returns:
        Path of the log file
    """
    logger.remove()
    logger.configure(extra={"market": DEFAULT_MARKET_TAG})

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>" + _LINE + "</level>",
        level=log_level,
        colorize=True,
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | " + _LINE,
        level=log_level,
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        encoding="utf-8",
    )

    logger.debug(f"Logging to {log_file} at {log_level}")
    return log_file
