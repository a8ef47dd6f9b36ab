"""Console and file sinks for one SimEvo run, tagged with the problem name."""

from datetime import datetime, timezone
from pathlib import Path
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[problem]}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[problem]} | "
    "{name}:{line} | {message}"
)


def setup_logger(
    problem: str = "simevo",
    log_dir: str = "logs",
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "30 days",
    colorize: bool | None = None,
) -> str:
    """
    Replace all sinks with a console sink and a rotating file sink.

    Every record carries ``extra["problem"]``, so engine lines such as
    ``[Evaluator] ...`` and ``[12] 0: ...`` can be traced back to the run
    that produced them. ``colorize=None`` lets loguru detect a terminal.

    Returns:
        Path of the log file, ``<log_dir>/<problem>_<utc timestamp>.log``
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = directory / f"{problem}_{timestamp}.log"

    logger.configure(
        handlers=[
            {
                "sink": sys.stdout,
                "level": level,
                "format": CONSOLE_FORMAT,
                "colorize": colorize,
            },
            {
                "sink": str(log_file),
                "level": level,
                "format": FILE_FORMAT,
                "rotation": rotation,
                "retention": retention,
                "compression": "zip",
                "encoding": "utf-8",
                "backtrace": True,
            },
        ],
        extra={"problem": problem},
    )
    logger.debug("[Logger] {} at level {}", log_file, level)
    return str(log_file)
