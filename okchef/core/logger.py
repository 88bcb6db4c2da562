# okchef/core/logger.py

"""
Logging helper for okchef.

- Logs to a file under the logs directory and to the console
- Modules log through child loggers ("okchef.patterns", "okchef.resolver", ...)
- Level and file name come from the "logging" section of config.json
- Chatty third-party loggers (urllib3 under requests) are held at WARNING
"""

import logging
from pathlib import Path
from typing import Iterable, Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept a level number or a name such as "debug"."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    log_dir: Path | None = None,
    level: Union[int, str] = logging.INFO,
    log_file: str = "okchef.log",
    quiet: Iterable[str] = ("urllib3",),
) -> logging.Logger:
    if log_dir is None:
        log_dir = Path(__file__).resolve().parents[2] / "data" / "logs"

    level = resolve_level(level)
    logger = logging.getLogger("okchef")
    logger.setLevel(level)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Already configured: only the level changes
    if logger.handlers:
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    fh = logging.FileHandler(log_dir / log_file, encoding="utf-8")
    fh.setFormatter(fmt)
    fh.setLevel(level)
    logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.setLevel(level)
    logger.addHandler(ch)

    logger.info(f"okchef logging initialized ({logging.getLevelName(level)}, {log_dir / log_file}).")
    return logger
