import logging
import os
from pathlib import Path


def _default_level() -> int:
    name = os.environ.get("RELAYGATE_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Get a named logger with the relay's standard formatting.

    Example:
        logger = get_logger(__name__)
        logger.debug("event %s rejected", event.id_prefix)

    The level defaults to ``RELAYGATE_LOG_LEVEL``. A per-logger file under
    ``RELAYGATE_LOG_DIR`` is written only when that variable is set.

    Returns:
        logging.Logger: Configured logger instance.
    """
    if level is None:
        level = _default_level()
    logger = logging.getLogger(name)

    # handlers are attached once; repeated calls only adjust the level
    if logger.handlers:
        logger.setLevel(level)
        return logger

    formatter = logging.Formatter(
        '%(asctime)s     || %(name)s \n%(levelname)s   || %(message)s \n',
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    log_dir = os.environ.get("RELAYGATE_LOG_DIR")
    if log_dir:
        logs_dir = Path(log_dir)
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.warning("cannot create log directory %s, logging to stream only", logs_dir)
        else:
            filehandler = logging.FileHandler(str(logs_dir / f"{name}.log"), encoding="utf-8")
            filehandler.setFormatter(formatter)
            logger.addHandler(filehandler)

    logger.setLevel(level)
    # records stop here so the root logger does not print them twice
    logger.propagate = False
    return logger
