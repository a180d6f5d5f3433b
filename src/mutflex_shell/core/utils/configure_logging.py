# src/mutflex_shell/core/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

Level = Union[str, int]


class LogWithTqdm(logging.Handler):
    """
    Sends log records through `tqdm.write()` so they land above the prompt
    and any upload progress bar instead of tearing through them.
    """

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def _to_level(level: Level, fallback: int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), fallback)


def configure_logger(general_level: Level = "INFO",
                     module_specific_levels: Optional[Dict[str, Level]] = None,
                     silenced_loggers: Optional[Dict[str, Level]] = None) -> logging.Handler:
    """
    Installs one tqdm-aware handler on the root logger.

    `module_specific_levels` raises or lowers single packages
    (e.g. {'article_editor': 'INFO'}); `silenced_loggers` quiets chatty
    libraries such as werkzeug's request log.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_to_level(general_level, logging.INFO))

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))
    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))

    return handler
