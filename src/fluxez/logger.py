import logging
from typing import Optional

from fluxez.settings import settings as api_settings

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

ROOT_LOGGER = "fluxez"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())

_configured = False


def setup_global_logging(level: str = "INFO") -> None:
    """Set the level of the `fluxez` logger once.

    Handlers and formatting belong to the host application; the root logger is
    left untouched.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO")
    """
    global _configured
    if _configured:
        return
    lvl = _LEVELS.get(level.upper(), logging.INFO)
    logging.getLogger(ROOT_LOGGER).setLevel(lvl)
    _configured = True


class Logger:
    """Thin wrapper over standard logging used by the client and every service.

    - Honors global configuration via `setup_global_logging` using `LOG_LEVEL`.
    - Loggers live under the `fluxez.` namespace so host applications can tune them.
    - Provides `.message(text)` which logs at `INFO` when LOG_LEVEL is INFO or higher,
      otherwise logs at `DEBUG`.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        if not _configured:
            setup_global_logging(api_settings.LOG_LEVEL)
        name = name or __name__
        if not name.startswith(ROOT_LOGGER):
            name = f"{ROOT_LOGGER}.{name}"
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._logger.critical(msg, *args, **kwargs)

    def message(self, msg: str, *args, **kwargs) -> None:
        level = (api_settings.LOG_LEVEL or "").upper()
        if level == "DEBUG":
            self.debug(msg, *args, **kwargs)
        elif level == "INFO" or level == "":  # UNSET treated as INFO
            self.info(msg, *args, **kwargs)
        else:
            lvl = _LEVELS.get(level, logging.INFO)
            self._logger.log(lvl, msg, *args, **kwargs)
