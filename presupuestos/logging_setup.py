import os, logging, sys
from .config import LOG_DIR, LOG_LEVEL

_LEVEL_MAP = {
    "ERROR":   logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO":    logging.INFO,
    "DEBUG":   logging.DEBUG,
}

# Configuración efectiva (init_logging la puede pisar en runtime)
_STATE = {"level": LOG_LEVEL, "log_dir": LOG_DIR}
_LOGGERS: dict[str, logging.Logger] = {}

def _build_formatter() -> logging.Formatter:
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    return logging.Formatter(fmt, datefmt)

def _get_log_file() -> str:
    try: os.makedirs(_STATE["log_dir"], exist_ok=True)
    except OSError: pass
    return os.path.join(_STATE["log_dir"], "app.log")

def _level() -> int:
    return _LEVEL_MAP.get(str(_STATE["level"]).upper(), logging.INFO)

def _attach_handlers(logger: logging.Logger) -> None:
    level = _level()
    logger.setLevel(level)

    # File handler
    try:
        fh = logging.FileHandler(_get_log_file(), encoding="utf-8")
        fh.setLevel(level); fh.setFormatter(_build_formatter())
        logger.addHandler(fh)
    except OSError:
        pass
    # Console handler (stderr)
    ch = logging.StreamHandler(stream=sys.stderr)
    ch.setLevel(level); ch.setFormatter(_build_formatter())
    logger.addHandler(ch)
    logger.propagate = False

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    _attach_handlers(logger)
    _LOGGERS[name] = logger
    return logger

def init_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """
    Reconfigura nivel y carpeta de logs y re-arma los handlers de los
    loggers ya creados (tests, --log-level del CLI).
    """
    if level and str(level).upper() in _LEVEL_MAP:
        _STATE["level"] = str(level).upper()
    if log_dir:
        _STATE["log_dir"] = log_dir

    for logger in _LOGGERS.values():
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        _attach_handlers(logger)
