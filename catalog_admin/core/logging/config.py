import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from catalog_admin.core.config import settings

_FORMATTERS_MODULE = "catalog_admin.core.logging.formatters"
_FILTERS_MODULE = "catalog_admin.core.logging.filters"


def _stream_handler(formatter: str, level: str, filters: list[str], stream: str = "stdout") -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "filters": filters,
        "stream": f"ext://sys.{stream}",
    }


def _local_outputs() -> tuple[Dict[str, Any], Dict[str, Any]]:
    formatters = {
        "console": {
            "()": f"{_FORMATTERS_MODULE}.ConsoleFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "datefmt": "%H:%M:%S",
        },
    }
    handlers = {"console": _stream_handler("console", "DEBUG", ["context_filter"])}
    return formatters, handlers


def _deployed_outputs() -> tuple[Dict[str, Any], Dict[str, Any]]:
    formatters = {"json": {"()": f"{_FORMATTERS_MODULE}.ProductionFormatter"}}
    handlers = {
        "json_stdout": _stream_handler("json", "INFO", ["context_filter", "noise_reduction"]),
        "json_stderr": _stream_handler("json", "ERROR", ["context_filter"], stream="stderr"),
    }
    return formatters, handlers


def get_logging_config() -> Dict[str, Any]:
    """
    Build the ``dictConfig`` for the current environment.

    Locally everything goes to stdout through the compact console formatter.
    Staging and production write JSON to stdout and repeat errors on stderr.
    """
    is_local = settings.ENVIRONMENT == "local"
    formatters, handlers = _local_outputs() if is_local else _deployed_outputs()
    handler_names = list(handlers)

    app_level = settings.LOG_LEVEL or ("DEBUG" if is_local else "INFO")
    sql_level = "INFO" if is_local and settings.DATABASE_ECHO else "WARNING"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context_filter": {"()": f"{_FILTERS_MODULE}.ContextFilter"},
            "noise_reduction": {
                "()": f"{_FILTERS_MODULE}.NoiseReductionFilter",
                "suppress_patterns": ["SELECT 1"],
            },
        },
        "formatters": formatters,
        "handlers": handlers,
        "root": {"level": "WARNING", "handlers": handler_names},
        "loggers": {
            "catalog_admin": {"level": app_level, "handlers": handler_names, "propagate": False},
            "sqlalchemy.engine": {"level": sql_level, "propagate": True},
            "tenacity": {"level": "INFO", "propagate": True},
        },
    }


def load_config_from_yaml(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Read a ``dictConfig`` from a YAML file, or None when the file is missing or unreadable.
    """
    if not config_path.is_file():
        return None

    try:
        with config_path.open(encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Ignoring logging config {config_path}: {e}", file=sys.stderr)
        return None


def setup_logging(config_override: Optional[Dict[str, Any]] = None) -> None:
    """
    Configure logging for the process.

    The first configuration found wins: ``config_override``, then
    ``config/logging.<env>.yaml``, then ``config/logging.yaml``, then
    :func:`get_logging_config`.
    """
    config = config_override

    if config is None:
        config_dir = Path(settings.BASE_DIR) / "config"
        for candidate in (f"logging.{settings.ENVIRONMENT}.yaml", "logging.yaml"):
            config = load_config_from_yaml(config_dir / candidate)
            if config is not None:
                break

    try:
        logging.config.dictConfig(config or get_logging_config())
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        print(f"Falling back to basic logging, invalid logging config: {e}", file=sys.stderr)
        logging.basicConfig(level=logging.INFO, stream=sys.stdout)


def setup_exception_logging() -> None:
    """
    Log uncaught exceptions as critical before the default hook prints them.
    """
    previous_hook = sys.excepthook

    def log_uncaught(exc_type, exc_value, exc_traceback):
        if not issubclass(exc_type, KeyboardInterrupt):
            logging.getLogger("catalog_admin").critical(
                "Uncaught exception, process will terminate",
                exc_info=(exc_type, exc_value, exc_traceback),
            )
        previous_hook(exc_type, exc_value, exc_traceback)

    sys.excepthook = log_uncaught


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
