import traceback
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

_DEFAULT_RENAME_FIELDS: Dict[str, str] = {
    "levelname": "level",
    "asctime": "timestamp",
    "name": "logger",
}


class ConsoleFormatter(JsonFormatter):
    """
    A compact JSON formatter for local development output.
    """

    def __init__(self, **kwargs):
        fmt = kwargs.pop("format", "%(asctime)s %(name)s %(levelname)s %(message)s")
        datefmt = kwargs.pop("datefmt", "%Y-%m-%d %H:%M:%S")
        rename_fields = {**_DEFAULT_RENAME_FIELDS, **kwargs.pop("rename_fields", {})}

        super().__init__(fmt=fmt, datefmt=datefmt, rename_fields=rename_fields, **kwargs)


class ProductionFormatter(JsonFormatter):
    """
    JSON formatter for deployed environments.

    Exceptions are emitted as a structured ``exception`` object (type, message,
    traceback lines) instead of the flattened ``exc_info`` text.
    """

    def __init__(self, **kwargs):
        fmt = kwargs.pop(
            "format",
            "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d %(funcName)s %(process)d",
        )
        datefmt = kwargs.pop("datefmt", "%Y-%m-%dT%H:%M:%S")
        rename_fields = {
            **_DEFAULT_RENAME_FIELDS,
            "pathname": "file_path",
            "lineno": "line_number",
            "funcName": "function_name",
            "process": "process_id",
            **kwargs.pop("rename_fields", {}),
        }

        super().__init__(fmt=fmt, datefmt=datefmt, rename_fields=rename_fields, **kwargs)

    def add_fields(self, log_record: Dict[str, Any], record: Any, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if record.exc_info:
            exc_type, exc_value, exc_traceback = record.exc_info

            log_record["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": (
                    traceback.format_exception(exc_type, exc_value, exc_traceback) if exc_traceback else None
                ),
            }

            log_record.pop("exc_info", None)
            log_record.pop("exc_text", None)
