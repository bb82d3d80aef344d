"""
Configuration des logs

- Développement : sortie console lisible
- Production : une ligne JSON par événement sur stdout

Variables d'environnement :
- LOG_FORMAT : "json" ou "console" (json par défaut hors DEBUG)
- LOG_LEVEL : DEBUG, INFO, WARNING, ERROR (INFO par défaut hors DEBUG)
"""
import json
import logging
import os
from datetime import datetime, timezone


def get_logging_config(debug=False):
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    config = {
        "version": 1,
        "disable_existing_loggers": False,
    }

    if log_format == "json":
        config["formatters"] = {
            "json": {"()": "config.settings.logging.JsonFormatter"},
        }
        formatter = "json"
    else:
        config["formatters"] = {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        }
        formatter = "verbose"

    config["handlers"] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter,
        },
        "null": {
            "class": "logging.NullHandler",
        },
    }

    config["loggers"] = {
        "": {
            "handlers": ["console"],
            "level": log_level,
        },
        "django": {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": log_level if debug else "ERROR",
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["null"],
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        },
    }

    return config


class JsonFormatter(logging.Formatter):
    """Ligne JSON : horodatage, niveau, logger, message, champs extra"""

    STANDARD_ATTRS = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "exc_info", "exc_text", "stack_info",
        "message", "taskName",
    }

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extras = {k: v for k, v in record.__dict__.items() if k not in self.STANDARD_ATTRS}
        if extras:
            entry["extra"] = extras

        return json.dumps(entry, default=str, ensure_ascii=False)
