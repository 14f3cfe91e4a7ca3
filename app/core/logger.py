# ===================================
# app/core/logger.py
# ===================================
"""
Configuration des logs de l'application.

Console toujours active ; fichiers `error.log` et `combined.log` avec rotation
(5 Mo x 5) lorsque `log_to_file` est activé. Le format `json` produit un objet
JSON par ligne avec les métadonnées fixes de la boutique.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


class JsonFormatter(logging.Formatter):
    """Formatter JSON (une ligne par enregistrement)."""

    def __init__(self, static_fields: dict = None):
        super().__init__()
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(self.static_fields)
        if record.exc_info:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_formatter(settings) -> logging.Formatter:
    if settings.log_format == "json":
        return JsonFormatter({
            "service": "safety-equipment-ecommerce",
            "currency": settings.currency,
            "country": settings.country,
        })
    return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")


def setup_logging(settings) -> None:
    """Configurer le logger racine à partir des settings"""
    formatter = _build_formatter(settings)

    root = logging.getLogger()
    root.setLevel(settings.log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.log_to_file:
        os.makedirs(settings.log_dir, exist_ok=True)

        error_file = RotatingFileHandler(
            os.path.join(settings.log_dir, "error.log"),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        error_file.setLevel(logging.ERROR)
        error_file.setFormatter(formatter)
        root.addHandler(error_file)

        combined_file = RotatingFileHandler(
            os.path.join(settings.log_dir, "combined.log"),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        combined_file.setFormatter(formatter)
        root.addHandler(combined_file)

    # APScheduler est très bavard au niveau INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
