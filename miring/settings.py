import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULTS = {
    "schema": "schema/MiringTier1.xsd",
    "schematron": ["schematron/MiringAll.sch"],
    "rules_dir": "rules",
    "log_level": "INFO",
    "upload_max_size_mb": 16,
}

ENV = {
    "schema": "MIRING_SCHEMA",
    "schematron": "MIRING_SCHEMATRON",
    "rules_dir": "MIRING_RULES_DIR",
    "log_level": "MIRING_LOG_LEVEL",
    "upload_max_size_mb": "MIRING_UPLOAD_MAX_MB",
}


def _split(value):
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value or [])


def load_settings(path=None) -> dict:
    """Defaults, then the JSON settings file, then MIRING_* environment variables."""
    settings = dict(DEFAULTS)
    path = path or os.environ.get("MIRING_SETTINGS")
    if path:
        try:
            with open(Path(path), "r", encoding="utf-8") as f:
                data = json.load(f)
            settings.update({k: v for k, v in data.items() if k in DEFAULTS})
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Ignoring settings file %s: %s", path, e)

    for key, var in ENV.items():
        value = os.environ.get(var)
        if value:
            settings[key] = value

    settings["schematron"] = _split(settings["schematron"])
    try:
        settings["upload_max_size_mb"] = int(settings["upload_max_size_mb"])
    except (TypeError, ValueError):
        logger.warning("Invalid upload_max_size_mb %r, using %s",
                       settings["upload_max_size_mb"], DEFAULTS["upload_max_size_mb"])
        settings["upload_max_size_mb"] = DEFAULTS["upload_max_size_mb"]
    settings["log_level"] = str(settings["log_level"]).upper()
    return settings
