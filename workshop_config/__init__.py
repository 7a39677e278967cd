"""
workshop_config -- single public entrypoint for workshop configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    Engines receive plain values from it; they never read files or the
    environment themselves.

Architecture position:
    Configuration -- sits above ``workshop_kernel`` and below
    ``workshop_modules``.  The kernel and the engines MUST NOT import it.

Failure modes:
    - ``FileNotFoundError`` -- the selected YAML file does not exist.
    - ``ValueError`` -- schema validation failed.

Audit relevance:
    Every call emits a ``WORKSHOP_CONFIG_TRACE`` log entry carrying the
    config_id, version, source path and checksum.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from workshop_config.loader import load_config
from workshop_config.schema import CalendarSettings, PayrollSettings, WorkshopConfig

_logger = logging.getLogger("workshop_kernel.config")

CONFIG_PATH_ENV = "WORKSHOP_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(config_path: Path | str | None = None) -> WorkshopConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``config_path``, then the
    ``WORKSHOP_CONFIG_PATH`` environment variable, then the packaged
    ``defaults.yaml``.
    """
    source = Path(config_path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = load_config(source)

    _logger.info(
        "WORKSHOP_CONFIG_TRACE",
        extra={
            "trace_type": "WORKSHOP_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "config_source": str(source),
            "checksum": config.checksum,
        },
    )
    return config


__all__ = [
    "CONFIG_PATH_ENV",
    "CalendarSettings",
    "DEFAULT_CONFIG_PATH",
    "PayrollSettings",
    "WorkshopConfig",
    "get_active_config",
]
