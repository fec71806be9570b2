"""Config module to share settings across all modules in fluentxlsx."""

import logging
import sys
from pathlib import Path

from pydantic import BaseModel

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# Name of the table read from TOML config files.
CONFIG_TABLE = "fluentxlsx"


class XLSXSettings(BaseModel):
    # Format pattern for date/datetime members that have no formatter.
    date_formatter: str = "yyyy-MM-dd HH:mm:ss"
    # Run the auto-index pass when a registered configuration is built.
    auto_index: bool = True
    # Import annotation defaults when a model is first registered.
    from_annotations: bool = True


# Updated/set by load_config.
SETTINGS = XLSXSettings()


def load_config(
    config_file: Path | None = None, settings: XLSXSettings | None = None
) -> XLSXSettings:
    global SETTINGS  # noqa: PLW0603

    if config_file is not None and not config_file.exists():
        logger.warning('Configuration file "%s" not found.', config_file)
    if (True if config_file is None else not config_file.exists()) and settings is None:
        new_settings = XLSXSettings()
        logger.debug("Initializing default settings.")
    elif config_file and settings is None:
        with config_file.open(mode="rb") as fp:
            conf = tomllib.load(fp)
        logger.debug("Config loaded from: %s", config_file)
        new_settings = XLSXSettings(**conf.get(CONFIG_TABLE, {}))
    else:
        new_settings = XLSXSettings.model_validate_json(settings.model_dump_json())
        logger.debug("Refreshing global state of settings.")

    SETTINGS = new_settings
    return SETTINGS
