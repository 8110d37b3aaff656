"""
Configuration repository for the connection properties file.

This module provides the infrastructure layer for reading
``config.properties``: plain ``KEY=VALUE`` lines with ``#`` comments,
parsed with python-dotenv.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values
from pydantic import ValidationError

from sqldiagnostics.domain.config import ConnectionSettings
from sqldiagnostics.domain.errors import ConfigMalformed, ConfigMissing

logger = logging.getLogger(__name__)

KEY_HOST = "DB_HOST"
KEY_PORT = "DB_PORT"
KEY_DATABASE = "DB_NAME"
KEY_USER = "USER"
KEY_PASSWORD = "PASSWORD"
KEY_TRUSTED = "TRUSTED"
KEY_CONNECTION_STRING = "CONNECTION_STRING"
KEY_DRIVER = "ODBC_DRIVER"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def parse_trusted(raw: str) -> bool:
    """
    Parse the TRUSTED flag.

    Accepts the usual spellings of true/false. Anything else is logged and
    treated as False.
    """
    value = (raw or "").strip()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Invalid TRUSTED property %r, defaulting to false", raw)
    return False


class ConfigRepository:
    """
    Repository for the connection properties file.

    Handles loading the file and mapping its keys onto
    ConnectionSettings.
    """

    def __init__(self, config_path: Path):
        """
        Initialize the config repository.

        Args:
            config_path: Path to the properties file
        """
        self.config_path = Path(config_path)

    def load_properties(self) -> Dict[str, str]:
        """
        Load the raw key/value pairs.

        Raises:
            ConfigMissing: If the file does not exist or cannot be read
        """
        if not self.config_path.is_file():
            raise ConfigMissing(
                f"Configuration file '{self.config_path}' not found. "
                "Please validate that it exists for the SQL Server connection."
            )

        try:
            values = dotenv_values(self.config_path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigMissing(f"Cannot read configuration file '{self.config_path}': {e}") from e

        # keys without "=" come back as None
        properties = {key: (value or "") for key, value in values.items()}
        logger.debug("Loaded %d properties from %s", len(properties), self.config_path)
        return properties

    def load_connection_settings(self) -> ConnectionSettings:
        """
        Load connection settings.

        A non-blank CONNECTION_STRING bypasses every other key. Otherwise
        DB_HOST, DB_PORT, DB_NAME and TRUSTED are required, and USER and
        PASSWORD are required unless TRUSTED is true.

        Raises:
            ConfigMissing: If the file cannot be read
            ConfigMalformed: If a required key is missing or a value is invalid
        """
        properties = self.load_properties()
        driver = properties.get(KEY_DRIVER, "").strip() or None

        override = properties.get(KEY_CONNECTION_STRING, "")
        if override.strip():
            logger.info("Using %s from %s", KEY_CONNECTION_STRING, self.config_path)
            return self._build(connection_string=override.strip(), driver=driver)

        self._require(properties, KEY_HOST, KEY_PORT, KEY_DATABASE, KEY_TRUSTED)
        trusted = parse_trusted(properties[KEY_TRUSTED])
        if not trusted:
            self._require(properties, KEY_USER, KEY_PASSWORD)

        settings = self._build(
            host=properties[KEY_HOST].strip(),
            port=properties[KEY_PORT].strip(),
            database=properties[KEY_DATABASE].strip(),
            user=properties.get(KEY_USER, ""),
            password=properties.get(KEY_PASSWORD, ""),
            trusted=trusted,
            driver=driver,
        )
        logger.info(
            "Loaded connection settings for %s/%s (trusted=%s)",
            settings.server, settings.database, settings.trusted
        )
        return settings

    def _require(self, properties: Dict[str, str], *keys: str) -> None:
        missing = [key for key in keys if key not in properties]
        if missing:
            raise ConfigMalformed(
                f"Missing required key(s) {', '.join(missing)} in '{self.config_path}'"
            )

    def _build(self, driver: Optional[str] = None, **fields) -> ConnectionSettings:
        try:
            return ConnectionSettings(driver=driver, **fields)
        except ValidationError as e:
            raise ConfigMalformed(f"Invalid configuration in '{self.config_path}': {e}") from e
