"""
SQL Server connection module.

Handles:
- ODBC driver detection and fallback
- Connection string building (fields or pre-formed override)
- Opening the connection with a liveness/version probe
- Output converters for ODBC types pyodbc cannot decode natively
"""

import logging
import re
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pyodbc

from sqldiagnostics.domain.config import ConnectionSettings
from sqldiagnostics.domain.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

# ODBC type codes without native pyodbc support
SQL_SS_VARIANT = -150
SQL_SS_TIMESTAMPOFFSET = -155

_PASSWORD_PATTERN = re.compile(r"(PWD|Password)\s*=\s*[^;]*", re.IGNORECASE)

VERSION_PROBE = """
    SELECT
        CAST(SERVERPROPERTY('ServerName') AS NVARCHAR(256)) AS ServerName,
        CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128)) AS Version,
        CAST(SERVERPROPERTY('Edition') AS NVARCHAR(256)) AS Edition,
        CAST(SERVERPROPERTY('ProductLevel') AS NVARCHAR(128)) AS ProductLevel
"""


@dataclass
class SqlServerInfo:
    """SQL Server instance information."""
    server_name: str
    version: str
    edition: str
    product_level: str


def mask_connection_string(connection_string: str) -> str:
    """Hide the password in a connection string for logging."""
    return _PASSWORD_PATTERN.sub(lambda m: f"{m.group(1)}=***", connection_string)


def _handle_datetimeoffset(raw: bytes) -> datetime:
    """Decode SQL_SS_TIMESTAMPOFFSET into an aware datetime."""
    parts = struct.unpack("<6hI2h", raw)
    return datetime(
        parts[0], parts[1], parts[2], parts[3], parts[4], parts[5], parts[6] // 1000,
        timezone(timedelta(hours=parts[7], minutes=parts[8]))
    )


def _handle_sql_variant(raw: bytes) -> str:
    """
    Best-effort text for sql_variant values.

    Variants holding N-types arrive as UTF-16LE, everything else is read
    as UTF-8.
    """
    if len(raw) % 2 == 0 and b"\x00" in raw:
        return raw.decode("utf-16-le", errors="replace")
    return raw.decode("utf-8", errors="replace")


class SqlConnector:
    """
    SQL Server connection factory.

    Builds the ODBC connection string from ConnectionSettings and opens
    verified connections. The caller owns and closes each connection.
    """

    def __init__(self, settings: ConnectionSettings):
        """
        Initialize SQL connector.

        Args:
            settings: Connection settings loaded from the properties file
        """
        self.settings = settings
        self._connection_string: str | None = None
        self.server_info: SqlServerInfo | None = None

        target = "connection string override" if settings.uses_override else settings.server
        logger.info("SqlConnector initialized for %s (trusted=%s)", target, settings.trusted)

    def _detect_odbc_driver(self) -> str:
        """
        Detect best available ODBC driver.

        Returns:
            ODBC driver name

        Raises:
            DatabaseConnectionError: If no suitable driver found
        """
        if self.settings.driver:
            return self.settings.driver

        drivers = pyodbc.drivers()
        logger.debug("Available ODBC drivers: %s", drivers)

        # Preferred drivers (newest first)
        preferred = [
            "ODBC Driver 18 for SQL Server",
            "ODBC Driver 17 for SQL Server",
            "ODBC Driver 13 for SQL Server",
            "ODBC Driver 11 for SQL Server"
        ]

        for driver in preferred:
            if driver in drivers:
                logger.info("Using ODBC driver: %s", driver)
                return driver

        fallback = [
            "SQL Server Native Client 11.0",
            "SQL Server Native Client 10.0",
            "SQL Server"
        ]

        for driver in fallback:
            if driver in drivers:
                logger.warning("Using fallback ODBC driver: %s", driver)
                return driver

        raise DatabaseConnectionError(
            "No SQL Server ODBC driver found. Please install ODBC Driver 17 or 18."
        )

    def build_connection_string(self) -> str:
        """
        Build ODBC connection string.

        Returns:
            Connection string (the override verbatim when configured)
        """
        if self._connection_string:
            return self._connection_string

        settings = self.settings
        if settings.uses_override:
            self._connection_string = settings.connection_string.get_secret_value().strip()
            return self._connection_string

        driver = self._detect_odbc_driver()

        parts = [
            f"DRIVER={{{driver}}}",
            f"SERVER={settings.server}",
            f"DATABASE={settings.database}",
            "Encrypt=no",
            "TrustServerCertificate=yes",
            f"Connection Timeout={settings.connect_timeout}",
        ]

        if settings.trusted:
            parts.append("Trusted_Connection=yes")
        else:
            parts.append(f"UID={settings.user}")
            parts.append(f"PWD={settings.password.get_secret_value()}")

        self._connection_string = ";".join(parts)
        logger.debug("Connection string: %s", mask_connection_string(self._connection_string))
        return self._connection_string

    def connect(self) -> pyodbc.Connection:
        """
        Open a connection and verify it with a version probe.

        Returns:
            Open pyodbc connection in autocommit mode

        Raises:
            DatabaseConnectionError: If the connection or probe fails
        """
        conn_str = self.build_connection_string()

        try:
            conn = pyodbc.connect(conn_str, autocommit=True, timeout=self.settings.connect_timeout)
        except pyodbc.Error as e:
            raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e

        try:
            register_output_converters(conn)
            self.server_info = self.detect_version(conn)
        except DatabaseConnectionError:
            conn.close()
            raise
        except Exception as e:
            conn.close()
            raise DatabaseConnectionError(f"Connection liveness check failed: {e}") from e

        return conn

    @staticmethod
    def detect_version(conn: pyodbc.Connection) -> SqlServerInfo:
        """
        Detect SQL Server version and properties.

        Returns:
            SqlServerInfo object

        Raises:
            pyodbc.Error: If the probe query fails
            DatabaseConnectionError: If the probe returns no row
        """
        cursor = conn.cursor()
        try:
            cursor.execute(VERSION_PROBE)
            row = cursor.fetchone()
        finally:
            cursor.close()

        if row is None:
            raise DatabaseConnectionError("Version probe returned no row")

        info = SqlServerInfo(
            server_name=row.ServerName or "",
            version=row.Version or "",
            edition=row.Edition or "",
            product_level=row.ProductLevel or "",
        )
        logger.info(
            "Connected to %s: SQL Server %s (%s, %s)",
            info.server_name, info.version, info.edition, info.product_level
        )
        return info


def register_output_converters(conn: pyodbc.Connection) -> None:
    """Teach the connection to decode sql_variant and datetimeoffset."""
    conn.add_output_converter(SQL_SS_VARIANT, _handle_sql_variant)
    conn.add_output_converter(SQL_SS_TIMESTAMPOFFSET, _handle_datetimeoffset)
