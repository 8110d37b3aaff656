"""
Connection settings domain model.

Holds everything needed to reach one SQL Server database, either as
individual fields or as a complete pre-formed ODBC connection string.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator


class ConnectionSettings(BaseModel):
    """
    Domain model for a SQL Server connection.

    When ``connection_string`` is set, all other fields are ignored.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field("", description="SQL Server host name or IP")
    port: str = Field("1433", description="TCP port")
    database: str = Field("", description="Database to connect to")
    user: str = Field("", description="SQL login (unused when trusted)")
    password: SecretStr = Field(SecretStr(""), description="SQL login password")
    trusted: bool = Field(False, description="Use integrated security")
    connection_string: Optional[SecretStr] = Field(
        None, description="Pre-formed ODBC connection string, overrides the fields above"
    )
    driver: Optional[str] = Field(None, description="Explicit ODBC driver name")
    connect_timeout: int = Field(30, description="Seconds to wait for the connection", ge=1)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: str) -> str:
        """Port must be numeric and in range."""
        v = (v or "").strip()
        if not v.isdigit() or not 1 <= int(v) <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v!r}")
        return v

    @model_validator(mode="after")
    def require_target(self) -> "ConnectionSettings":
        if self.uses_override:
            return self
        if not self.host.strip():
            raise ValueError("Host name cannot be empty")
        if not self.database.strip():
            raise ValueError("Database name cannot be empty")
        return self

    @property
    def uses_override(self) -> bool:
        return bool(
            self.connection_string is not None
            and self.connection_string.get_secret_value().strip()
        )

    @property
    def server(self) -> str:
        """ODBC ``SERVER`` value (``host,port``)."""
        return f"{self.host},{self.port}"
