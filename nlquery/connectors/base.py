"""
Base Database Connector

Abstract base class for database connectors used by the direct query path.
Provides a consistent async interface for connecting to, probing, querying,
and introspecting a target database.

All connectors must implement:
- connect(): Establish the (disposable) connection pool
- ping(): Liveness check
- execute(): Run generated SQL
- get_schema(): Introspect the schema into a SchemaInventory
- close(): Release connections
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# ============================================================================
# Data Models
# ============================================================================


class ColumnInfo(BaseModel):
    """Information about a database column."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Declared data type, e.g. 'integer'")
    is_nullable: bool = Field(..., description="Whether column can be NULL")
    default_value: str | None = Field(None, description="Default value expression if any")
    constraint_type: str | None = Field(
        None, description="Key constraint the column participates in (first seen)"
    )

    @property
    def is_primary_key(self) -> bool:
        return self.constraint_type == "PRIMARY KEY"


class TableInfo(BaseModel):
    """Information about a database table."""

    schema_name: str = Field(default="public", alias="schema", description="Schema name")
    table_name: str = Field(..., description="Table name")
    columns: list[ColumnInfo] = Field(default_factory=list, description="Columns in ordinal order")
    table_type: str = Field(default="BASE TABLE", description="BASE TABLE, VIEW, etc.")

    model_config = ConfigDict(populate_by_name=True)


# Table name -> TableInfo, in first-seen order.
SchemaInventory = dict[str, TableInfo]


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[dict[str, Any]] = Field(..., description="Query result rows")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(..., description="Column names")
    execution_time_ms: float = Field(..., description="Query execution time in ms")


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or probing the database connection."""

    pass


class SchemaError(ConnectorError):
    """Error introspecting database schema."""

    pass


class ExecutionError(ConnectorError):
    """Error executing generated SQL (syntax, permission, missing relation)."""

    pass


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    A connector wraps a single-use pool: it is connected at the start of a
    request and closed when the request finishes, whatever the outcome.

    Usage:
        connector = PostgresConnector.from_connection_string(dsn)
        async with connector:
            await connector.ping()
            schema = await connector.get_schema()
            result = await connector.execute("SELECT * FROM users")
    """

    def __init__(
        self,
        dsn: str,
        pool_size: int = 1,
        connect_timeout: float = 30.0,
        command_timeout: float | None = None,
        **kwargs,
    ):
        """
        Initialize connector.

        Args:
            dsn: Sanitized connection string
            pool_size: Maximum physical connections (default: 1)
            connect_timeout: Connection establishment timeout in seconds
            command_timeout: Per-statement timeout in seconds (None = unbounded)
            **kwargs: Additional connector-specific parameters
        """
        self.dsn = dsn
        self.pool_size = pool_size
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self.kwargs = kwargs

        self._pool = None
        self._connected = False

        logger.debug(f"Initialized {self.__class__.__name__} for {self.target}")

    @property
    @abstractmethod
    def target(self) -> str:
        """Credential-free description of the target (host:port/database)."""

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish database connection.

        Raises:
            ConnectionError: If connection fails
        """

    @abstractmethod
    async def ping(self) -> None:
        """
        Run a trivial liveness check.

        Raises:
            ConnectionError: If the check fails
        """

    @abstractmethod
    async def execute(self, query: str) -> QueryResult:
        """
        Execute a SQL statement verbatim.

        Raises:
            ExecutionError: If query execution fails
            ConnectionError: If not connected
        """

    @abstractmethod
    async def get_schema(self, schema_name: str | None = None) -> SchemaInventory:
        """
        Introspect database schema.

        Raises:
            SchemaError: If schema introspection fails
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Close the connection pool. Safe to call multiple times, including
        when connect() never completed.
        """

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.target} ({status})>"
