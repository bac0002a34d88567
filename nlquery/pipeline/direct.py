"""
Direct Query Executor

In-process natural-language query path for PostgreSQL:

    connect -> SELECT 1 -> introspect schema -> build prompt
            -> generate SQL -> execute -> close

Each request gets its own single-connection pool, which is closed on every
exit path. Every failure is terminal for the request and comes back as a
QueryOutcome; nothing is retried.

Usage:
    service = DirectQueryService.from_settings(get_settings())
    outcome = await service.run(connection_string, "list all users", "postgres")
    if outcome.success:
        print(outcome.sql, outcome.data)
"""

import logging
from collections.abc import Callable

from nlquery.config import DirectQuerySettings, Settings, get_settings
from nlquery.connectors.base import BaseConnector, ExecutionError, SchemaError
from nlquery.connectors.base import ConnectionError as ConnectorConnectionError
from nlquery.connectors.postgres import PostgresConnector
from nlquery.llm.openai import OpenAIProvider
from nlquery.models.query import QueryOutcome
from nlquery.pipeline.base import QueryService
from nlquery.pipeline.prompts import build_sql_prompt
from nlquery.pipeline.sql_generator import GenerationError, SQLGenerator

logger = logging.getLogger(__name__)

SUPPORTED_DB_TYPES = frozenset({"postgres"})
UNSUPPORTED_DB_TYPE_MESSAGE = "Only PostgreSQL is supported in direct mode"

ConnectorFactory = Callable[..., BaseConnector]


class DirectQueryService(QueryService):
    """Query path that introspects, generates and executes in-process."""

    name = "direct"

    def __init__(
        self,
        generator: SQLGenerator,
        settings: DirectQuerySettings | None = None,
        connector_factory: ConnectorFactory = PostgresConnector.from_connection_string,
    ):
        """
        Args:
            generator: SQL generator bound to a completion provider
            settings: Connection and result-cap settings
            connector_factory: Builds a connector from a raw connection string
        """
        self.generator = generator
        self.settings = settings or DirectQuerySettings()
        self.connector_factory = connector_factory

    @classmethod
    def from_settings(
        cls, settings: Settings, api_key: str | None = None
    ) -> "DirectQueryService":
        """Build the service and its provider from application settings."""
        provider = OpenAIProvider(
            api_key=api_key if api_key is not None else settings.llm.api_key,
            model=settings.llm.model,
            base_url=settings.llm.base_url,
            temperature=settings.llm.temperature,
            max_tokens=settings.llm.max_tokens,
            timeout=settings.llm.timeout,
        )
        generator = SQLGenerator(
            provider,
            temperature=settings.llm.temperature,
            row_limit=settings.direct.row_limit,
            enforce_row_limit=settings.direct.enforce_row_limit,
        )
        return cls(generator=generator, settings=settings.direct)

    async def run(
        self,
        connection_string: str,
        nl_query: str,
        db_type: str,
        user_id: str | None = None,
    ) -> QueryOutcome:
        if db_type not in SUPPORTED_DB_TYPES:
            return QueryOutcome.fail(UNSUPPORTED_DB_TYPE_MESSAGE, "unsupported")

        connector: BaseConnector | None = None
        try:
            connector = self.connector_factory(
                connection_string,
                ssl_required=self.settings.ssl_required,
                ssl_verify=self.settings.ssl_verify,
                pool_size=1,
                connect_timeout=self.settings.connect_timeout,
                command_timeout=self.settings.statement_timeout,
            )
            await connector.connect()
            await connector.ping()

            logger.info("Extracting database schema...")
            schema = await connector.get_schema(self.settings.schema_name)
            logger.info(f"Schema extracted: {len(schema)} tables")

            logger.info("Generating SQL from natural language...")
            prompt = build_sql_prompt(schema, nl_query, row_limit=self.settings.row_limit)
            sql = await self.generator.generate(prompt)

            logger.info("Executing query...")
            result = await connector.execute(sql)
            logger.info(f"Query executed successfully, rows: {result.row_count}")

            return QueryOutcome.ok(data=result.rows, sql=sql)

        except ConnectorConnectionError as e:
            logger.error(f"Error in direct query (connection): {e}")
            return QueryOutcome.fail(str(e), "connection")
        except SchemaError as e:
            logger.error(f"Error in direct query (schema): {e}")
            return QueryOutcome.fail(str(e), "schema")
        except GenerationError as e:
            logger.error(f"Error in direct query (generation): {e}")
            return QueryOutcome.fail(str(e), "generation")
        except ExecutionError as e:
            logger.error(f"Error in direct query (execution): {e}")
            return QueryOutcome.fail(str(e), "execution")
        except Exception as e:
            logger.exception(f"Unexpected error in direct query: {e}")
            return QueryOutcome.fail(str(e), "unknown")
        finally:
            if connector is not None:
                await self._release(connector)

    async def aclose(self) -> None:
        await self.generator.provider.aclose()

    async def _release(self, connector: BaseConnector) -> None:
        try:
            await connector.close()
        except Exception as e:
            logger.error(f"Error closing pool: {e}")


async def execute_direct_query(
    connection_string: str,
    nl_query: str,
    db_type: str,
    api_key: str | None,
    settings: Settings | None = None,
) -> QueryOutcome:
    """
    Answer one question on the direct path.

    Args:
        connection_string: Target PostgreSQL URL (channel_binding is dropped)
        nl_query: Natural-language question
        db_type: Database type tag; only "postgres" is accepted
        api_key: Completion endpoint credential
        settings: Application settings (default: get_settings())

    Returns:
        QueryOutcome with rows and SQL, or the error message
    """
    service = DirectQueryService.from_settings(settings or get_settings(), api_key=api_key)
    try:
        return await service.run(connection_string, nl_query, db_type)
    finally:
        await service.aclose()
