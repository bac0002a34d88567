"""
SQL generation prompts.

Pure text assembly: renders a SchemaInventory and a natural-language
question into the instruction prompt sent to the model.
"""

from nlquery.connectors.base import SchemaInventory, TableInfo

DEFAULT_DIALECT = "PostgreSQL"
DEFAULT_ROW_LIMIT = 100

SQL_SYSTEM_PROMPT = "You are a SQL expert. Generate only valid {dialect} queries."

SQL_PROMPT_TEMPLATE = """Given the following {dialect} database schema:

{schema}

Generate a SQL query for the following request (respond with ONLY the SQL query, no explanations):
"{question}"

Rules:
- Return ONLY valid {dialect} SQL
- Use proper table and column names from the schema
- Add LIMIT {row_limit} if not specified
- No markdown, no explanations, just the SQL query"""


def render_table(table: TableInfo) -> str:
    """Render one table as ``Table <name>: <col> (<type>), ...``."""
    columns = ", ".join(f"{col.name} ({col.data_type})" for col in table.columns)
    return f"Table {table.table_name}: {columns}"


def build_schema_description(schema: SchemaInventory) -> str:
    """One line per table, in inventory order."""
    return "\n".join(render_table(table) for table in schema.values())


def build_system_prompt(dialect: str = DEFAULT_DIALECT) -> str:
    return SQL_SYSTEM_PROMPT.format(dialect=dialect)


def build_sql_prompt(
    schema: SchemaInventory,
    question: str,
    dialect: str = DEFAULT_DIALECT,
    row_limit: int = DEFAULT_ROW_LIMIT,
) -> str:
    """
    Build the user prompt for SQL generation.

    Args:
        schema: Introspected tables and columns
        question: The user's question, quoted verbatim
        dialect: Target SQL dialect name
        row_limit: Result cap the model should add when none is requested

    Returns:
        Prompt text
    """
    return SQL_PROMPT_TEMPLATE.format(
        dialect=dialect,
        schema=build_schema_description(schema),
        question=question,
        row_limit=row_limit,
    )
