"""
SQL Generator

Sends the SQL prompt to a chat-completion provider and turns the free-form
answer into a single executable statement.
"""

import logging
import re

from nlquery.llm.base import BaseLLMProvider, LLMProviderError
from nlquery.llm.models import LLMMessage, LLMRequest
from nlquery.pipeline.prompts import DEFAULT_DIALECT, DEFAULT_ROW_LIMIT, build_system_prompt

logger = logging.getLogger(__name__)

# Fence opener or closer plus its newline. A language tag only counts when
# nothing but whitespace follows it on the line.
_FENCE_RE = re.compile(r"```(?:[A-Za-z][\w+-]*(?=[ \t]*(?:\n|$)))?[ \t]*\n?")
_TRAILING_TERMINATOR_RE = re.compile(r"[;\s]+$")
_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")
_STATEMENT_VERBS = {"SELECT", "INSERT", "UPDATE", "DELETE", "MERGE"}


class GenerationError(Exception):
    """SQL could not be produced: the completion call failed or returned nothing usable."""

    pass


def sanitize_sql(text: str) -> str:
    """
    Strip markdown fences, surrounding whitespace and the trailing terminator.

    >>> sanitize_sql("```sql\\nSELECT 1;\\n```")
    'SELECT 1'
    """
    sql = text
    while True:
        stripped = _FENCE_RE.sub("", sql)
        if stripped == sql:
            break
        sql = stripped
    return _TRAILING_TERMINATOR_RE.sub("", sql.strip())


def top_level_words(sql: str) -> list[str]:
    """
    Upper-cased keywords and identifiers outside parentheses.

    Comments and quoted strings or identifiers are skipped, so words from
    subqueries, CTE bodies and literals are never returned.
    """
    words: list[str] = []
    i = 0
    depth = 0
    length = len(sql)

    while i < length:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < length else ""

        # Skip line comments.
        if ch == "-" and nxt == "-":
            i += 2
            while i < length and sql[i] != "\n":
                i += 1
            continue

        # Skip block comments.
        if ch == "/" and nxt == "*":
            i += 2
            while i + 1 < length and not (sql[i] == "*" and sql[i + 1] == "/"):
                i += 1
            i = min(i + 2, length)
            continue

        # Skip quoted strings/identifiers, including doubled quotes.
        if ch in ("'", '"'):
            quote = ch
            i += 1
            while i < length:
                if sql[i] == quote:
                    if i + 1 < length and sql[i + 1] == quote:
                        i += 2
                        continue
                    i += 1
                    break
                i += 1
            continue

        if ch == "(":
            depth += 1
            i += 1
            continue

        if ch == ")":
            depth = max(0, depth - 1)
            i += 1
            continue

        match = _WORD_RE.match(sql, i)
        if match:
            if depth == 0:
                words.append(match.group().upper())
            i = match.end()
            continue

        i += 1

    return words


def apply_row_limit(sql: str, limit: int = DEFAULT_ROW_LIMIT) -> str:
    """
    Append ``LIMIT <limit>`` to a query whose outer result has no row cap.

    Only statements whose main verb is SELECT are capped; a WITH list in
    front of INSERT/UPDATE/DELETE/MERGE is left alone. LIMIT and FETCH
    FIRST/NEXT inside subqueries do not count as a cap on the outer result.
    """
    words = top_level_words(sql)
    if not words or words[0] not in ("SELECT", "WITH"):
        return sql

    verb = next((word for word in words if word in _STATEMENT_VERBS), None)
    if verb != "SELECT":
        return sql

    for index, word in enumerate(words):
        if word == "LIMIT":
            return sql
        if word == "FETCH" and words[index + 1 : index + 2] in (["FIRST"], ["NEXT"]):
            return sql

    # On its own line so a trailing line comment cannot swallow it.
    return f"{sql}\nLIMIT {limit}"


class SQLGenerator:
    """
    Generate SQL from a prompt with a single completion call.

    Usage:
        generator = SQLGenerator(provider)
        sql = await generator.generate(build_sql_prompt(schema, "list all users"))
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        temperature: float = 0.1,
        dialect: str = DEFAULT_DIALECT,
        row_limit: int = DEFAULT_ROW_LIMIT,
        enforce_row_limit: bool = True,
    ):
        self.provider = provider
        self.temperature = temperature
        self.dialect = dialect
        self.row_limit = row_limit
        self.enforce_row_limit = enforce_row_limit

    async def generate(self, prompt: str) -> str:
        """
        Ask the model for SQL and sanitize the answer.

        Args:
            prompt: Output of build_sql_prompt()

        Returns:
            One SQL statement without fences or trailing terminator

        Raises:
            GenerationError: If the call fails, the response is malformed,
                or nothing is left after sanitization
        """
        request = LLMRequest(
            messages=[
                LLMMessage(role="system", content=build_system_prompt(self.dialect)),
                LLMMessage(role="user", content=prompt),
            ],
            temperature=self.temperature,
        )

        try:
            response = await self.provider.generate(request)
        except LLMProviderError as e:
            logger.error(
                f"Error calling completion API: {e.detail}",
                extra={"status_code": e.status_code},
            )
            raise GenerationError(f"Failed to generate SQL query: {e.detail}") from e

        sql = sanitize_sql(response.content)
        if not sql:
            raise GenerationError("Failed to generate SQL query: model returned no SQL")

        if self.enforce_row_limit:
            sql = apply_row_limit(sql, self.row_limit)

        logger.info(f"SQL generated: {sql}")
        return sql
