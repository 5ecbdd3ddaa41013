"""
SQL Generation Utilities

This module turns a natural-language question into a DuckDB query: it builds
the translation prompt (schema, rules, worked examples, conversation history),
calls the completion service with model fallback, and cleans up the output.
"""

import re
from typing import List, Optional, Tuple

from ..errors import ServiceError, TranslationFailure
from ..schemas import ConversationTurn
from ..services.recovery import ModelFallbackPolicy, run_with_fallback
from ..services.schema_catalog import SCHEMA_TEXT
from .conversation_manager import serialize_history
from .logs import get_logger

logger = get_logger(__name__)


SQL_RULES = (
    "Always use proper JOINs when querying related tables, following the relationships above",
    "Use DuckDB date functions: DATE_TRUNC('month', column), EXTRACT(year FROM column), etc.",
    "Handle aggregations correctly (SUM, AVG, COUNT, etc.)",
    "Return ONLY the SQL query, no markdown, no explanations, no backticks",
    "Use DuckDB SQL syntax (similar to PostgreSQL)",
    "For date comparisons, use TIMESTAMP functions or CAST to DATE",
    "Always include ORDER BY for ranking queries",
    "Use LIMIT when appropriate (especially for \"highest\", \"top\", \"first\" queries)",
    "Handle NULL values appropriately",
    "Use aliases for better readability (e.g., oi for order_items, p for products)",
    "When grouping, select the grouping column first and the aggregated value second",
)

# (question pattern, query shape)
FEW_SHOT_EXAMPLES: Tuple[Tuple[str, str], ...] = (
    ("highest selling category",
     "SELECT p.product_category_name, SUM(oi.price) AS total_revenue FROM order_items oi "
     "JOIN products p ON oi.product_id = p.product_id WHERE p.product_category_name IS NOT NULL "
     "GROUP BY p.product_category_name ORDER BY total_revenue DESC LIMIT 1"),
    ("average order value",
     "SELECT AVG(total_value) AS avg_order_value FROM (SELECT oi.order_id, "
     "SUM(oi.price + oi.freight_value) AS total_value FROM order_items oi GROUP BY oi.order_id)"),
    ("average order value for electronics",
     "SELECT AVG(oi.price + oi.freight_value) AS avg_order_value FROM order_items oi "
     "JOIN products p ON oi.product_id = p.product_id "
     "WHERE LOWER(p.product_category_name) LIKE '%electronics%'"),
    ("past 2 quarters",
     "Use DATE_TRUNC('quarter', o.order_purchase_timestamp) and filter WHERE "
     "o.order_purchase_timestamp >= DATE_TRUNC('quarter', CURRENT_DATE) - INTERVAL '6 months'"),
    ("sales by month",
     "SELECT DATE_TRUNC('month', o.order_purchase_timestamp) AS month, SUM(oi.price) AS total_sales "
     "FROM orders o JOIN order_items oi ON o.order_id = oi.order_id "
     "WHERE o.order_purchase_timestamp IS NOT NULL GROUP BY month ORDER BY month"),
)

_FENCE_RE = re.compile(r"```[ \t]*(?:sql|duckdb)?[ \t]*\n?(.*?)```", re.IGNORECASE | re.DOTALL)


def build_translation_prompt(message: str, history: List[ConversationTurn],
                             schema_text: str = SCHEMA_TEXT) -> str:
    """
    Build the system prompt for SQL generation.

    Args:
        message: User query string
        history: Session history, oldest first
        schema_text: Rendered schema description

    Returns:
        Prompt containing schema, rules, examples, history and the question
    """
    rules = "\n".join(f"{i}. {rule}" for i, rule in enumerate(SQL_RULES, start=1))
    examples = "\n".join(f'- "{q}" -> {sql}' for q, sql in FEW_SHOT_EXAMPLES)
    return (
        "You are an expert SQL query generator for an e-commerce database.\n"
        "Your task is to convert natural language questions into accurate SQL queries.\n\n"
        f"{schema_text}\n\n"
        f"Rules:\n{rules}\n\n"
        f"Examples:\n{examples}\n\n"
        f"Conversation History:\n{serialize_history(history)}\n\n"
        f"User Query: {message}\n\n"
        "Generate the SQL query:"
    )


def extract_sql(text: Optional[str]) -> str:
    """
    Strip markdown wrapping from an LLM response.

    Args:
        text: Raw completion text

    Returns:
        The query text with code fences and surrounding whitespace removed
        (may be empty)
    """
    if not text:
        return ""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    # Unbalanced or inline fences
    cleaned = re.sub(r"```[ \t]*(?:sql|duckdb)?", "", text, flags=re.IGNORECASE)
    return cleaned.strip().strip("`").strip()


class QueryTranslator:
    """Natural language to SQL via the completion service."""

    def __init__(self, llm, policy: ModelFallbackPolicy, schema_text: str = SCHEMA_TEXT):
        self.llm = llm
        self.policy = policy
        self.schema_text = schema_text

    async def translate(self, message: str, history: List[ConversationTurn]) -> str:
        """
        Generate a sanitized SQL query for a question.

        Raises:
            TranslationFailure: empty output, or the completion service failed
                (after model fallback when the model was rejected)
            ServiceUnavailable: no credential configured
        """
        messages = [
            {"role": "system", "content": build_translation_prompt(message, history, self.schema_text)},
            {"role": "user", "content": message},
        ]

        async def attempt(model: Optional[str]) -> str:
            return await self.llm.chat(messages, model=model)

        try:
            raw = await run_with_fallback(attempt, self.policy, on_success=self._promote_model)
        except ServiceError as e:
            logger.error(f"[sql_generation_error] {e.message}")
            raise TranslationFailure(TranslationFailure.SERVICE_ERROR, e.message) from e

        sql = extract_sql(raw)
        if not sql:
            raise TranslationFailure(TranslationFailure.EMPTY_OUTPUT,
                                     "The model returned an empty response")
        logger.debug(f"[sql_generated] {sql}")
        return sql

    def _promote_model(self, model: str) -> None:
        # Later calls (composition included) go straight to the working model.
        if hasattr(self.llm, "model"):
            logger.info(f"[llm_fallback] switching model '{self.llm.model}' -> '{model}'")
            self.llm.model = model
