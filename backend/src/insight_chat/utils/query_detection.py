"""
Query Detection Utilities

This module classifies user messages so they can be routed either to the
text-to-SQL pipeline or to one of the utility responders.
"""

from enum import Enum
from typing import Tuple


class QueryIntent(str, Enum):
    DATA_ANALYSIS = "data_analysis"
    DEFINITION = "definition"
    TRANSLATION = "translation"
    GENERAL = "general"


DEFINITION_TRIGGERS = ("define", "what is")
TRANSLATION_TRIGGERS = ("translate",)
ANALYTICAL_TRIGGERS = (
    "show", "find", "which", "what", "how many", "average",
    "total", "highest", "lowest", "compare",
)

# Evaluated top to bottom, first match wins. Definition and translation
# phrases outrank the generic analytical ones ("what is" contains "what").
INTENT_RULES: Tuple[Tuple[QueryIntent, Tuple[str, ...]], ...] = (
    (QueryIntent.DEFINITION, DEFINITION_TRIGGERS),
    (QueryIntent.TRANSLATION, TRANSLATION_TRIGGERS),
    (QueryIntent.DATA_ANALYSIS, ANALYTICAL_TRIGGERS),
)


def classify_query(message: str) -> QueryIntent:
    """
    Classify a user message by intent.

    Args:
        message: User query string

    Returns:
        The first intent in INTENT_RULES whose trigger phrases occur in the
        message, or QueryIntent.GENERAL when none do
    """
    m = (message or "").lower()
    for intent, phrases in INTENT_RULES:
        if any(p in m for p in phrases):
            return intent
    return QueryIntent.GENERAL


def is_data_query(message: str) -> bool:
    """Check whether a message should go through the SQL pipeline."""
    return classify_query(message) is QueryIntent.DATA_ANALYSIS
