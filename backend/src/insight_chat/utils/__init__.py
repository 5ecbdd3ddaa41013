"""
Utility modules for the E-commerce Insights Chat backend.

This package contains modular utility functions that support the main application logic.
Each module has a specific responsibility to maintain clean code architecture.

Modules:
- query_detection: Message intent classification
- sql_generation: Translation prompt, SQL clean-up and the query translator
- response_formatting: Result rows, chart encodings and result summaries
- conversation_manager: Session store and conversation context building
- logs: Logger factory
"""

__version__ = "1.0.0"

# Import key functions for easy access
from .query_detection import (
    QueryIntent,
    classify_query,
    is_data_query
)

from .sql_generation import (
    QueryTranslator,
    build_translation_prompt,
    extract_sql
)

from .response_formatting import (
    build_visualization,
    dataframe_to_records,
    summarize_results
)

from .conversation_manager import (
    InMemorySessionStore,
    SessionStore,
    build_conversation_context,
    serialize_history
)

__all__ = [
    # Query detection
    "QueryIntent",
    "classify_query",
    "is_data_query",

    # SQL generation
    "QueryTranslator",
    "build_translation_prompt",
    "extract_sql",

    # Response formatting
    "build_visualization",
    "dataframe_to_records",
    "summarize_results",

    # Conversation management
    "InMemorySessionStore",
    "SessionStore",
    "build_conversation_context",
    "serialize_history"
]
