"""
Tests for message intent classification.
"""
import pytest

from insight_chat.utils.query_detection import INTENT_RULES, QueryIntent, classify_query, is_data_query


@pytest.mark.parametrize("message", [
    "Show me total sales by category",
    "Which state has the most customers?",
    "How many orders were delivered?",
    "Find the lowest rated sellers",
    "Compare revenue between January and February",
    "AVERAGE freight value",
])
def test_analytical_messages_are_data_queries(message):
    assert classify_query(message) is QueryIntent.DATA_ANALYSIS
    assert is_data_query(message)


@pytest.mark.parametrize("message", [
    "Define churn rate",
    "What is GMV?",
    "define and show the average order value",
    "what is the highest selling category",
])
def test_definition_phrases_win_over_analytical_triggers(message):
    assert classify_query(message) is QueryIntent.DEFINITION


def test_translate_is_translation():
    assert classify_query("Translate 'cama mesa banho' to English") is QueryIntent.TRANSLATION


def test_translate_with_analytical_trigger_is_still_translation():
    assert classify_query("translate this and show me the total") is QueryIntent.TRANSLATION


def test_define_and_translate_prefers_definition():
    assert classify_query("define and translate boleto") is QueryIntent.DEFINITION


@pytest.mark.parametrize("message", ["hello there", "thanks!", "", "tell me a joke"])
def test_everything_else_is_general(message):
    assert classify_query(message) is QueryIntent.GENERAL


def test_rule_table_order():
    assert [intent for intent, _ in INTENT_RULES] == [
        QueryIntent.DEFINITION, QueryIntent.TRANSLATION, QueryIntent.DATA_ANALYSIS,
    ]
