"""Tests for the individual pipeline stages."""

import pytest

from agent.events import CollectingSink, EventKind
from agent.nodes import AnalyzeNode, ResponseNode, SqlBuilderNode, SqlExecutorNode, parse_confidence
from agent.prompts import GUARDRAIL_RESPONSE
from sql_tools.sql_executor import QueryExecutionError
from sql_tools.sql_validator import SQLValidator


@pytest.mark.parametrize("analysis, expected", [
    ("[CONFIDENCE: 0.85] Clear question about orders", 0.85),
    ("Some preamble [CONFIDENCE: 0.30] vague", 0.30),
    ("[CONFIDENCE:0.4]", 0.4),
    ("[CONFIDENCE: 1.0] certain", 1.0),
    ("[CONFIDENCE: 1]", 1.0),
    ("No marker here", 0.0),
    ("", 0.0),
    (None, 0.0),
])
def test_parse_confidence(analysis, expected):
    assert parse_confidence(analysis) == pytest.approx(expected)


async def test_analyze_node_passes_gate(gateway):
    node = AnalyzeNode(gateway, "schema", confidence_threshold=0.4)
    update = await node.execute({"question": "List customers"})

    assert update["confidence"] == pytest.approx(0.9)
    assert update["should_continue"] is True


async def test_analyze_node_threshold_is_inclusive(make_gateway):
    node = AnalyzeNode(make_gateway(analysis="[CONFIDENCE: 0.40] borderline"), "schema", 0.4)
    update = await node.execute({"question": "orders?"})

    assert update["should_continue"] is True


async def test_analyze_node_gate_emits_guidance(make_gateway):
    node = AnalyzeNode(make_gateway(analysis="[CONFIDENCE: 0.10] greeting"), "schema", 0.4)
    state = {"question": "hello"}
    state.update(await node.execute(state))

    sink = CollectingSink()
    should_continue = await node.on_success(state, sink)

    assert should_continue is False
    assert sink.thoughts == ["[CONFIDENCE: 0.10] greeting"]
    assert sink.answer_text == GUARDRAIL_RESPONSE


async def test_builder_requires_analysis(gateway):
    node = SqlBuilderNode(gateway, "schema", SQLValidator())
    with pytest.raises(ValueError, match="No analysis available for SQL generation"):
        await node.execute({"question": "q", "analysis": None})


async def test_builder_sanitizes_sql(make_gateway):
    node = SqlBuilderNode(make_gateway(sql="```sql\nSELECT 1;\n```"), "schema", SQLValidator())
    update = await node.execute({"question": "q", "analysis": "a"})

    assert update == {"sql_query": "SELECT 1"}


async def test_executor_node_requires_sql(executor):
    node = SqlExecutorNode(executor)
    with pytest.raises(QueryExecutionError, match="No SQL query to execute"):
        await node.execute({"question": "q", "sql_query": None})


async def test_executor_node_raises_on_failed_result(executor):
    node = SqlExecutorNode(executor)
    with pytest.raises(QueryExecutionError, match="Only SELECT queries are allowed"):
        await node.execute({"question": "q", "sql_query": "DELETE FROM customer"})


async def test_executor_node_emits_rows(executor):
    node = SqlExecutorNode(executor)
    state = {"question": "q", "sql_query": "SELECT id FROM customer ORDER BY id"}
    state.update(await node.execute(state))

    sink = CollectingSink()
    assert await node.on_success(state, sink)
    assert sink.kinds == [EventKind.QUERY_RESULT]
    assert sink.result == [{"id": 1}, {"id": 2}]


async def test_response_node_requires_inputs(gateway):
    node = ResponseNode(gateway)
    with pytest.raises(ValueError, match="Missing SQL query or query results"):
        await node.execute({"question": "q", "sql_query": "SELECT 1", "query_result": None})


async def test_response_node_accepts_empty_result(gateway):
    node = ResponseNode(gateway)
    update = await node.execute({"question": "q", "sql_query": "SELECT 1", "query_result": []})

    assert update["answer"] == gateway.answer
    assert gateway.last_query_result == "[]"


async def test_response_node_rejects_empty_answer(make_gateway):
    node = ResponseNode(make_gateway(answer="   "))
    with pytest.raises(ValueError, match="Model returned an empty answer"):
        await node.execute({"question": "q", "sql_query": "SELECT 1", "query_result": []})
