from typing import Dict, Any
import structlog

from agent.events import EventSink
from agent.nodes.base import BaseNode, PipelineState
from sql_tools.sql_executor import SQLExecutor, QueryExecutionError

logger = structlog.get_logger()


class SqlExecutorNode(BaseNode):
    name = "executeSql"
    message = "Executing SQL query..."

    def __init__(self, executor: SQLExecutor):
        self.executor = executor

    async def execute(self, state: PipelineState) -> Dict[str, Any]:
        """Run the generated query; validation and database failures both fail the stage."""
        if not state.get("sql_query"):
            raise QueryExecutionError("No SQL query to execute")

        result = await self.executor.execute(state["sql_query"].strip())
        if not result["success"]:
            raise QueryExecutionError(result["error"])

        return {"query_result": result["data"]}

    async def on_success(self, state: PipelineState, sink: EventSink) -> bool:
        if state.get("query_result") is not None:
            await sink.query_result(state["query_result"])
        return True
