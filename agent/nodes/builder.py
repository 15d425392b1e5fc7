from typing import Dict, Any
import structlog

from agent.events import EventSink
from agent.llm import LanguageModelGateway
from agent.nodes.base import BaseNode, PipelineState
from sql_tools.sql_validator import SQLValidator

logger = structlog.get_logger()


class SqlBuilderNode(BaseNode):
    name = "generateSql"
    message = "Generating SQL query..."

    def __init__(self, gateway: LanguageModelGateway, schema: str, validator: SQLValidator):
        self.gateway = gateway
        self.schema = schema
        self.validator = validator

    async def execute(self, state: PipelineState) -> Dict[str, Any]:
        if state.get("analysis") is None:
            raise ValueError("No analysis available for SQL generation")

        raw_sql = await self.gateway.generate_sql(self.schema, state["question"], state["analysis"])
        sql_query = self.validator.sanitize_sql(raw_sql)

        logger.info("SQL generated", sql_preview=sql_query[:100])
        return {"sql_query": sql_query}

    async def on_success(self, state: PipelineState, sink: EventSink) -> bool:
        if state.get("sql_query"):
            await sink.sql_query(state["sql_query"])
        return True
