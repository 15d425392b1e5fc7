from typing import Dict, Any
import structlog

from agent.events import EventSink
from agent.llm import LanguageModelGateway
from agent.nodes.base import BaseNode, PipelineState
from agent.utils import safe_stringify

logger = structlog.get_logger()


class ResponseNode(BaseNode):
    name = "generateAnswer"
    message = "Generating answer..."

    def __init__(self, gateway: LanguageModelGateway):
        self.gateway = gateway

    async def execute(self, state: PipelineState) -> Dict[str, Any]:
        if not state.get("sql_query") or state.get("query_result") is None:
            raise ValueError("Missing SQL query or query results")

        answer = await self.gateway.generate_answer(
            state["question"],
            state["sql_query"],
            safe_stringify(state["query_result"])
        )
        if not answer or not answer.strip():
            raise ValueError("Model returned an empty answer")
        return {"answer": answer}

    async def on_success(self, state: PipelineState, sink: EventSink) -> bool:
        await sink.answer(state["answer"])
        return True
