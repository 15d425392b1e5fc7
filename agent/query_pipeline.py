import time
import uuid as uuid_module
from typing import Any, Callable, Dict, List, Optional

import structlog
from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END
from sqlalchemy.ext.asyncio import AsyncEngine

from agent.events import EventSink
from agent.llm import LanguageModelGateway, get_llm
from agent.nodes import (
    BaseNode,
    PipelineState,
    AnalyzeNode,
    SqlBuilderNode,
    SqlExecutorNode,
    ResponseNode
)
from agent.schema import SchemaDescriptor, CUSTOMER_SCHEMA
from services.config import Settings
from sql_tools.sql_executor import SQLExecutor
from sql_tools.sql_validator import SQLValidator

logger = structlog.get_logger()


class QueryPipeline:
    """
    Four-stage question answering pipeline:
    analyze -> generateSql -> executeSql -> generateAnswer.

    The graph is compiled once and shared by every run. Each call to `run`
    owns its own state and event sink, so concurrent runs never share
    mutable data.
    """

    def __init__(
        self,
        gateway: LanguageModelGateway,
        executor: SQLExecutor,
        schema: SchemaDescriptor = CUSTOMER_SCHEMA,
        confidence_threshold: float = 0.4,
        validator: Optional[SQLValidator] = None
    ):
        self.gateway = gateway
        self.executor = executor
        self.schema_text = schema.describe()
        self.confidence_threshold = confidence_threshold
        self.validator = validator or executor.validator

        self.nodes: List[BaseNode] = [
            AnalyzeNode(gateway, self.schema_text, confidence_threshold),
            SqlBuilderNode(gateway, self.schema_text, self.validator),
            SqlExecutorNode(executor),
            ResponseNode(gateway)
        ]
        self.workflow = self._build_graph()
        self.app = self.workflow.compile()

    def _build_graph(self) -> StateGraph:
        workflow = StateGraph(PipelineState)

        for node in self.nodes:
            workflow.add_node(node.name, self._wrap_node(node))

        workflow.set_entry_point(self.nodes[0].name)

        # Every stage either hands over to the next one or ends the run
        for current, following in zip(self.nodes, self.nodes[1:]):
            workflow.add_conditional_edges(
                current.name,
                self._check_halted,
                {
                    "continue": following.name,
                    "halt": END
                }
            )
        workflow.add_edge(self.nodes[-1].name, END)

        return workflow

    def _check_halted(self, state: PipelineState) -> str:
        return "halt" if state.get("halted") else "continue"

    def _wrap_node(self, node: BaseNode) -> Callable:
        async def run_node(state: PipelineState, config: RunnableConfig) -> Dict[str, Any]:
            sink: EventSink = config["configurable"]["sink"]
            await sink.thought(node.message)

            start_time = time.time()
            try:
                update = await node.execute(state)
            except Exception as e:
                error_msg = str(e) or "Unknown error"
                logger.error("Pipeline stage failed", stage=node.name, error=error_msg, error_type=type(e).__name__)
                await sink.thought(f"Error in {node.name}: {error_msg}")
                await sink.answer(f"I encountered an error: {error_msg}")
                return {"halted": True}

            logger.info("Pipeline stage completed", stage=node.name, duration_ms=int((time.time() - start_time) * 1000))

            should_continue = await node.on_success({**state, **update}, sink)
            return {**update, "halted": not should_continue}

        run_node.__name__ = node.name
        return run_node

    async def run(self, question: str, sink: EventSink) -> PipelineState:
        """
        Process one question, streaming every step to `sink`.

        The complete event is always the last event emitted, whether the run
        finished, was stopped by the confidence gate, failed in a stage, or
        was cancelled.
        """
        run_id = uuid_module.uuid4().hex[:16]
        initial_state = PipelineState(
            question=question,
            analysis=None,
            confidence=0.0,
            should_continue=False,
            sql_query=None,
            query_result=None,
            answer=None,
            halted=False
        )
        final_state: PipelineState = initial_state

        with structlog.contextvars.bound_contextvars(run_id=run_id, question_preview=question[:100]):
            logger.info("Starting query pipeline")
            try:
                final_state = await self.app.ainvoke(
                    initial_state,
                    config={"configurable": {"sink": sink}}
                )
            except Exception as e:
                logger.error("Query pipeline failed", error=str(e), error_type=type(e).__name__)
                await sink.thought(f"Error: {str(e) or 'Unknown error'}")
                await sink.answer("I encountered an error while processing your question.")
            finally:
                await sink.complete()
                logger.info("Query pipeline finished")

        return final_state


def create_pipeline(settings: Settings, engine: AsyncEngine) -> QueryPipeline:
    """Build the model client, executor and compiled pipeline once at startup."""
    gateway = LanguageModelGateway(get_llm(settings), timeout_seconds=settings.llm_timeout_seconds)
    executor = SQLExecutor(
        engine,
        timeout=settings.query_timeout_seconds,
        limit=settings.max_query_results
    )
    return QueryPipeline(
        gateway,
        executor,
        confidence_threshold=settings.confidence_threshold
    )
