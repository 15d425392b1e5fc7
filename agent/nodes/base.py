from typing import Dict, Any, List, Optional, TypedDict
import structlog

from agent.events import EventSink

logger = structlog.get_logger()


class PipelineState(TypedDict, total=False):
    question: str

    # Analyze
    analysis: Optional[str]
    confidence: float
    should_continue: bool

    # Generate SQL / Execute SQL / Generate answer
    sql_query: Optional[str]
    query_result: Optional[List[Dict[str, Any]]]
    answer: Optional[str]

    # Routing control: set when a stage failed or asked to stop
    halted: bool


class BaseNode:
    """
    One pipeline stage.

    `execute` computes the stage's state update and raises on failure.
    `on_success` emits stage-specific events and says whether the run goes on.
    """
    name: str = ""
    message: str = ""

    async def execute(self, state: PipelineState) -> Dict[str, Any]:
        raise NotImplementedError

    async def on_success(self, state: PipelineState, sink: EventSink) -> bool:
        return True
