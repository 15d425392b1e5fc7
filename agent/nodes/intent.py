import re
from typing import Dict, Any, Optional
import structlog

from agent.events import EventSink
from agent.llm import LanguageModelGateway
from agent.nodes.base import BaseNode, PipelineState
from agent.prompts import GUARDRAIL_RESPONSE

logger = structlog.get_logger()

CONFIDENCE_PATTERN = re.compile(r'\[CONFIDENCE:\s*([01](?:\.\d+)?)\]')


def parse_confidence(analysis: Optional[str]) -> float:
    """Read the `[CONFIDENCE: X.XX]` marker; a missing marker counts as 0."""
    if not analysis:
        return 0.0
    match = CONFIDENCE_PATTERN.search(analysis)
    if not match:
        return 0.0
    return min(float(match.group(1)), 1.0)


class AnalyzeNode(BaseNode):
    name = "analyze"
    message = "Analyzing your question..."

    def __init__(self, gateway: LanguageModelGateway, schema: str, confidence_threshold: float = 0.4):
        self.gateway = gateway
        self.schema = schema
        self.confidence_threshold = confidence_threshold

    async def execute(self, state: PipelineState) -> Dict[str, Any]:
        analysis = await self.gateway.analyze(self.schema, state["question"])
        confidence = parse_confidence(analysis)

        logger.info("Question analyzed", confidence=confidence, threshold=self.confidence_threshold)
        return {
            "analysis": analysis,
            "confidence": confidence,
            "should_continue": confidence >= self.confidence_threshold
        }

    async def on_success(self, state: PipelineState, sink: EventSink) -> bool:
        if state.get("analysis"):
            await sink.thought(state["analysis"])

        # Confidence gate
        if not state.get("should_continue"):
            await sink.answer(GUARDRAIL_RESPONSE)
            return False
        return True
