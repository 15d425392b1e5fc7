from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import structlog

logger = structlog.get_logger()


class EventKind(str, Enum):
    """Pipeline event kinds; values double as the socket event names."""
    THOUGHT = "thought"
    SQL_QUERY = "sqlQuery"
    QUERY_RESULT = "queryResult"
    ANSWER = "answerChunk"
    COMPLETE = "answerComplete"
    ERROR = "error"


@dataclass(frozen=True)
class PipelineEvent:
    kind: EventKind
    payload: Dict[str, Any] = field(default_factory=dict)


class EventSink:
    """
    Receives the ordered events of a single pipeline run.

    Subclasses implement `emit`; the helpers build the payload shape each
    event kind carries on the wire.
    """

    async def emit(self, event: PipelineEvent) -> None:
        raise NotImplementedError

    async def thought(self, thought: str) -> None:
        await self.emit(PipelineEvent(EventKind.THOUGHT, {"thought": thought}))

    async def sql_query(self, sql_query: str) -> None:
        await self.emit(PipelineEvent(EventKind.SQL_QUERY, {"sqlQuery": sql_query}))

    async def query_result(self, result: List[Dict[str, Any]]) -> None:
        await self.emit(PipelineEvent(EventKind.QUERY_RESULT, {"result": result}))

    async def answer(self, answer: str) -> None:
        await self.emit(PipelineEvent(EventKind.ANSWER, {"chunk": answer}))

    async def complete(self) -> None:
        await self.emit(PipelineEvent(EventKind.COMPLETE))


class CollectingSink(EventSink):
    """Buffers events in memory; used by the HTTP endpoint and in tests."""

    def __init__(self):
        self.events: List[PipelineEvent] = []

    async def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[PipelineEvent]:
        return [e for e in self.events if e.kind == kind]

    @property
    def kinds(self) -> List[EventKind]:
        return [e.kind for e in self.events]

    @property
    def thoughts(self) -> List[str]:
        return [e.payload["thought"] for e in self.of_kind(EventKind.THOUGHT)]

    @property
    def sql_query_text(self) -> Optional[str]:
        events = self.of_kind(EventKind.SQL_QUERY)
        return events[-1].payload["sqlQuery"] if events else None

    @property
    def result(self) -> Optional[List[Dict[str, Any]]]:
        events = self.of_kind(EventKind.QUERY_RESULT)
        return events[-1].payload["result"] if events else None

    @property
    def answer_text(self) -> Optional[str]:
        events = self.of_kind(EventKind.ANSWER)
        return events[-1].payload["chunk"] if events else None
