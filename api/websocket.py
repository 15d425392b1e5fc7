import socketio
import structlog
from typing import Any, Optional
import asyncio

from agent.events import EventKind, EventSink, PipelineEvent
from agent.query_pipeline import QueryPipeline
from services.query_job_manager import QueryJobManager

logger = structlog.get_logger()

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*',
    logger=False,
    engineio_logger=False
)


class SocketEventSink(EventSink):
    """Forwards pipeline events to one connected client."""

    def __init__(self, server: socketio.AsyncServer, sid: str):
        self.server = server
        self.sid = sid

    async def emit(self, event: PipelineEvent) -> None:
        if event.kind == EventKind.COMPLETE:
            await self.server.emit(event.kind.value, room=self.sid)
        else:
            await self.server.emit(event.kind.value, event.payload, room=self.sid)


class StreamingAdapter:
    """
    Maps inbound `question` events to pipeline runs and pipeline events to
    outbound socket events.
    """

    def __init__(
        self,
        server: socketio.AsyncServer,
        pipeline: QueryPipeline,
        job_manager: Optional[QueryJobManager] = None
    ):
        self.server = server
        self.pipeline = pipeline
        self.job_manager = job_manager or QueryJobManager()

    def register(self) -> None:
        self.server.on('connect', self.on_connect)
        self.server.on('disconnect', self.on_disconnect)
        self.server.on('question', self.on_question)

    async def on_connect(self, sid, environ, auth=None):
        logger.info("Client connected", sid=sid)

    async def on_disconnect(self, sid, *args):
        logger.info("Client disconnected", sid=sid)
        self.job_manager.cancel_jobs(sid)

    async def on_question(self, sid, data=None):
        await self.handle_question(sid, data)

    async def handle_question(self, sid: str, data: Any) -> Optional[asyncio.Task]:
        """Validate the payload and start one independent pipeline run."""
        query = data.get('query') if isinstance(data, dict) else None
        if not isinstance(query, str) or not query.strip():
            await self.server.emit(EventKind.ERROR.value, {'message': 'Query is required'}, room=sid)
            return None

        return self.job_manager.submit_job(sid, self._run_question(sid, query))

    async def _run_question(self, sid: str, question: str) -> None:
        sink = SocketEventSink(self.server, sid)
        try:
            await self.pipeline.run(question, sink)
        except Exception as e:
            logger.error("Error processing question", sid=sid, error=str(e), error_type=type(e).__name__)
            await self.server.emit(EventKind.ERROR.value, {'message': 'Error processing your question'}, room=sid)
