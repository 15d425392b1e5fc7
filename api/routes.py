from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel
from typing import List, Optional, Any
import structlog

from agent.events import CollectingSink
from agent.query_pipeline import QueryPipeline
from services.auth import require_api_key

router = APIRouter()
logger = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="healthy", version="1.0.0")


class AgentQueryRequest(BaseModel):
    query: Optional[str] = None


class AgentQueryResponse(BaseModel):
    answer: Optional[str] = None
    sql_query: Optional[str] = None
    result: Optional[Any] = None
    thoughts: List[str]


def get_pipeline(request: Request) -> QueryPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Query pipeline not initialized")
    return pipeline


@router.post("/agent/query", response_model=AgentQueryResponse)
async def agent_query(
    request: AgentQueryRequest,
    _: str = Depends(require_api_key),
    pipeline: QueryPipeline = Depends(get_pipeline)
):
    """
    Answer a question without streaming.

    Runs the same pipeline as the socket transport and returns what it
    emitted: the final answer, the generated SQL, the rows and the thoughts.
    """
    if not request.query or not request.query.strip():
        raise HTTPException(status_code=400, detail="Query is required in the request body.")

    sink = CollectingSink()
    await pipeline.run(request.query, sink)

    return AgentQueryResponse(
        answer=sink.answer_text,
        sql_query=sink.sql_query_text,
        result=sink.result,
        thoughts=sink.thoughts
    )
