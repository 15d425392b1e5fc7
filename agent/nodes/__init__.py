from agent.nodes.base import BaseNode, PipelineState
from agent.nodes.intent import AnalyzeNode, parse_confidence
from agent.nodes.builder import SqlBuilderNode
from agent.nodes.executor import SqlExecutorNode
from agent.nodes.response import ResponseNode

__all__ = [
    "BaseNode",
    "PipelineState",
    "AnalyzeNode",
    "SqlBuilderNode",
    "SqlExecutorNode",
    "ResponseNode",
    "parse_confidence"
]
