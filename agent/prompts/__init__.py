from agent.prompts.orchestrator import (
    ANALYZE_PROMPT_TEMPLATE,
    GUARDRAIL_RESPONSE
)
from agent.prompts.postgres import POSTGRESQL_QUERY_BUILDER_PROMPT
from agent.prompts.response import RESPONSE_COMPOSER_PROMPT

__all__ = [
    "ANALYZE_PROMPT_TEMPLATE",
    "GUARDRAIL_RESPONSE",
    "POSTGRESQL_QUERY_BUILDER_PROMPT",
    "RESPONSE_COMPOSER_PROMPT"
]
