import asyncio
import time
from typing import Any, Dict, Optional

from langchain_openai import ChatOpenAI
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
import structlog

from agent.prompts import (
    ANALYZE_PROMPT_TEMPLATE,
    POSTGRESQL_QUERY_BUILDER_PROMPT,
    RESPONSE_COMPOSER_PROMPT
)
from services.config import Settings

logger = structlog.get_logger()

SUPPORTED_PROVIDERS = ('openai', 'anthropic')


def get_llm(settings: Settings) -> BaseChatModel:
    """
    Get a chat model instance based on provider and model configuration.

    Retries are disabled at the client level: a failed call fails the
    pipeline stage that made it.

    Raises:
        ValueError: unknown provider or missing API key
    """
    provider = (settings.llm_provider or 'openai').lower()

    logger.info(
        "Initializing LLM",
        provider=provider,
        model=settings.llm_model,
        temperature=settings.llm_temperature
    )

    if provider == 'openai':
        if not settings.llm_api_key:
            raise ValueError("LLM API key not configured")

        # Any OpenAI-compatible endpoint (Nebius, OpenRouter, OpenAI)
        return ChatOpenAI(
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url or None,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout_seconds,
            max_retries=0
        )

    if provider == 'anthropic':
        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key not configured")

        return ChatAnthropic(
            model=settings.llm_model,
            api_key=settings.anthropic_api_key,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout_seconds,
            max_retries=0
        )

    logger.error("Unsupported LLM provider", provider=provider)
    raise ValueError(f"Unsupported LLM provider: {provider}")


class LanguageModelGateway:
    """
    The three model operations the pipeline needs.

    Prompt templates and chains are built once per gateway and reused
    across runs; each call is bounded by `timeout_seconds`.
    """

    def __init__(self, llm: BaseChatModel, timeout_seconds: Optional[float] = 60.0):
        self.llm = llm
        self.timeout_seconds = timeout_seconds

        parser = StrOutputParser()
        self.analyze_chain = PromptTemplate.from_template(ANALYZE_PROMPT_TEMPLATE) | llm | parser
        self.sql_chain = PromptTemplate.from_template(POSTGRESQL_QUERY_BUILDER_PROMPT) | llm | parser
        self.answer_chain = PromptTemplate.from_template(RESPONSE_COMPOSER_PROMPT) | llm | parser

    async def analyze(self, schema: str, question: str) -> str:
        return await self._invoke(
            self.analyze_chain,
            {"schema": schema, "question": question},
            operation="analyze"
        )

    async def generate_sql(self, schema: str, question: str, analysis: str) -> str:
        return await self._invoke(
            self.sql_chain,
            {"schema": schema, "question": question, "analysis": analysis},
            operation="generate_sql"
        )

    async def generate_answer(self, question: str, sql_query: str, query_result: str) -> str:
        return await self._invoke(
            self.answer_chain,
            {"question": question, "sqlQuery": sql_query, "queryResult": query_result},
            operation="generate_answer"
        )

    async def _invoke(self, chain: Any, inputs: Dict[str, str], operation: str) -> str:
        start_time = time.time()
        try:
            content = await asyncio.wait_for(chain.ainvoke(inputs), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("LLM call timed out", operation=operation, timeout=self.timeout_seconds)
            raise TimeoutError(f"LLM {operation} call timed out after {self.timeout_seconds} seconds")

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info("LLM call completed", operation=operation, duration_ms=duration_ms, response_length=len(content))
        return content
