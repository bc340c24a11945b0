"""LLM access - chat model factory, summary prompts and the completion adapter"""
import asyncio
from typing import Optional, Protocol

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate

from ..config.settings import Settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


SUMMARY_PROMPT = PromptTemplate.from_template(
    """You are an expert at summarizing customer support tickets.
Your goal is to create a concise but comprehensive summary of the ticket.
Below you find the content of a support ticket:
--------
{text}
--------

Focus on:
1. The main issue or request
2. Key details and context provided
3. Current status and any resolution steps
4. Important customer interactions

CONCISE SUMMARY:"""
)

SUMMARY_REFINE_PROMPT = PromptTemplate.from_template(
    """You are an expert at summarizing customer support tickets.
We have provided an existing summary up to a certain point: {existing_answer}

Below you find additional ticket content:
--------
{text}
--------

Given this new context, refine the summary to be more complete.
If the context isn't useful, return the original summary.
Focus on maintaining a clear and concise summary that captures all important details.

REFINED SUMMARY:"""
)


class SummarizationModel(Protocol):
    """Stateless text-in/text-out completion"""

    async def complete(self, prompt: str) -> str: ...


class LangChainSummarizationModel:
    """Runs a prompt through a LangChain chat model"""

    def __init__(self, llm: BaseChatModel, timeout_seconds: Optional[float] = None):
        self._chain = llm | StrOutputParser()
        self._timeout = timeout_seconds

    async def complete(self, prompt: str) -> str:
        return await asyncio.wait_for(self._chain.ainvoke(prompt), self._timeout)


def build_chat_model(settings: Settings) -> Optional[BaseChatModel]:
    """
    Create the configured chat model.

    Returns:
        The chat model, or None if the provider is not configured
    """
    provider = settings.llm_provider.lower()
    try:
        if provider == "azure":
            if not (settings.azure_openai_endpoint and settings.azure_openai_api_key):
                logger.error("Azure OpenAI not configured")
                return None
            from langchain_openai import AzureChatOpenAI
            llm = AzureChatOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key,
                api_version=settings.azure_openai_api_version,
                azure_deployment=settings.azure_openai_deployment,
                temperature=settings.llm_temperature,
            )
        elif provider == "openai":
            if not settings.openai_api_key:
                logger.error("OpenAI not configured")
                return None
            from langchain_openai import ChatOpenAI
            llm = ChatOpenAI(
                model=settings.openai_model,
                api_key=settings.openai_api_key,
                temperature=settings.llm_temperature,
            )
        else:
            logger.error(f"Unknown LLM provider: {settings.llm_provider}")
            return None
    except Exception as e:
        logger.error(f"LLM init error: {e}")
        return None

    logger.info(f"Summarization LLM initialized ({provider})")
    return llm
