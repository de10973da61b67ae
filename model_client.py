import logging
from typing import Any, Optional, Type

from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI, Modality
from pydantic import BaseModel

from config import GeneratorSettings
from errors import ImageGenerationFailure, ProviderUnavailable

try:
    from langchain_openai import ChatOpenAI
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False

try:
    from langchain_anthropic import ChatAnthropic
    CLAUDE_AVAILABLE = True
except ImportError:
    CLAUDE_AVAILABLE = False

logger = logging.getLogger(__name__)


def get_llm(settings: GeneratorSettings):
    """Return a chat model honouring the provider preference, with fallbacks."""

    def init_gemini():
        if not settings.google_api_key:
            return None
        try:
            logger.info("Using Google Gemini provider (%s).", settings.gemini_model)
            return ChatGoogleGenerativeAI(
                model=settings.gemini_model,
                google_api_key=settings.google_api_key,
                temperature=settings.gemini_temperature,
                max_output_tokens=settings.gemini_max_output_tokens,
            )
        except Exception as e:
            logger.error("Error initializing Gemini LLM: %s", e)
            return None

    def init_openai():
        if not settings.openai_api_key or not OPENAI_AVAILABLE:
            if not settings.openai_api_key:
                logger.debug("OpenAI skipped: OPENAI_API_KEY missing.")
            else:
                logger.warning("OpenAI requested but langchain-openai not installed.")
            return None
        try:
            logger.info("Using OpenAI provider (%s).", settings.openai_model)
            return ChatOpenAI(model=settings.openai_model, api_key=settings.openai_api_key, temperature=0.6)
        except Exception as e:
            logger.error("Error initializing OpenAI LLM: %s", e)
            return None

    def init_claude():
        if not settings.anthropic_api_key or not CLAUDE_AVAILABLE:
            if not settings.anthropic_api_key:
                logger.debug("Claude skipped: ANTHROPIC_API_KEY missing.")
            else:
                logger.warning("Claude requested but langchain-anthropic not installed.")
            return None
        try:
            logger.info("Using Claude provider (%s).", settings.anthropic_model)
            return ChatAnthropic(
                model=settings.anthropic_model,
                api_key=settings.anthropic_api_key,
                temperature=0.6,
                max_tokens=8192,
            )
        except Exception as e:
            logger.error("Error initializing Claude LLM: %s", e)
            return None

    provider_pref = settings.llm_provider
    if provider_pref == "openai":
        provider_sequence = [init_openai, init_gemini, init_claude]
    elif provider_pref in ["claude", "anthropic"]:
        provider_sequence = [init_claude, init_gemini, init_openai]
    else:
        provider_sequence = [init_gemini, init_openai, init_claude]

    for init in provider_sequence:
        llm = init()
        if llm:
            return llm

    raise ProviderUnavailable("Failed to initialize any LLM provider. Set GOOGLE_API_KEY.")


def extract_image_url(message: Any) -> Optional[str]:
    """Return the first image reference in a multimodal model reply, if any.

    Gemini image models answer with a list of content blocks; images arrive as
    ``{"type": "image_url", "image_url": {"url": "data:image/png;base64,..."}}``
    and any text parts are ignored.
    """
    content = message.content if isinstance(message, BaseMessage) else message
    if not isinstance(content, list):
        return None
    for block in content:
        if not isinstance(block, dict) or block.get("type") != "image_url":
            continue
        image_url = block.get("image_url")
        url = image_url.get("url") if isinstance(image_url, dict) else image_url
        if url:
            return url
    return None


class ModelClient:
    """Narrow interface over the generative models used by every flow."""

    async def generate_text(self, prompt: str, schema: Type[BaseModel]) -> Optional[BaseModel]:
        raise NotImplementedError

    async def generate_image(self, prompt: str) -> str:
        raise NotImplementedError


class LangChainModelClient(ModelClient):
    def __init__(self, settings: GeneratorSettings):
        self.settings = settings
        self._llm = None
        self._image_llm = None

    @property
    def llm(self):
        if self._llm is None:
            self._llm = get_llm(self.settings)
        return self._llm

    @property
    def image_llm(self):
        if self._image_llm is None:
            if not self.settings.google_api_key:
                raise ProviderUnavailable("Image generation requires GOOGLE_API_KEY.")
            self._image_llm = ChatGoogleGenerativeAI(
                model=self.settings.gemini_image_model,
                google_api_key=self.settings.google_api_key,
                response_modalities=[Modality.TEXT, Modality.IMAGE],
            )
        return self._image_llm

    async def generate_text(self, prompt: str, schema: Type[BaseModel]) -> Optional[BaseModel]:
        structured = self.llm.with_structured_output(schema)
        logger.debug("Requesting %s (%d prompt chars).", schema.__name__, len(prompt))
        return await structured.ainvoke(prompt)

    async def generate_image(self, prompt: str) -> str:
        logger.debug("Generating image for '%s'", prompt[:50])
        response = await self.image_llm.ainvoke(prompt)
        url = extract_image_url(response)
        if not url:
            raise ImageGenerationFailure(prompt)
        return url
