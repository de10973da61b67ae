import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_FALLBACK_IMAGE_URL = "https://placehold.co/600x400.png"


@dataclass
class GeneratorSettings:
    """Model and pipeline configuration passed explicitly to every flow."""

    llm_provider: str = ""
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "gemini-2.0-flash-preview-image-generation"
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 16384
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    fallback_image_url: str = DEFAULT_FALLBACK_IMAGE_URL
    refine_max_attempts: int = 2
    refine_timeout_seconds: float = 0.0
    log_level: str = "INFO"

    def __post_init__(self):
        self.refine_max_attempts = max(1, int(self.refine_max_attempts))

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "GeneratorSettings":
        if load_env_file:
            load_dotenv()
        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "").strip().lower(),
            google_api_key=os.getenv("GOOGLE_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            gemini_image_model=os.getenv("GEMINI_IMAGE_MODEL", cls.gemini_image_model),
            gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", cls.gemini_temperature)),
            gemini_max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", cls.gemini_max_output_tokens)),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", cls.anthropic_model),
            fallback_image_url=os.getenv("FALLBACK_IMAGE_URL", DEFAULT_FALLBACK_IMAGE_URL),
            refine_max_attempts=max(1, int(os.getenv("REFINE_MAX_ATTEMPTS", cls.refine_max_attempts))),
            refine_timeout_seconds=float(os.getenv("REFINE_TIMEOUT_SECONDS", cls.refine_timeout_seconds)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
