"""Exceptions raised by the generation flows."""


class WebsiteGeneratorError(Exception):
    pass


class GenerationFailure(WebsiteGeneratorError):
    """A text-generation call failed or returned no structured output."""


class ProviderUnavailable(GenerationFailure):
    """No LLM provider could be initialized from the current settings."""


class RefinementFailure(GenerationFailure):
    pass


class SuggestionFailure(GenerationFailure):
    pass


class ImageGenerationFailure(WebsiteGeneratorError):
    """A single image-generation call produced no image."""

    def __init__(self, prompt: str, reason: str = "no image returned"):
        self.prompt = prompt
        self.reason = reason
        super().__init__(f"Image generation failed for '{prompt[:50]}': {reason}")
