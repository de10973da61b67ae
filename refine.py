import asyncio
import enum
import logging
import re
from typing import List, Optional

from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, Field

from config import GeneratorSettings
from errors import GenerationFailure, ProviderUnavailable, RefinementFailure
from model_client import ModelClient
from placeholders import (
    IMAGE_PROMPT_RE,
    count_placeholders,
    decode_placeholders,
    encode_inline_images,
    find_image_prompts,
)

logger = logging.getLogger(__name__)


class RefinementRequest(BaseModel):
    html_content: str
    request: str


class RefinementResult(BaseModel):
    refined_html_content: str


class RefinedWebsite(BaseModel):
    """Structured output expected from the rewrite model."""

    refined_html_content: str = Field(
        description="The full, updated HTML content of the website after applying the refinements."
    )


class RefinementState(enum.Enum):
    IDLE = "idle"
    ENCODED = "encoded"
    REWRITTEN = "rewritten"
    MATERIALIZED = "materialized"
    RECONCILED = "reconciled"
    DONE = "done"
    FAILED = "failed"


refine_prompt = PromptTemplate.from_template(
    """You are an expert web developer and designer AI. Your task is to modify the provided HTML code based on the user's request.

The request might be a simple instruction (e.g., "change the theme to blue") or a list of specific tasks to complete, separated by periods. You must apply ALL requested changes and return the ENTIRE, complete, self-contained HTML document. Do not provide explanations, diffs or partial code snippets.

CRITICAL IMAGE HANDLING RULES:
1. Preserve Existing Images: The provided HTML contains placeholders for existing images, like src="---image-placeholder-0---". You MUST keep these placeholders exactly as they are. Do not alter, renumber or remove them unless the user asked to remove that image.
2. Generate New Images: If the request needs a new image (e.g., "add a picture of a cat"), you MUST use the AI image generation format: src="image-prompt:A descriptive prompt for the new image". For example: src="image-prompt:a photo of a fluffy ginger cat napping in a sunbeam". Do NOT use any other placeholder format or image URL such as https://placehold.co.

User's Request: "{request}"

Current HTML:
```html
{html_content}
```
"""
)


def strip_code_fences(html: str) -> str:
    """Remove markdown fences like ```html ... ``` around a returned document."""
    html = html.strip()
    html = re.sub(r'^\s*```(?:html)?\s*', '', html, flags=re.IGNORECASE)
    html = re.sub(r'\s*```\s*$', '', html)
    return html.strip()


async def rewrite_html(client: ModelClient, html_with_placeholders: str, request: str) -> str:
    """Ask the model for a full replacement document. No retries here."""
    prompt = refine_prompt.format(request=request, html_content=html_with_placeholders)
    try:
        output = await client.generate_text(prompt, RefinedWebsite)
    except ProviderUnavailable:
        raise
    except Exception as e:
        raise GenerationFailure(f"Rewrite model call failed: {e}") from e
    if output is None:
        raise GenerationFailure("Rewrite model returned no structured output.")
    refined = strip_code_fences(output.refined_html_content)
    if not refined:
        raise GenerationFailure("Rewrite model returned an empty document.")
    return refined


async def materialize_images(client: ModelClient, html: str, fallback_url: str) -> str:
    """Replace every ``image-prompt:`` source with a generated image.

    All generation calls run concurrently and are awaited together; the n-th
    token takes the n-th result regardless of completion order. Failed calls
    fall back to ``fallback_url``.
    """
    prompts = find_image_prompts(html)
    if not prompts:
        return html

    logger.info("Generating %d new image(s)", len(prompts))
    results = await asyncio.gather(
        *(client.generate_image(p) for p in prompts),
        return_exceptions=True,
    )

    urls: List[str] = []
    for prompt, result in zip(prompts, results):
        if isinstance(result, BaseException):
            logger.warning("Image generation failed for '%s': %s", prompt[:50], result)
            urls.append(fallback_url)
        elif not result:
            logger.warning("Image generation returned nothing for '%s'", prompt[:50])
            urls.append(fallback_url)
        else:
            urls.append(result)

    position = iter(urls)
    return IMAGE_PROMPT_RE.sub(lambda m: f'src="{next(position)}"', html)


async def refine_website(request: RefinementRequest, client: ModelClient,
                         settings: Optional[GeneratorSettings] = None) -> RefinementResult:
    """Apply a natural-language change request to a generated page.

    Existing inline images survive untouched; images the model asks for are
    generated and spliced in. Raises RefinementFailure if the rewrite fails.
    """
    settings = settings or GeneratorSettings()
    state = RefinementState.IDLE

    def advance(new_state: RefinementState, detail: str = ""):
        nonlocal state
        logger.debug("Refinement %s -> %s %s", state.value, new_state.value, detail)
        state = new_state

    encoded = encode_inline_images(request.html_content)
    advance(RefinementState.ENCODED, f"({len(encoded.original_images)} images)")

    try:
        rewritten = await rewrite_html(client, encoded.html, request.request)
    except GenerationFailure as e:
        advance(RefinementState.FAILED)
        raise RefinementFailure(f"Failed to refine website: {e}") from e
    advance(RefinementState.REWRITTEN, f"({count_placeholders(rewritten)} placeholders kept)")

    materialized = await materialize_images(client, rewritten, settings.fallback_image_url)
    advance(RefinementState.MATERIALIZED)

    reconciled = decode_placeholders(materialized, encoded.original_images, settings.fallback_image_url)
    advance(RefinementState.RECONCILED)

    advance(RefinementState.DONE)
    return RefinementResult(refined_html_content=reconciled)
