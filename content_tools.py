"""Single-call writing helpers: section copy, SEO advice and build guidance."""
import logging
from typing import List, Optional, Type

from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, Field

from errors import GenerationFailure, ProviderUnavailable
from model_client import ModelClient

logger = logging.getLogger(__name__)


class SectionContent(BaseModel):
    title: str = Field(description="The title of the section.")
    content: str = Field(description="The generated content for the specified website section.")


class SeoOptimization(BaseModel):
    title: str = Field(description="The optimized title for the page.")
    meta_description: str = Field(description="The optimized meta description for the page.")
    keywords: List[str] = Field(description="Suggested keywords for the page.")
    content_suggestions: str = Field(description="Suggestions for improving the content for SEO.")


class SiteGuidance(BaseModel):
    guidance: str = Field(
        description="Guidance and suggestions for improving the website, including layout, "
                    "image optimization, content, and SEO."
    )


section_content_prompt = PromptTemplate.from_template(
    """You are an AI assistant that specializes in generating website content.

Based on the provided description and section type, create compelling and informative content.

Description: {short_description}
Section Type: {section_type}
Keywords: {keywords}

Content should be well-structured and engaging for website visitors.
The title and content MUST be suitable for a professional website.
"""
)

seo_prompt = PromptTemplate.from_template(
    """You are an SEO expert. Analyze the given website content and provide suggestions to optimize it for search engines.

Content: {content}
Focus Keyword: {focus_keyword}

Provide the following:
- An optimized title for the page.
- An optimized meta description for the page.
- A list of suggested keywords for the page.
- Suggestions for improving the content for SEO.
"""
)

guidance_prompt = PromptTemplate.from_template(
    """You are an AI assistant providing expert guidance on website creation.

Based on the description of the website and its current state, provide specific and actionable suggestions for improvement.
Consider best practices for layout, image optimization, content strategy, and SEO.

Website Description: {website_description}
Current Website State: {current_website_state}
"""
)


async def _generate(client: ModelClient, prompt: str, schema: Type[BaseModel]):
    try:
        output = await client.generate_text(prompt, schema)
    except ProviderUnavailable:
        raise
    except Exception as e:
        raise GenerationFailure(f"{schema.__name__} generation failed: {e}") from e
    if output is None:
        raise GenerationFailure(f"Model returned no {schema.__name__}.")
    return output


async def generate_section_content(client: ModelClient, section_type: str, short_description: str,
                                   keywords: Optional[str] = None) -> SectionContent:
    prompt = section_content_prompt.format(
        section_type=section_type,
        short_description=short_description,
        keywords=keywords or "none",
    )
    logger.info("Generating '%s' section content", section_type)
    return await _generate(client, prompt, SectionContent)


async def optimize_for_seo(client: ModelClient, content: str,
                           focus_keyword: Optional[str] = None) -> SeoOptimization:
    prompt = seo_prompt.format(content=content, focus_keyword=focus_keyword or "none")
    return await _generate(client, prompt, SeoOptimization)


async def get_site_creation_guidance(client: ModelClient, website_description: str,
                                     current_website_state: str) -> SiteGuidance:
    prompt = guidance_prompt.format(
        website_description=website_description,
        current_website_state=current_website_state,
    )
    return await _generate(client, prompt, SiteGuidance)
