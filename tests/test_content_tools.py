import pytest

from conftest import StubModelClient
from content_tools import (
    SectionContent,
    SeoOptimization,
    SiteGuidance,
    generate_section_content,
    get_site_creation_guidance,
    optimize_for_seo,
)
from errors import GenerationFailure


@pytest.mark.asyncio
async def test_section_content_prompt_includes_inputs():
    expected = SectionContent(title="About Us", content="We bake.")
    client = StubModelClient(text_responses=[expected])

    result = await generate_section_content(client, "About Us", "A family bakery", keywords="sourdough")

    assert result == expected
    prompt = client.text_prompts[0]
    assert "Section Type: About Us" in prompt
    assert "Description: A family bakery" in prompt
    assert "Keywords: sourdough" in prompt


@pytest.mark.asyncio
async def test_seo_without_focus_keyword():
    expected = SeoOptimization(
        title="Best Bakery", meta_description="Fresh bread", keywords=["bread"], content_suggestions="Add FAQ"
    )
    client = StubModelClient(text_responses=[expected])

    result = await optimize_for_seo(client, "Our bread is fresh.")

    assert result.keywords == ["bread"]
    assert "Focus Keyword: none" in client.text_prompts[0]


@pytest.mark.asyncio
async def test_guidance():
    client = StubModelClient(text_responses=[SiteGuidance(guidance="Add testimonials.")])

    result = await get_site_creation_guidance(client, "bakery site", "hero only")

    assert result.guidance == "Add testimonials."


@pytest.mark.asyncio
async def test_empty_model_answer_raises():
    client = StubModelClient(text_responses=[None])

    with pytest.raises(GenerationFailure):
        await get_site_creation_guidance(client, "bakery site", "hero only")
