import asyncio
import re

import pytest

from config import GeneratorSettings
from model_client import ModelClient
from refine import RefinedWebsite

# 1x1 transparent PNG / GIF payloads
PNG_DATA_URI = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
GIF_DATA_URI = "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"

FALLBACK = "https://placehold.co/600x400.png"


def html_from_prompt(prompt: str) -> str:
    """Pull the document out of the ```html block of a rewrite prompt."""
    match = re.search(r"```html\n(.*)\n```", prompt, flags=re.DOTALL)
    assert match, "prompt should embed the current HTML in a fenced block"
    return match.group(1)


def echo_rewrite(prompt: str) -> RefinedWebsite:
    return RefinedWebsite(refined_html_content=html_from_prompt(prompt))


class StubModelClient(ModelClient):
    """Deterministic stand-in for the generative models.

    ``text_responses`` are consumed in order; each is a model instance, ``None``,
    an exception to raise, or a callable taking the prompt. ``images`` maps a
    prompt to a URL or an exception; ``delays`` maps a prompt to seconds.
    """

    def __init__(self, text_responses=None, images=None, delays=None):
        self.text_responses = list(text_responses or [])
        self.images = images or {}
        self.delays = delays or {}
        self.text_prompts = []
        self.image_prompts = []
        self.completed_images = []
        self.active = 0
        self.max_active = 0

    async def generate_text(self, prompt, schema):
        self.text_prompts.append(prompt)
        response = self.text_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(prompt)
        return response

    async def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(prompt, 0))
        finally:
            self.active -= 1
        self.completed_images.append(prompt)
        result = self.images.get(prompt, f"https://img.test/{prompt.replace(' ', '-')}.png")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def settings():
    return GeneratorSettings(fallback_image_url=FALLBACK, refine_max_attempts=1)


@pytest.fixture
def sample_html():
    return (
        "<!DOCTYPE html><html><head><title>Bakery</title></head><body>"
        f'<header><img src="{PNG_DATA_URI}" alt="logo"></header>'
        "<section id=\"about\"><h2>About</h2><p>Fresh bread daily.</p></section>"
        f'<footer><img src="{GIF_DATA_URI}" alt="badge"></footer>'
        "</body></html>"
    )
