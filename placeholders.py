"""Swap embedded images in generated HTML for short tokens and back.

Generated pages carry their images inline as base64 ``data:`` URIs, which
would blow the model's token budget if sent as-is. Before a page goes to the
model every inline image is replaced by a positional placeholder; afterwards
the placeholders are resolved back to the original data. The model itself
asks for new pictures with ``image-prompt:`` sources.
"""
import logging
import re
from typing import List, NamedTuple

from config import DEFAULT_FALLBACK_IMAGE_URL

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "---image-placeholder-"
PLACEHOLDER_SUFFIX = "---"
ANALYSIS_IMAGE_MARKER = 'src="image-placeholder"'

INLINE_IMAGE_RE = re.compile(r'src="(data:image/[^;]+;base64,[^"]+)"')
PLACEHOLDER_RE = re.compile(r'src="---image-placeholder-(\d+)---"')
IMAGE_PROMPT_RE = re.compile(r'src="image-prompt:([^"]+)"')


class EncodedDocument(NamedTuple):
    html: str
    original_images: List[str]


def placeholder_src(index: int) -> str:
    return f'src="{PLACEHOLDER_PREFIX}{index}{PLACEHOLDER_SUFFIX}"'


def encode_inline_images(html: str) -> EncodedDocument:
    """Replace each inline image, left to right, with ``---image-placeholder-N---``.

    ``original_images[N]`` holds the data URI that placeholder N stands for.
    Duplicate images are kept at every position.
    """
    original_images: List[str] = []

    def repl(m):
        index = len(original_images)
        original_images.append(m.group(1))
        return placeholder_src(index)

    encoded = INLINE_IMAGE_RE.sub(repl, html)
    if original_images:
        logger.debug("Extracted %d inline images into placeholders", len(original_images))
    return EncodedDocument(encoded, original_images)


def decode_placeholders(html: str, original_images: List[str],
                        fallback_url: str = DEFAULT_FALLBACK_IMAGE_URL) -> str:
    """Restore original images from their placeholders.

    An index outside ``original_images`` (the model invented it) resolves to
    ``fallback_url``. Images whose placeholder the model removed are dropped.
    """

    def repl(m):
        index = int(m.group(1))
        if 0 <= index < len(original_images):
            return f'src="{original_images[index]}"'
        logger.warning("Dangling image placeholder %d (only %d originals); using fallback",
                       index, len(original_images))
        return f'src="{fallback_url}"'

    return PLACEHOLDER_RE.sub(repl, html)


def strip_inline_images(html: str) -> str:
    """Replace every inline image with a generic marker before analysis."""
    return INLINE_IMAGE_RE.sub(ANALYSIS_IMAGE_MARKER, html)


def find_image_prompts(html: str) -> List[str]:
    return IMAGE_PROMPT_RE.findall(html)


def count_placeholders(html: str) -> int:
    return len(PLACEHOLDER_RE.findall(html))
