from conftest import FALLBACK, GIF_DATA_URI, PNG_DATA_URI
from placeholders import (
    count_placeholders,
    decode_placeholders,
    encode_inline_images,
    find_image_prompts,
    strip_inline_images,
)


def test_encode_replaces_images_in_document_order(sample_html):
    encoded = encode_inline_images(sample_html)

    assert encoded.original_images == [PNG_DATA_URI, GIF_DATA_URI]
    assert 'src="---image-placeholder-0---" alt="logo"' in encoded.html
    assert 'src="---image-placeholder-1---" alt="badge"' in encoded.html
    assert "data:image" not in encoded.html


def test_encode_keeps_duplicate_images_at_each_position():
    html = f'<img src="{PNG_DATA_URI}"><img src="{PNG_DATA_URI}">'
    encoded = encode_inline_images(html)

    assert encoded.original_images == [PNG_DATA_URI, PNG_DATA_URI]
    assert count_placeholders(encoded.html) == 2


def test_encode_without_images_is_a_no_op():
    html = '<img src="https://example.com/a.png"><p>hi</p>'
    encoded = encode_inline_images(html)

    assert encoded.html == html
    assert encoded.original_images == []


def test_encode_is_idempotent_on_encoded_output(sample_html):
    first = encode_inline_images(sample_html)
    second = encode_inline_images(first.html)

    assert second.html == first.html
    assert second.original_images == []


def test_decode_round_trips_encoded_document(sample_html):
    encoded = encode_inline_images(sample_html)
    assert decode_placeholders(encoded.html, encoded.original_images, FALLBACK) == sample_html


def test_decode_uses_fallback_for_out_of_range_index():
    html = '<img src="---image-placeholder-1---"><img src="---image-placeholder-99---">'
    decoded = decode_placeholders(html, [PNG_DATA_URI, GIF_DATA_URI], FALLBACK)

    assert decoded == f'<img src="{GIF_DATA_URI}"><img src="{FALLBACK}">'
    assert count_placeholders(decoded) == 0


def test_decode_drops_images_whose_placeholder_was_removed():
    decoded = decode_placeholders('<img src="---image-placeholder-1---">', [PNG_DATA_URI, GIF_DATA_URI], FALLBACK)

    assert PNG_DATA_URI not in decoded
    assert GIF_DATA_URI in decoded


def test_strip_inline_images_uses_generic_marker(sample_html):
    stripped = strip_inline_images(sample_html)

    assert "base64" not in stripped
    assert stripped.count('src="image-placeholder"') == 2


def test_find_image_prompts_keeps_order_and_duplicates():
    html = (
        '<img src="image-prompt:a ginger cat"><img src="https://x.test/a.png">'
        '<img src="image-prompt:a bakery counter"><img src="image-prompt:a ginger cat">'
    )
    assert find_image_prompts(html) == ["a ginger cat", "a bakery counter", "a ginger cat"]
