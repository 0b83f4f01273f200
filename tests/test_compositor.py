import numpy as np
import pytest
from PyQt6.QtCore import QRect, QSize
from PyQt6.QtGui import QColor, QImage, QPainter

from playful_environment.core.compositor import (
    CompositeMode,
    build_composite,
    build_inpainting_images,
    build_mask,
    prepare_concept_payload,
)
from playful_environment.utils.image_utils import data_url_to_qimage, parse_data_url, qimage_to_rgba_array

from conftest import solid_image, transparent_image


def sketch_with_square(width, height, rect, color=QColor(255, 0, 0, 255)):
    sketch = transparent_image(width, height)
    painter = QPainter(sketch)
    painter.fillRect(rect, color)
    painter.end()
    return sketch


def test_mask_is_binary_black_and_white():
    sketch = sketch_with_square(100, 50, QRect(10, 10, 20, 20))
    sketch.setPixelColor(70, 30, QColor(0, 0, 255, 3))

    mask = build_mask(sketch, QSize(100, 50))
    pixels = qimage_to_rgba_array(mask)

    assert (mask.width(), mask.height()) == (100, 50)
    assert set(np.unique(pixels[:, :, :3])) <= {0, 255}
    assert np.all(pixels[:, :, 3] == 255)
    assert tuple(pixels[15, 15]) == (255, 255, 255, 255)
    assert tuple(pixels[30, 70]) == (255, 255, 255, 255)
    assert tuple(pixels[45, 90]) == (0, 0, 0, 255)


def test_empty_sketch_gives_all_black_mask():
    mask = build_mask(transparent_image(40, 30), QSize(40, 30))
    pixels = qimage_to_rgba_array(mask)
    assert not np.any(pixels[:, :, :3])


def test_fully_inked_sketch_gives_all_white_mask():
    mask = build_mask(solid_image(40, 30, '#ff0000'), QSize(80, 60))
    pixels = qimage_to_rgba_array(mask)

    assert pixels.shape == (60, 80, 4)
    assert np.all(pixels == 255)


def test_mask_follows_base_size_when_sketch_differs():
    sketch = sketch_with_square(50, 25, QRect(0, 0, 25, 25))
    mask = build_mask(sketch, QSize(100, 50))
    pixels = qimage_to_rgba_array(mask)

    assert pixels.shape == (50, 100, 4)
    assert set(np.unique(pixels[:, :, :3])) <= {0, 255}
    assert tuple(pixels[10, 10, :3]) == (255, 255, 255)
    assert tuple(pixels[10, 90, :3]) == (0, 0, 0)


def test_composite_has_base_dimensions_and_sketch_on_top():
    base = solid_image(120, 80, '#0000ff')
    sketch = sketch_with_square(120, 80, QRect(0, 0, 10, 10))

    composite = build_composite(base, sketch)

    assert (composite.width(), composite.height()) == (120, 80)
    top_left = composite.pixelColor(5, 5)
    assert (top_left.red(), top_left.green(), top_left.blue()) == (255, 0, 0)
    other = composite.pixelColor(60, 60)
    assert (other.red(), other.green(), other.blue()) == (0, 0, 255)


def test_inpainting_images_share_base_size():
    base = solid_image(64, 48)
    sketch = sketch_with_square(32, 24, QRect(0, 0, 4, 4))

    image, mask = build_inpainting_images(base, sketch)

    assert image.size() == base.size()
    assert mask.size() == base.size()


def test_composite_payload_is_downscaled_jpeg():
    base = solid_image(2000, 1000)
    payload = prepare_concept_payload(base, transparent_image(2000, 1000), CompositeMode.COMPOSITE)

    mime, _ = parse_data_url(payload.image_data)
    decoded = data_url_to_qimage(payload.image_data)
    assert payload.mode == CompositeMode.COMPOSITE
    assert mime == 'image/jpeg'
    assert (decoded.width(), decoded.height()) == (1024, 512)
    assert payload.mask_data is None


def test_composite_payload_without_downscale_is_png():
    base = solid_image(40, 20)
    payload = prepare_concept_payload(base, transparent_image(40, 20), CompositeMode.COMPOSITE,
                                      downscale=False)
    assert parse_data_url(payload.image_data)[0] == 'image/png'


def test_inpainting_payload_keeps_mask_binary_png():
    base = solid_image(2000, 1000)
    sketch = sketch_with_square(2000, 1000, QRect(100, 100, 400, 400))

    payload = prepare_concept_payload(base, sketch, CompositeMode.INPAINTING)

    assert payload.image_data is None
    assert parse_data_url(payload.base_image_data)[0] == 'image/jpeg'
    assert parse_data_url(payload.mask_data)[0] == 'image/png'
    mask = data_url_to_qimage(payload.mask_data)
    assert (mask.width(), mask.height()) == (1024, 512)
    assert set(np.unique(qimage_to_rgba_array(mask)[:, :, :3])) <= {0, 255}


def test_payload_requires_base_image():
    with pytest.raises(ValueError):
        prepare_concept_payload(QImage(), transparent_image(10, 10), CompositeMode.COMPOSITE)
