import numpy as np
from PyQt6.QtGui import QColor

from playful_environment.core.preview import (
    downscale_data_url,
    downscale_image,
    downscale_mask_data_url,
    target_size,
)
from playful_environment.utils.image_utils import data_url_to_qimage, parse_data_url, qimage_to_rgba_array, to_data_url

from conftest import solid_image


def test_target_size_caps_larger_side():
    assert target_size(2000, 1000, 1024) == (1024, 512)
    assert target_size(1000, 2000, 1024) == (512, 1024)
    assert target_size(500, 300, 1024) == (500, 300)
    assert target_size(1024, 10, 1024) == (1024, 10)


def test_downscale_image_returns_same_object_when_small():
    image = solid_image(20, 10)
    assert downscale_image(image, 1024) is image


def test_large_image_is_reencoded_as_smaller_jpeg():
    data_url = to_data_url(solid_image(2000, 1000), "PNG")

    result = downscale_data_url(data_url)

    assert parse_data_url(result)[0] == 'image/jpeg'
    decoded = data_url_to_qimage(result)
    assert (decoded.width(), decoded.height()) == (1024, 512)


def test_small_image_keeps_dimensions():
    result = downscale_data_url(to_data_url(solid_image(500, 300), "PNG"))
    decoded = data_url_to_qimage(result)
    assert (decoded.width(), decoded.height()) == (500, 300)


def test_undecodable_input_is_returned_unchanged():
    assert downscale_data_url("not a data url") == "not a data url"
    broken = "data:image/png;base64,AAAA"
    assert downscale_data_url(broken) == broken
    assert downscale_mask_data_url(broken) == broken


def test_mask_downscale_stays_binary():
    mask = solid_image(2000, 1000, '#000000')
    for x in range(0, 2000, 7):
        for y in range(0, 1000, 97):
            mask.setPixelColor(x, y, QColor(255, 255, 255))

    result = downscale_mask_data_url(to_data_url(mask, "PNG"))

    assert parse_data_url(result)[0] == 'image/png'
    pixels = qimage_to_rgba_array(data_url_to_qimage(result))
    assert pixels.shape == (512, 1024, 4)
    assert set(np.unique(pixels[:, :, :3])) <= {0, 255}
