import pytest

from playful_environment.utils.color_utils import (
    alpha_to_opacity,
    hex_to_rgb,
    opacity_to_alpha,
    rgb_to_hex,
    rgba_string,
)


def test_rgb_to_hex_is_lowercase_and_clamped():
    assert rgb_to_hex((255, 87, 51)) == '#ff5733'
    assert rgb_to_hex((300, -4, 0)) == '#ff0000'


def test_hex_to_rgb_accepts_short_and_long_forms():
    assert hex_to_rgb('#AABBCC') == (170, 187, 204)
    assert hex_to_rgb('abc') == (170, 187, 204)
    assert hex_to_rgb('  #000000 ') == (0, 0, 0)


@pytest.mark.parametrize('bad', ['', '#12', '#12345', 'not-a-color'])
def test_hex_to_rgb_rejects_invalid(bad):
    with pytest.raises(ValueError):
        hex_to_rgb(bad)


def test_rgba_string():
    assert rgba_string('#ff0000', 0.4) == 'rgba(255, 0, 0, 0.4)'
    assert rgba_string('#00ff00', 2) == 'rgba(0, 255, 0, 1)'


def test_alpha_opacity_conversions():
    assert alpha_to_opacity(255) == 1.0
    assert alpha_to_opacity(0) == 0.0
    assert alpha_to_opacity(128) == 0.5
    assert opacity_to_alpha(1.0) == 255
    assert opacity_to_alpha(0.5) == 128
