from PyQt6.QtCore import QPointF, QRectF

from playful_environment.utils.coordinate_utils import CoordinateConverter, fit_rect


def test_fit_rect_letterboxes_wide_image():
    rect = fit_rect(800, 400, 400, 400)
    assert rect == QRectF(0, 100, 400, 200)


def test_fit_rect_pillarboxes_tall_image():
    rect = fit_rect(300, 600, 400, 300)
    assert rect == QRectF(125, 0, 150, 300)


def test_fit_rect_empty_for_degenerate_sizes():
    assert fit_rect(0, 100, 400, 300).isEmpty()
    assert fit_rect(100, 100, 0, 300).isEmpty()


def test_display_to_raster_scales_by_raster_over_display():
    converter = CoordinateConverter()
    converter.set_raster_size(800, 600)
    converter.set_display_rect(QRectF(0, 0, 400, 300))

    assert converter.scale_factors() == (2.0, 2.0)
    assert converter.display_to_raster(QPointF(100, 100)) == QPointF(200, 200)


def test_display_rect_offset_is_removed():
    converter = CoordinateConverter()
    converter.set_raster_size(200, 100)
    converter.set_display_rect(QRectF(50, 25, 100, 50))

    assert converter.display_to_raster(QPointF(50, 25)) == QPointF(0, 0)
    assert converter.display_to_raster(QPointF(100, 50)) == QPointF(100, 50)


def test_missing_display_rect_maps_one_to_one():
    converter = CoordinateConverter()
    converter.set_raster_size(640, 480)

    assert converter.get_display_rect() is None
    assert converter.display_to_raster(QPointF(12, 34)) == QPointF(12, 34)


def test_inside_rect_excludes_letterbox_margin():
    converter = CoordinateConverter()
    converter.set_raster_size(100, 100)
    converter.set_display_rect(QRectF(10, 10, 100, 100))

    assert converter.is_inside_rect(QPointF(50, 50))
    assert not converter.is_inside_rect(QPointF(5, 50))
