from PyQt6.QtCore import QRect
from PyQt6.QtGui import QColor, QPainter

from playful_environment.config import Config
from playful_environment.core.sketch_layer import SketchLayer


def paint_square(layer, x, y, size=4, color='#ff0000'):
    painter = QPainter(layer.image)
    painter.fillRect(QRect(x, y, size, size), QColor(color))
    painter.end()


def stroke(layer, x, y):
    layer.save_snapshot()
    paint_square(layer, x, y)


def test_new_layer_is_blank():
    layer = SketchLayer(40, 30)
    assert (layer.width, layer.height) == (40, 30)
    assert not layer.has_ink()
    assert layer.snapshot_count == 0
    assert not layer.can_undo()


def test_null_layer_reports_no_ink():
    layer = SketchLayer()
    assert layer.is_null()
    assert not layer.has_ink()
    layer.save_snapshot()
    assert layer.snapshot_count == 0


def test_single_translucent_pixel_counts_as_ink():
    layer = SketchLayer(10, 10)
    layer.image.setPixelColor(3, 4, QColor(0, 0, 255, 1))
    assert layer.has_ink()


def test_undo_reverts_strokes_in_reverse_order():
    layer = SketchLayer(20, 20)
    stroke(layer, 0, 0)
    stroke(layer, 10, 10)
    assert layer.snapshot_count == 2

    assert layer.undo()
    assert layer.image.pixelColor(1, 1).alpha() == 255
    assert layer.image.pixelColor(11, 11).alpha() == 0

    assert layer.undo()
    assert not layer.has_ink()


def test_undo_with_empty_stack_clears_raster():
    layer = SketchLayer(20, 20)
    paint_square(layer, 5, 5)

    assert not layer.undo()
    assert not layer.has_ink()


def test_n_strokes_then_n_undos_is_blank():
    layer = SketchLayer(50, 50)
    for i in range(5):
        stroke(layer, i * 8, i * 8)

    for _ in range(5):
        layer.undo()

    assert not layer.has_ink()
    assert layer.snapshot_count == 0


def test_history_is_bounded_and_drops_oldest():
    layer = SketchLayer(100, 10)
    total = Config.MAX_UNDO_SNAPSHOTS + 1
    for i in range(total):
        stroke(layer, i * 5, 0)

    assert layer.snapshot_count == Config.MAX_UNDO_SNAPSHOTS

    for _ in range(Config.MAX_UNDO_SNAPSHOTS):
        layer.undo()

    # The first stroke can no longer be undone
    assert layer.image.pixelColor(1, 1).alpha() == 255
    assert layer.image.pixelColor(6, 1).alpha() == 0
    assert not layer.can_undo()


def test_custom_snapshot_limit():
    layer = SketchLayer(10, 10, max_snapshots=3)
    for _ in range(5):
        layer.save_snapshot()
    assert layer.max_snapshots == 3
    assert layer.snapshot_count == 3


def test_clear_discards_history():
    layer = SketchLayer(20, 20)
    stroke(layer, 0, 0)
    layer.clear()

    assert not layer.has_ink()
    assert layer.snapshot_count == 0


def test_reset_resizes_and_drops_history():
    layer = SketchLayer(20, 20)
    stroke(layer, 0, 0)
    layer.reset(64, 48)

    assert (layer.width, layer.height) == (64, 48)
    assert layer.snapshot_count == 0
    assert not layer.has_ink()


def test_replace_image_keeps_layer_size():
    layer = SketchLayer(20, 20)
    other = SketchLayer(40, 40)
    paint_square(other, 0, 0, size=40)

    layer.replace_image(other.image)

    assert (layer.width, layer.height) == (20, 20)
    assert layer.has_ink()
