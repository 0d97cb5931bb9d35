import pytest

from annotator_app.domains.annotation.models.annotation_models import Coordinates, ImageSize
from annotator_app.domains.annotation.services.coordinate_transform import to_percentage, to_pixels, rescale
from annotator_app.shared.exceptions import DegenerateImageSizeError, ValidationError


def test_pixel_box_converts_to_percentages():
    box = to_percentage(Coordinates(100, 50, 200, 100), ImageSize(1000, 500))
    assert box == Coordinates(10.0, 10.0, 20.0, 20.0)


def test_to_pixels_inverts_to_percentage():
    size = ImageSize(1366, 768)
    original = Coordinates(123.0, 45.5, 300.25, 17.0)
    restored = to_pixels(to_percentage(original, size), size)
    assert restored.start_x == pytest.approx(original.start_x)
    assert restored.start_y == pytest.approx(original.start_y)
    assert restored.width == pytest.approx(original.width)
    assert restored.height == pytest.approx(original.height)


@pytest.mark.parametrize("size", [ImageSize(0, 500), ImageSize(800, 0), ImageSize(0, 0)])
def test_zero_sized_image_is_rejected(size):
    with pytest.raises(DegenerateImageSizeError) as excinfo:
        to_percentage(Coordinates(1, 1, 1, 1), size)
    assert isinstance(excinfo.value, ValidationError)
    assert excinfo.value.status_code == 400

    with pytest.raises(DegenerateImageSizeError):
        to_pixels(Coordinates(1, 1, 1, 1), size)


def test_negative_size_is_not_degenerate():
    box = to_percentage(Coordinates(10, 10, 10, 10), ImageSize(-100, 100))
    assert box.start_x == -10.0


def test_boxes_past_the_edge_are_not_clamped():
    box = to_percentage(Coordinates(900, -20, 300, 100), ImageSize(1000, 1000))
    assert box.start_x == 90.0
    assert box.start_y == -2.0
    assert box.start_x + box.width == 120.0


def test_from_corners_normalizes_drag_direction():
    assert Coordinates.from_corners(50, 40, 10, 20) == Coordinates(10, 20, 40, 20)


def test_rescale_between_rendered_sizes():
    box = rescale(Coordinates(100, 100, 50, 50), ImageSize(1000, 1000), ImageSize(500, 2000))
    assert box == Coordinates(50.0, 200.0, 25.0, 100.0)
