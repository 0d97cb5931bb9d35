"""
Annotation Domain - Coordinate Transform

Converts annotation boxes between pixel space (tied to one rendered image
size) and percentage space (the persisted, resolution-independent form).
Values are never clamped: a box dragged past the image edge keeps its
out-of-range percentages.
"""
from annotator_app.domains.annotation.models.annotation_models import Coordinates, ImageSize
from annotator_app.shared.exceptions import DegenerateImageSizeError


def _check_size(image_size: ImageSize):
    if image_size.is_degenerate:
        raise DegenerateImageSizeError(
            f"Image size {image_size.width}x{image_size.height} has zero area",
            width=image_size.width,
            height=image_size.height
        )


def to_percentage(pixel_box: Coordinates, image_size: ImageSize) -> Coordinates:
    """Pixel box -> percentage box for the given rendered image size"""
    _check_size(image_size)
    return Coordinates(
        start_x=pixel_box.start_x / image_size.width * 100,
        start_y=pixel_box.start_y / image_size.height * 100,
        width=pixel_box.width / image_size.width * 100,
        height=pixel_box.height / image_size.height * 100
    )


def to_pixels(percentage_box: Coordinates, image_size: ImageSize) -> Coordinates:
    """Percentage box -> pixel box; exact inverse of ``to_percentage``"""
    _check_size(image_size)
    return Coordinates(
        start_x=percentage_box.start_x * image_size.width / 100,
        start_y=percentage_box.start_y * image_size.height / 100,
        width=percentage_box.width * image_size.width / 100,
        height=percentage_box.height * image_size.height / 100
    )


def rescale(pixel_box: Coordinates, from_size: ImageSize, to_size: ImageSize) -> Coordinates:
    """Map a pixel box drawn at one rendered size onto another"""
    return to_pixels(to_percentage(pixel_box, from_size), to_size)
