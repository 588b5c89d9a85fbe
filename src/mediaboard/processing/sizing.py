"""
Thumbnail geometry helpers shared by every engine.
"""

from typing import Tuple


# Substituted for a dimension the header reports as zero
DEFAULT_DIMENSION = 192

MAX_ASPECT_RATIO = 5

# Fixed overhead added to every decode estimate
DECODE_OVERHEAD = 4 * 1024 * 1024


def clamp_aspect_ratio(width: int, height: int, max_ratio: int = MAX_ASPECT_RATIO) -> Tuple[int, int]:
    """
    Limit extreme aspect ratios so thumbnails of banners and strips stay legible.

    The width is clamped against the height first, then the height against
    the (possibly clamped) width, so 1000x10 becomes 50x10 and 10x1000
    becomes 10x50.
    """
    if width > height * max_ratio:
        width = height * max_ratio
    if height > width * max_ratio:
        height = width * max_ratio
    return width, height


def get_thumbnail_size(
    width: int,
    height: int,
    max_width: int,
    max_height: int,
    upscale: bool = False
) -> Tuple[int, int]:
    """
    Fit an image into the thumbnail box, preserving its (clamped) aspect ratio.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_width: Thumbnail box width
        max_height: Thumbnail box height
        upscale: Enlarge images smaller than the box

    Returns:
        (width, height) of the thumbnail, each at least 1
    """
    if width == 0:
        width = DEFAULT_DIMENSION
    if height == 0:
        height = DEFAULT_DIMENSION

    width, height = clamp_aspect_ratio(width, height)

    scale = min(max_width / width, max_height / height)
    if scale > 1 and not upscale:
        return max(1, int(width)), max(1, int(height))

    return max(1, int(width * scale)), max(1, int(height * scale))


def estimate_memory(file_size: int, width: int, height: int) -> int:
    """Bytes needed to decode an image in memory: file twice, 4 bytes per pixel, plus overhead."""
    return file_size * 2 + width * height * 4 + DECODE_OVERHEAD
