"""
Handler for raster images: JPEG, PNG and GIF.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import UnidentifiedImageError

from mediaboard.core.models import Image, explode_tags, strip_query
from mediaboard.media_handlers.base import ThumbHandlerExtension
from mediaboard.processing.engines import EngineResult, read_image_header


class PixelFileHandler(ThumbHandlerExtension):
    """Ingests everyday raster images and thumbnails them with the configured engine."""

    SUPPORTED_EXTENSIONS = frozenset({'jpg', 'jpeg', 'gif', 'png'})
    VALID_FORMATS = frozenset({'JPEG', 'PNG', 'GIF'})

    def supported_ext(self, ext: str) -> bool:
        return strip_query(ext).lower() in self.SUPPORTED_EXTENSIONS

    def check_contents(self, tmpname: Union[str, Path]) -> bool:
        path = Path(tmpname)
        if not path.exists():
            return False
        try:
            fmt, _ = read_image_header(path)
        except (UnidentifiedImageError, OSError):
            return False
        return fmt in self.VALID_FORMATS

    def create_image_from_data(self, filename: Union[str, Path], metadata: Dict[str, Any]) -> Optional[Image]:
        try:
            _, (width, height) = read_image_header(filename)
        except (UnidentifiedImageError, OSError) as e:
            self.logger.warning(f"Cannot read image size from {filename}: {e}")
            return None

        return Image(
            hash=metadata['hash'],
            width=width,
            height=height,
            filesize=metadata['size'],
            filename=strip_query(metadata['filename']),
            ext=strip_query(metadata['extension']).lower(),
            tag_array=explode_tags(metadata.get('tags')),
            source=metadata.get('source'),
        )

    def create_thumb_force(self, hash: str) -> EngineResult:
        storage = self.context.storage
        return self.do_create_thumb(storage.image_path(hash), storage.thumbnail_path(hash))
