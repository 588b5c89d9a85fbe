"""
Thumbnail Engines

Interchangeable renderers that turn a stored file into a JPEG thumbnail.
``gd`` renders in-process with Pillow; ``convert`` and ``epeg`` shell out to
ImageMagick and epeg. Engines never raise for an expected failure: they
return an EngineResult whose status says what went wrong, so the ingestion
pipeline can record it and carry on.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Type, Union

from PIL import Image as PILImage
from PIL import ImageDraw, UnidentifiedImageError

from mediaboard.core.config.models import ThumbnailConfig
from mediaboard.core.exceptions import EngineUnavailableError
from mediaboard.processing.commands import CommandRunner
from mediaboard.processing.sizing import clamp_aspect_ratio, estimate_memory, get_thumbnail_size


logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Image Too Large :("
PLACEHOLDER_MAX_HEIGHT = 64


class EngineStatus(Enum):
    OK = "ok"
    ENGINE_UNAVAILABLE = "engine_unavailable"
    PROCESS_FAILED = "process_failed"
    UNSUPPORTED_INPUT = "unsupported_input"


@dataclass
class EngineResult:
    """Outcome of one thumbnail render."""
    status: EngineStatus
    engine: str = ""
    message: str = ""
    output: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.status is EngineStatus.OK

    def __bool__(self) -> bool:
        return self.ok


class ThumbnailEngine(ABC):
    """Base class for thumbnail engines."""

    name = "base"

    def __init__(self, config: Optional[ThumbnailConfig] = None, runner: Optional[CommandRunner] = None):
        self.config = config or ThumbnailConfig()
        self.runner = runner or CommandRunner(self.config.process_timeout)
        self.logger = logging.getLogger(f"mediaboard.processing.{self.name}")

    @abstractmethod
    def make_thumb(self, src: Union[str, Path], dst: Union[str, Path]) -> EngineResult:
        """Render ``src`` into a JPEG thumbnail at ``dst``."""

    def _result(self, status: EngineStatus, message: str = "", output: Optional[Path] = None) -> EngineResult:
        return EngineResult(status=status, engine=self.name, message=message, output=output)

    def _probe_size(self, src: Path) -> Tuple[int, int]:
        return read_image_header(src)[1]


class GDEngine(ThumbnailEngine):
    """In-process renderer built on Pillow."""

    name = "gd"

    def make_thumb(self, src, dst) -> EngineResult:
        src, dst = Path(src), Path(dst)
        try:
            width, height = self._probe_size(src)
        except (UnidentifiedImageError, OSError) as e:
            return self._result(EngineStatus.UNSUPPORTED_INPUT, f"Cannot read image header: {e}")

        dst.parent.mkdir(parents=True, exist_ok=True)

        needed = estimate_memory(src.stat().st_size, width, height)
        if needed > self.config.memory_limit:
            self.logger.info(
                f"{src.name}: decoding {width}x{height} needs ~{needed} bytes, "
                f"over the {self.config.memory_limit} byte limit; writing placeholder"
            )
            self._placeholder(dst)
            return self._result(EngineStatus.OK, "placeholder", dst)

        try:
            self._render(src, dst, width, height)
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as e:
            self.logger.error(f"Thumbnail render failed for {src}: {e}")
            return self._result(EngineStatus.PROCESS_FAILED, str(e))

        return self._result(EngineStatus.OK, output=dst)

    def _placeholder(self, dst: Path) -> None:
        size = (self.config.width, min(self.config.height, PLACEHOLDER_MAX_HEIGHT))
        thumb = PILImage.new('RGB', size, (255, 255, 255))
        ImageDraw.Draw(thumb).text((10, 24), PLACEHOLDER_TEXT, fill=(0, 0, 0))
        thumb.save(dst, format='JPEG', quality=self.config.quality)

    def _render(self, src: Path, dst: Path, width: int, height: int) -> None:
        crop_w, crop_h = clamp_aspect_ratio(width, height)
        size = get_thumbnail_size(width, height, self.config.width, self.config.height, self.config.upscale)

        with PILImage.open(src) as img:
            region = img.crop((0, 0, crop_w, crop_h))
            thumb = _flatten(region.resize(size, PILImage.Resampling.LANCZOS))
            thumb.save(dst, format='JPEG', quality=self.config.quality)


class ConvertEngine(ThumbnailEngine):
    """ImageMagick ``convert`` renderer with optional jpegoptim pass."""

    name = "convert"

    def make_thumb(self, src, dst) -> EngineResult:
        src, dst = Path(src), Path(dst)
        cfg = self.config

        try:
            width, height = self._probe_size(src)
        except (UnidentifiedImageError, OSError):
            # convert reads more formats than Pillow; let it try with the default box
            width = height = 0
        width, height = clamp_aspect_ratio(width or cfg.width, height or cfg.height)

        dst.parent.mkdir(parents=True, exist_ok=True)
        args = [
            f"{src}[0]",
            "-extent", f"{width}x{height}",
            "-flatten",
            "-strip",
            "-thumbnail", f"{cfg.width}x{cfg.height}",
            "-quality", str(cfg.quality),
            f"jpg:{dst}",
        ]

        try:
            result = self.runner.run(cfg.convert_path, args)
        except EngineUnavailableError as e:
            return self._result(EngineStatus.ENGINE_UNAVAILABLE, e.message)

        if result.timed_out:
            return self._result(EngineStatus.PROCESS_FAILED, f"convert timed out after {self.runner.timeout}s")
        if result.returncode != 0:
            self.logger.warning(f"convert exited with {result.returncode}: {result.stderr.strip()}")
            return self._result(
                EngineStatus.PROCESS_FAILED,
                f"convert exited with status {result.returncode}: {result.stderr.strip()}"
            )

        if cfg.optimize:
            self._optimize(dst)

        return self._result(EngineStatus.OK, output=dst)

    def _optimize(self, dst: Path) -> None:
        try:
            result = self.runner.run(self.config.jpegoptim_path, [dst])
        except EngineUnavailableError as e:
            self.logger.warning(f"Skipping optimisation: {e.message}")
            return
        if not result.ok:
            self.logger.warning(f"jpegoptim failed on {dst} (status {result.returncode})")


class EpegEngine(ThumbnailEngine):
    """Fast JPEG-only downscaler."""

    name = "epeg"

    def make_thumb(self, src, dst) -> EngineResult:
        src, dst = Path(src), Path(dst)

        try:
            fmt = read_image_header(src)[0]
        except (UnidentifiedImageError, OSError):
            fmt = None
        if fmt != 'JPEG':
            return self._result(EngineStatus.UNSUPPORTED_INPUT, "epeg only handles JPEG input")

        dst.parent.mkdir(parents=True, exist_ok=True)
        args = [src, "-c", "Created by EPEG", "--max", str(self.config.width), dst]

        try:
            result = self.runner.run(self.config.epeg_path, args)
        except EngineUnavailableError as e:
            return self._result(EngineStatus.ENGINE_UNAVAILABLE, e.message)

        if not result.ok:
            reason = "timed out" if result.timed_out else f"exited with status {result.returncode}"
            return self._result(EngineStatus.PROCESS_FAILED, f"epeg {reason}")

        return self._result(EngineStatus.OK, output=dst)


def read_image_header(src: Union[str, Path]) -> Tuple[Optional[str], Tuple[int, int]]:
    """
    Identify an image and read its dimensions without decoding any pixels.

    Pillow refuses to open images whose pixel count looks like a
    decompression bomb. Only the header is read here and decoding is gated
    by the engines' memory limit, so that check is lifted for this call.

    Returns:
        The Pillow format name and the (width, height) pair

    Raises:
        UnidentifiedImageError: If Pillow does not recognise the file
        OSError: If the file cannot be read
    """
    limit = PILImage.MAX_IMAGE_PIXELS
    PILImage.MAX_IMAGE_PIXELS = None
    try:
        with PILImage.open(src) as img:
            return img.format, img.size
    finally:
        PILImage.MAX_IMAGE_PIXELS = limit


ENGINES: Dict[str, Type[ThumbnailEngine]] = {
    GDEngine.name: GDEngine,
    ConvertEngine.name: ConvertEngine,
    EpegEngine.name: EpegEngine,
}


def create_engine(
    name: str,
    config: Optional[ThumbnailConfig] = None,
    runner: Optional[CommandRunner] = None
) -> ThumbnailEngine:
    """
    Build the engine called ``name``.

    Unknown names fall back to the Pillow engine.
    """
    key = (name or "").strip().lower()
    engine_class = ENGINES.get(key)
    if engine_class is None:
        logger.warning(f"Unknown thumbnail engine '{name}', using gd")
        engine_class = GDEngine
    return engine_class(config, runner)


def _flatten(img: PILImage.Image) -> PILImage.Image:
    """Composite transparent images onto white and return an RGB image."""
    if img.mode == 'P':
        img = img.convert('RGBA')
    if img.mode in ('RGBA', 'LA'):
        background = PILImage.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img
