"""
PDF rasterisation for thumbnails.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image as PILImage
from PIL import ImageDraw

from mediaboard.core.exceptions import EngineError, ErrorCode
from mediaboard.processing.commands import CommandRunner


PLACEHOLDER_SIZE = (192, 256)


class PdfRasterizer:
    """Render the first page of a PDF to JPEG with poppler's pdftoppm."""

    def __init__(self, pdftoppm_path: str = "pdftoppm", runner: Optional[CommandRunner] = None):
        self.pdftoppm_path = pdftoppm_path
        self.runner = runner or CommandRunner()
        self.logger = logging.getLogger("mediaboard.processing.pdf")

    def probe(self) -> Optional[str]:
        """Resolved path of pdftoppm, or None when it is not installed."""
        if not self.pdftoppm_path:
            return None
        return self.runner.which(self.pdftoppm_path)

    def rasterize_first_page(self, src: Union[str, Path], workdir: Union[str, Path]) -> Path:
        """
        Render page 1 of ``src`` into ``workdir``.

        Returns:
            Path of the JPEG written by pdftoppm

        Raises:
            EngineUnavailableError: If pdftoppm cannot be found
            EngineError: If pdftoppm fails or produces no output
        """
        base = Path(workdir) / "page"
        result = self.runner.run(
            self.pdftoppm_path,
            ["-jpeg", "-singlefile", "-f", "1", "-l", "1", src, base]
        )

        if not result.ok:
            reason = "timed out" if result.timed_out else f"exited with status {result.returncode}"
            raise EngineError(
                f"pdftoppm {reason}: {result.stderr.strip()}",
                error_code=ErrorCode.ENGINE_TIMEOUT if result.timed_out else ErrorCode.ENGINE_PROCESS_FAILED,
                engine="pdftoppm"
            )

        output = base.with_suffix(".jpg")
        if not output.exists():
            raise EngineError(f"pdftoppm produced no output for {src}", engine="pdftoppm")

        self.logger.debug(f"Rasterized {src} to {output}")
        return output


def write_static_placeholder(dst: Union[str, Path]) -> Path:
    """Draw the generic document icon used when PDFs are not rasterised."""
    dst = Path(dst)
    img = PILImage.new('RGB', PLACEHOLDER_SIZE, (255, 255, 255))
    draw = ImageDraw.Draw(img)
    w, h = PLACEHOLDER_SIZE
    draw.rectangle((16, 16, w - 17, h - 17), outline=(96, 96, 96), width=3)
    for y in range(64, h - 48, 20):
        draw.line((40, y, w - 40, y), fill=(176, 176, 176), width=2)
    draw.rectangle((16, h - 64, 88, h - 32), fill=(200, 30, 30))
    draw.text((34, h - 54), "PDF", fill=(255, 255, 255))
    img.save(dst, format='JPEG', quality=90)
    return dst
