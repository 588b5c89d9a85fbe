"""
Handler for PDF documents.

Thumbnails come from one of two engines, chosen at startup: ``pdftoppm``
rasterises the first page when poppler is installed, ``static`` renders a
generic document icon otherwise. Either way the picture is passed through
the configured thumbnail engine so every thumbnail has the same size and
format. A pdftoppm binary that cannot be found falls back to the icon.
"""

import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mediaboard.core.events.types import InitExtEvent
from mediaboard.core.exceptions import EngineError, EngineUnavailableError
from mediaboard.core.models import Image, explode_tags, strip_query
from mediaboard.media_handlers.base import ThumbHandlerExtension
from mediaboard.processing.commands import CommandRunner
from mediaboard.processing.engines import EngineResult, EngineStatus
from mediaboard.processing.pdf import PdfRasterizer, write_static_placeholder


PDF_MAGIC = b"%PDF-"

STATIC = "static"
PDFTOPPM = "pdftoppm"


class PdfFileHandler(ThumbHandlerExtension):

    def __init__(self, context, registry=None):
        super().__init__(context, registry)
        self.rasterizer = PdfRasterizer(
            context.config.pdf.pdftoppm_path,
            CommandRunner(context.config.thumbnails.process_timeout)
        )

    def on_init_ext(self, event: InitExtEvent) -> None:
        configured = self.context.config.pdf.thumb_engine
        found = self.rasterizer.probe()

        engine = configured or (PDFTOPPM if found else STATIC)
        if engine == PDFTOPPM and not found:
            self.logger.warning(
                f"pdftoppm not found at {self.context.config.pdf.pdftoppm_path}; using static PDF thumbnails"
            )
            engine = STATIC

        self.context.settings['pdf_thumb_engine'] = engine
        self.logger.info(f"PDF thumbnails: {engine} (pdftoppm: {found or 'not found'})")

    @property
    def thumb_engine(self) -> str:
        return self.context.settings.get('pdf_thumb_engine', STATIC)

    def supported_ext(self, ext: str) -> bool:
        return strip_query(ext).lower() == "pdf"

    def check_contents(self, tmpname: Union[str, Path]) -> bool:
        return _has_pdf_magic(Path(tmpname))

    def create_image_from_data(self, filename: Union[str, Path], metadata: Dict[str, Any]) -> Optional[Image]:
        if not _has_pdf_magic(Path(filename)):
            return None

        # pages have no intrinsic pixel size
        return Image(
            hash=metadata['hash'],
            width=1,
            height=1,
            filesize=metadata['size'],
            filename=strip_query(metadata['filename']),
            ext="pdf",
            tag_array=explode_tags(metadata.get('tags')),
            source=metadata.get('source'),
        )

    def create_thumb_force(self, hash: str) -> EngineResult:
        if self.thumb_engine == PDFTOPPM:
            return self._pdftoppm_thumb(hash)
        return self._static_thumb(hash)

    def _static_thumb(self, hash: str) -> EngineResult:
        with tempfile.TemporaryDirectory(prefix="mediaboard-pdf-") as workdir:
            icon = write_static_placeholder(Path(workdir) / "static.jpg")
            return self.do_create_thumb(icon, self.context.storage.thumbnail_path(hash))

    def _pdftoppm_thumb(self, hash: str) -> EngineResult:
        storage = self.context.storage
        with tempfile.TemporaryDirectory(prefix="mediaboard-pdf-") as workdir:
            try:
                page = self.rasterizer.rasterize_first_page(storage.image_path(hash), workdir)
            except EngineUnavailableError as e:
                self.logger.warning(f"{e.message}; falling back to the static thumbnail for {hash}")
                page = None
            except EngineError as e:
                self.logger.warning(f"Cannot rasterize {hash}: {e.message}")
                return EngineResult(EngineStatus.PROCESS_FAILED, PDFTOPPM, e.message)

            if page is not None:
                return self.do_create_thumb(page, storage.thumbnail_path(hash))
        return self._static_thumb(hash)


def _has_pdf_magic(path: Path) -> bool:
    try:
        with open(path, 'rb') as f:
            return f.read(len(PDF_MAGIC)) == PDF_MAGIC
    except OSError:
        return False
