"""
Thumbnail processing for mediaboard.

Engines, the external command runner, thumbnail geometry and PDF
rasterisation.
"""

from mediaboard.processing.commands import CommandResult, CommandRunner
from mediaboard.processing.engines import (
    ENGINES,
    ConvertEngine,
    EngineResult,
    EngineStatus,
    EpegEngine,
    GDEngine,
    ThumbnailEngine,
    create_engine,
    read_image_header,
)
from mediaboard.processing.pdf import PdfRasterizer, write_static_placeholder
from mediaboard.processing.sizing import clamp_aspect_ratio, estimate_memory, get_thumbnail_size

__all__ = [
    'CommandResult',
    'CommandRunner',
    'ENGINES',
    'ConvertEngine',
    'EngineResult',
    'EngineStatus',
    'EpegEngine',
    'GDEngine',
    'ThumbnailEngine',
    'create_engine',
    'read_image_header',
    'PdfRasterizer',
    'write_static_placeholder',
    'clamp_aspect_ratio',
    'estimate_memory',
    'get_thumbnail_size',
]
