"""
Media handlers for mediaboard.

Built-in extensions that ingest uploads, render their thumbnails, keep the
image records and format user text.
"""

from mediaboard.media_handlers.base import DataHandlerExtension, ThumbHandlerExtension
from mediaboard.media_handlers.formatting import NewlineFormatter, WhitespaceStripper
from mediaboard.media_handlers.index import ImageIndex
from mediaboard.media_handlers.pdf import PdfFileHandler
from mediaboard.media_handlers.pixel import PixelFileHandler
from mediaboard.media_handlers.themes import PdfFileHandlerTheme, PixelFileHandlerTheme

__all__ = [
    'DataHandlerExtension',
    'ThumbHandlerExtension',
    'NewlineFormatter',
    'WhitespaceStripper',
    'ImageIndex',
    'PdfFileHandler',
    'PixelFileHandler',
    'PdfFileHandlerTheme',
    'PixelFileHandlerTheme',
]
